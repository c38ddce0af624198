"""Unified diff parser producing per-file chunks of old/new line changes."""

import re
from dataclasses import dataclass, field

from suggest_changes.changes import LineChange

HUNK_HEADER_PATTERN = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")
DIFF_GIT_PATTERN = re.compile(r"^diff --git a/(.+) b/(.+)$")

DEV_NULL = "/dev/null"


class DiffParseError(ValueError):
    """Raised when diff text contains no recognizable diff structure."""


@dataclass
class DiffChunk:
    """One hunk of a unified diff.

    Attributes:
        source_start: First OLD-file line of the hunk, from the header.
        source_length: Number of OLD-file lines in the hunk.
        target_start: First NEW-file line of the hunk, from the header.
        target_length: Number of NEW-file lines in the hunk.
        changes: Line changes in file order.
    """

    source_start: int
    source_length: int
    target_start: int
    target_length: int
    changes: list[LineChange] = field(default_factory=list)


@dataclass
class FileDiff:
    """One file section of a unified diff.

    Attributes:
        path: NEW-file path, or the OLD-file path for deleted files.
        kind: "changed", "added", "deleted", "renamed" or "binary".
        chunks: Hunks of the file in order.
        old_path: OLD-file path when it differs from path.
    """

    path: str
    kind: str = "changed"
    chunks: list[DiffChunk] = field(default_factory=list)
    old_path: str | None = None


def _strip_path_prefix(raw_path: str) -> str:
    # "--- a/file.py\t2024-01-01 ..." -> "file.py"
    path = raw_path.split("\t", 1)[0].rstrip()
    if path.startswith(("a/", "b/")):
        return path[2:]
    return path


def _parse_hunk_header(raw_line: str) -> DiffChunk:
    header_match = HUNK_HEADER_PATTERN.match(raw_line)
    if not header_match:
        raise DiffParseError(f"Malformed hunk header: {raw_line!r}")
    source_length = header_match.group(2)
    target_length = header_match.group(4)
    return DiffChunk(
        source_start=int(header_match.group(1)),
        source_length=int(source_length) if source_length is not None else 1,
        target_start=int(header_match.group(3)),
        target_length=int(target_length) if target_length is not None else 1,
    )


def _parse_hunks(lines: list[str], index: int) -> tuple[list[DiffChunk], int]:
    """Read consecutive hunks starting at lines[index].

    Hunk line counts from the headers decide whether a line such as
    "--- x" is a deleted line or the next file's header.

    Returns:
        Tuple of (chunks, index of the first line not consumed).
    """
    chunks: list[DiffChunk] = []
    chunk: DiffChunk | None = None
    old_line = new_line = 0
    old_remaining = new_remaining = 0

    while index < len(lines):
        raw_line = lines[index]

        if raw_line.startswith("@@"):
            chunk = _parse_hunk_header(raw_line)
            chunks.append(chunk)
            old_line, new_line = chunk.source_start, chunk.target_start
            old_remaining, new_remaining = chunk.source_length, chunk.target_length
            index += 1
            continue

        if chunk is None or raw_line.startswith("diff --git "):
            break

        # Skip "\ No newline at end of file"
        if raw_line.startswith("\\"):
            index += 1
            continue

        exhausted = old_remaining <= 0 and new_remaining <= 0
        if exhausted and (not raw_line or raw_line.startswith(("--- ", "+++ "))):
            break

        prefix = raw_line[:1]
        content = raw_line[1:]

        if prefix == "+":
            chunk.changes.append(LineChange.added(content, new_line))
            new_line += 1
            new_remaining -= 1
        elif prefix == "-":
            chunk.changes.append(LineChange.deleted(content, old_line))
            old_line += 1
            old_remaining -= 1
        elif prefix in (" ", ""):
            # Some tools strip the space prefix from blank context lines
            chunk.changes.append(LineChange.unchanged(content, old_line, new_line))
            old_line += 1
            new_line += 1
            old_remaining -= 1
            new_remaining -= 1
        else:
            break

        index += 1

    return chunks, index


def _parse_file(lines: list[str], index: int) -> tuple[FileDiff, int]:
    """Parse one file section (extended headers, ---/+++ headers, hunks)."""
    file_diff = FileDiff(path="")
    old_path: str | None = None
    new_path: str | None = None
    seen_old_header = False

    git_match = DIFF_GIT_PATTERN.match(lines[index])
    if git_match:
        old_path, new_path = git_match.group(1), git_match.group(2)
        index += 1

    while index < len(lines):
        raw_line = lines[index]
        if raw_line.startswith("@@"):
            break
        if raw_line.startswith("diff --git "):
            break
        if raw_line.startswith("--- "):
            if seen_old_header:
                break
            seen_old_header = True
            source = raw_line[4:]
            if source.startswith(DEV_NULL):
                file_diff.kind = "added"
            else:
                old_path = _strip_path_prefix(source)
        elif raw_line.startswith("+++ "):
            target = raw_line[4:]
            if target.startswith(DEV_NULL):
                file_diff.kind = "deleted"
            else:
                new_path = _strip_path_prefix(target)
        elif raw_line.startswith("new file mode"):
            file_diff.kind = "added"
        elif raw_line.startswith("deleted file mode"):
            file_diff.kind = "deleted"
        elif raw_line.startswith("rename from"):
            file_diff.kind = "renamed"
        elif raw_line.startswith(("Binary files ", "GIT binary patch")):
            file_diff.kind = "binary"
        index += 1

    file_diff.chunks, index = _parse_hunks(lines, index)

    if file_diff.kind == "deleted":
        file_diff.path = old_path or new_path or ""
    else:
        file_diff.path = new_path or old_path or ""
        if old_path and old_path != file_diff.path:
            file_diff.old_path = old_path

    return file_diff, index


def parse_diff(diff_text: str) -> list[FileDiff]:
    """Parse unified diff text into per-file chunks.

    Accepts `git diff` output (with "diff --git" headers) as well as plain
    unified diffs starting at "---" headers.

    Args:
        diff_text: Unified diff text. May be empty.

    Returns:
        List of FileDiff objects in diff order.

    Raises:
        DiffParseError: If non-empty text contains no file header, or a hunk
            header is malformed.
    """
    if not diff_text or not diff_text.strip():
        return []

    lines = diff_text.split("\n")
    files: list[FileDiff] = []
    index = 0

    while index < len(lines):
        raw_line = lines[index]
        if raw_line.startswith("diff --git ") or raw_line.startswith("--- "):
            file_diff, next_index = _parse_file(lines, index)
            files.append(file_diff)
            index = max(next_index, index + 1)
        else:
            index += 1

    if not files:
        raise DiffParseError("No file headers found in diff text")

    return files

