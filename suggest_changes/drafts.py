"""Review comment drafts built from a parsed diff."""

import logging
from collections.abc import Callable, Iterator
from typing import Literal, TypeVar

from pydantic import BaseModel, ConfigDict

from suggest_changes.anchors import calculate_line_position
from suggest_changes.changes import LineChange
from suggest_changes.dedup import generate_comment_key
from suggest_changes.diff_parser import FileDiff
from suggest_changes.grouping import group_changes_for_suggestions
from suggest_changes.suggestions import generate_suggestion_body

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SuggestionDraft(BaseModel):
    """A suggestion comment not yet accepted by the review API."""

    model_config = ConfigDict(frozen=True)

    path: str
    body: str
    line: int
    start_line: int | None = None
    start_side: Literal["RIGHT"] | None = None

    def to_api(self) -> dict[str, str | int]:
        """Return the review API comment payload, unset fields omitted."""
        return self.model_dump(exclude_none=True)


def iterate_suggestion_groups(
    files: list[FileDiff],
) -> Iterator[tuple[str, int, list[LineChange]]]:
    """Yield (path, chunk OLD-file start, group) for every changed file.

    Added, deleted, renamed and binary files produce no suggestions.
    """
    for file_diff in files:
        if file_diff.kind != "changed":
            continue
        for chunk in file_diff.chunks:
            for group in group_changes_for_suggestions(chunk.changes):
                yield file_diff.path, chunk.source_start, group


def build_comment_draft(
    path: str, source_start: int, group: list[LineChange]
) -> SuggestionDraft | None:
    """Build a review comment draft from a suggestion group.

    Returns:
        SuggestionDraft, or None if the group has nothing to suggest.
    """
    suggestion = generate_suggestion_body(group)
    if suggestion is None:
        return None

    position = calculate_line_position(group, suggestion.line_count, source_start)
    if suggestion.line_count > 1:
        return SuggestionDraft(
            path=path,
            body=suggestion.body,
            line=position.end_line,
            start_line=position.start_line,
            start_side="RIGHT",
        )
    return SuggestionDraft(path=path, body=suggestion.body, line=position.end_line)


def partition(items: list[T], predicate: Callable[[T], bool]) -> tuple[list[T], list[T]]:
    """Split items into (matching, not matching), preserving order."""
    passed: list[T] = []
    failed: list[T] = []
    for item in items:
        (passed if predicate(item) else failed).append(item)
    return passed, failed


def format_line_range(start_line: int | None, line: int) -> str:
    """Format "start-end" for multi-line comments, else the single line."""
    if start_line is not None and start_line != line:
        return f"{start_line}-{line}"
    return str(line)


def log_comments(
    header: str,
    comments: list[SuggestionDraft],
    *,
    level: int = logging.INFO,
    detailed: bool = False,
) -> None:
    """Log review comment drafts, one line each or with full bodies."""
    if not comments:
        return

    logger.log(level, "%s %d", header, len(comments))

    for comment in comments:
        if not detailed:
            logger.log(
                level,
                "- %s:%s",
                comment.path,
                format_line_range(comment.start_line, comment.line),
            )
            continue

        logger.log(level, "- Draft review comment:")
        logger.log(level, "  path: %s", comment.path)
        logger.log(level, "  line: %s", comment.line)
        if comment.start_line is not None:
            logger.log(level, "  start_line: %s", comment.start_line)
        if comment.start_side is not None:
            logger.log(level, "  start_side: %s", comment.start_side)
        logger.log(level, "  body:")
        logger.log(
            level, "\n".join(f"  {line}" for line in comment.body.split("\n"))
        )


def generate_review_comments(
    files: list[FileDiff], existing_comment_keys: set[str] | None = None
) -> list[SuggestionDraft]:
    """Generate suggestion drafts for a parsed diff, minus duplicates.

    Args:
        files: Parsed diff of the working tree.
        existing_comment_keys: Keys of comments already on the pull request.

    Returns:
        Drafts whose key is not among existing_comment_keys, in diff order.
    """
    existing_comment_keys = existing_comment_keys or set()

    drafts: list[SuggestionDraft] = []
    for path, source_start, group in iterate_suggestion_groups(files):
        draft = build_comment_draft(path, source_start, group)
        if draft:
            drafts.append(draft)

    if drafts:
        log_comments(
            "Generated suggestions:", drafts, level=logging.DEBUG, detailed=True
        )
    else:
        logger.debug("Generated suggestions: 0")

    unique, skipped = partition(
        drafts, lambda draft: generate_comment_key(draft) not in existing_comment_keys
    )
    log_comments(
        "Suggestions skipped because they would duplicate existing suggestions:",
        skipped,
    )
    return unique
