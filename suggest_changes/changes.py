"""Line change records from a unified diff chunk, with typed predicates."""

from dataclasses import dataclass
from typing import Any, Literal

ChangeKind = Literal["added", "deleted", "unchanged"]

_RAW_TYPE_NAMES: dict[str, str] = {
    "AddedLine": "added",
    "DeletedLine": "deleted",
    "UnchangedLine": "unchanged",
}


@dataclass(frozen=True)
class LineChange:
    """A single line of a diff chunk.

    Attributes:
        kind: One of "added", "deleted", "unchanged".
        content: Line content without the diff prefix (+, -, space).
        line_before: 1-based line number in the OLD file (deleted/unchanged).
        line_after: 1-based line number in the NEW file (added/unchanged).
    """

    kind: str
    content: str
    line_before: int | None = None
    line_after: int | None = None

    @classmethod
    def added(cls, content: str, line_after: int) -> "LineChange":
        return cls(kind="added", content=content, line_after=line_after)

    @classmethod
    def deleted(cls, content: str, line_before: int) -> "LineChange":
        return cls(kind="deleted", content=content, line_before=line_before)

    @classmethod
    def unchanged(
        cls, content: str, line_before: int, line_after: int
    ) -> "LineChange":
        return cls(
            kind="unchanged",
            content=content,
            line_before=line_before,
            line_after=line_after,
        )

    @classmethod
    def from_dict(cls, record: dict[str, Any]) -> "LineChange":
        """Build a LineChange from a raw change record.

        Accepts both ``{"type": "AddedLine", "lineAfter": 2}`` and
        ``{"kind": "added", "line_after": 2}`` shapes. Missing fields are
        left as None; the predicates below reject the result instead of
        this constructor raising.

        Args:
            record: Raw change record.

        Returns:
            LineChange carrying whatever the record provided.
        """
        raw_kind = record.get("kind") or record.get("type") or ""
        kind = _RAW_TYPE_NAMES.get(raw_kind, raw_kind)
        return cls(
            kind=kind,
            content=record.get("content", ""),
            line_before=record.get("line_before", record.get("lineBefore")),
            line_after=record.get("line_after", record.get("lineAfter")),
        )


@dataclass
class FilteredChanges:
    """Changes of a group split by variant, each list in input order."""

    added_lines: list[LineChange]
    deleted_lines: list[LineChange]
    unchanged_lines: list[LineChange]


def _is_line_number(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_added_line(change: LineChange | None) -> bool:
    """True if change is an added line with a NEW-file line number."""
    return (
        change is not None
        and change.kind == "added"
        and _is_line_number(change.line_after)
    )


def is_deleted_line(change: LineChange | None) -> bool:
    """True if change is a deleted line with an OLD-file line number."""
    return (
        change is not None
        and change.kind == "deleted"
        and _is_line_number(change.line_before)
    )


def is_unchanged_line(change: LineChange | None) -> bool:
    """True if change is an unchanged line carrying both line numbers."""
    return (
        change is not None
        and change.kind == "unchanged"
        and _is_line_number(change.line_before)
        and _is_line_number(change.line_after)
    )


def position_of(change: LineChange | None) -> int | None:
    """Return the line number used to position a change within its chunk.

    Deleted and unchanged lines are positioned by their OLD-file line,
    added lines by their NEW-file line. Malformed changes have no position.
    """
    if is_deleted_line(change) or is_unchanged_line(change):
        return change.line_before
    if is_added_line(change):
        return change.line_after
    return None


def filter_changes_by_type(changes: list[LineChange]) -> FilteredChanges:
    """Split changes into added, deleted and unchanged lists.

    Malformed changes end up in none of the lists.
    """
    return FilteredChanges(
        added_lines=[change for change in changes if is_added_line(change)],
        deleted_lines=[change for change in changes if is_deleted_line(change)],
        unchanged_lines=[change for change in changes if is_unchanged_line(change)],
    )
