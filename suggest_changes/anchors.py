"""OLD-file line anchoring for suggestion groups."""

import logging
from dataclasses import dataclass

from suggest_changes.changes import LineChange, filter_changes_by_type
from suggest_changes.suggestions import context_line_comes_first, detect_line_movement

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LinePosition:
    """Inclusive OLD-file line range a suggestion replaces."""

    start_line: int
    end_line: int


def get_anchor_for_additions(
    unchanged_lines: list[LineChange], added_lines: list[LineChange]
) -> int:
    """Anchor line for pure additions with context.

    Context before the additions is anchored directly. Context after them
    is anchored one line earlier, but never before line 1.
    """
    first_unchanged = unchanged_lines[0]
    if context_line_comes_first(unchanged_lines, added_lines):
        return first_unchanged.line_before
    return max(1, first_unchanged.line_before - 1)


def calculate_line_position(
    group: list[LineChange], line_count: int, source_start: int
) -> LinePosition:
    """Calculate the OLD-file lines a review comment must be anchored to.

    Args:
        group: One suggestion group.
        line_count: Number of existing lines the suggestion replaces.
        source_start: OLD-file start line of the group's chunk, used when
            the group has nothing better to anchor to.

    Returns:
        LinePosition with end_line = start_line + line_count - 1.
    """
    filtered = filter_changes_by_type(group)
    added_lines = filtered.added_lines
    unchanged_lines = filtered.unchanged_lines
    first_deleted = filtered.deleted_lines[0] if filtered.deleted_lines else None
    first_unchanged = unchanged_lines[0] if unchanged_lines else None

    if first_unchanged and not added_lines and not first_deleted:
        logger.debug(
            "[BUG] Unexpected state: context line without added or deleted "
            "lines. group: %r",
            group,
        )

    movement = detect_line_movement(group)
    if (
        movement
        and first_unchanged
        and first_unchanged.line_before < movement.deleted.line_before
    ):
        start_line = first_unchanged.line_before
    elif first_deleted:
        start_line = first_deleted.line_before
    elif first_unchanged and added_lines:
        start_line = get_anchor_for_additions(unchanged_lines, added_lines)
    elif first_unchanged:
        start_line = first_unchanged.line_before
    else:
        start_line = source_start

    return LinePosition(start_line=start_line, end_line=start_line + line_count - 1)
