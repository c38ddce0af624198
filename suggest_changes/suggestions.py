"""Suggestion body synthesis for a group of line changes."""

from dataclasses import dataclass

from suggest_changes.changes import LineChange, filter_changes_by_type
from suggest_changes.grouping import is_content_movement


@dataclass(frozen=True)
class SuggestionBody:
    """Fenced replacement text and the number of existing lines it replaces."""

    body: str
    line_count: int


@dataclass(frozen=True)
class LineMovement:
    """A line deleted in one place and re-added with the same content."""

    deleted: LineChange
    added: LineChange


def create_suggestion(content: str) -> str:
    """Wrap content in a suggestion fenced block.

    Quadruple backticks allow a triple-backtick code block inside the
    suggested content.
    """
    return f"````suggestion\n{content}\n````"


def detect_line_movement(changes: list[LineChange]) -> LineMovement | None:
    """Return the moved line pair if the group is exactly one such move.

    Only a single deleted line and a single added line with equal content
    count as a movement.
    """
    filtered = filter_changes_by_type(changes)
    if len(filtered.deleted_lines) == 1 and len(filtered.added_lines) == 1:
        deleted = filtered.deleted_lines[0]
        added = filtered.added_lines[0]
        if is_content_movement(deleted, added):
            return LineMovement(deleted=deleted, added=added)
    return None


def context_line_comes_first(
    unchanged_lines: list[LineChange], added_lines: list[LineChange]
) -> bool:
    """True if the first context line precedes the first addition in the NEW file."""
    if not unchanged_lines or not added_lines:
        return False
    return unchanged_lines[0].line_after < added_lines[0].line_after


def _movement_suggestion(
    movement: LineMovement, unchanged_lines: list[LineChange]
) -> SuggestionBody | None:
    deleted = movement.deleted
    unchanged_before_deletion = next(
        (line for line in unchanged_lines if line.line_before < deleted.line_before),
        None,
    )
    if unchanged_before_deletion is None:
        return None

    # Blank lines after the deletion end up after the moved line. One new
    # blank is inserted before it, so one of the existing blanks is dropped.
    blanks_after_deletion = [
        line
        for line in unchanged_lines
        if line.line_before > deleted.line_before and line.content == ""
    ]

    suggestion_lines = [unchanged_before_deletion.content, "", deleted.content]
    suggestion_lines.extend("" for _ in blanks_after_deletion[1:])

    return SuggestionBody(
        body=create_suggestion("\n".join(suggestion_lines)),
        line_count=1 + 1 + len(blanks_after_deletion),
    )


def generate_suggestion_body(changes: list[LineChange]) -> SuggestionBody | None:
    """Generate the suggestion body and replaced line count for a group.

    Rules, in order:

    1. A line movement with context before it is rendered as "context,
       inserted blank, moved line", replacing context through the trailing
       blank lines instead of a no-op "replace X with X".
    2. Pure deletions produce an empty suggestion over the deleted lines.
    3. Pure additions include the preceding context line, if any, and
       replace only that one line.
    4. Replacements suggest the added content over the deleted lines,
       whatever the number of added lines.

    Args:
        changes: One suggestion group.

    Returns:
        SuggestionBody, or None if the group has nothing to suggest.
    """
    filtered = filter_changes_by_type(changes)
    added_lines = filtered.added_lines
    deleted_lines = filtered.deleted_lines
    unchanged_lines = filtered.unchanged_lines

    movement = detect_line_movement(changes)
    if movement:
        suggestion = _movement_suggestion(movement, unchanged_lines)
        if suggestion:
            return suggestion

    if not added_lines:
        if not deleted_lines:
            return None
        return SuggestionBody(
            body=create_suggestion(""), line_count=len(deleted_lines)
        )

    if not deleted_lines:
        comes_first = context_line_comes_first(unchanged_lines, added_lines)
        suggestion_lines = [line.content for line in added_lines]
        if comes_first:
            suggestion_lines.insert(0, unchanged_lines[0].content)

        # line_count is the number of anchored lines being replaced, not the
        # number of lines in the body
        return SuggestionBody(
            body=create_suggestion("\n".join(suggestion_lines)),
            line_count=1 if comes_first else len(added_lines),
        )

    return SuggestionBody(
        body=create_suggestion("\n".join(line.content for line in added_lines)),
        line_count=len(deleted_lines),
    )
