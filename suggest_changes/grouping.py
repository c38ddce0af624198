"""Grouping of chunk line changes into suggestion-sized edits."""

from suggest_changes.changes import (
    LineChange,
    is_added_line,
    is_deleted_line,
    is_unchanged_line,
    position_of,
)


def is_unchanged_followed_by_added(group: list[LineChange]) -> bool:
    """Check if group is one unchanged line followed only by added lines.

    This shape indicates blank line insertions after a content line.
    """
    return (
        len(group) > 0
        and is_unchanged_line(group[0])
        and all(is_added_line(change) for change in group[1:])
    )


def is_content_movement(deleted: LineChange, added: LineChange) -> bool:
    """Check if a deleted and an added line carry the same content."""
    return deleted.content == added.content


def is_line_movement(current_group: list[LineChange], next_change: LineChange) -> bool:
    """Check if next_change re-adds the content of a line deleted in the group.

    Pattern: [..., Deleted line, Unchanged line(s)] + upcoming Added line
    with the same content, i.e. a line relocated (typically to make room
    for an inserted blank line) rather than changed.
    """
    if not is_added_line(next_change):
        return False

    deleted_line = next(
        (change for change in current_group if is_deleted_line(change)), None
    )
    if deleted_line is None:
        return False

    return is_content_movement(deleted_line, next_change)


def should_split_for_blank_line_insertion(
    current_group: list[LineChange], next_change: LineChange
) -> bool:
    """Check if the group should be closed before next_change.

    Pattern: [Unchanged, Added...] followed by another Unchanged line.
    Closing here yields clean [Unchanged, Added] pairs.
    """
    return is_unchanged_followed_by_added(current_group) and is_unchanged_line(
        next_change
    )


def get_last_changed_line_number(group: list[LineChange]) -> int | None:
    """Return the position of the last added or deleted line in the group.

    Unchanged lines are ignored so they never contribute to gap detection.
    """
    for change in reversed(group):
        if is_deleted_line(change) or is_added_line(change):
            return position_of(change)
    return None


def group_changes_for_suggestions(
    changes: list[LineChange],
) -> list[list[LineChange]]:
    """Group contiguous or nearly contiguous changes into suggestion groups.

    Unchanged lines are kept in the open group for context but do not
    affect contiguity. A new group starts when an added/deleted line is more
    than one line past the previous added/deleted line of the group.

    Two patterns override plain contiguity:

    * Blank line insertions. Linters that add a blank line after every
      heading produce [Unchanged, Add(""), Unchanged, Add(""), ...]. Each
      [Unchanged, Add("")] pair becomes its own group instead of one large
      confusing multi-line suggestion.
    * Line movements. A line deleted and re-added further down with the same
      content stays in the group of its deletion, so it is not rendered as
      an unrelated delete plus an unrelated add.

    Args:
        changes: Line changes of one diff chunk, in file order.

    Returns:
        Groups in order. Their concatenation is the input minus any
        malformed changes.
    """
    groups: list[list[LineChange]] = []
    current_group: list[LineChange] = []

    for change in changes:
        if should_split_for_blank_line_insertion(current_group, change):
            groups.append(current_group)
            current_group = [change]
            continue

        line_number = position_of(change)
        if line_number is None:
            continue

        last_changed_line_number = get_last_changed_line_number(current_group)
        appears_to_be_line_movement = is_line_movement(current_group, change)

        if (
            not is_unchanged_line(change)
            and last_changed_line_number is not None
            and line_number > last_changed_line_number + 1
            and not appears_to_be_line_movement
        ):
            groups.append(current_group)
            current_group = []

        current_group.append(change)

    if current_group:
        groups.append(current_group)

    return groups
