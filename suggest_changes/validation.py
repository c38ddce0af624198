"""Validation of suggestion anchors against the pull request diff."""

import logging

from suggest_changes.changes import is_added_line, is_unchanged_line
from suggest_changes.diff_parser import FileDiff, parse_diff
from suggest_changes.drafts import SuggestionDraft, log_comments, partition
from suggest_changes.platform_protocol import ReviewPlatform

logger = logging.getLogger(__name__)

ANCHORABLE_FILE_KINDS = frozenset({"changed", "added"})


def build_right_side_anchors(files: list[FileDiff]) -> dict[str, set[int]]:
    """Map each file path to the NEW-file lines a comment may anchor to.

    Only added and context lines of changed and added files are visible on
    the right side of the diff.
    """
    return {
        file_diff.path: {
            change.line_after
            for chunk in file_diff.chunks
            for change in chunk.changes
            if is_added_line(change) or is_unchanged_line(change)
        }
        for file_diff in files
        if file_diff.kind in ANCHORABLE_FILE_KINDS
    }


def is_valid_suggestion(comment: SuggestionDraft, anchors: dict[str, set[int]]) -> bool:
    """Check that every anchored line of the draft is part of the diff."""
    valid_lines = anchors.get(comment.path)
    if not valid_lines:
        return False
    if comment.line not in valid_lines:
        return False
    if comment.start_line is not None and comment.start_line not in valid_lines:
        return False
    return True


def fetch_canonical_diff(platform: ReviewPlatform) -> str | None:
    """Fetch the pull request diff, or None if it is unavailable."""
    try:
        diff_text = platform.get_pull_request_diff()
    except Exception as error:
        logger.warning("PR diff fetch failed: %s", error)
        return None

    if not diff_text or not diff_text.startswith("diff --git "):
        logger.debug("PR diff filter: no usable diff string; skipping.")
        return None
    return diff_text


def filter_suggestions_in_pull_request_diff(
    platform: ReviewPlatform, comments: list[SuggestionDraft]
) -> list[SuggestionDraft]:
    """Drop drafts anchored outside the diff the service will validate against.

    The service computes its own diff, which may differ from the local one.
    If that diff cannot be fetched or parsed for any reason, including a
    network failure, all drafts are returned unchanged.

    Args:
        platform: Review platform to fetch the pull request diff from.
        comments: Drafts to validate.

    Returns:
        Drafts whose anchors are all within the pull request diff.
    """
    diff_text = fetch_canonical_diff(platform)
    if diff_text is None:
        return comments

    try:
        pull_request_files = parse_diff(diff_text)
    except Exception as error:
        logger.warning("PR diff parse failed: %s", error)
        return comments

    anchors = build_right_side_anchors(pull_request_files)
    valid, skipped = partition(
        comments, lambda comment: is_valid_suggestion(comment, anchors)
    )
    log_comments(
        "Suggestions skipped because they are outside the pull request diff:",
        skipped,
    )
    return valid
