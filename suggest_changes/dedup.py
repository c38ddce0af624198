"""Comment keys for recognizing suggestions that were already posted."""

from typing import Any


def _comment_field(comment: Any, name: str) -> Any:
    if isinstance(comment, dict):
        return comment.get(name)
    return getattr(comment, name, None)


def generate_comment_key(comment: Any) -> str:
    """Generate a key identifying a comment by anchoring and text.

    Drafts, API payload dicts and comments fetched from the API all go
    through this same formatting, so identical suggestions collide. The
    body is compared verbatim; whitespace differences yield different keys.

    Args:
        comment: Object or dict with path, line, start_line and body.

    Returns:
        Key of the form "path:line:start_line:body", missing fields empty.
    """
    line = _comment_field(comment, "line")
    start_line = _comment_field(comment, "start_line")
    return (
        f"{_comment_field(comment, 'path')}:"
        f"{'' if line is None else line}:"
        f"{'' if start_line is None else start_line}:"
        f"{_comment_field(comment, 'body')}"
    )


def build_comment_keys(comments: list[Any]) -> set[str]:
    """Build the set of keys for previously posted comments."""
    return {generate_comment_key(comment) for comment in comments}
