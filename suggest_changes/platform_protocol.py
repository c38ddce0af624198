"""Platform-agnostic protocol for posting review suggestions."""

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

LINE_OUTSIDE_DIFF_MARKERS = ("line must be part of the diff",)
PENDING_REVIEW_MARKERS = (
    "pending review already exists",
    "can only have one pending review",
)


class ReviewApiError(Exception):
    """A review API call failed.

    Attributes:
        status: HTTP status code of the failed call.
        message: Error message returned by the API.
    """

    def __init__(self, status: int, message: str) -> None:
        super().__init__(f"{status}: {message}")
        self.status = status
        self.message = message

    def _message_contains(self, markers: tuple[str, ...]) -> bool:
        lowered = self.message.lower()
        return any(marker in lowered for marker in markers)

    @property
    def is_line_outside_diff(self) -> bool:
        """True for a 422 caused by a comment anchored outside the diff."""
        return self.status == 422 and self._message_contains(LINE_OUTSIDE_DIFF_MARKERS)

    @property
    def is_pending_review_conflict(self) -> bool:
        """True for a 422 caused by an existing pending review."""
        return self.status == 422 and self._message_contains(PENDING_REVIEW_MARKERS)

    @property
    def is_anchoring_rejection(self) -> bool:
        """True if the rejection can be recovered by per-comment salvage."""
        return self.is_line_outside_diff or self.is_pending_review_conflict


@dataclass
class ExistingComment:
    """A review comment already posted on the pull request."""

    path: str
    """File path relative to repo root."""

    body: str
    """Comment text."""

    line: int | None = None
    """Last line the comment is anchored to."""

    start_line: int | None = None
    """First line for multi-line comments."""


@dataclass
class PlatformContext:
    """Context information for a pull request."""

    number: int
    """PR number."""

    title: str
    """PR title."""

    head_sha: str
    """Head commit SHA the review is attached to."""

    repo_identifier: str
    """'owner/repo'."""


@runtime_checkable
class ReviewPlatform(Protocol):
    """Protocol for the review-hosting service.

    Every call that fails on the service side raises ReviewApiError.
    """

    def get_context(self) -> PlatformContext:
        """Get the pull request context information."""
        ...

    def get_changed_filenames(self) -> list[str]:
        """Get the paths of files changed in the pull request."""
        ...

    def list_review_comments(self) -> list[ExistingComment]:
        """Get review comments already posted on the pull request."""
        ...

    def get_pull_request_diff(self) -> str | None:
        """Get the pull request diff as computed by the service.

        Returns:
            Unified diff text, or None if unavailable.
        """
        ...

    def create_review(
        self,
        commit_id: str,
        body: str,
        event: str,
        comments: list[dict[str, Any]],
    ) -> int:
        """Create and submit a review with comments.

        Returns:
            ID of the created review.
        """
        ...

    def find_pending_review(self) -> int | None:
        """Get the ID of the caller's pending review, if one exists."""
        ...

    def create_pending_review(self, commit_id: str) -> int:
        """Open a pending (draft) review and return its ID."""
        ...

    def add_pending_review_comment(
        self, review_id: int, commit_id: str, comment: dict[str, Any]
    ) -> None:
        """Attach one comment to the pending review."""
        ...

    def submit_pending_review(self, review_id: int, event: str, body: str) -> None:
        """Submit the pending review as a real review."""
        ...

    def delete_pending_review(self, review_id: int) -> None:
        """Discard the pending review."""
        ...
