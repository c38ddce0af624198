"""Batched review submission with per-comment salvage of rejected batches."""

import logging
from dataclasses import dataclass, field

from suggest_changes.drafts import SuggestionDraft
from suggest_changes.platform_protocol import ReviewApiError, ReviewPlatform

logger = logging.getLogger(__name__)

MAX_COMMENTS_PER_REVIEW = 100
VALID_EVENTS = ("APPROVE", "REQUEST_CHANGES", "COMMENT")


@dataclass
class SubmissionResult:
    """Outcome of a run: delivered comments and whether any review exists."""

    comments: list[SuggestionDraft] = field(default_factory=list)
    review_created: bool = False


def batch_comments(
    comments: list[SuggestionDraft],
    batch_size: int = MAX_COMMENTS_PER_REVIEW,
) -> list[list[SuggestionDraft]]:
    """Split comments into contiguous batches of at most batch_size."""
    return [
        comments[i : i + batch_size] for i in range(0, len(comments), batch_size)
    ]


def create_batch_review_body(
    body: str,
    batch_number: int,
    total_batches: int,
    total_comments: int,
    batch_size: int = MAX_COMMENTS_PER_REVIEW,
) -> str:
    """Build the review body for one batch.

    A single batch keeps the body as is. Multiple batches get a note
    explaining why the suggestions are spread over several reviews.
    """
    if total_batches <= 1:
        return body

    note = (
        f"> [!NOTE]\n"
        f"> This pull request has {total_comments} suggestions, split into "
        f"{total_batches} separate reviews because GitHub allows at most "
        f"{batch_size} comments per review. "
        f"This is review {batch_number} of {total_batches}."
    )
    return f"{body}\n\n{note}" if body else note


class ReviewSubmitter:
    """Submits suggestion drafts as reviews, one batch at a time.

    A batch rejected because a comment is anchored outside the diff (or
    because a pending review already exists) is salvaged: its comments are
    attached one by one to a pending review, skipping those still rejected,
    and the pending review is then submitted. Any other API error is fatal.

    Only a pending review opened by this submitter is ever deleted; one left
    over from an earlier run is reused but never discarded.
    """

    def __init__(
        self, platform: ReviewPlatform, batch_size: int = MAX_COMMENTS_PER_REVIEW
    ) -> None:
        self._platform = platform
        self._batch_size = batch_size

    def submit(
        self,
        comments: list[SuggestionDraft],
        commit_id: str,
        event: str,
        body: str,
    ) -> SubmissionResult:
        """Submit all comments in batches.

        Args:
            comments: Validated, deduplicated drafts.
            commit_id: SHA of the reviewed commit.
            event: APPROVE, REQUEST_CHANGES or COMMENT.
            body: Review body text.

        Returns:
            SubmissionResult aggregating every delivered comment.

        Raises:
            ReviewApiError: On any error other than an anchoring rejection.
        """
        result = SubmissionResult()
        batches = batch_comments(comments, self._batch_size)

        for batch_number, batch in enumerate(batches, start=1):
            batch_body = create_batch_review_body(
                body, batch_number, len(batches), len(comments), self._batch_size
            )
            delivered = self._submit_batch(batch, commit_id, event, batch_body)
            if delivered:
                result.comments.extend(delivered)
                result.review_created = True
                logger.info(
                    "Review %d of %d created with %d suggestion(s).",
                    batch_number,
                    len(batches),
                    len(delivered),
                )
            else:
                logger.warning(
                    "Review %d of %d was not created: no suggestion could be "
                    "attached.",
                    batch_number,
                    len(batches),
                )

        return result

    def _submit_batch(
        self,
        batch: list[SuggestionDraft],
        commit_id: str,
        event: str,
        body: str,
    ) -> list[SuggestionDraft]:
        try:
            self._platform.create_review(
                commit_id=commit_id,
                body=body,
                event=event,
                comments=[comment.to_api() for comment in batch],
            )
        except ReviewApiError as error:
            if not error.is_anchoring_rejection:
                raise
            logger.warning(
                "Batch review rejected (%s), attaching %d comment(s) individually",
                error.message,
                len(batch),
            )
            return self._salvage_batch(batch, commit_id, event, body)
        return batch

    def _open_pending_review(self, commit_id: str) -> tuple[int, bool]:
        """Return (review ID, whether this call created the review)."""
        review_id = self._platform.find_pending_review()
        if review_id is not None:
            return review_id, False
        return self._platform.create_pending_review(commit_id), True

    def _salvage_batch(
        self,
        batch: list[SuggestionDraft],
        commit_id: str,
        event: str,
        body: str,
    ) -> list[SuggestionDraft]:
        review_id, created = self._open_pending_review(commit_id)

        try:
            attached = self._attach_comments(review_id, commit_id, batch)
        except ReviewApiError:
            if created:
                self._discard_pending_review(review_id)
            raise

        if attached:
            self._platform.submit_pending_review(review_id, event, body)
        elif created:
            self._platform.delete_pending_review(review_id)
        else:
            logger.info(
                "No comment attached; leaving pre-existing pending review %d as is",
                review_id,
            )
        return attached

    def _attach_comments(
        self, review_id: int, commit_id: str, batch: list[SuggestionDraft]
    ) -> list[SuggestionDraft]:
        attached: list[SuggestionDraft] = []
        for comment in batch:
            try:
                self._platform.add_pending_review_comment(
                    review_id, commit_id, comment.to_api()
                )
            except ReviewApiError as error:
                if not error.is_line_outside_diff:
                    raise
                logger.warning(
                    "Skipping comment on %s line %s: %s",
                    comment.path,
                    comment.line,
                    error.message,
                )
                continue
            attached.append(comment)
        return attached

    def _discard_pending_review(self, review_id: int) -> None:
        try:
            self._platform.delete_pending_review(review_id)
        except ReviewApiError as error:
            logger.warning(
                "Could not delete pending review %d: %s", review_id, error.message
            )
