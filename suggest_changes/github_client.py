"""GitHub implementation of the ReviewPlatform protocol."""

from __future__ import annotations

import logging
from typing import Any

from github import Github, GithubException

from suggest_changes.platform_protocol import (
    ExistingComment,
    PlatformContext,
    ReviewApiError,
)

logger = logging.getLogger(__name__)

DIFF_MEDIA_TYPE = "application/vnd.github.v3.diff"
USER_AGENT = "suggest-changes"

ADD_REVIEW_THREAD_MUTATION = """
mutation($input: AddPullRequestReviewThreadInput!) {
  addPullRequestReviewThread(input: $input) {
    thread { id }
  }
}
"""


def _error_message(data: Any) -> str:
    """Flatten a GitHub error payload into one message string."""
    if isinstance(data, str):
        return data
    if not isinstance(data, dict):
        return str(data) if data is not None else ""

    parts = [str(data["message"])] if data.get("message") else []
    for item in data.get("errors") or []:
        if isinstance(item, dict):
            parts.append(str(item.get("message", item)))
        else:
            parts.append(str(item))
    return ": ".join(parts)


def to_review_api_error(error: GithubException) -> ReviewApiError:
    """Translate a PyGithub exception into a ReviewApiError."""
    return ReviewApiError(status=error.status, message=_error_message(error.data))


def graphql_review_api_error(error: GithubException) -> ReviewApiError:
    """Translate a failed GraphQL mutation into a ReviewApiError.

    GraphQL reports validation failures with HTTP 400 and an "errors" list.
    Anchoring rejections are mapped to 422 so they match the REST ones.
    """
    message = _error_message(error.data)
    anchoring = ReviewApiError(status=422, message=message)
    if anchoring.is_anchoring_rejection:
        return anchoring
    return ReviewApiError(status=error.status, message=message)


class GitHubClient:
    """GitHub pull request client implementing ReviewPlatform protocol.

    Uses PyGithub for the REST endpoints it wraps and its requester for the
    pending review endpoints and the GraphQL review thread mutation.
    """

    def __init__(self, token: str, repo_name: str, event_data: dict[str, Any]) -> None:
        """Initialize GitHub client.

        Args:
            token: GitHub API token.
            repo_name: Repository full name (owner/repo).
            event_data: GitHub webhook event payload.
        """
        self._github = Github(token, user_agent=USER_AGENT)
        self._repo = self._github.get_repo(repo_name)
        self._event_data = event_data
        self._pr_number: int = event_data["pull_request"]["number"]
        self._pr = self._repo.get_pull(self._pr_number)
        self._review_node_ids: dict[int, str] = {}

    def get_context(self) -> PlatformContext:
        """Get the PR context information from event data."""
        pull_request = self._event_data["pull_request"]
        return PlatformContext(
            number=pull_request["number"],
            title=pull_request.get("title", ""),
            head_sha=pull_request["head"]["sha"],
            repo_identifier=self._event_data["repository"]["full_name"],
        )

    def get_changed_filenames(self) -> list[str]:
        """Get the paths of files changed in the PR."""
        try:
            return [file.filename for file in self._pr.get_files()]
        except GithubException as error:
            raise to_review_api_error(error) from error

    def list_review_comments(self) -> list[ExistingComment]:
        """Get review comments already posted on the PR."""
        try:
            return [
                ExistingComment(
                    path=comment.path,
                    body=comment.body,
                    line=comment.line,
                    start_line=comment.start_line,
                )
                for comment in self._pr.get_review_comments()
            ]
        except GithubException as error:
            raise to_review_api_error(error) from error

    def get_pull_request_diff(self) -> str | None:
        """Get the PR diff as computed by GitHub.

        Returns:
            Diff text, or None if the response holds no diff.
        """
        try:
            _, data = self._github.requester.requestJsonAndCheck(
                "GET", self._pr.url, headers={"Accept": DIFF_MEDIA_TYPE}
            )
        except GithubException as error:
            raise to_review_api_error(error) from error

        # Non-JSON bodies come back wrapped as {"data": text}
        if isinstance(data, dict):
            data = data.get("data")
        return data if isinstance(data, str) else None

    def create_review(
        self,
        commit_id: str,
        body: str,
        event: str,
        comments: list[dict[str, Any]],
    ) -> int:
        """Create and submit a review with all comments at once.

        Args:
            commit_id: SHA of the commit to review.
            body: Review body text.
            event: APPROVE, REQUEST_CHANGES or COMMENT.
            comments: Review comment payloads.

        Returns:
            ID of the created review.
        """
        try:
            commit = self._repo.get_commit(commit_id)
            review = self._pr.create_review(
                commit=commit, body=body, event=event, comments=comments
            )
        except GithubException as error:
            raise to_review_api_error(error) from error
        return review.id

    def find_pending_review(self) -> int | None:
        """Get the ID of the authenticated user's pending review, if any."""
        try:
            for review in self._pr.get_reviews():
                if review.state == "PENDING":
                    self._review_node_ids[review.id] = review.raw_data["node_id"]
                    return review.id
        except GithubException as error:
            raise to_review_api_error(error) from error
        return None

    def create_pending_review(self, commit_id: str) -> int:
        """Open a pending review; a review created without event stays pending."""
        try:
            commit = self._repo.get_commit(commit_id)
            review = self._pr.create_review(commit=commit)
        except GithubException as error:
            raise to_review_api_error(error) from error
        self._review_node_ids[review.id] = review.raw_data["node_id"]
        return review.id

    def add_pending_review_comment(
        self, review_id: int, commit_id: str, comment: dict[str, Any]
    ) -> None:
        """Attach one comment to the pending review as a review thread.

        Args:
            review_id: ID returned by find_pending_review or
                create_pending_review.
            commit_id: SHA of the reviewed commit.
            comment: Review comment payload (path, body, line, start_line).
        """
        thread_input: dict[str, Any] = {
            "pullRequestReviewId": self._review_node_ids[review_id],
            "path": comment["path"],
            "body": comment["body"],
            "line": comment["line"],
            "side": "RIGHT",
        }
        if comment.get("start_line") is not None:
            thread_input["startLine"] = comment["start_line"]
            thread_input["startSide"] = comment.get("start_side", "RIGHT")

        try:
            self._github.requester.graphql_query(
                ADD_REVIEW_THREAD_MUTATION, {"input": thread_input}
            )
        except GithubException as error:
            raise graphql_review_api_error(error) from error

        logger.debug(
            "Attached comment on %s line %s to pending review %s",
            comment["path"],
            comment["line"],
            review_id,
        )

    def submit_pending_review(self, review_id: int, event: str, body: str) -> None:
        """Submit the pending review with the given event and body."""
        try:
            self._github.requester.requestJsonAndCheck(
                "POST",
                f"{self._pr.url}/reviews/{review_id}/events",
                input={"event": event, "body": body},
            )
        except GithubException as error:
            raise to_review_api_error(error) from error

    def delete_pending_review(self, review_id: int) -> None:
        """Delete the pending review."""
        try:
            self._github.requester.requestJsonAndCheck(
                "DELETE", f"{self._pr.url}/reviews/{review_id}"
            )
        except GithubException as error:
            raise to_review_api_error(error) from error
        self._review_node_ids.pop(review_id, None)
