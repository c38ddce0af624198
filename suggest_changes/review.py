"""Main entry point: turn the local diff into pull request suggestions."""

import json
import logging
import os
import sys
from dataclasses import dataclass
from typing import Any

from suggest_changes.dedup import build_comment_keys
from suggest_changes.diff_parser import DiffParseError, parse_diff
from suggest_changes.drafts import generate_review_comments, log_comments
from suggest_changes.git_diff import get_git_diff
from suggest_changes.github_client import GitHubClient
from suggest_changes.platform_protocol import ReviewApiError, ReviewPlatform
from suggest_changes.submission import (
    VALID_EVENTS,
    ReviewSubmitter,
    SubmissionResult,
)
from suggest_changes.validation import filter_suggestions_in_pull_request_diff

logger = logging.getLogger(__name__)

DEFAULT_EVENT = "COMMENT"


class ConfigurationError(Exception):
    """Raised when the environment does not describe a runnable review."""


@dataclass
class RunConfig:
    """Inputs of one suggestion run."""

    commit_id: str
    """SHA of the commit the review is attached to."""

    diff: str
    """Local unified diff to turn into suggestions."""

    event: str = DEFAULT_EVENT
    """Review event: APPROVE, REQUEST_CHANGES or COMMENT."""

    body: str = ""
    """Review body text."""


def load_event_data(event_path: str) -> dict[str, Any]:
    """Load GitHub webhook event JSON data from file.

    Args:
        event_path: Path to the GitHub event JSON file.

    Returns:
        Parsed event data dictionary.
    """
    with open(event_path, "r") as file:
        return json.load(file)


def parse_review_event(raw_event: str) -> str:
    """Validate the review event input, defaulting to COMMENT.

    Raises:
        ConfigurationError: If the event is not a valid review event.
    """
    event = (raw_event or DEFAULT_EVENT).strip().upper()
    if event not in VALID_EVENTS:
        raise ConfigurationError(
            f'Invalid event type: "{event}". '
            f"Must be one of: {', '.join(VALID_EVENTS)}"
        )
    return event


def load_pull_request_event() -> dict[str, Any]:
    """Load the triggering event and check it carries pull request data.

    Raises:
        ConfigurationError: If GITHUB_EVENT_PATH is unset or the event has
            no pull_request payload.
    """
    event_path = os.environ.get("GITHUB_EVENT_PATH")
    if not event_path:
        raise ConfigurationError("GITHUB_EVENT_PATH must be set.")

    event_data = load_event_data(event_path)
    if not event_data.get("pull_request"):
        event_name = os.environ.get("GITHUB_EVENT_NAME", "unknown")
        raise ConfigurationError(
            f"This workflow was triggered via {event_name}.\n"
            f"The {event_name} event payload does not include the pull_request "
            "data required by this action.\n"
            "Run this action on: pull_request or pull_request_target instead."
        )
    return event_data


def create_platform(event_data: dict[str, Any]) -> GitHubClient:
    """Create the GitHub client for the repository in GITHUB_REPOSITORY.

    Raises:
        ConfigurationError: If GITHUB_TOKEN is unset or GITHUB_REPOSITORY is
            not in owner/repo format.
    """
    token = os.environ.get("GITHUB_TOKEN", "")
    if not token:
        raise ConfigurationError("GITHUB_TOKEN must be set.")

    repo_name = os.environ.get("GITHUB_REPOSITORY", "")
    owner, _, repo = repo_name.partition("/")
    if not owner or not repo:
        raise ConfigurationError("GITHUB_REPOSITORY must be in format owner/repo")

    return GitHubClient(token=token, repo_name=repo_name, event_data=event_data)


def run(platform: ReviewPlatform, config: RunConfig) -> SubmissionResult:
    """Run the suggestion pipeline against a review platform.

    Pipeline steps:
    1. Collect keys of comments already on the pull request
    2. Parse the local diff and generate non-duplicate suggestions
    3. Drop suggestions outside the pull request diff
    4. Submit the remaining suggestions in batches

    Args:
        platform: Review platform client.
        config: Diff and review settings.

    Returns:
        SubmissionResult with delivered comments.

    Raises:
        DiffParseError: If the local diff cannot be parsed.
        ReviewApiError: On unrecoverable review API errors.
    """
    logger.debug("Diff output: %s", config.diff)

    existing_comment_keys = build_comment_keys(platform.list_review_comments())

    # Parse diff after collecting existing comment keys
    files = parse_diff(config.diff)

    initial_comments = generate_review_comments(files, existing_comment_keys)
    comments = filter_suggestions_in_pull_request_diff(platform, initial_comments)
    log_comments("Suggestions to be included in review:", comments)
    if not comments:
        return SubmissionResult()

    result = ReviewSubmitter(platform).submit(
        comments, commit_id=config.commit_id, event=config.event, body=config.body
    )
    if result.review_created:
        logger.info(
            "Review created successfully with %d suggestion(s).", len(result.comments)
        )
    return result


def main() -> None:
    """Run suggest-changes for the pull request that triggered the workflow."""
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(levelname)s %(message)s",
    )

    try:
        event = parse_review_event(os.environ.get("INPUT_EVENT", ""))
        event_data = load_pull_request_event()
        platform = create_platform(event_data)
        context = platform.get_context()

        # Limit the local diff to the files in the pull request
        diff = get_git_diff(["--", *platform.get_changed_filenames()])

        config = RunConfig(
            commit_id=context.head_sha,
            diff=diff,
            event=event,
            body=os.environ.get("INPUT_COMMENT", ""),
        )
        run(platform, config)
    except (ConfigurationError, DiffParseError, ReviewApiError) as error:
        logger.error("%s", error)
        sys.exit(1)


if __name__ == "__main__":
    main()
