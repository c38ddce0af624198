"""Tests for validation module."""

import logging
from unittest.mock import patch

import requests

from suggest_changes.diff_parser import parse_diff
from suggest_changes.drafts import SuggestionDraft
from suggest_changes.platform_protocol import ReviewApiError
from suggest_changes.validation import (
    build_right_side_anchors,
    filter_suggestions_in_pull_request_diff,
    is_valid_suggestion,
)

PR_DIFF = (
    "diff --git a/docs/guide.md b/docs/guide.md\n"
    "index 1111111..2222222 100644\n"
    "--- a/docs/guide.md\n"
    "+++ b/docs/guide.md\n"
    "@@ -3,3 +3,4 @@\n"
    " keep\n"
    "-teh typo\n"
    "+the typo\n"
    "+extra\n"
    " keep\n"
)


def _draft(line: int, start_line: int | None = None, path: str = "docs/guide.md"):
    return SuggestionDraft(
        path=path,
        body="````suggestion\nx\n````",
        line=line,
        start_line=start_line,
        start_side="RIGHT" if start_line is not None else None,
    )


class TestBuildRightSideAnchors:
    """Tests for build_right_side_anchors."""

    def test_added_and_context_lines(self):
        anchors = build_right_side_anchors(parse_diff(PR_DIFF))
        assert anchors == {"docs/guide.md": {3, 4, 5, 6}}

    def test_changed_and_added_files_only(self, multi_file_diff: str):
        anchors = build_right_side_anchors(parse_diff(multi_file_diff))
        assert anchors == {"docs/guide.md": {3, 4, 5}, "docs/new.md": {1, 2}}


class TestIsValidSuggestion:
    """Tests for is_valid_suggestion."""

    anchors = {"docs/guide.md": {3, 4, 5, 6}}

    def test_single_line_inside_diff(self):
        assert is_valid_suggestion(_draft(4), self.anchors)

    def test_single_line_outside_diff(self):
        assert not is_valid_suggestion(_draft(9), self.anchors)

    def test_start_line_outside_diff(self):
        assert not is_valid_suggestion(_draft(4, start_line=1), self.anchors)

    def test_multi_line_inside_diff(self):
        assert is_valid_suggestion(_draft(6, start_line=3), self.anchors)

    def test_unknown_path(self):
        assert not is_valid_suggestion(_draft(4, path="other.md"), self.anchors)


class TestFilterSuggestionsInPullRequestDiff:
    """Tests for filter_suggestions_in_pull_request_diff."""

    def test_drops_drafts_outside_diff(self, mock_platform, caplog):
        mock_platform.get_pull_request_diff.return_value = PR_DIFF
        inside, outside = _draft(4), _draft(1)

        with caplog.at_level(logging.INFO):
            result = filter_suggestions_in_pull_request_diff(
                mock_platform, [inside, outside]
            )

        assert result == [inside]
        assert "outside the pull request diff" in caplog.text
        assert "docs/guide.md:1" in caplog.text

    def test_fails_open_when_diff_unavailable(self, mock_platform):
        mock_platform.get_pull_request_diff.return_value = None
        drafts = [_draft(1)]

        assert filter_suggestions_in_pull_request_diff(mock_platform, drafts) == drafts

    def test_fails_open_on_api_error(self, mock_platform, caplog):
        mock_platform.get_pull_request_diff.side_effect = ReviewApiError(
            500, "Server Error"
        )
        drafts = [_draft(1)]

        with caplog.at_level(logging.WARNING):
            result = filter_suggestions_in_pull_request_diff(mock_platform, drafts)

        assert result == drafts
        assert "PR diff fetch failed" in caplog.text

    def test_fails_open_on_non_diff_response(self, mock_platform):
        mock_platform.get_pull_request_diff.return_value = '{"message": "Not Found"}'
        drafts = [_draft(1)]

        assert filter_suggestions_in_pull_request_diff(mock_platform, drafts) == drafts

    def test_fails_open_on_parse_error(self, mock_platform, caplog):
        mock_platform.get_pull_request_diff.return_value = (
            "diff --git a/x b/x\n--- a/x\n+++ b/x\n@@ garbage\n+y\n"
        )
        drafts = [_draft(1)]

        with caplog.at_level(logging.WARNING):
            result = filter_suggestions_in_pull_request_diff(mock_platform, drafts)

        assert result == drafts
        assert "PR diff parse failed" in caplog.text

    def test_fails_open_on_network_error(self, mock_platform, caplog):
        mock_platform.get_pull_request_diff.side_effect = (
            requests.exceptions.ConnectionError("connection refused")
        )
        drafts = [_draft(1)]

        with caplog.at_level(logging.WARNING):
            result = filter_suggestions_in_pull_request_diff(mock_platform, drafts)

        assert result == drafts
        assert "PR diff fetch failed: connection refused" in caplog.text

    def test_fails_open_on_unexpected_parser_error(self, mock_platform):
        mock_platform.get_pull_request_diff.return_value = PR_DIFF
        drafts = [_draft(1)]

        with patch(
            "suggest_changes.validation.parse_diff", side_effect=IndexError("boom")
        ):
            result = filter_suggestions_in_pull_request_diff(mock_platform, drafts)

        assert result == drafts
