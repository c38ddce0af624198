"""Shared test fixtures for suggest-changes."""

from typing import Any
from unittest.mock import MagicMock

import pytest

from suggest_changes.drafts import SuggestionDraft


@pytest.fixture
def sample_single_hunk_patch() -> str:
    """Single hunk with 3 additions."""
    return (
        "@@ -10,4 +10,6 @@\n"
        " context_line\n"
        "+added_line_1\n"
        "+added_line_2\n"
        " context_line\n"
        " context_line\n"
        "+added_line_3"
    )


@pytest.fixture
def sample_multi_hunk_patch() -> str:
    """Two hunks in one file."""
    return "@@ -5,3 +5,4 @@\n ctx\n+new1\n ctx\n@@ -20,2 +21,3 @@\n ctx\n+new2\n+new3"


@pytest.fixture
def replace_line_diff() -> str:
    """One line replaced at OLD-file line 1."""
    return (
        "diff --git a/test.md b/test.md\n"
        "--- a/test.md\n"
        "+++ b/test.md\n"
        "@@ -1,1 +1,1 @@\n"
        "-old line\n"
        "+new line"
    )


@pytest.fixture
def blank_line_insertion_diff() -> str:
    """Blank line inserted after a heading."""
    return (
        "diff --git a/README.md b/README.md\n"
        "index 68f3925..1e22de6 100644\n"
        "--- a/README.md\n"
        "+++ b/README.md\n"
        "@@ -1,2 +1,3 @@\n"
        " ## Heading\n"
        "+\n"
        " Paragraph\n"
    )


@pytest.fixture
def shrinking_replacement_diff() -> str:
    """Three deleted lines replaced by one added line at OLD-file lines 2-4."""
    return (
        "diff --git a/test.php b/test.php\n"
        "index abc123..def456 100644\n"
        "--- a/test.php\n"
        "+++ b/test.php\n"
        "@@ -1,5 +1,3 @@\n"
        "  // unchanged\n"
        "-line 1 to delete\n"
        "-line 2 to delete  \n"
        "-line 3 to delete\n"
        "+single replacement line\n"
        "  // unchanged\n"
    )


@pytest.fixture
def multi_file_diff() -> str:
    """Changed, added, deleted, renamed and binary files in one diff."""
    return (
        "diff --git a/docs/guide.md b/docs/guide.md\n"
        "index 1111111..2222222 100644\n"
        "--- a/docs/guide.md\n"
        "+++ b/docs/guide.md\n"
        "@@ -3,3 +3,3 @@ Intro\n"
        " keep\n"
        "-teh typo\n"
        "+the typo\n"
        " keep\n"
        "diff --git a/docs/new.md b/docs/new.md\n"
        "new file mode 100644\n"
        "index 0000000..3333333\n"
        "--- /dev/null\n"
        "+++ b/docs/new.md\n"
        "@@ -0,0 +1,2 @@\n"
        "+first\n"
        "+second\n"
        "diff --git a/docs/old.md b/docs/old.md\n"
        "deleted file mode 100644\n"
        "index 4444444..0000000\n"
        "--- a/docs/old.md\n"
        "+++ /dev/null\n"
        "@@ -1 +0,0 @@\n"
        "-gone\n"
        "diff --git a/docs/a.md b/docs/b.md\n"
        "similarity index 90%\n"
        "rename from docs/a.md\n"
        "rename to docs/b.md\n"
        "index 5555555..6666666 100644\n"
        "--- a/docs/a.md\n"
        "+++ b/docs/b.md\n"
        "@@ -1,2 +1,2 @@\n"
        " title\n"
        "-body\n"
        "+Body\n"
        "diff --git a/logo.png b/logo.png\n"
        "index 7777777..8888888 100644\n"
        "Binary files a/logo.png and b/logo.png differ\n"
    )


@pytest.fixture
def make_drafts():
    """Factory for n single-line drafts on distinct files."""

    def _make(count: int) -> list[SuggestionDraft]:
        return [
            SuggestionDraft(
                path=f"file{i}.md",
                line=1,
                body=f"````suggestion\nsuggestion {i}\n````",
            )
            for i in range(count)
        ]

    return _make


@pytest.fixture
def mock_platform() -> MagicMock:
    """Review platform with no existing comments and no PR diff."""
    platform = MagicMock()
    platform.list_review_comments.return_value = []
    platform.get_pull_request_diff.return_value = None
    platform.create_review.return_value = 123
    platform.find_pending_review.return_value = None
    platform.create_pending_review.return_value = 7
    return platform


@pytest.fixture
def sample_event_payload() -> dict[str, Any]:
    """Mock GitHub pull_request event payload."""
    return {
        "action": "synchronize",
        "number": 42,
        "pull_request": {
            "number": 42,
            "title": "Fix formatting",
            "head": {"sha": "abc123def456"},
        },
        "repository": {
            "full_name": "owner/repo",
        },
    }
