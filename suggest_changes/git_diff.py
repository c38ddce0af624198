"""Local diff generation with git."""

import subprocess

GIT_DIFF_FLAGS = ("--unified=1", "--ignore-cr-at-eol")


def get_git_diff(git_args: list[str]) -> str:
    """Run git diff with the flags the suggestion pipeline expects.

    One line of context keeps unrelated edits in separate chunks, and CR at
    end of line is ignored so line-ending churn produces no suggestions.
    The exit code is ignored: `git diff --no-index` exits 1 when the files
    differ.

    Args:
        git_args: Extra arguments, e.g. ["--", "file.md"].

    Returns:
        Diff text from stdout.
    """
    result = subprocess.run(
        ["git", "diff", *GIT_DIFF_FLAGS, *git_args],
        capture_output=True,
        text=True,
        check=False,
    )
    return result.stdout
