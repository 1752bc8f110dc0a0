"""gitchanges — which files changed between two refs, and how."""

from gitchanges.git import (
    Diff,
    DiffParseError,
    GitDiffError,
    GitError,
    Match,
    Status,
    diff_async,
    diff_sync,
    first_commit_async,
    first_commit_sync,
    parse,
)

__version__ = "0.1.0"

__all__ = [
    "Diff",
    "DiffParseError",
    "GitDiffError",
    "GitError",
    "Match",
    "Status",
    "__version__",
    "diff_async",
    "diff_sync",
    "first_commit_async",
    "first_commit_sync",
    "parse",
]
