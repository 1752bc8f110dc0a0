"""Git interface layer — adapter, change-list parsing, models."""

from gitchanges.git.adapter import (
    BAD_REVISION,
    GitDiffError,
    GitError,
    diff_async,
    diff_sync,
    first_commit_async,
    first_commit_sync,
    get_repo_root,
    raise_for_bad_revision,
)
from gitchanges.git.diff_parser import DiffParseError, parse
from gitchanges.git.models import Diff, Match, Status, coerce_status, status_label

__all__ = [
    "BAD_REVISION",
    "Diff",
    "DiffParseError",
    "GitDiffError",
    "GitError",
    "Match",
    "Status",
    "coerce_status",
    "diff_async",
    "diff_sync",
    "first_commit_async",
    "first_commit_sync",
    "get_repo_root",
    "parse",
    "raise_for_bad_revision",
    "status_label",
]
