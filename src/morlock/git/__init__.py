"""Git collaborators: commit history, diffs and file content for one path."""

from __future__ import annotations

from morlock.git.history import NULL_HASH, Commit, HistoryStream, parse_commit_record
from morlock.git.repo import GitRepository, run_git
from morlock.git.unified import parse_unified_diff

__all__ = [
    "NULL_HASH",
    "Commit",
    "GitRepository",
    "HistoryStream",
    "parse_commit_record",
    "parse_unified_diff",
    "run_git",
]
