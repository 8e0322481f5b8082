"""Timelapse builder - walk a file's history and splice in every deletion."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from typing import TYPE_CHECKING

from morlock.timelapse.alignment import transcribe
from morlock.timelapse.models import DiffHunk
from morlock.timelapse.result import Timelapse

if TYPE_CHECKING:
    from morlock.git.history import Commit

logger = logging.getLogger(__name__)

DiffFn = Callable[["Commit", "Commit", "str | None"], Sequence[DiffHunk]]
"""diff_fn(older, newer, path) -> hunks of the diff from older to newer."""


class TimelapseBuilder:
    """Builds a Timelapse from current content, history and a diff source.

    The builder owns the Timelapse while it is being built and only hands
    it out frozen, once history is exhausted. Any error from the diff
    source or the alignment engine aborts the build.
    """

    def __init__(self, diff_fn: DiffFn, path: str | None = None) -> None:
        self.diff_fn = diff_fn
        self.path = path

    def build(self, current_content: str, history: Iterable[Commit]) -> Timelapse:
        """Reconstruct the timelapse.

        Args:
            current_content: Most recent content of the file.
            history: Commits touching the file, newest first. If it has a
                `close()` method it is called when the build ends, whether
                it finished or failed.

        Returns:
            The finished, frozen Timelapse.
        """
        timelapse = Timelapse(current_content)
        newer: Commit | None = None
        pairs = 0

        try:
            for commit in history:
                if newer is None:
                    newer = commit
                    continue

                self._apply_pair(timelapse, commit, newer)
                pairs += 1
                newer = commit
        finally:
            close = getattr(history, "close", None)
            if callable(close):
                close()

        timelapse.verify()
        logger.debug(
            f"Built timelapse for {self.path or 'content'} from {pairs} commit pair(s): {timelapse!r}"
        )
        return timelapse.freeze()

    def _apply_pair(self, timelapse: Timelapse, older: Commit, newer: Commit) -> None:
        hunks = self.diff_fn(older, newer, self.path)
        newer_name = "working tree" if newer.is_worktree else newer.short_hash
        logger.debug(
            f"Diff {older.short_hash}..{newer_name}: {len(hunks)} hunk(s), "
            f"{sum(h.removed_count for h in hunks)} removed line(s)"
        )

        # Last hunk first: earlier hunks' after-side line numbers stay valid
        for hunk in reversed(hunks):
            transcribe(hunk, timelapse)


def build_timelapse(
    current_content: str,
    history: Iterable[Commit],
    diff_fn: DiffFn,
    path: str | None = None,
) -> Timelapse:
    """Build a Timelapse for `path`; see TimelapseBuilder.build."""
    return TimelapseBuilder(diff_fn, path).build(current_content, history)
