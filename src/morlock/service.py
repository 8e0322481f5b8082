"""Timelapse service - answer history and timelapse queries for a file path.

Used by both the CLI and the HTTP server. Each call opens the repository,
runs the query and releases every git process before returning; no state is
kept between calls.
"""

from __future__ import annotations

import itertools
import logging
from pathlib import Path

from morlock.config import MorlockConfig
from morlock.errors import InputError
from morlock.git.history import Commit
from morlock.git.repo import GitRepository
from morlock.timelapse.builder import build_timelapse
from morlock.timelapse.result import Timelapse

logger = logging.getLogger(__name__)


class TimelapseService:
    """Reconstructs file history on demand."""

    def __init__(self, config: MorlockConfig | None = None) -> None:
        self.config = config or MorlockConfig()

    def open(self, path: Path | str) -> tuple[GitRepository, Path]:
        """Open the repository holding a tracked file.

        Raises:
            InputError: The path is missing, not a file, outside a
                repository, or not tracked by git.
        """
        if not str(path).strip():
            raise InputError("A file path is required")

        file_path = Path(path).expanduser().resolve()
        if not file_path.exists():
            raise InputError(f"File not found: {path}", path=str(path))
        if not file_path.is_file():
            raise InputError(f"Not a file: {path}", path=str(path))

        repo = GitRepository.open(file_path, self.config.git)
        if not repo.is_tracked(file_path):
            raise InputError(f"File is not under version control: {path}", path=str(path))

        return repo, file_path

    def history(self, path: Path | str) -> list[Commit]:
        """All commits touching a file, newest first."""
        repo, file_path = self.open(path)
        with repo.history(file_path) as commits:
            return list(commits)

    def timelapse(self, path: Path | str) -> Timelapse:
        """Reconstruct the timelapse of a file from its working-tree content.

        Uncommitted changes head the history as the null-hash pseudo commit,
        so the working tree is diffed against the newest commit first.
        """
        repo, file_path = self.open(path)
        content = repo.content(file_path)

        history = repo.history(file_path)
        commits = itertools.chain([Commit.worktree()], history) if repo.is_modified(file_path) else history

        logger.info(f"Reconstructing timelapse for {repo.relative_path(file_path)}")
        try:
            timelapse = build_timelapse(content, commits, repo.diff, path=str(file_path))
        finally:
            history.close()

        logger.info(
            f"Timelapse ready: {timelapse.present_line_count} present, "
            f"{timelapse.deleted_line_count} deleted line(s)"
        )
        return timelapse
