"""Shared fixtures: temporary git repositories and hand-written diff hunks."""

from __future__ import annotations

import shutil
import subprocess
from collections.abc import Callable
from pathlib import Path

import pytest

from morlock.timelapse.models import DiffHunk, DiffLine, LineMode


class TemporaryGitRepo:
    """A throwaway git repository driven by the real git binary."""

    user_name = "Morlock Test"
    user_email = "morlock@test.com"

    def __init__(self, path: Path) -> None:
        self.path = path

    def git(self, *args: str) -> str:
        result = subprocess.run(
            ["git", *args],
            cwd=self.path,
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout

    def init(self) -> None:
        self.path.mkdir(parents=True, exist_ok=True)
        self.git("init", "-q")
        self.git("config", "user.name", self.user_name)
        self.git("config", "user.email", self.user_email)
        self.git("config", "commit.gpgsign", "false")
        self.git("config", "core.autocrlf", "false")

    def write(self, name: str, content: str | bytes) -> Path:
        file_path = self.path / name
        file_path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            file_path.write_bytes(content)
        else:
            file_path.write_text(content)
        return file_path

    def commit_file(self, name: str, content: str | bytes, message: str | None = None) -> str:
        """Write, stage and commit a file; return the new commit hash."""
        self.write(name, content)
        self.git("add", name)
        self.git("commit", "-q", "-m", message or f"Update {name}")
        return self.git("rev-parse", "HEAD").strip()


@pytest.fixture
def git_repo(tmp_path: Path) -> TemporaryGitRepo:
    """Create an empty git repository (skipped when git is missing)."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    repo = TemporaryGitRepo(tmp_path / "repo")
    repo.init()
    return repo


def build_hunk(*body: str, before_start: int = 1, after_start: int = 1) -> DiffHunk:
    """Build a hunk from unified-diff body lines (' x', '-x', '+x').

    Positions run 1, 2, ... over the body, as the diff parser numbers them.
    """
    before: list[DiffLine] = []
    after: list[DiffLine] = []
    before_number, after_number = before_start, after_start

    for position, text in enumerate(body, start=1):
        marker, content = text[0], text[1:]
        if marker == "-":
            before.append(DiffLine(position, before_number, content, LineMode.REMOVED))
            before_number += 1
        elif marker == "+":
            after.append(DiffLine(position, after_number, content, LineMode.ADDED))
            after_number += 1
        else:
            before.append(DiffLine(position, before_number, content, LineMode.UNCHANGED))
            after.append(DiffLine(position, after_number, content, LineMode.UNCHANGED))
            before_number += 1
            after_number += 1

    return DiffHunk(tuple(before), tuple(after), before_start, after_start)


@pytest.fixture
def make_hunk() -> Callable[..., DiffHunk]:
    """Factory for hunks written as unified-diff body lines."""
    return build_hunk
