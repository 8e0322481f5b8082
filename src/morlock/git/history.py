"""Commit history source - stream `git log` for one file as Commit objects.

History is produced lazily by a background `git log` process. The consumer
pulls commits one at a time; if it stops early it must call `close()` (or
leave the `with` block) so the process is terminated instead of blocking on
a full pipe.

Usage:
    with repo.history("src/app.py") as commits:
        for commit in commits:
            print(commit.short_hash, commit.author)
"""

from __future__ import annotations

import logging
import re
import subprocess
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from morlock.errors import GitError, InputError

logger = logging.getLogger(__name__)

# Git's all-zero object id; stands for uncommitted working-tree content
NULL_HASH = "0" * 40

HASH_PATTERN = re.compile(r"^[0-9a-f]{40}$")

FIELD_SEP = "\x00"
RECORD_SEP = "\x1e"
LOG_FORMAT = "%H%x00%an <%ae>%x00%aI%x00%B%x1e"


def decode_output(data: bytes | str | None) -> str:
    """Decode git output as UTF-8, leaving line endings as git wrote them."""
    if data is None:
        return ""
    if isinstance(data, str):
        return data
    return data.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class Commit:
    """A commit touching the tracked file."""

    hash: str
    """Full 40-character hex commit hash."""

    author: str
    """Author name and email."""

    date: datetime
    """Author date."""

    description: str = ""
    """Full commit message (may span several lines)."""

    @property
    def short_hash(self) -> str:
        return self.hash[:7]

    @property
    def is_worktree(self) -> bool:
        return self.hash == NULL_HASH

    @staticmethod
    def is_hash(value: str) -> bool:
        """Check whether a string looks like a full git hash."""
        return bool(HASH_PATTERN.match(value.strip().lower()))

    @classmethod
    def worktree(cls) -> Commit:
        """Pseudo commit for uncommitted changes in the working tree."""
        return cls(
            hash=NULL_HASH,
            author="Not Committed Yet",
            date=datetime.now(UTC),
            description="Uncommitted changes",
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "hash": self.hash,
            "author": self.author,
            "date": self.date.isoformat(),
            "desc": self.description,
        }


def parse_commit_record(record: str) -> Commit:
    """Parse one `git log --format=LOG_FORMAT` record."""
    fields = record.lstrip("\n").split(FIELD_SEP)
    if len(fields) < 4:
        raise GitError(f"Malformed git log record: {record[:80]!r}")

    commit_hash, author, date_str = fields[0].strip(), fields[1], fields[2].strip()
    if not Commit.is_hash(commit_hash):
        raise GitError(f"Malformed git log record: {commit_hash!r} is not a commit hash")

    try:
        date = datetime.fromisoformat(date_str.replace("Z", "+00:00"))
    except ValueError as e:
        raise GitError(f"Couldn't parse commit date {date_str!r}") from e

    return Commit(
        hash=commit_hash,
        author=author,
        date=date,
        description=FIELD_SEP.join(fields[3:]).strip(),
    )


class HistoryStream:
    """Lazy, finite, non-restartable sequence of Commits from `git log`.

    The git process starts on the first `next()`. Exhausting the stream
    reaps it; `close()` terminates it early.
    """

    def __init__(self, args: list[str], cwd: Path, executable: str = "git") -> None:
        self._command = [executable, *args]
        self._cwd = cwd
        self._process: subprocess.Popen[bytes] | None = None
        self._records: Iterator[Commit] | None = None
        self._closed = False

    @classmethod
    def empty(cls, cwd: Path) -> HistoryStream:
        """A stream with no commits, for a repository without any yet."""
        stream = cls([], cwd)
        stream._closed = True
        return stream

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self) -> HistoryStream:
        return self

    def __next__(self) -> Commit:
        if self._closed:
            raise StopIteration
        if self._records is None:
            self._records = self._read_records()
        try:
            return next(self._records)
        except Exception:
            # Exhausted or failed: reap the process either way
            self.close()
            raise

    def __enter__(self) -> HistoryStream:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.close()

    def _start(self) -> subprocess.Popen[bytes]:
        logger.debug(f"Streaming: {' '.join(self._command)}")
        try:
            return subprocess.Popen(
                self._command,
                cwd=self._cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except FileNotFoundError:
            raise InputError("Git not installed") from None

    def _read_records(self) -> Iterator[Commit]:
        self._process = self._start()
        assert self._process.stdout is not None

        buffer = ""
        for raw in self._process.stdout:
            line = decode_output(raw)
            if RECORD_SEP not in line:
                buffer += line
                continue
            head, _, tail = line.partition(RECORD_SEP)
            yield parse_commit_record(buffer + head)
            buffer = tail

        if buffer.strip():
            yield parse_commit_record(buffer)

        stderr = decode_output(self._process.stderr.read()) if self._process.stderr else ""
        if self._process.wait() != 0:
            raise GitError(f"Git command failed: {' '.join(self._command)}\n{stderr}")

    def close(self) -> None:
        """Stop the stream and release the git process."""
        if self._closed:
            return
        self._closed = True

        process = self._process
        if process is not None and process.poll() is None:
            logger.debug("Terminating git log before end of history")
            process.terminate()
            try:
                process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                process.kill()
                process.wait()

        if self._records is not None:
            self._records.close()
        if process is not None:
            for pipe in (process.stdout, process.stderr):
                if pipe is not None:
                    pipe.close()
