"""Git repository access - history, diff and content sources for one file."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from morlock.config import GitConfig
from morlock.errors import DiffError, GitError, InputError
from morlock.git.history import LOG_FORMAT, NULL_HASH, Commit, HistoryStream, decode_output
from morlock.git.unified import parse_unified_diff
from morlock.timelapse.models import DiffHunk

logger = logging.getLogger(__name__)


def run_git(
    args: list[str],
    cwd: Path | None = None,
    executable: str = "git",
    timeout: int | None = None,
    strip: bool = True,
) -> str:
    """Run a git command and return output.

    Output is captured as bytes and decoded without newline translation,
    so "\\r" in file content survives.
    """
    try:
        result = subprocess.run(
            [executable] + args,
            cwd=cwd,
            capture_output=True,
            check=True,
            timeout=timeout,
        )
    except FileNotFoundError:
        raise InputError("Git not installed") from None
    except subprocess.CalledProcessError as e:
        raise GitError(f"Git command failed: git {' '.join(args)}\n{decode_output(e.stderr)}") from e
    except subprocess.TimeoutExpired as e:
        raise GitError(f"Git command timed out after {timeout}s: git {' '.join(args)}") from e
    output = decode_output(result.stdout)
    return output.strip() if strip else output


def find_closest_directory(path: Path) -> Path | None:
    """Return `path` if it is a directory, its parent if it is a file.

    Returns None when the path does not exist.
    """
    if path.is_dir():
        return path
    if path.is_file():
        return path.parent
    return None


def _revision(value: Commit | str | None) -> str | None:
    """Git revision argument for a commit, or None for the working tree."""
    if value is None:
        return None
    commit_hash = value.hash if isinstance(value, Commit) else value
    return None if commit_hash == NULL_HASH else commit_hash


class GitRepository:
    """A local git repository, opened from any path inside it."""

    def __init__(self, root: Path, config: GitConfig | None = None) -> None:
        self.root = root
        self.config = config or GitConfig()

    @classmethod
    def open(cls, path: Path | str, config: GitConfig | None = None) -> GitRepository:
        """Open the repository containing a file or directory.

        Raises:
            InputError: Git is missing, the path does not exist, or it is
                not inside a git repository.
        """
        config = config or GitConfig()
        if shutil.which(config.executable) is None:
            raise InputError("Git not installed")

        path = Path(path).expanduser()
        directory = find_closest_directory(path)
        if directory is None:
            raise InputError(f"Not a git repository: {path} does not exist", path=str(path))

        try:
            root = run_git(
                ["rev-parse", "--show-toplevel"],
                cwd=directory,
                executable=config.executable,
                timeout=config.timeout_seconds,
            )
        except GitError:
            raise InputError(f"Not a git repository: {path}", path=str(path)) from None

        logger.debug(f"Opened git repository at {root}")
        return cls(Path(root), config)

    def _git(self, args: list[str], strip: bool = True) -> str:
        return run_git(
            args,
            cwd=self.root,
            executable=self.config.executable,
            timeout=self.config.timeout_seconds,
            strip=strip,
        )

    def relative_path(self, path: Path | str) -> str:
        """Path of a file relative to the repository root, in git's form."""
        candidate = Path(path).expanduser()
        if not candidate.is_absolute():
            candidate = self.root / candidate
        try:
            return candidate.resolve().relative_to(self.root.resolve()).as_posix()
        except ValueError:
            raise InputError(f"{path} is outside repository {self.root}", path=str(path)) from None

    def is_tracked(self, path: Path | str) -> bool:
        """Check whether git tracks the file."""
        try:
            self._git(["ls-files", "--error-unmatch", "--", self.relative_path(path)])
        except GitError:
            return False
        return True

    def has_commits(self) -> bool:
        """Check whether HEAD points at a commit."""
        try:
            self._git(["rev-parse", "--verify", "--quiet", "HEAD"])
        except GitError:
            return False
        return True

    def is_modified(self, path: Path | str) -> bool:
        """Check whether the working-tree file differs from the last commit."""
        try:
            changed = self._git(
                ["diff", "--no-ext-diff", "--name-only", "HEAD", "--", self.relative_path(path)]
            )
        except GitError:
            # No commits yet
            return False
        return len(changed) > 0

    def history(self, path: Path | str) -> HistoryStream:
        """Stream the commits touching a file, newest first.

        Only the first-parent line of history is followed, and renames are
        not tracked.
        """
        if not self.has_commits():
            logger.debug(f"No commits yet in {self.root}")
            return HistoryStream.empty(self.root)
        args = [
            "log",
            "--no-color",
            "--first-parent",
            f"--format={LOG_FORMAT}",
            "--",
            self.relative_path(path),
        ]
        return HistoryStream(args, cwd=self.root, executable=self.config.executable)

    def diff(
        self,
        older: Commit | str,
        newer: Commit | str | None,
        path: Path | str,
    ) -> list[DiffHunk]:
        """Diff a file between two revisions.

        `newer` may be the null hash (or None) to diff against the working tree.

        Raises:
            DiffError: No differences were found, or the diff is unusable.
            GitError: git failed.
        """
        older_rev = _revision(older)
        if older_rev is None:
            raise DiffError("The older side of a diff must be a commit")
        newer_rev = _revision(newer)

        relative = self.relative_path(path)
        args = [
            "diff",
            "--no-color",
            "--no-ext-diff",
            "--no-renames",
            f"-U{self.config.context_lines}",
            older_rev,
        ]
        if newer_rev is not None:
            args.append(newer_rev)
        args.extend(["--", relative])

        text = self._git(args, strip=False)
        if not text.strip():
            raise DiffError(
                f"No differences found for {relative} between {older_rev[:7]} "
                f"and {newer_rev[:7] if newer_rev else 'working tree'}",
                path=relative,
            )
        return parse_unified_diff(text)

    def content(self, path: Path | str, revision: Commit | str | None = None) -> str:
        """Raw file content at a revision, or in the working tree."""
        relative = self.relative_path(path)
        rev = _revision(revision)
        if rev is None:
            try:
                # Bytes keep "\r\n" intact, matching what git diff reports
                return decode_output((self.root / relative).read_bytes())
            except FileNotFoundError:
                raise InputError(f"File not found: {path}", path=str(path)) from None
            except IsADirectoryError:
                raise InputError(f"Not a file: {path}", path=str(path)) from None
        return self._git(["show", f"{rev}:{relative}"], strip=False)
