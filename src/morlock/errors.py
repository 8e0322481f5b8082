"""Error handling framework for Morlock."""

from __future__ import annotations

from enum import IntEnum
from typing import Any


class ExitCode(IntEnum):
    """Morlock CLI exit codes."""

    SUCCESS = 0
    INPUT_ERROR = 1  # Bad path, untracked file, no repository (user fixable)
    CONFIG_ERROR = 2  # Configuration error (user fixable)
    FATAL_ERROR = 3  # Unexpected crash or inconsistent history
    GIT_ERROR = 4  # Git operation failed


class MorlockError(Exception):
    """Base exception for Morlock errors."""

    exit_code: ExitCode = ExitCode.FATAL_ERROR
    status_code: int = 500

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for JSON output."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "exit_code": self.exit_code,
            **self.context,
        }


class InputError(MorlockError):
    """The caller asked about something that cannot be answered.

    File not found, not under version control, or outside any repository.
    """

    exit_code = ExitCode.INPUT_ERROR
    status_code = 400


class ConfigError(MorlockError):
    """Configuration-related errors."""

    exit_code = ExitCode.CONFIG_ERROR


class GitError(MorlockError):
    """A git command failed or produced output we could not use."""

    exit_code = ExitCode.GIT_ERROR


class DiffError(GitError):
    """Diff output was empty or unusable for a path that should differ."""

    pass


class AlignmentError(MorlockError):
    """History and diff data are inconsistent with the timelapse."""

    exit_code = ExitCode.FATAL_ERROR


class MalformedDiffError(AlignmentError):
    """A removed line shares its hunk position with an after-side line."""

    pass


class AlignmentOverrunError(AlignmentError):
    """The result cursor ran past the end of the timelapse."""

    pass


class TimelapseFrozenError(MorlockError):
    """A finished timelapse was mutated."""

    pass
