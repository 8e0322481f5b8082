"""Data models shared by diff parsing and timelapse reconstruction."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class LineMode(Enum):
    """How a diff line relates the two revisions of a hunk."""

    UNCHANGED = "unchanged"
    ADDED = "added"
    REMOVED = "removed"


class Disposition(Enum):
    """Whether a timelapse segment is in the current file or was deleted."""

    PRESENT = "present"
    DELETED = "deleted"


@dataclass(frozen=True)
class DiffLine:
    """One line on one side (before or after) of a diff hunk."""

    position: int
    """Shared position within the hunk, common to both sides (1-based)."""

    line_number: int
    """Line number within this line's own side."""

    content: str
    """Line text without its terminator."""

    mode: LineMode

    def to_dict(self) -> dict[str, Any]:
        return {
            "position": self.position,
            "line_number": self.line_number,
            "content": self.content,
            "mode": self.mode.value,
        }


@dataclass(frozen=True)
class DiffHunk:
    """A contiguous change region between two revisions of a file.

    `before_lines` holds the UNCHANGED and REMOVED lines of the older
    revision, `after_lines` the UNCHANGED and ADDED lines of the newer one.
    Both are ordered by position.
    """

    before_lines: tuple[DiffLine, ...]
    after_lines: tuple[DiffLine, ...]
    before_start: int = 0
    after_start: int = 0

    @property
    def first_position(self) -> int:
        firsts = [side[0].position for side in (self.before_lines, self.after_lines) if side]
        return min(firsts, default=1)

    @property
    def last_position(self) -> int:
        lasts = [side[-1].position for side in (self.before_lines, self.after_lines) if side]
        return max(lasts, default=0)

    @property
    def removed_count(self) -> int:
        return sum(1 for line in self.before_lines if line.mode == LineMode.REMOVED)

    @property
    def added_count(self) -> int:
        return sum(1 for line in self.after_lines if line.mode == LineMode.ADDED)

    def to_dict(self) -> dict[str, Any]:
        return {
            "before_start": self.before_start,
            "after_start": self.after_start,
            "before_lines": [line.to_dict() for line in self.before_lines],
            "after_lines": [line.to_dict() for line in self.after_lines],
        }


@dataclass
class Segment:
    """A run of timelapse lines sharing one disposition.

    `visible` is reconstruction bookkeeping, parallel to `lines`: it marks the
    lines that exist in the revision at the newer end of the commit pair
    being processed. It takes no part in equality or output.
    """

    disposition: Disposition
    lines: list[str]
    visible: list[bool] = field(default_factory=list, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.visible:
            self.visible = [True] * len(self.lines)
        elif len(self.visible) != len(self.lines):
            raise ValueError("visible flags must match lines")

    def __len__(self) -> int:
        return len(self.lines)

    @property
    def is_present(self) -> bool:
        return self.disposition == Disposition.PRESENT

    @property
    def is_deleted(self) -> bool:
        return self.disposition == Disposition.DELETED

    def split(self, offset: int) -> tuple[Segment | None, Segment | None]:
        """Split into (before, after) fragments at a line offset.

        Empty fragments are returned as None.
        """
        before = None
        after = None
        if offset > 0:
            before = Segment(self.disposition, self.lines[:offset], self.visible[:offset])
        if offset < len(self.lines):
            after = Segment(self.disposition, self.lines[offset:], self.visible[offset:])
        return before, after

    def to_dict(self) -> dict[str, Any]:
        return {
            "disposition": self.disposition.value,
            "lines": list(self.lines),
        }
