"""The Timelapse result model.

A Timelapse is an ordered arena of segments addressed by index. Segments are
only ever changed by `splice`, which replaces one segment with up to three
(before fragment, new DELETED segment, after fragment), and by `hide`, which
updates revision-view bookkeeping. Neither touches the PRESENT lines, so
concatenating every PRESENT segment always reproduces the seeded content.

Positions inside the arena are expressed as slots: a `(segment_index,
line_offset)` pair naming the gap just before a line. `line_offset` may equal
the segment length (the gap after its last line) and `segment_index` may
equal the segment count (the end of the timelapse).
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Any

from morlock.errors import AlignmentError, AlignmentOverrunError, TimelapseFrozenError
from morlock.timelapse.models import Disposition, Segment

Slot = tuple[int, int]


def split_lines(content: str) -> list[str]:
    """Split file content into lines the way git counts them.

    Only `\\n` terminates a line, and a trailing terminator does not start an
    extra empty line.
    """
    if not content:
        return []
    lines = content.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


class Timelapse:
    """Ordered PRESENT/DELETED segments explaining a file's line history."""

    def __init__(self, current_content: str = "") -> None:
        self._baseline: tuple[str, ...] = tuple(split_lines(current_content))
        self._segments: list[Segment] = []
        if self._baseline:
            self._segments.append(Segment(Disposition.PRESENT, list(self._baseline)))
        self._frozen = False

    @classmethod
    def from_segments(cls, segments: Sequence[Segment]) -> Timelapse:
        """Build a timelapse from existing segments.

        The baseline becomes the concatenation of the PRESENT segments.
        """
        timelapse = cls()
        timelapse._segments = [
            Segment(s.disposition, list(s.lines), list(s.visible)) for s in segments if s.lines
        ]
        timelapse._baseline = tuple(timelapse.present_lines())
        return timelapse

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def segments(self) -> tuple[Segment, ...]:
        return tuple(self._segments)

    @property
    def baseline(self) -> tuple[str, ...]:
        """The seeded current content, split into lines."""
        return self._baseline

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __iter__(self) -> Iterator[Segment]:
        return iter(self._segments)

    def __len__(self) -> int:
        return len(self._segments)

    def __getitem__(self, index: int) -> Segment:
        return self._segments[index]

    def __repr__(self) -> str:
        return (
            f"Timelapse(segments={len(self._segments)}, "
            f"present={self.present_line_count}, deleted={self.deleted_line_count})"
        )

    @property
    def present_line_count(self) -> int:
        return sum(len(s) for s in self._segments if s.is_present)

    @property
    def deleted_line_count(self) -> int:
        return sum(len(s) for s in self._segments if s.is_deleted)

    def present_lines(self) -> list[str]:
        """Concatenate the lines of every PRESENT segment, in order."""
        return [line for s in self._segments if s.is_present for line in s.lines]

    def is_consistent(self) -> bool:
        """Check that PRESENT content still equals the seeded content."""
        return tuple(self.present_lines()) == self._baseline

    def verify(self) -> None:
        """Raise AlignmentError if PRESENT content drifted from the baseline."""
        if not self.is_consistent():
            raise AlignmentError(
                "Timelapse present lines no longer match the current content",
                expected_lines=len(self._baseline),
                actual_lines=self.present_line_count,
            )

    # -------------------------------------------------------------------------
    # Revision view
    # -------------------------------------------------------------------------

    def locate(self, line_number: int) -> Slot:
        """Find the slot holding a 1-based line of the newer revision.

        Only visible lines count. Before any pair is processed these are the
        PRESENT lines, so DELETED segments are skipped entirely.
        """
        remaining = line_number
        if remaining >= 1:
            for index, segment in enumerate(self._segments):
                visible_count = sum(segment.visible)
                if visible_count < remaining:
                    remaining -= visible_count
                    continue
                for offset, visible in enumerate(segment.visible):
                    if visible:
                        remaining -= 1
                        if remaining == 0:
                            return index, offset
        raise AlignmentOverrunError(
            f"Seeking line {line_number} went past end of timelapse "
            f"with {len(self._segments)} segments",
            line_number=line_number,
        )

    def next_visible(self, slot: Slot) -> Slot:
        """Find the first visible line at or after a slot.

        Rolls over to following segments when the current one is exhausted.
        """
        index, offset = slot
        while index < len(self._segments):
            visible = self._segments[index].visible
            while offset < len(visible):
                if visible[offset]:
                    return index, offset
                offset += 1
            index += 1
            offset = 0
        raise AlignmentOverrunError(
            f"Unchanged lines overran timelapse at segment {slot[0]}, line {slot[1]}",
            segment_index=slot[0],
            line_offset=slot[1],
        )

    def slot_after(self, slot: Slot) -> Slot:
        """Return the slot just past the next visible line at or after `slot`."""
        index, offset = self.next_visible(slot)
        return index, offset + 1

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def splice(self, slot: Slot, lines: Sequence[str]) -> int:
        """Insert a DELETED segment at a slot, splitting the segment there.

        Returns the index of the segment following the inserted one.
        """
        self._check_mutable()
        if not lines:
            raise ValueError("cannot splice an empty run")

        index, offset = slot
        deleted = Segment(Disposition.DELETED, list(lines))

        if index == len(self._segments):
            self._segments.append(deleted)
            return len(self._segments)

        if not 0 <= index < len(self._segments) or not 0 <= offset <= len(self._segments[index]):
            raise IndexError(f"slot {slot} is outside the timelapse")

        before, after = self._segments[index].split(offset)
        replacement = [s for s in (before, deleted, after) if s is not None]
        self._segments[index : index + 1] = replacement
        return index + (1 if before is not None else 0) + 1

    def hide(self, slot: Slot) -> None:
        """Drop a line from the revision view (it was added by the newer revision)."""
        self._check_mutable()
        index, offset = slot
        self._segments[index].visible[offset] = False

    def freeze(self) -> Timelapse:
        """Mark the timelapse finished; further mutation raises."""
        self._frozen = True
        return self

    def _check_mutable(self) -> None:
        if self._frozen:
            raise TimelapseFrozenError("Timelapse is finished and can no longer be modified")

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def render(self) -> str:
        """Render alternating PRESENT/DELETED runs as plain text."""
        out: list[str] = []
        for segment in self._segments:
            marker = " " if segment.is_present else "-"
            out.extend(f"{marker} {line}" for line in segment.lines)
        return "\n".join(out)

    def to_dict(self) -> dict[str, Any]:
        return {
            "segments": [s.to_dict() for s in self._segments],
            "present_lines": self.present_line_count,
            "deleted_lines": self.deleted_line_count,
        }
