"""Alignment engine - splice one hunk's removed runs into a Timelapse.

A hunk numbers its before-side and after-side lines in one shared position
domain. The engine walks that domain one position at a time, keeping three
cursors in step:

- the before side (which older-revision line is current),
- the after side (which newer-revision line is current),
- the result, a slot in the Timelapse just before the line that holds the
  current after-side line.

Whenever the before side shows a run of REMOVED lines, the run is spliced
into the Timelapse at the result slot as one DELETED segment, and the walk
resumes after it.

The cursor is an immutable value and `advance` is a pure step, so single
transitions can be tested without driving a whole hunk.

Usage:
    from morlock.timelapse.alignment import transcribe

    for hunk in reversed(hunks):
        transcribe(hunk, timelapse)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from morlock.errors import MalformedDiffError
from morlock.timelapse.models import DiffHunk, DiffLine, LineMode
from morlock.timelapse.result import Slot, Timelapse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlignmentCursor:
    """Synchronized before/after/result cursors for one hunk."""

    position: int
    """Current position in the hunk's shared position domain."""

    last_position: int
    """Greatest position on either side; the walk ends after it."""

    before_index: int = 0
    after_index: int = 0
    segment_index: int = 0
    line_offset: int = 0

    @property
    def slot(self) -> Slot:
        return self.segment_index, self.line_offset

    @property
    def at_end(self) -> bool:
        return self.position > self.last_position


def before_line(cursor: AlignmentCursor, hunk: DiffHunk) -> DiffLine | None:
    """The before-side line at the cursor's position, if there is one."""
    if cursor.before_index < len(hunk.before_lines):
        line = hunk.before_lines[cursor.before_index]
        if line.position == cursor.position:
            return line
    return None


def after_line(cursor: AlignmentCursor, hunk: DiffHunk) -> DiffLine | None:
    """The after-side line at the cursor's position, if there is one."""
    if cursor.after_index < len(hunk.after_lines):
        line = hunk.after_lines[cursor.after_index]
        if line.position == cursor.position:
            return line
    return None


def validate_hunk(hunk: DiffHunk) -> None:
    """Reject hunks the engine cannot walk, before anything is mutated."""
    for side, allowed in (
        (hunk.before_lines, (LineMode.UNCHANGED, LineMode.REMOVED)),
        (hunk.after_lines, (LineMode.UNCHANGED, LineMode.ADDED)),
    ):
        previous = None
        for line in side:
            if line.mode not in allowed:
                raise MalformedDiffError(
                    f"Found {line.mode.value} line on the wrong side of a diff hunk",
                    position=line.position,
                )
            if previous is not None and line.position <= previous.position:
                raise MalformedDiffError(
                    "Diff hunk positions are not increasing",
                    position=line.position,
                )
            previous = line

    after_positions = {line.position for line in hunk.after_lines}
    for line in hunk.before_lines:
        if line.mode == LineMode.REMOVED and line.position in after_positions:
            raise MalformedDiffError(
                "Found deleted line with same position in diff hunk as new line",
                position=line.position,
                content=line.content,
            )


def start_cursor(hunk: DiffHunk, timelapse: Timelapse) -> AlignmentCursor:
    """Seek the Timelapse slot of the hunk's first after-side line."""
    if hunk.after_lines:
        slot = timelapse.locate(hunk.after_lines[0].line_number)
    elif hunk.after_start > 0:
        # Pure removal with no context: the run follows line `after_start`
        slot = timelapse.slot_after(timelapse.locate(hunk.after_start))
    else:
        slot = (0, 0)

    return AlignmentCursor(
        position=hunk.first_position,
        last_position=hunk.last_position,
        segment_index=slot[0],
        line_offset=slot[1],
    )


def advance(cursor: AlignmentCursor, hunk: DiffHunk, timelapse: Timelapse) -> AlignmentCursor:
    """Step every cursor past the current position.

    The after side moving past a line moves the result slot past that
    line's Timelapse line, rolling over into the next segment when the
    current one is exhausted.

    Raises:
        AlignmentOverrunError: The result would move past the last segment.
    """
    passed = cursor.position

    before_index = cursor.before_index
    if before_index < len(hunk.before_lines) and hunk.before_lines[before_index].position <= passed:
        before_index += 1

    after_index = cursor.after_index
    slot = cursor.slot
    if after_index < len(hunk.after_lines) and hunk.after_lines[after_index].position <= passed:
        slot = timelapse.slot_after(slot)
        after_index += 1

    return replace(
        cursor,
        position=passed + 1,
        before_index=before_index,
        after_index=after_index,
        segment_index=slot[0],
        line_offset=slot[1],
    )


def _continues_run(previous: DiffLine, candidate: DiffLine | None) -> bool:
    return (
        candidate is not None
        and candidate.mode == LineMode.REMOVED
        and candidate.line_number == previous.line_number + 1
        and candidate.position == previous.position + 1
    )


def transcribe(
    hunk: DiffHunk,
    timelapse: Timelapse,
    cursor: AlignmentCursor | None = None,
) -> AlignmentCursor:
    """Merge every REMOVED run of a hunk into the Timelapse.

    Args:
        hunk: Diff hunk between an older (before) and newer (after) revision.
        timelapse: Result being built; mutated in place.
        cursor: Starting cursor; sought from the hunk when omitted.

    Returns:
        The cursor after the last position of the hunk.

    Raises:
        MalformedDiffError: A removed line shares a position with an after
            line. Raised before the Timelapse is touched.
        AlignmentOverrunError: The hunk does not fit the Timelapse.
    """
    validate_hunk(hunk)
    if cursor is None:
        cursor = start_cursor(hunk, timelapse)

    while not cursor.at_end:
        line = before_line(cursor, hunk)
        if line is not None and line.mode == LineMode.REMOVED:
            run = [line.content]
            following = cursor.before_index + 1
            while following < len(hunk.before_lines) and _continues_run(
                line, hunk.before_lines[following]
            ):
                cursor = advance(cursor, hunk, timelapse)
                line = hunk.before_lines[following]
                run.append(line.content)
                following += 1

            next_segment = timelapse.splice(cursor.slot, run)
            logger.debug(f"Spliced {len(run)} deleted line(s): {dump(cursor, hunk, timelapse)}")
            cursor = replace(cursor, segment_index=next_segment, line_offset=0)

        passing = after_line(cursor, hunk)
        cursor = advance(cursor, hunk, timelapse)
        if passing is not None and passing.mode == LineMode.ADDED:
            # Lines added by the newer revision do not exist in older ones
            timelapse.hide((cursor.segment_index, cursor.line_offset - 1))

    return cursor


def dump(cursor: AlignmentCursor, hunk: DiffHunk, timelapse: Timelapse) -> str:
    """Describe the cursor state for debugging."""
    before = before_line(cursor, hunk)
    after = after_line(cursor, hunk)
    return (
        f"at position {cursor.position} of {cursor.last_position}: "
        f"before line {cursor.before_index} of {len(hunk.before_lines)} "
        f"({before.content[:10] if before else '-'!r}), "
        f"after line {cursor.after_index} of {len(hunk.after_lines)} "
        f"({after.content[:10] if after else '-'!r}), "
        f"result segment {cursor.segment_index} of {len(timelapse)}, line {cursor.line_offset}"
    )
