"""Tests for the alignment engine that splices removed runs into a Timelapse."""

from __future__ import annotations

import logging

import pytest

from morlock.errors import AlignmentOverrunError, MalformedDiffError
from morlock.timelapse.alignment import (
    AlignmentCursor,
    advance,
    after_line,
    before_line,
    dump,
    start_cursor,
    transcribe,
    validate_hunk,
)
from morlock.timelapse.models import DiffHunk, DiffLine, Disposition, LineMode, Segment
from morlock.timelapse.result import Timelapse

PRESENT = Disposition.PRESENT
DELETED = Disposition.DELETED


def shape(timelapse: Timelapse) -> list[tuple[str, list[str]]]:
    return [(s.disposition.value, s.lines) for s in timelapse]


# =============================================================================
# Cursor Tests
# =============================================================================


class TestStartCursor:
    """Tests for seeking the starting slot of a hunk."""

    def test_starts_at_first_after_line(self, make_hunk) -> None:
        """Test starts at first after line."""
        timelapse = Timelapse("a\nb\nc\nd\ne")
        hunk = make_hunk(" c", "-x", " d", before_start=3, after_start=3)

        cursor = start_cursor(hunk, timelapse)

        assert cursor.position == 1
        assert cursor.last_position == 3
        assert cursor.slot == (0, 2)

    def test_pure_removal_follows_after_start(self) -> None:
        """Test pure removal follows after start."""
        timelapse = Timelapse("a\nb")
        hunk = DiffHunk(
            before_lines=(DiffLine(1, 3, "c", LineMode.REMOVED),),
            after_lines=(),
            before_start=3,
            after_start=2,
        )
        assert start_cursor(hunk, timelapse).slot == (0, 2)

    def test_everything_removed_starts_at_beginning(self) -> None:
        """Test everything removed starts at beginning."""
        hunk = DiffHunk(
            before_lines=(DiffLine(1, 1, "a", LineMode.REMOVED),),
            after_lines=(),
            before_start=1,
            after_start=0,
        )
        assert start_cursor(hunk, Timelapse("")).slot == (0, 0)

    def test_hunk_beyond_timelapse_overruns(self, make_hunk) -> None:
        """Test hunk beyond timelapse overruns."""
        hunk = make_hunk(" x", "-y", before_start=10, after_start=10)
        with pytest.raises(AlignmentOverrunError):
            start_cursor(hunk, Timelapse("a\nb"))


class TestAdvance:
    """Tests for single cursor transitions."""

    def test_unchanged_moves_every_cursor(self, make_hunk) -> None:
        """Test unchanged moves every cursor."""
        timelapse = Timelapse("a\nb")
        hunk = make_hunk(" a", " b")
        cursor = start_cursor(hunk, timelapse)

        cursor = advance(cursor, hunk, timelapse)

        assert cursor.position == 2
        assert (cursor.before_index, cursor.after_index) == (1, 1)
        assert cursor.slot == (0, 1)

    def test_removed_keeps_result_slot(self, make_hunk) -> None:
        """Test removed keeps result slot."""
        timelapse = Timelapse("b")
        hunk = make_hunk("-a", " b")
        cursor = start_cursor(hunk, timelapse)

        cursor = advance(cursor, hunk, timelapse)

        assert (cursor.before_index, cursor.after_index) == (1, 0)
        assert cursor.slot == (0, 0)

    def test_added_moves_result_slot(self, make_hunk) -> None:
        """Test added moves result slot."""
        timelapse = Timelapse("x\na")
        hunk = make_hunk("+x", " a")
        cursor = start_cursor(hunk, timelapse)

        cursor = advance(cursor, hunk, timelapse)

        assert (cursor.before_index, cursor.after_index) == (0, 1)
        assert cursor.slot == (0, 1)

    def test_rolls_over_into_next_segment(self, make_hunk) -> None:
        """Test rolls over into next segment."""
        timelapse = Timelapse.from_segments(
            [Segment(PRESENT, ["a"]), Segment(DELETED, ["old"], [False]), Segment(PRESENT, ["b"])]
        )
        hunk = make_hunk(" a", " b")
        cursor = advance(start_cursor(hunk, timelapse), hunk, timelapse)
        cursor = advance(cursor, hunk, timelapse)

        assert cursor.slot == (2, 1)
        assert cursor.at_end

    def test_cursor_is_immutable(self, make_hunk) -> None:
        """Test cursor is immutable."""
        timelapse = Timelapse("a")
        hunk = make_hunk(" a")
        cursor = start_cursor(hunk, timelapse)
        advance(cursor, hunk, timelapse)
        assert cursor.position == 1

    def test_side_lookups(self, make_hunk) -> None:
        """Test side lookups."""
        hunk = make_hunk("-a", "+b")
        cursor = AlignmentCursor(position=1, last_position=2)
        assert before_line(cursor, hunk).content == "a"
        assert after_line(cursor, hunk) is None

        cursor = AlignmentCursor(position=2, last_position=2, before_index=1)
        assert before_line(cursor, hunk) is None
        assert after_line(cursor, hunk).content == "b"

    def test_dump_describes_state(self, make_hunk) -> None:
        """Test dump describes state."""
        timelapse = Timelapse("a")
        hunk = make_hunk(" a")
        text = dump(start_cursor(hunk, timelapse), hunk, timelapse)
        assert "position 1 of 1" in text
        assert "result segment 0 of 1" in text


# =============================================================================
# Validation Tests
# =============================================================================


class TestValidateHunk:
    """Tests for hunk shape checks."""

    def test_accepts_well_formed(self, make_hunk) -> None:
        """Test accepts well formed."""
        validate_hunk(make_hunk(" a", "-b", "+c", " d"))

    def test_removed_line_sharing_position(self) -> None:
        """Test removed line sharing position."""
        hunk = DiffHunk(
            before_lines=(DiffLine(1, 1, "old", LineMode.REMOVED),),
            after_lines=(DiffLine(1, 1, "new", LineMode.ADDED),),
        )
        with pytest.raises(MalformedDiffError, match="same position"):
            validate_hunk(hunk)

    def test_added_line_on_before_side(self) -> None:
        """Test added line on before side."""
        hunk = DiffHunk(before_lines=(DiffLine(1, 1, "a", LineMode.ADDED),), after_lines=())
        with pytest.raises(MalformedDiffError, match="wrong side"):
            validate_hunk(hunk)

    def test_positions_must_increase(self) -> None:
        """Test positions must increase."""
        hunk = DiffHunk(
            before_lines=(
                DiffLine(2, 1, "a", LineMode.REMOVED),
                DiffLine(1, 2, "b", LineMode.REMOVED),
            ),
            after_lines=(),
        )
        with pytest.raises(MalformedDiffError, match="not increasing"):
            validate_hunk(hunk)


# =============================================================================
# Transcription Tests
# =============================================================================


class TestTranscribe:
    """Tests for merging a whole hunk into a Timelapse."""

    def test_single_deleted_line_between_context(self, make_hunk) -> None:
        """Test single deleted line between context."""
        timelapse = Timelapse("one\nthree")
        transcribe(make_hunk(" one", "-two", " three"), timelapse)

        assert timelapse.segments == (
            Segment(PRESENT, ["one"]),
            Segment(DELETED, ["two"]),
            Segment(PRESENT, ["three"]),
        )

    def test_contiguous_run_becomes_one_segment(self, make_hunk) -> None:
        """Test contiguous run becomes one segment."""
        timelapse = Timelapse("a\ne")
        transcribe(make_hunk(" a", "-b", "-c", "-d", " e"), timelapse)

        assert shape(timelapse) == [
            ("present", ["a"]),
            ("deleted", ["b", "c", "d"]),
            ("present", ["e"]),
        ]

    def test_separate_runs_become_separate_segments(self, make_hunk) -> None:
        """Test separate runs become separate segments."""
        timelapse = Timelapse("a\nc\ne")
        transcribe(make_hunk(" a", "-b", " c", "-d", " e"), timelapse)

        assert shape(timelapse) == [
            ("present", ["a"]),
            ("deleted", ["b"]),
            ("present", ["c"]),
            ("deleted", ["d"]),
            ("present", ["e"]),
        ]

    def test_added_line_breaks_a_run(self, make_hunk) -> None:
        """Test added line breaks a run."""
        timelapse = Timelapse("x\nc")
        transcribe(make_hunk("-a", "+x", "-b", " c"), timelapse)

        assert shape(timelapse) == [
            ("deleted", ["a"]),
            ("present", ["x"]),
            ("deleted", ["b"]),
            ("present", ["c"]),
        ]

    def test_removal_at_start_of_file(self, make_hunk) -> None:
        """Test removal at start of file."""
        timelapse = Timelapse("a\nb")
        transcribe(make_hunk("-gone", " a", " b"), timelapse)
        assert shape(timelapse) == [("deleted", ["gone"]), ("present", ["a", "b"])]

    def test_trailing_removal_is_captured(self, make_hunk) -> None:
        """Test trailing removal is captured."""
        timelapse = Timelapse("a\nb")
        transcribe(make_hunk(" a", " b", "-c", "-d", before_start=1, after_start=1), timelapse)
        assert shape(timelapse) == [("present", ["a", "b"]), ("deleted", ["c", "d"])]

    def test_removal_after_added_lines(self, make_hunk) -> None:
        """The run is placed after the added lines that precede it."""
        timelapse = Timelapse("a\nnew\nc")
        transcribe(make_hunk(" a", "+new", "-old", " c"), timelapse)

        assert shape(timelapse) == [
            ("present", ["a", "new"]),
            ("deleted", ["old"]),
            ("present", ["c"]),
        ]

    def test_replacement(self, make_hunk) -> None:
        """Test replacement."""
        timelapse = Timelapse("a\nx\nc")
        transcribe(make_hunk(" a", "-b", "+x", " c"), timelapse)

        assert shape(timelapse) == [
            ("present", ["a"]),
            ("deleted", ["b"]),
            ("present", ["x", "c"]),
        ]

    def test_added_lines_leave_the_revision_view(self, make_hunk) -> None:
        """Test added lines leave the revision view."""
        timelapse = Timelapse("a\nx\nc")
        transcribe(make_hunk(" a", "-b", "+x", " c"), timelapse)

        assert timelapse[2].visible == [False, True]
        # The older revision's line 2 is now the deleted "b"
        assert timelapse.locate(2) == (1, 0)

    def test_everything_removed(self) -> None:
        """Test everything removed."""
        timelapse = Timelapse("")
        hunk = DiffHunk(
            before_lines=(
                DiffLine(1, 1, "a", LineMode.REMOVED),
                DiffLine(2, 2, "b", LineMode.REMOVED),
            ),
            after_lines=(),
            before_start=1,
            after_start=0,
        )
        transcribe(hunk, timelapse)
        assert shape(timelapse) == [("deleted", ["a", "b"])]

    def test_hunk_in_middle_of_file(self, make_hunk) -> None:
        """Test hunk in middle of file."""
        timelapse = Timelapse("1\n2\n3\n4\n5\n6\n7")
        transcribe(make_hunk(" 4", "-gone", " 5", before_start=4, after_start=4), timelapse)

        assert shape(timelapse) == [
            ("present", ["1", "2", "3", "4"]),
            ("deleted", ["gone"]),
            ("present", ["5", "6", "7"]),
        ]

    def test_present_content_preserved(self, make_hunk) -> None:
        """Test present content preserved."""
        timelapse = Timelapse("a\nx\nc\ne")
        transcribe(make_hunk(" a", "-b", "+x", " c", "-d", " e"), timelapse)
        assert timelapse.present_lines() == ["a", "x", "c", "e"]
        assert timelapse.is_consistent()

    def test_returns_cursor_past_hunk(self, make_hunk) -> None:
        """Test returns cursor past hunk."""
        timelapse = Timelapse("a\nc")
        cursor = transcribe(make_hunk(" a", "-b", " c"), timelapse)
        assert cursor.at_end
        assert cursor.position == 4

    def test_malformed_hunk_leaves_timelapse_untouched(self) -> None:
        """Test malformed hunk leaves timelapse untouched."""
        timelapse = Timelapse("a\nnew")
        hunk = DiffHunk(
            before_lines=(
                DiffLine(1, 1, "a", LineMode.UNCHANGED),
                DiffLine(2, 2, "old", LineMode.REMOVED),
            ),
            after_lines=(
                DiffLine(1, 1, "a", LineMode.UNCHANGED),
                DiffLine(2, 2, "new", LineMode.ADDED),
            ),
        )
        with pytest.raises(MalformedDiffError):
            transcribe(hunk, timelapse)

        assert timelapse.segments == (Segment(PRESENT, ["a", "new"]),)
        assert timelapse[0].visible == [True, True]

    def test_unchanged_lines_overrun(self, make_hunk) -> None:
        """Test unchanged lines overrun."""
        timelapse = Timelapse("a")
        with pytest.raises(AlignmentOverrunError):
            transcribe(make_hunk(" a", " b", "-c"), timelapse)

    def test_logs_each_splice(self, make_hunk, caplog) -> None:
        """Test logs each splice."""
        timelapse = Timelapse("one\nthree")
        with caplog.at_level(logging.DEBUG, logger="morlock.timelapse.alignment"):
            transcribe(make_hunk(" one", "-two", " three"), timelapse)
        assert "Spliced 1 deleted line(s)" in caplog.text
