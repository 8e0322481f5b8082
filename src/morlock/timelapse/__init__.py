"""Timelapse reconstruction.

Walks a file's history backward and splices every deleted line run into an
ordered PRESENT/DELETED segment structure at the position it occupied.

Usage:
    from morlock.timelapse import build_timelapse

    timelapse = build_timelapse(content, history, diff_fn, path="README.md")
    for segment in timelapse:
        print(segment.disposition, segment.lines)
"""

from __future__ import annotations

from morlock.timelapse.alignment import AlignmentCursor, advance, start_cursor, transcribe
from morlock.timelapse.builder import TimelapseBuilder, build_timelapse
from morlock.timelapse.formatters import format_timelapse, format_timelapse_json
from morlock.timelapse.models import DiffHunk, DiffLine, Disposition, LineMode, Segment
from morlock.timelapse.result import Timelapse, split_lines

__all__ = [
    "AlignmentCursor",
    "DiffHunk",
    "DiffLine",
    "Disposition",
    "LineMode",
    "Segment",
    "Timelapse",
    "TimelapseBuilder",
    "advance",
    "build_timelapse",
    "format_timelapse",
    "format_timelapse_json",
    "split_lines",
    "start_cursor",
    "transcribe",
]
