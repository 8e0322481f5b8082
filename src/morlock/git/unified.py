"""Unified diff parsing into hunks with a shared position domain."""

from __future__ import annotations

from unidiff import PatchSet
from unidiff.constants import LINE_TYPE_NO_NEWLINE
from unidiff.errors import UnidiffParseError
from unidiff.patch import Hunk

from morlock.errors import DiffError
from morlock.timelapse.models import DiffHunk, DiffLine, LineMode


def parse_unified_diff(text: str) -> list[DiffHunk]:
    """Parse unified diff text into DiffHunks.

    Every body line of a hunk takes the next position (starting at 1);
    context lines appear on both sides at the same position. The
    `\\ No newline at end of file` marker takes no position.

    Raises:
        DiffError: The text is not a unified diff, or describes a binary file.
    """
    try:
        patch = PatchSet.from_string(text)
    except UnidiffParseError as e:
        raise DiffError(f"Could not parse diff output: {e}") from e

    if text.strip() and not len(patch):
        raise DiffError("Diff output contained no file changes")

    hunks: list[DiffHunk] = []
    for patched_file in patch:
        if patched_file.is_binary_file:
            raise DiffError("Binary files are not supported", path=patched_file.path)
        hunks.extend(_convert_hunk(hunk) for hunk in patched_file)
    return hunks


def _convert_hunk(hunk: Hunk) -> DiffHunk:
    before: list[DiffLine] = []
    after: list[DiffLine] = []
    position = 0

    for line in hunk:
        if line.line_type == LINE_TYPE_NO_NEWLINE:
            continue
        position += 1
        content = line.value.removesuffix("\n")

        if line.is_removed:
            before.append(DiffLine(position, line.source_line_no, content, LineMode.REMOVED))
        elif line.is_added:
            after.append(DiffLine(position, line.target_line_no, content, LineMode.ADDED))
        else:
            before.append(DiffLine(position, line.source_line_no, content, LineMode.UNCHANGED))
            after.append(DiffLine(position, line.target_line_no, content, LineMode.UNCHANGED))

    return DiffHunk(
        before_lines=tuple(before),
        after_lines=tuple(after),
        before_start=hunk.source_start,
        after_start=hunk.target_start,
    )
