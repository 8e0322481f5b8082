"""Output formatters for timelapses and commit history."""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import TYPE_CHECKING

from morlock.timelapse.result import Timelapse

if TYPE_CHECKING:
    from morlock.git.history import Commit


# ANSI color codes
class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    YELLOW = "\033[33m"
    CYAN = "\033[36m"


def _color(text: str, color: str, no_color: bool = False) -> str:
    """Apply color to text."""
    if no_color:
        return text
    return f"{color}{text}{Colors.RESET}"


def format_timelapse(timelapse: Timelapse, no_color: bool = False) -> str:
    """Format a timelapse for terminal output.

    Present lines carry their current line number; deleted lines are shown
    in red with a `-` gutter where they were removed.

    Args:
        timelapse: The timelapse to format.
        no_color: If True, disable ANSI colors.

    Returns:
        Formatted string for terminal display.
    """
    width = len(str(max(timelapse.present_line_count, 1)))
    lines: list[str] = []
    line_number = 0

    for segment in timelapse:
        if segment.is_present:
            for text in segment.lines:
                line_number += 1
                gutter = _color(str(line_number).rjust(width), Colors.DIM, no_color)
                lines.append(f"{gutter} {text}")
        else:
            gutter = _color("-".rjust(width), Colors.RED, no_color)
            for text in segment.lines:
                lines.append(f"{gutter} {_color(text, Colors.RED, no_color)}")

    lines.append("")
    summary = (
        f"{timelapse.present_line_count} present, "
        f"{timelapse.deleted_line_count} deleted in {len(timelapse)} segments"
    )
    lines.append(_color(summary, Colors.BOLD, no_color))
    return "\n".join(lines)


def format_timelapse_json(timelapse: Timelapse, indent: int | None = 2) -> str:
    """Format a timelapse as JSON."""
    return json.dumps(timelapse.to_dict(), indent=indent)


def format_history(commits: Sequence[Commit], no_color: bool = False) -> str:
    """Format a commit list for terminal output, newest first."""
    lines: list[str] = []
    for commit in commits:
        header = f"{_color(commit.short_hash, Colors.YELLOW, no_color)} {commit.date.isoformat()}"
        lines.append(f"{header} {_color(commit.author, Colors.CYAN, no_color)}")
        for text in commit.description.splitlines() or [""]:
            lines.append(f"    {text}")
    return "\n".join(lines)


def format_history_json(commits: Sequence[Commit], indent: int | None = 2) -> str:
    """Format a commit list as a JSON array of {hash, author, date, desc}."""
    return json.dumps([c.to_dict() for c in commits], indent=indent)
