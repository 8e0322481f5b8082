"""Console output and logging for the Morlock CLI.

Log records go to stderr through rich so that stdout carries only command
output (rendered timelapses, JSON). The `print_*` helpers write user-facing
status lines; their messages often quote git stderr or file paths, so they
are escaped before rich sees them.
"""

from __future__ import annotations

import logging
from typing import Literal

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

console = Console()
err_console = Console(stderr=True)

LEVELS = {
    "quiet": logging.ERROR,
    "normal": logging.INFO,
    "verbose": logging.DEBUG,
}


def setup_logging(
    verbosity: Literal["quiet", "normal", "verbose"] = "normal",
    no_color: bool = False,
) -> logging.Logger:
    """Route the `morlock` logger to stderr at the level for `verbosity`.

    Verbose mode adds timestamps and source locations, and lets the git
    layer's command traces through.
    """
    logger = logging.getLogger("morlock")
    logger.handlers.clear()
    logger.setLevel(LEVELS[verbosity])

    console.no_color = no_color
    err_console.no_color = no_color

    handler = RichHandler(
        console=err_console,
        show_time=verbosity == "verbose",
        show_path=verbosity == "verbose",
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)

    return logger


def print_error(message: str) -> None:
    err_console.print(f"[red]Error:[/red] {escape(message)}")


def print_warning(message: str) -> None:
    err_console.print(f"[yellow]Warning:[/yellow] {escape(message)}")


def print_success(message: str) -> None:
    console.print(f"[green]{escape(message)}[/green]")


def print_info(message: str) -> None:
    """Plain status line on stdout."""
    console.print(escape(message))
