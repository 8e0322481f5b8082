"""morlock history - List the commits touching a file."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from morlock.cli import MorlockContext


@click.command()
@click.argument("path", type=click.Path(path_type=Path))
@click.option(
    "--format",
    "-f",
    type=click.Choice(["terminal", "json"]),
    default="terminal",
    help="Output format",
)
@click.pass_obj
def history(ctx: MorlockContext, path: Path, format: str) -> None:
    """List the commits touching PATH, newest first.

    \b
    Examples:
        morlock history README.md
        morlock history src/app.py -f json
    """
    from morlock.commands import exit_with_error
    from morlock.config import MorlockConfig
    from morlock.errors import MorlockError
    from morlock.logging import print_info
    from morlock.service import TimelapseService
    from morlock.timelapse.formatters import format_history, format_history_json

    service = TimelapseService(ctx.config or MorlockConfig())
    try:
        commits = service.history(path)
    except MorlockError as e:
        exit_with_error(ctx, e)

    if format == "json":
        click.echo(format_history_json(commits))
    elif not commits:
        print_info(f"No commits touch {path}")
    else:
        click.echo(format_history(commits, no_color=ctx.no_color))
