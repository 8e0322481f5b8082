"""morlock timelapse - Show a file with its deleted lines restored in place."""

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
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    help="Output file (default: stdout)",
)
@click.pass_obj
def timelapse(ctx: MorlockContext, path: Path, format: str, output: Path | None) -> None:
    """Show PATH with every line ever deleted from it, where it was deleted.

    Present lines are numbered as in the current file; deleted lines are
    marked with '-' between the lines they used to sit between.

    \b
    Examples:
        morlock timelapse README.md
        morlock timelapse src/app.py -f json -o app-timelapse.json
    """
    from morlock.commands import exit_with_error
    from morlock.config import MorlockConfig
    from morlock.errors import MorlockError
    from morlock.logging import print_success
    from morlock.service import TimelapseService
    from morlock.timelapse.formatters import format_timelapse, format_timelapse_json

    service = TimelapseService(ctx.config or MorlockConfig())
    try:
        result = service.timelapse(path)
    except MorlockError as e:
        exit_with_error(ctx, e)

    if format == "json":
        rendered = format_timelapse_json(result)
    else:
        rendered = format_timelapse(result, no_color=ctx.no_color or output is not None)

    if output:
        output.write_text(rendered + "\n", encoding="utf-8")
        print_success(f"Timelapse written to {output}")
    else:
        click.echo(rendered)
