"""Morlock CLI - line-level timelapse of a file's history."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Literal

from dotenv import load_dotenv

# Load .env file before any other imports that might use env vars
load_dotenv()

import click  # noqa: E402

from morlock import __version__  # noqa: E402
from morlock.commands.history import history  # noqa: E402
from morlock.commands.init_cmd import init  # noqa: E402
from morlock.commands.serve import serve  # noqa: E402
from morlock.commands.timelapse import timelapse  # noqa: E402

if TYPE_CHECKING:
    from morlock.config import MorlockConfig

VerbosityLevel = Literal["quiet", "normal", "verbose"]


class MorlockContext:
    """Shared context for CLI commands."""

    def __init__(self) -> None:
        self.config: MorlockConfig | None = None
        self.verbosity: VerbosityLevel = "normal"
        self.debug: bool = False
        self.no_color: bool = False


pass_context = click.make_pass_decorator(MorlockContext, ensure=True)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-error output")
@click.option("--debug", is_flag=True, help="Show full tracebacks on errors")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.version_option(version=__version__, prog_name="morlock")
@pass_context
def cli(
    ctx: MorlockContext,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config: Path | None,
    no_color: bool,
) -> None:
    """Morlock - line-level timelapse of a file's git history.

    \b
    Commands:
      init         Create .morlockrc.toml with defaults
      history      List the commits touching a file
      timelapse    Show a file with every deleted line restored in place
      serve        Start the HTTP server

    Use 'morlock <command> --help' for details.
    Use --debug to show full tracebacks on errors.
    """
    import sys

    from morlock.config import MorlockConfig
    from morlock.errors import ConfigError, ExitCode
    from morlock.logging import print_error, setup_logging

    ctx.debug = debug

    if quiet:
        ctx.verbosity = "quiet"
    elif verbose:
        ctx.verbosity = "verbose"
    else:
        ctx.verbosity = "normal"

    # Auto-disable color when piped
    ctx.no_color = no_color or not sys.stdout.isatty()

    setup_logging(ctx.verbosity, no_color=no_color)

    try:
        ctx.config = MorlockConfig.load(config)
    except ConfigError as e:
        print_error(e.message)
        sys.exit(ExitCode.CONFIG_ERROR)


cli.add_command(init)
cli.add_command(history)
cli.add_command(timelapse)
cli.add_command(serve)


def main() -> None:
    """Entry point for the CLI."""
    cli(obj=MorlockContext())


if __name__ == "__main__":
    main()
