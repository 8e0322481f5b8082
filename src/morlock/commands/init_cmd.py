"""morlock init - Write a starter .morlockrc.toml."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from morlock.cli import MorlockContext


@click.command()
@click.option("--force", "-f", is_flag=True, help="Overwrite an existing .morlockrc.toml")
@click.pass_obj
def init(ctx: MorlockContext, force: bool) -> None:
    """Create .morlockrc.toml with default settings in the current directory."""
    from morlock.config import CONFIG_FILE, get_default_config_toml
    from morlock.errors import ExitCode
    from morlock.logging import print_error, print_info, print_success, print_warning

    config_path = Path.cwd() / CONFIG_FILE

    if config_path.exists() and not force:
        print_warning(f"Configuration file already exists: {config_path}")
        print_info("Use --force to overwrite")
        sys.exit(ExitCode.CONFIG_ERROR)

    try:
        config_path.write_text(get_default_config_toml())
    except OSError as e:
        print_error(f"Failed to create config file: {e}")
        sys.exit(ExitCode.CONFIG_ERROR)

    print_success(f"Created {config_path}")
    print_info("Run 'morlock timelapse <file>' inside a git repository to try it")


__all__ = ["init"]
