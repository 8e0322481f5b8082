"""Morlock CLI commands."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, NoReturn

if TYPE_CHECKING:
    from morlock.cli import MorlockContext
    from morlock.errors import MorlockError


def exit_with_error(ctx: MorlockContext, error: MorlockError) -> NoReturn:
    """Report a Morlock error and exit with its code (re-raise under --debug)."""
    from morlock.logging import print_error

    if ctx.debug:
        raise error
    print_error(error.message)
    sys.exit(error.exit_code)
