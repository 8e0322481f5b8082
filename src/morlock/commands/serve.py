"""morlock serve - Start the HTTP server."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from morlock.cli import MorlockContext


@click.command("serve")
@click.option("--port", "-p", type=int, default=None, help="HTTP port (default: 8008)")
@click.option("--host", type=str, default=None, help="Bind address (default: 127.0.0.1)")
@click.pass_obj
def serve(ctx: MorlockContext, port: int | None, host: str | None) -> None:
    """Start the Morlock HTTP server in the foreground.

    \b
    Endpoints:
        /                  Index page
        /api/history       Commit list for ?path=
        /api/timelapse     Timelapse for ?path=

    \b
    Examples:
        morlock serve
        morlock serve --port 9000
    """
    from morlock.config import MorlockConfig
    from morlock.server import run_server

    config = ctx.config or MorlockConfig()
    if port is not None:
        config.server.port = port
    if host is not None:
        config.server.host = host

    run_server(config)
