"""FastAPI server for Morlock.

Serves a static index page and JSON endpoints for a file's commit history
and timelapse. Every request reconstructs history on demand; nothing is
persisted between requests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from importlib.resources import files

from fastapi import FastAPI, Query, Request
from fastapi.responses import HTMLResponse, PlainTextResponse
from pydantic import BaseModel, Field

from morlock import __version__
from morlock.config import MorlockConfig
from morlock.errors import MorlockError
from morlock.service import TimelapseService

logger = logging.getLogger(__name__)


# =============================================================================
# Pydantic Models for API
# =============================================================================


class CommitResponse(BaseModel):
    """A commit in /api/history output."""

    hash: str = Field(description="Full 40-character commit hash")
    author: str = Field(description="Author name and email")
    date: datetime = Field(description="Author date")
    desc: str = Field(default="", description="Full commit message")


class SegmentResponse(BaseModel):
    """A run of timelapse lines sharing one disposition."""

    disposition: str = Field(description="'present' or 'deleted'")
    lines: list[str] = Field(description="Line text, in order")


class TimelapseResponse(BaseModel):
    """Response model for /api/timelapse."""

    path: str = Field(description="Requested file path")
    segments: list[SegmentResponse] = Field(description="Segments in file order")
    present_lines: int = Field(description="Lines in the current file")
    deleted_lines: int = Field(description="Lines recovered from history")


# =============================================================================
# Application State
# =============================================================================


def load_index_page() -> str:
    """Load the index page from package data."""
    return files("morlock.data").joinpath("index.html").read_text(encoding="utf-8")


@dataclass
class ServerState:
    """Process-scoped server state, built once per application."""

    config: MorlockConfig
    service: TimelapseService
    index_html: str


# =============================================================================
# Application Factory
# =============================================================================


def create_app(config: MorlockConfig | None = None) -> FastAPI:
    """Create the FastAPI application with all endpoints.

    Args:
        config: Morlock configuration (defaults when omitted)

    Returns:
        Configured FastAPI application
    """
    config = config or MorlockConfig()

    app = FastAPI(
        title="Morlock",
        description="Line-level timelapse of a file's git history",
        version=__version__,
    )
    app.state.morlock = ServerState(
        config=config,
        service=TimelapseService(config),
        index_html=load_index_page(),
    )

    @app.exception_handler(MorlockError)
    async def morlock_error_handler(request: Request, exc: MorlockError) -> PlainTextResponse:
        """Return the raw error message with the error's status code."""
        if exc.status_code >= 500:
            logger.error(f"{request.url.path} failed: {exc.message}")
        else:
            logger.info(f"{request.url.path} rejected: {exc.message}")
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    # -------------------------------------------------------------------------
    # Endpoints
    # -------------------------------------------------------------------------

    @app.get("/", response_class=HTMLResponse)
    async def index() -> HTMLResponse:
        """Serve the static index page."""
        state: ServerState = app.state.morlock
        return HTMLResponse(state.index_html)

    # Git-backed endpoints are sync so they run in the threadpool

    @app.get("/api/history", response_model=list[CommitResponse])
    def get_history(
        path: str = Query(default="", description="Absolute path of a tracked file"),
    ) -> list[CommitResponse]:
        """List the commits touching a file, newest first."""
        state: ServerState = app.state.morlock
        commits = state.service.history(path)
        return [CommitResponse(**commit.to_dict()) for commit in commits]

    @app.get("/api/timelapse", response_model=TimelapseResponse)
    def get_timelapse(
        path: str = Query(default="", description="Absolute path of a tracked file"),
    ) -> TimelapseResponse:
        """Reconstruct the timelapse of a file."""
        state: ServerState = app.state.morlock
        timelapse = state.service.timelapse(path)
        return TimelapseResponse(
            path=path,
            segments=[SegmentResponse(**segment.to_dict()) for segment in timelapse],
            present_lines=timelapse.present_line_count,
            deleted_lines=timelapse.deleted_line_count,
        )

    return app


def run_server(config: MorlockConfig | None = None) -> None:
    """Run the server with uvicorn until interrupted."""
    import uvicorn

    config = config or MorlockConfig()
    logger.info(f"Starting Morlock on http://{config.server.host}:{config.server.port}")
    uvicorn.run(
        create_app(config),
        host=config.server.host,
        port=config.server.port,
        log_level="info",
    )
