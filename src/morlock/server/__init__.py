"""Morlock HTTP server."""

from __future__ import annotations

from morlock.server.app import (
    CommitResponse,
    SegmentResponse,
    ServerState,
    TimelapseResponse,
    create_app,
    run_server,
)

__all__ = [
    "CommitResponse",
    "SegmentResponse",
    "ServerState",
    "TimelapseResponse",
    "create_app",
    "run_server",
]
