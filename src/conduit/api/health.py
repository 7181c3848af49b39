"""Health check endpoints."""

from __future__ import annotations

import time
from typing import Any

from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])

_START_TIME = time.monotonic()


@router.get("/api/health")
async def health() -> dict[str, str]:
    """Basic health check -- always returns quickly."""
    return {"status": "ok"}


@router.get("/api/health/detailed")
async def health_detailed(request: Request) -> dict[str, Any]:
    """Health check with backend and registry details."""
    from conduit import __version__

    session = getattr(request.app.state, "session", None)
    client = getattr(request.app.state, "graphql_client", None)

    return {
        "status": "ok" if session is not None else "starting",
        "version": __version__,
        "uptime_seconds": round(time.monotonic() - _START_TIME, 1),
        "backend": client.url if client is not None else None,
        "tools": len(session.tools) if session is not None else 0,
    }
