"""POST /mcp -- JSON-RPC endpoint for MCP clients."""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from conduit.mcp.jsonrpc import internal_error, parse_error

logger = logging.getLogger(__name__)

router = APIRouter(tags=["mcp"])

SESSION_HEADER = "mcp-session-id"


@router.post("/mcp", response_model=None)
async def mcp_endpoint(request: Request) -> Response:
    """Handle one JSON-RPC message per request body.

    JSON-RPC errors are returned with HTTP 200. Notifications get an
    empty 200 response.
    """
    message: Any = None
    try:
        raw = await request.body()
        try:
            message = json.loads(raw)
        except ValueError:
            return JSONResponse(parse_error())

        session = request.app.state.session
        response = await session.handle(message, request.headers.get(SESSION_HEADER))
    except Exception:
        logger.exception("Error handling MCP request")
        return JSONResponse(internal_error(message))

    if response is None:
        return Response(status_code=200)
    return JSONResponse(response)


@router.delete("/mcp", response_model=None)
async def close_mcp_session(request: Request) -> Response:
    """Terminate the session named by the ``Mcp-Session-Id`` header.

    400 without the header, 404 for an unknown or already closed session.
    """
    session_id = request.headers.get(SESSION_HEADER)
    if not session_id:
        return Response(status_code=400)

    if not request.app.state.session.close_session(session_id):
        return Response(status_code=404)
    logger.info("Closed MCP session %r", session_id)
    return Response(status_code=204)
