"""MCP protocol session: handshake state and JSON-RPC dispatch.

Every inbound message goes through :meth:`ProtocolSession.handle`, which
returns the JSON-RPC response dict, or ``None`` for notifications.

Dispatch order:
    1. ``initialize``                 -> always succeeds, marks the session
    2. ``notifications/initialized``  -> no response
    3. any other method before 1      -> -32002 Server not initialized
    4. ``tools/list`` / ``tools/call`` / ``ping``
    5. anything else                  -> -32601 Method not found

Handshake state is tracked per session id, supplied by the transport.
Transports that supply none share one default session. At most
``max_sessions`` ids are tracked; initializing one more evicts the least
recently initialized, which must then handshake again.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from conduit import __version__
from conduit.mcp.jsonrpc import (
    ErrorCode,
    error,
    internal_error,
    invalid_request,
    is_valid_envelope,
    success,
)
from conduit.tools.compiler import tool_definitions

if TYPE_CHECKING:
    from collections.abc import Mapping

    from conduit.tools.base import ToolDescriptor

logger = logging.getLogger(__name__)

DEFAULT_SESSION = ""
MAX_SESSIONS = 1024


@dataclass(frozen=True, slots=True)
class ServerIdentity:
    """Fixed identity reported in the ``initialize`` result."""

    name: str = "conduit-graphql-bridge"
    version: str = __version__
    protocol_version: str = "2024-11-05"


class ProtocolSession:
    """JSON-RPC state machine over a frozen tool registry."""

    def __init__(
        self,
        registry: Mapping[str, ToolDescriptor],
        identity: ServerIdentity | None = None,
        max_sessions: int = MAX_SESSIONS,
    ) -> None:
        if max_sessions < 1:
            msg = f"max_sessions must be at least 1, got {max_sessions}"
            raise ValueError(msg)
        self._registry = registry
        self._identity = identity or ServerIdentity()
        self._max_sessions = max_sessions
        # Least recently initialized first.
        self._initialized: OrderedDict[str, bool] = OrderedDict()

    @property
    def tools(self) -> Mapping[str, ToolDescriptor]:
        return self._registry

    @property
    def session_count(self) -> int:
        return len(self._initialized)

    def is_initialized(self, session_id: str | None = None) -> bool:
        return self._initialized.get(session_id or DEFAULT_SESSION, False)

    def close_session(self, session_id: str | None = None) -> bool:
        """Forget the handshake state of *session_id*.

        Returns whether the session was known.
        """
        return self._initialized.pop(session_id or DEFAULT_SESSION, None) is not None

    def _mark_initialized(self, key: str) -> None:
        self._initialized[key] = True
        self._initialized.move_to_end(key)
        while len(self._initialized) > self._max_sessions:
            evicted, _ = self._initialized.popitem(last=False)
            logger.info("Session limit %d reached, evicting %r", self._max_sessions, evicted)

    async def handle(
        self, message: Any, session_id: str | None = None
    ) -> dict[str, Any] | None:
        """Process one inbound message.

        Never raises: unexpected faults become -32603 Internal server error.
        """
        if not is_valid_envelope(message):
            return invalid_request(message)
        try:
            return await self._dispatch(message, session_id or DEFAULT_SESSION)
        except Exception:
            logger.exception("Error handling MCP request")
            return internal_error(message)

    async def _dispatch(self, message: dict[str, Any], key: str) -> dict[str, Any] | None:
        method = message.get("method")
        msg_id = message.get("id")

        if method == "initialize":
            self._mark_initialized(key)
            return success(msg_id, self._initialize_result())

        if method == "notifications/initialized":
            return None

        if not self._initialized.get(key, False):
            return error(msg_id, ErrorCode.SERVER_NOT_INITIALIZED, "Server not initialized")

        if method == "tools/list":
            return success(msg_id, {"tools": tool_definitions(self._registry)})

        if method == "tools/call":
            return await self._call_tool(msg_id, message.get("params") or {})

        if method == "ping":
            return success(msg_id, {})

        return error(msg_id, ErrorCode.METHOD_NOT_FOUND, f"Method not found: {method}")

    def _initialize_result(self) -> dict[str, Any]:
        return {
            "protocolVersion": self._identity.protocol_version,
            "capabilities": {"tools": {"listChanged": True}},
            "serverInfo": {
                "name": self._identity.name,
                "version": self._identity.version,
            },
        }

    async def _call_tool(self, msg_id: Any, params: dict[str, Any]) -> dict[str, Any]:
        name = params.get("name")
        tool = self._registry.get(name) if isinstance(name, str) else None
        if tool is None:
            return error(msg_id, ErrorCode.METHOD_NOT_FOUND, f"Tool not found: {name}")

        try:
            result = await tool.call(params.get("arguments"))
        except Exception as e:
            logger.warning("Tool '%s' failed: %s", name, e)
            reason = str(e) or "Unknown error"
            return error(
                msg_id, ErrorCode.INTERNAL_ERROR, f"Tool execution failed: {reason}"
            )
        return success(msg_id, result)
