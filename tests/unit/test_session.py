"""Tests for the MCP protocol session state machine."""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from typing import Any

import pytest

from conduit.core.errors import GraphQLResponseError
from conduit.graphql.schema import FieldDescriptor
from conduit.graphql.types import NamedType
from conduit.mcp.jsonrpc import ErrorCode
from conduit.mcp.session import MAX_SESSIONS, ProtocolSession, ServerIdentity
from conduit.tools.base import ToolDescriptor, text_result

# ── Helpers ──────────────────────────────────────────────────────


def _tool(name: str, executor: Any = None) -> ToolDescriptor:
    async def echo(arguments: dict[str, Any] | None) -> dict[str, Any]:
        return text_result(arguments)

    return ToolDescriptor(
        name=name,
        description=f"{name} tool",
        input_schema={"type": "object", "properties": {}},
        operation="query",
        field=FieldDescriptor(name=name, type=NamedType("String")),
        executor=executor or echo,
    )


def _msg(method: str, msg_id: Any = 1, **params: Any) -> dict[str, Any]:
    message: dict[str, Any] = {"jsonrpc": "2.0", "method": method, "id": msg_id}
    if params:
        message["params"] = params
    return message


class ExplodingRegistry(Mapping):
    """A registry that fails the test if it is ever consulted."""

    def __getitem__(self, key: str) -> ToolDescriptor:
        raise AssertionError("registry consulted")

    def __iter__(self) -> Iterator[str]:
        raise AssertionError("registry consulted")

    def __len__(self) -> int:
        raise AssertionError("registry consulted")


@pytest.fixture
def session() -> ProtocolSession:
    return ProtocolSession({"alpha": _tool("alpha"), "beta": _tool("beta")})


async def _initialized(session: ProtocolSession, session_id: str | None = None) -> None:
    await session.handle(_msg("initialize"), session_id)
    await session.handle({"jsonrpc": "2.0", "method": "notifications/initialized"}, session_id)


# ── Envelope ─────────────────────────────────────────────────────


class TestEnvelope:
    async def test_missing_jsonrpc(self, session):
        response = await session.handle({"invalidField": "test"})
        assert response == {
            "jsonrpc": "2.0",
            "id": None,
            "error": {"code": -32600, "message": "Invalid JSON-RPC request"},
        }

    async def test_wrong_version_keeps_id(self, session):
        response = await session.handle({"jsonrpc": "1.0", "method": "initialize", "id": 7})
        assert response["id"] == 7
        assert response["error"]["code"] == ErrorCode.INVALID_REQUEST

    async def test_non_object_message(self, session):
        response = await session.handle([1, 2, 3])
        assert response["id"] is None
        assert response["error"]["code"] == -32600

    async def test_envelope_checked_before_state(self, session):
        await _initialized(session)
        response = await session.handle({"method": "tools/list", "id": 3})
        assert response["error"]["code"] == -32600


# ── Handshake ────────────────────────────────────────────────────


class TestInitialize:
    async def test_initialize_result(self, session):
        response = await session.handle(_msg("initialize", protocolVersion="2024-11-05"))
        assert response == {
            "jsonrpc": "2.0",
            "id": 1,
            "result": {
                "protocolVersion": "2024-11-05",
                "capabilities": {"tools": {"listChanged": True}},
                "serverInfo": {"name": "conduit-graphql-bridge", "version": "1.0.0"},
            },
        }
        assert session.is_initialized()

    async def test_initialize_is_idempotent(self, session):
        first = await session.handle(_msg("initialize", msg_id=1))
        second = await session.handle(_msg("initialize", msg_id=2))
        assert "result" in first
        assert "result" in second
        assert second["id"] == 2
        assert session.is_initialized()

    async def test_initialized_notification_has_no_response(self, session):
        response = await session.handle({"jsonrpc": "2.0", "method": "notifications/initialized"})
        assert response is None

    async def test_initialized_notification_before_initialize(self, session):
        response = await session.handle({"jsonrpc": "2.0", "method": "notifications/initialized"})
        assert response is None
        assert not session.is_initialized()

    async def test_custom_identity(self):
        identity = ServerIdentity(name="my-bridge", version="9.9.9", protocol_version="2025-01-01")
        session = ProtocolSession({}, identity)
        response = await session.handle(_msg("initialize"))
        assert response["result"]["serverInfo"] == {"name": "my-bridge", "version": "9.9.9"}
        assert response["result"]["protocolVersion"] == "2025-01-01"


class TestUninitializedGuard:
    @pytest.mark.parametrize("method", ["tools/list", "tools/call", "ping", "unknown/method"])
    async def test_rejected_before_initialize(self, method):
        session = ProtocolSession(ExplodingRegistry())
        response = await session.handle(_msg(method, msg_id=5, name="alpha"))
        assert response == {
            "jsonrpc": "2.0",
            "id": 5,
            "error": {"code": -32002, "message": "Server not initialized"},
        }

    async def test_notification_alone_does_not_initialize(self, session):
        await session.handle({"jsonrpc": "2.0", "method": "notifications/initialized"})
        response = await session.handle(_msg("tools/list"))
        assert response["error"]["code"] == ErrorCode.SERVER_NOT_INITIALIZED


class TestSessions:
    async def test_sessions_are_independent(self, session):
        await _initialized(session, "session-a")
        allowed = await session.handle(_msg("tools/list"), "session-a")
        denied = await session.handle(_msg("tools/list"), "session-b")
        assert "result" in allowed
        assert denied["error"]["code"] == -32002

    async def test_no_session_id_shares_default(self, session):
        await _initialized(session)
        response = await session.handle(_msg("tools/list"), None)
        assert "result" in response

    async def test_close_session_resets_handshake(self, session):
        await _initialized(session, "session-a")
        assert session.close_session("session-a") is True
        response = await session.handle(_msg("tools/list"), "session-a")
        assert response["error"]["code"] == -32002
        assert session.session_count == 0

    async def test_close_unknown_session(self, session):
        assert session.close_session("never-seen") is False


class TestSessionLimit:
    async def test_tracked_sessions_are_bounded(self):
        session = ProtocolSession({}, max_sessions=1)
        for n in range(5000):
            await session.handle(_msg("initialize", msg_id=n), f"sess-{n}")
        assert session.session_count == 1
        assert session.is_initialized("sess-4999")
        assert not session.is_initialized("sess-0")

    async def test_default_limit(self):
        session = ProtocolSession({})
        for n in range(MAX_SESSIONS + 10):
            await session.handle(_msg("initialize", msg_id=n), f"sess-{n}")
        assert session.session_count == MAX_SESSIONS

    async def test_oldest_initialized_evicted_first(self):
        session = ProtocolSession({}, max_sessions=2)
        await session.handle(_msg("initialize"), "a")
        await session.handle(_msg("initialize"), "b")
        await session.handle(_msg("initialize"), "a")
        await session.handle(_msg("initialize"), "c")
        assert session.is_initialized("a")
        assert session.is_initialized("c")
        assert not session.is_initialized("b")

    async def test_evicted_session_must_handshake_again(self):
        session = ProtocolSession({}, max_sessions=1)
        await _initialized(session, "a")
        await _initialized(session, "b")
        response = await session.handle(_msg("tools/list"), "a")
        assert response["error"]["code"] == -32002

    def test_limit_must_be_positive(self):
        with pytest.raises(ValueError, match="max_sessions"):
            ProtocolSession({}, max_sessions=0)


# ── Dispatch ─────────────────────────────────────────────────────


class TestToolsList:
    async def test_lists_in_registration_order(self, session):
        await _initialized(session)
        response = await session.handle(_msg("tools/list", msg_id=2))
        assert response["id"] == 2
        tools = response["result"]["tools"]
        assert [t["name"] for t in tools] == ["alpha", "beta"]
        assert tools[0] == {
            "name": "alpha",
            "description": "alpha tool",
            "inputSchema": {"type": "object", "properties": {}},
        }

    async def test_empty_registry(self):
        session = ProtocolSession({})
        await _initialized(session)
        response = await session.handle(_msg("tools/list"))
        assert response["result"] == {"tools": []}


class TestToolsCall:
    async def test_success_returns_executor_result(self, session):
        await _initialized(session)
        response = await session.handle(
            _msg("tools/call", msg_id=9, name="alpha", arguments={"x": 1})
        )
        assert response["id"] == 9
        assert json.loads(response["result"]["content"][0]["text"]) == {"x": 1}

    async def test_unknown_tool(self, session):
        await _initialized(session)
        response = await session.handle(_msg("tools/call", name="nonExistentTool"))
        assert response["error"] == {
            "code": -32601,
            "message": "Tool not found: nonExistentTool",
        }

    async def test_missing_params(self, session):
        await _initialized(session)
        response = await session.handle(_msg("tools/call"))
        assert response["error"]["code"] == ErrorCode.METHOD_NOT_FOUND

    async def test_execution_failure(self):
        async def failing(arguments):
            raise GraphQLResponseError([{"message": "User already exists"}])

        session = ProtocolSession({"createUser": _tool("createUser", failing)})
        await _initialized(session)
        response = await session.handle(_msg("tools/call", msg_id=3, name="createUser"))
        assert response["id"] == 3
        assert response["error"]["code"] == -32603
        assert response["error"]["message"] == (
            "Tool execution failed: API Error: User already exists"
        )

    async def test_execution_failure_without_message(self):
        async def failing(arguments):
            raise RuntimeError

        session = ProtocolSession({"broken": _tool("broken", failing)})
        await _initialized(session)
        response = await session.handle(_msg("tools/call", name="broken"))
        assert response["error"]["message"] == "Tool execution failed: Unknown error"


class TestOtherMethods:
    async def test_ping(self, session):
        await _initialized(session)
        response = await session.handle(_msg("ping", msg_id=4))
        assert response == {"jsonrpc": "2.0", "id": 4, "result": {}}

    async def test_unknown_method(self, session):
        await _initialized(session)
        response = await session.handle(_msg("resources/list", msg_id=6))
        assert response == {
            "jsonrpc": "2.0",
            "id": 6,
            "error": {"code": -32601, "message": "Method not found: resources/list"},
        }

    async def test_internal_fault_maps_to_internal_error(self, session):
        await _initialized(session)
        response = await session.handle(
            {"jsonrpc": "2.0", "method": "tools/call", "params": ["not", "a", "dict"], "id": 8}
        )
        assert response == {
            "jsonrpc": "2.0",
            "id": 8,
            "error": {"code": -32603, "message": "Internal server error"},
        }
