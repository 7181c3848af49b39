"""Shared test fixtures for conduit."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import pytest
from fastapi.testclient import TestClient

from conduit.api.app import create_app
from conduit.config.schema import ConduitConfig, GraphQLConfig
from conduit.graphql.client import GraphQLClient
from tests.fixtures.backend import FakeBackend
from tests.fixtures.graphql import GRAPHQL_URL


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
async def graphql_client(backend: FakeBackend) -> Any:
    """GraphQLClient wired to the fake backend, with a bearer token."""
    async with GraphQLClient(
        GRAPHQL_URL, "test-token", transport=backend.transport
    ) as client:
        yield client


@pytest.fixture
def bridge_config() -> ConduitConfig:
    return ConduitConfig(graphql=GraphQLConfig(url=GRAPHQL_URL, token="test-token"))


@pytest.fixture
def http_client(backend: FakeBackend, bridge_config: ConduitConfig) -> Iterator[TestClient]:
    """TestClient over a started app (lifespan run: schema introspected)."""
    app = create_app(bridge_config, transport=backend.transport)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def rpc(http_client: TestClient) -> Any:
    """POST one JSON-RPC message to /mcp and return the HTTP response."""

    def _post(message: Any, session_id: str | None = None) -> Any:
        headers = {"Mcp-Session-Id": session_id} if session_id else {}
        return http_client.post("/mcp", json=message, headers=headers)

    return _post


@pytest.fixture
def handshake(rpc: Any) -> Any:
    """Run initialize + notifications/initialized for a session."""

    def _handshake(session_id: str | None = None) -> None:
        resp = rpc(
            {
                "jsonrpc": "2.0",
                "method": "initialize",
                "params": {
                    "protocolVersion": "2024-11-05",
                    "capabilities": {},
                    "clientInfo": {"name": "test-client", "version": "1.0.0"},
                },
                "id": 1,
            },
            session_id,
        )
        assert resp.status_code == 200
        rpc({"jsonrpc": "2.0", "method": "notifications/initialized"}, session_id)

    return _handshake
