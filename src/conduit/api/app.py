"""FastAPI application factory for the conduit bridge."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

from conduit import __version__

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    import httpx

    from conduit.config.schema import ConduitConfig

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Introspect the backend and compile tools before serving.

    Any failure here aborts startup: the bridge never serves an empty or
    partial registry.
    """
    from conduit.config.loader import require_endpoint
    from conduit.graphql.client import GraphQLClient
    from conduit.mcp.session import ProtocolSession
    from conduit.tools.compiler import compile_tools
    from conduit.tools.executor import ToolExecutor

    config: ConduitConfig = app.state.config
    url = require_endpoint(config)

    logger.info("Starting Conduit bridge server...")
    async with GraphQLClient(
        url,
        config.graphql.token,
        timeout=config.graphql.timeout,
        transport=app.state.transport,
    ) as client:
        schema = await client.introspect()
        registry = compile_tools(schema, ToolExecutor(client))

        app.state.graphql_client = client
        app.state.session = ProtocolSession(
            registry, max_sessions=config.server.max_sessions
        )
        logger.info("Proxying %d tools for GraphQL API at: %s", len(registry), url)

        yield

    app.state.session = None


def create_app(
    config: ConduitConfig | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Loaded configuration; discovered via ``load_config`` if omitted.
        transport: Optional httpx transport for the backend client, mainly
            for tests.
    """
    from conduit.config.loader import load_config

    if config is None:
        config = load_config()

    app = FastAPI(
        title="conduit",
        description="GraphQL to MCP bridge",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.transport = transport
    app.state.session = None

    from conduit.api.health import router as health_router
    from conduit.api.routes.mcp import router as mcp_router

    app.include_router(mcp_router)
    app.include_router(health_router)

    return app
