"""Main CLI application.

Click commands for the conduit bridge: serve, tools, call.
"""

from __future__ import annotations

import asyncio
import json as json_mod
import logging
import sys
from typing import TYPE_CHECKING, Any

import click

from conduit import __version__
from conduit.config.loader import load_config, require_endpoint
from conduit.core.errors import ConduitError, ConfigError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from conduit.config.schema import ConduitConfig, LoggingConfig
    from conduit.tools.base import ToolDescriptor


# ── Helpers ──────────────────────────────────────────────────────


def _error(msg: str) -> None:
    """Print an error message to stderr and exit."""
    click.echo(f"Error: {msg}", err=True)
    sys.exit(1)


def _load_config(
    config_path: str | None,
    endpoint: str | None = None,
    token: str | None = None,
) -> ConduitConfig:
    """Load config with CLI overrides and user-friendly error handling."""
    overrides: dict[str, Any] = {}
    if endpoint:
        overrides.setdefault("graphql", {})["url"] = endpoint
    if token:
        overrides.setdefault("graphql", {})["token"] = token
    try:
        return load_config(path=config_path, overrides=overrides or None)
    except ConfigError as e:
        _error(str(e))
        raise  # unreachable, keeps mypy happy


def configure_logging(config: LoggingConfig) -> None:
    """Route stdlib logging to stderr or ``config.file`` at ``config.level``."""
    handler: logging.Handler
    if config.file:
        handler = logging.FileHandler(config.file)
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(config.level.upper())


async def _compile(config: ConduitConfig) -> Mapping[str, ToolDescriptor]:
    """Introspect the backend and compile its tools (client closed after)."""
    from conduit.graphql.client import GraphQLClient
    from conduit.tools.compiler import compile_tools
    from conduit.tools.executor import ToolExecutor

    url = require_endpoint(config)
    async with GraphQLClient(
        url, config.graphql.token, timeout=config.graphql.timeout
    ) as client:
        schema = await client.introspect()
        return compile_tools(schema, ToolExecutor(client))


async def _call(config: ConduitConfig, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
    """Introspect, compile and run a single tool."""
    from conduit.graphql.client import GraphQLClient
    from conduit.tools.compiler import compile_tools
    from conduit.tools.executor import ToolExecutor

    url = require_endpoint(config)
    async with GraphQLClient(
        url, config.graphql.token, timeout=config.graphql.timeout
    ) as client:
        schema = await client.introspect()
        registry = compile_tools(schema, ToolExecutor(client))
        tool = registry.get(name)
        if tool is None:
            msg = f"Tool not found: {name}"
            raise ConduitError(msg)
        return await tool.call(arguments)


# ── CLI group ────────────────────────────────────────────────────


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="conduit")
@click.option(
    "--config",
    "config_path",
    type=click.Path(),
    default=None,
    help="Path to config file.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: str | None) -> None:
    """conduit: expose a GraphQL API as MCP tools."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# ── serve ────────────────────────────────────────────────────────


@cli.command()
@click.option("--host", default=None, help="Host to bind to (overrides config).")
@click.option(
    "--port", type=int, default=None, help="Port to bind to (overrides config)."
)
@click.option("--endpoint", default=None, help="GraphQL endpoint URL.")
@click.option("--token", default=None, help="Bearer token for the GraphQL API.")
@click.pass_context
def serve(
    ctx: click.Context,
    host: str | None,
    port: int | None,
    endpoint: str | None,
    token: str | None,
) -> None:
    """Start the MCP bridge over HTTP (POST /mcp)."""
    import uvicorn

    from conduit.api.app import create_app

    config = _load_config(ctx.obj["config_path"], endpoint, token)
    try:
        url = require_endpoint(config)
    except ConduitError as e:
        _error(str(e))
        return

    configure_logging(config.logging)

    effective_host = host or config.server.host
    effective_port = port or config.server.port
    click.echo(f"Conduit bridge for {url} on http://{effective_host}:{effective_port}/mcp")

    app = create_app(config)
    uvicorn.run(app, host=effective_host, port=effective_port, log_config=None)


# ── tools ────────────────────────────────────────────────────────


@cli.command()
@click.option("--endpoint", default=None, help="GraphQL endpoint URL.")
@click.option("--token", default=None, help="Bearer token for the GraphQL API.")
@click.option(
    "--format",
    "output_fmt",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format.",
)
@click.pass_context
def tools(
    ctx: click.Context, endpoint: str | None, token: str | None, output_fmt: str
) -> None:
    """List the tools derived from the GraphQL schema."""
    from conduit.cli.display import ToolDisplay

    config = _load_config(ctx.obj["config_path"], endpoint, token)
    try:
        registry = asyncio.run(_compile(config))
    except ConduitError as e:
        _error(str(e))
        return

    display = ToolDisplay()
    if output_fmt == "json":
        display.tools_json(registry)
    else:
        display.tools_table(registry)


# ── call ─────────────────────────────────────────────────────────


@cli.command()
@click.argument("name")
@click.option("--args", "args_json", default="{}", help="Tool arguments as JSON.")
@click.option("--endpoint", default=None, help="GraphQL endpoint URL.")
@click.option("--token", default=None, help="Bearer token for the GraphQL API.")
@click.pass_context
def call(
    ctx: click.Context,
    name: str,
    args_json: str,
    endpoint: str | None,
    token: str | None,
) -> None:
    """Execute one tool NAME against the GraphQL API."""
    from conduit.cli.display import ToolDisplay

    try:
        arguments = json_mod.loads(args_json)
    except json_mod.JSONDecodeError as e:
        _error(f"--args is not valid JSON: {e}")
        return
    if not isinstance(arguments, dict):
        _error("--args must be a JSON object")
        return

    config = _load_config(ctx.obj["config_path"], endpoint, token)
    try:
        result = asyncio.run(_call(config, name, arguments))
    except ConduitError as e:
        _error(str(e))
        return

    ToolDisplay().call_result(result)
