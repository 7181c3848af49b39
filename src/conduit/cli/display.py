"""Rich rendering of compiled tools and call results."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.table import Table

from conduit.tools.compiler import tool_definitions

if TYPE_CHECKING:
    from collections.abc import Mapping

    from conduit.tools.base import ToolDescriptor

_TRUNCATE_LEN = 80


def _truncate(text: str, limit: int = _TRUNCATE_LEN) -> str:
    """Truncate text to *limit* characters with an ellipsis."""
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + " ..."


def _format_args(schema: dict[str, Any]) -> str:
    required = set(schema.get("required", []))
    parts = []
    for name, prop in schema.get("properties", {}).items():
        marker = "*" if name in required else ""
        parts.append(f"{name}{marker}: {prop.get('type', '?')}")
    return ", ".join(parts)


class ToolDisplay:
    """Prints tool listings and call results.

    Accepts an optional :class:`~rich.console.Console` for dependency
    injection in tests.
    """

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()

    def tools_table(self, registry: Mapping[str, ToolDescriptor]) -> None:
        """Render one row per tool: name, operation, arguments, description."""
        if not registry:
            self._console.print("[yellow]No tools found in schema.[/yellow]")
            return

        table = Table(title=f"{len(registry)} tools")
        table.add_column("Tool", style="bold cyan")
        table.add_column("Operation")
        table.add_column("Arguments")
        table.add_column("Description")
        for tool in registry.values():
            table.add_row(
                tool.name,
                tool.operation,
                _format_args(tool.input_schema),
                _truncate(tool.description),
            )
        self._console.print(table)

    def tools_json(self, registry: Mapping[str, ToolDescriptor]) -> None:
        self._console.print_json(json.dumps(tool_definitions(registry)))

    def call_result(self, result: dict[str, Any]) -> None:
        """Print the text of each content item of a tool result."""
        for item in result.get("content", []):
            self._console.print(item.get("text", ""), markup=False, highlight=False)
