"""Tool descriptors and execution results.

A :class:`ToolDescriptor` is compiled once per root field at startup and
never mutated. Its ``executor`` is an async callable taking the call
arguments and returning an execution result, or raising
:class:`~conduit.core.errors.ToolExecutionError`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from mcp.types import TextContent, Tool

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from conduit.graphql.schema import FieldDescriptor

    Executor = Callable[[dict[str, Any] | None], Awaitable[dict[str, Any]]]


@dataclass(frozen=True, slots=True)
class ToolDescriptor:
    """A GraphQL root field exposed as an invocable tool."""

    name: str
    description: str
    input_schema: dict[str, Any]
    operation: str
    field: FieldDescriptor
    executor: Executor

    def definition(self) -> dict[str, Any]:
        """The ``{name, description, inputSchema}`` form used by ``tools/list``."""
        tool = Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.input_schema,
        )
        return tool.model_dump(by_alias=True, exclude_none=True)

    async def call(self, arguments: dict[str, Any] | None = None) -> dict[str, Any]:
        return await self.executor(arguments)

    __call__ = call


def text_result(value: Any) -> dict[str, Any]:
    """Wrap *value* as a single indented-JSON text content item.

    This is the tool-result shape protocol clients parse, e.g.
    ``{"content": [{"type": "text", "text": "{\\n  \\"id\\": 1\\n}"}]}``.
    """
    content = TextContent(type="text", text=json.dumps(value, indent=2))
    return {"content": [content.model_dump(by_alias=True, exclude_none=True)]}
