"""Schema-to-tool compiler.

Folds the query root, then the mutation root, into one insertion-ordered
registry of :class:`ToolDescriptor` keyed by field name, then freezes it.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from conduit.graphql.types import is_non_null
from conduit.tools.base import ToolDescriptor
from conduit.tools.type_mapper import to_validation_schema

if TYPE_CHECKING:
    from collections.abc import Mapping

    from conduit.graphql.schema import FieldDescriptor, SchemaDescription
    from conduit.tools.executor import ToolExecutor

logger = logging.getLogger(__name__)


def build_input_schema(field: FieldDescriptor) -> dict[str, Any]:
    """JSON-Schema object for a field's arguments.

    ``required`` lists the ``NON_NULL`` arguments and is omitted when
    there are none.
    """
    properties = {
        arg.name: to_validation_schema(arg.type).to_json_schema() for arg in field.args
    }
    required = [arg.name for arg in field.args if is_non_null(arg.type)]

    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


def compile_tool(
    field: FieldDescriptor, operation: str, executor: ToolExecutor
) -> ToolDescriptor:
    """Compile one root field into a tool bound to *executor*."""
    field_name = field.name

    async def run(arguments: dict[str, Any] | None) -> dict[str, Any]:
        return await executor.execute(field_name, field, operation, arguments)

    return ToolDescriptor(
        name=field_name,
        description=field.description or f"Executes the {field_name} {operation}.",
        input_schema=build_input_schema(field),
        operation=operation,
        field=field,
        executor=run,
    )


def compile_tools(
    schema: SchemaDescription, executor: ToolExecutor
) -> Mapping[str, ToolDescriptor]:
    """Compile every query and mutation field of *schema*.

    Names collide across roots only when a query and a mutation share a
    field name; the later one (the mutation) replaces the earlier.
    """
    roots: list[tuple[str, Mapping[str, FieldDescriptor]]] = [
        ("query", schema.query_fields)
    ]
    if schema.mutation_fields is not None:
        roots.append(("mutation", schema.mutation_fields))

    registry: dict[str, ToolDescriptor] = {}
    for operation, fields in roots:
        for field in fields.values():
            if field.name in registry:
                logger.warning(
                    "Tool name collision: %s %s replaces %s %s",
                    operation,
                    field.name,
                    registry[field.name].operation,
                    field.name,
                )
            logger.info("Registering %s: %s", operation, field.name)
            registry[field.name] = compile_tool(field, operation, executor)

    return MappingProxyType(registry)


def tool_definitions(registry: Mapping[str, ToolDescriptor]) -> list[dict[str, Any]]:
    """Listing form of every tool, in registration order."""
    return [tool.definition() for tool in registry.values()]
