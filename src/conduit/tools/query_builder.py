"""GraphQL document synthesis for a single root field.

Documents take the form::

    mutation($name: String!) {
      createUser(name: $name) {
        id
        name
        ... on User {
          __typename
        }
      }
    }

The selection set is a fixed heuristic (``id``, ``name``, typename
fragment) rather than a projection of the return type's fields. Backends
that reject it surface a normal execution error.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from conduit.graphql.types import SCALAR_TYPES, named_type, type_string

if TYPE_CHECKING:
    from collections.abc import Sequence

    from conduit.graphql.schema import ArgumentDescriptor, FieldDescriptor
    from conduit.graphql.types import TypeRef


def build_selection_set(type_name: str) -> str:
    """Return the selection set for a field returning *type_name*.

    Scalars get no selection.
    """
    if type_name in SCALAR_TYPES:
        return ""
    return (
        "{\n"
        "    id\n"
        "    name\n"
        f"    ... on {type_name} {{\n"
        "      __typename\n"
        "    }\n"
        "  }"
    )


def build_document(
    operation: str,
    field_name: str,
    args: Sequence[ArgumentDescriptor],
    return_type: TypeRef,
) -> str:
    """Build a one-field *operation* document with one variable per argument.

    Variables are declared and used in the order *args* declares them;
    both parenthesised lists are dropped when there are no arguments.
    """
    definitions = ", ".join(f"${a.name}: {type_string(a.type)}" for a in args)
    usages = ", ".join(f"{a.name}: ${a.name}" for a in args)

    header = f"{operation}({definitions})" if definitions else operation
    call = f"{field_name}({usages})" if usages else field_name
    selection = build_selection_set(named_type(return_type))

    body = f"{call} {selection}" if selection else call
    return f"{header} {{\n  {body}\n}}"


def build_field_document(operation: str, field: FieldDescriptor) -> str:
    """Shorthand for :func:`build_document` over a :class:`FieldDescriptor`."""
    return build_document(operation, field.name, field.args, field.type)
