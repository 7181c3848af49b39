"""Schema description built from an introspection result.

Only what tool derivation needs is kept: the query root, the optional
mutation root, and for each root field its description, return type and
ordered arguments.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from conduit.core.errors import IntrospectionError
from conduit.graphql.types import parse_type_ref

if TYPE_CHECKING:
    from collections.abc import Mapping

    from conduit.graphql.types import TypeRef


@dataclass(frozen=True, slots=True)
class ArgumentDescriptor:
    """A single declared argument of a root field."""

    name: str
    type: TypeRef
    description: str | None = None
    default_value: str | None = None


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """A root query or mutation field."""

    name: str
    type: TypeRef
    description: str | None = None
    args: tuple[ArgumentDescriptor, ...] = ()


def _empty_fields() -> Mapping[str, FieldDescriptor]:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class SchemaDescription:
    """Immutable view of the backend's root operation types."""

    query_fields: Mapping[str, FieldDescriptor] = field(default_factory=_empty_fields)
    mutation_fields: Mapping[str, FieldDescriptor] | None = None

    @classmethod
    def from_introspection(cls, data: dict[str, Any]) -> SchemaDescription:
        """Build from the ``data`` member of an introspection response.

        Raises:
            IntrospectionError: If ``__schema`` or the query root is missing.
        """
        schema = (data or {}).get("__schema")
        if not schema:
            msg = "Introspection result has no __schema"
            raise IntrospectionError(msg)

        types = {
            t["name"]: t
            for t in schema.get("types") or []
            if t.get("name") and not t["name"].startswith("__")
        }

        query_name = (schema.get("queryType") or {}).get("name")
        if not query_name or query_name not in types:
            msg = "Introspection result has no query root type"
            raise IntrospectionError(msg)
        query_fields = _parse_fields(types[query_name])

        mutation_fields = None
        mutation_name = (schema.get("mutationType") or {}).get("name")
        if mutation_name:
            if mutation_name not in types:
                msg = f"Mutation root type {mutation_name!r} is not in the schema"
                raise IntrospectionError(msg)
            mutation_fields = _parse_fields(types[mutation_name])

        return cls(query_fields=query_fields, mutation_fields=mutation_fields)


def _parse_fields(type_def: dict[str, Any]) -> Mapping[str, FieldDescriptor]:
    fields: dict[str, FieldDescriptor] = {}
    for raw in type_def.get("fields") or []:
        if "name" not in raw or "type" not in raw:
            msg = f"Malformed field on {type_def.get('name')}: {raw!r}"
            raise IntrospectionError(msg)
        args = tuple(
            ArgumentDescriptor(
                name=a["name"],
                type=parse_type_ref(a["type"]),
                description=a.get("description"),
                default_value=a.get("defaultValue"),
            )
            for a in raw.get("args") or []
        )
        fields[raw["name"]] = FieldDescriptor(
            name=raw["name"],
            type=parse_type_ref(raw["type"]),
            description=raw.get("description"),
            args=args,
        )
    return MappingProxyType(fields)
