"""GraphQL type references.

A type reference is a closed variant: a named leaf, or a ``NON_NULL`` /
``LIST`` wrapper around another reference. Wrapping always terminates in
a :class:`NamedType`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from conduit.core.errors import IntrospectionError

SCALAR_TYPES: frozenset[str] = frozenset({"String", "Int", "Float", "Boolean", "ID"})


@dataclass(frozen=True, slots=True)
class NamedType:
    """A named scalar, enum, object or input object type."""

    name: str
    kind: str = "SCALAR"


@dataclass(frozen=True, slots=True)
class NonNullType:
    """``T!``"""

    of_type: TypeRef


@dataclass(frozen=True, slots=True)
class ListType:
    """``[T]``"""

    of_type: TypeRef


TypeRef = NamedType | NonNullType | ListType


def parse_type_ref(data: dict[str, Any]) -> TypeRef:
    """Build a :data:`TypeRef` from an introspection ``{kind, name, ofType}`` dict.

    Raises:
        IntrospectionError: If a wrapper has no ``ofType`` or a leaf has
            no ``name``.
    """
    if not isinstance(data, dict):
        msg = f"Malformed type reference: {data!r}"
        raise IntrospectionError(msg)

    kind = data.get("kind")
    if kind in ("NON_NULL", "LIST"):
        inner = data.get("ofType")
        if not inner:
            msg = f"{kind} type reference has no ofType"
            raise IntrospectionError(msg)
        if kind == "NON_NULL":
            return NonNullType(parse_type_ref(inner))
        return ListType(parse_type_ref(inner))

    name = data.get("name")
    if not name:
        msg = f"Named type reference has no name: {data!r}"
        raise IntrospectionError(msg)
    return NamedType(name=name, kind=kind or "SCALAR")


def type_string(ref: TypeRef) -> str:
    """Render *ref* in GraphQL syntax, e.g. ``[ID!]!``."""
    if isinstance(ref, NonNullType):
        return f"{type_string(ref.of_type)}!"
    if isinstance(ref, ListType):
        return f"[{type_string(ref.of_type)}]"
    return ref.name


def named_type(ref: TypeRef) -> str:
    """Return the innermost type name, stripping all wrappers."""
    while not isinstance(ref, NamedType):
        ref = ref.of_type
    return ref.name


def is_non_null(ref: TypeRef) -> bool:
    return isinstance(ref, NonNullType)
