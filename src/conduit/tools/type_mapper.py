"""Translate GraphQL type references into generic validation schemas.

Nullability is not encoded: ``String!`` and ``String`` map to the same
shape, and required-ness is decided by the compiler from the raw type
reference. Object, input object and enum types are not expanded; they
map to ``string`` with a note naming the original type.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from conduit.graphql.types import ListType, NonNullType

if TYPE_CHECKING:
    from conduit.graphql.types import TypeRef

SCALAR_KINDS: dict[str, str] = {
    "Int": "number",
    "Float": "number",
    "String": "string",
    "ID": "string",
    "Boolean": "boolean",
}


@dataclass(frozen=True, slots=True)
class ValidationSchema:
    """A node of the generic validation tree."""

    kind: str
    items: ValidationSchema | None = None
    properties: dict[str, ValidationSchema] | None = None
    required: tuple[str, ...] = ()
    description: str | None = None

    def to_json_schema(self) -> dict[str, Any]:
        """Render as a JSON-Schema-shaped dict."""
        out: dict[str, Any] = {"type": self.kind}
        if self.description:
            out["description"] = self.description
        if self.items is not None:
            out["items"] = self.items.to_json_schema()
        if self.properties is not None:
            out["properties"] = {
                name: prop.to_json_schema() for name, prop in self.properties.items()
            }
        if self.required:
            out["required"] = list(self.required)
        return out


def to_validation_schema(ref: TypeRef) -> ValidationSchema:
    if isinstance(ref, NonNullType):
        return to_validation_schema(ref.of_type)
    if isinstance(ref, ListType):
        return ValidationSchema(kind="array", items=to_validation_schema(ref.of_type))

    kind = SCALAR_KINDS.get(ref.name)
    if kind is not None:
        return ValidationSchema(kind=kind)
    return ValidationSchema(
        kind="string",
        description=f"Represents GraphQL type '{ref.name}'",
    )
