"""GraphQL schema model and backend client."""

from conduit.graphql.client import INTROSPECTION_QUERY, GraphQLClient
from conduit.graphql.schema import (
    ArgumentDescriptor,
    FieldDescriptor,
    SchemaDescription,
)
from conduit.graphql.types import (
    ListType,
    NamedType,
    NonNullType,
    TypeRef,
    is_non_null,
    named_type,
    parse_type_ref,
    type_string,
)

__all__ = [
    "INTROSPECTION_QUERY",
    "ArgumentDescriptor",
    "FieldDescriptor",
    "GraphQLClient",
    "ListType",
    "NamedType",
    "NonNullType",
    "SchemaDescription",
    "TypeRef",
    "is_non_null",
    "named_type",
    "parse_type_ref",
    "type_string",
]
