"""Core types and errors."""

from conduit.core.errors import (
    BackendError,
    ConduitError,
    ConfigError,
    GraphQLResponseError,
    IntrospectionError,
    ToolExecutionError,
)

__all__ = [
    "BackendError",
    "ConduitError",
    "ConfigError",
    "GraphQLResponseError",
    "IntrospectionError",
    "ToolExecutionError",
]
