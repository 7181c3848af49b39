"""Configuration loading and validation."""

from conduit.config.loader import load_config, require_endpoint
from conduit.config.schema import (
    ConduitConfig,
    GraphQLConfig,
    LoggingConfig,
    ServerConfig,
)

__all__ = [
    "ConduitConfig",
    "GraphQLConfig",
    "LoggingConfig",
    "ServerConfig",
    "load_config",
    "require_endpoint",
]
