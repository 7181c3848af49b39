"""Pydantic models for conduit configuration."""

from __future__ import annotations

from pydantic import BaseModel, Field


class GraphQLConfig(BaseModel):
    """Backend GraphQL endpoint settings."""

    url: str | None = None
    url_env: str = "GRAPHQL_API_URL"
    token: str | None = None
    token_env: str = "API_AUTH_TOKEN"
    timeout: float | None = None


class ServerConfig(BaseModel):
    """HTTP listener settings."""

    host: str = "127.0.0.1"
    port: int = 3000
    port_env: str = "PORT"
    max_sessions: int = Field(default=1024, ge=1)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    file: str = ""


class ConduitConfig(BaseModel):
    """Top-level configuration for conduit."""

    graphql: GraphQLConfig = Field(default_factory=GraphQLConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
