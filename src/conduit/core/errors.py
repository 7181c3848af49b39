"""Exception hierarchy for conduit.

Every module imports from here. The hierarchy is:

    ConduitError
    ├── ConfigError
    ├── IntrospectionError
    └── ToolExecutionError
        ├── BackendError
        └── GraphQLResponseError
"""

from __future__ import annotations


class ConduitError(Exception):
    """Base exception for all conduit errors."""


# ─── Configuration Errors ─────────────────────────────────────


class ConfigError(ConduitError):
    """Invalid or incomplete configuration."""


# ─── Schema Errors ────────────────────────────────────────────


class IntrospectionError(ConduitError):
    """The backend schema could not be introspected or parsed."""


# ─── Execution Errors ─────────────────────────────────────────


class ToolExecutionError(ConduitError):
    """Base for failures while executing a tool against the backend."""


class BackendError(ToolExecutionError):
    """Transport-level failure talking to the GraphQL backend.

    Carries the HTTP status code when the backend answered at all.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class GraphQLResponseError(ToolExecutionError):
    """The backend answered with a GraphQL ``errors`` list.

    Only the first error is surfaced in the message; the full value is
    kept on ``errors``. A value that is not a list is surfaced whole.
    """

    def __init__(self, errors: object) -> None:
        self.errors = errors
        if isinstance(errors, list) and errors:
            first = errors[0]
            message = first.get("message") if isinstance(first, dict) else first
        else:
            message = errors
        super().__init__(f"API Error: {message}")
