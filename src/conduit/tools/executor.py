"""Tool execution against the GraphQL backend."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from conduit.core.errors import BackendError, GraphQLResponseError
from conduit.tools.base import text_result
from conduit.tools.query_builder import build_field_document

if TYPE_CHECKING:
    from conduit.graphql.client import GraphQLClient
    from conduit.graphql.schema import FieldDescriptor

logger = logging.getLogger(__name__)


class ToolExecutor:
    """Runs compiled tools: one document, one POST, one result.

    Shared by every tool in the registry; holds no per-call state.
    """

    def __init__(self, client: GraphQLClient) -> None:
        self._client = client

    async def execute(
        self,
        field_name: str,
        field: FieldDescriptor,
        operation: str,
        arguments: dict[str, Any] | None,
    ) -> dict[str, Any]:
        """Execute *field_name* with *arguments* and wrap the payload.

        Raises:
            BackendError: Transport failure, non-2xx status or non-JSON body.
            GraphQLResponseError: The backend returned a non-empty
                ``errors`` list. Only the first message is surfaced.
        """
        logger.info("Executing tool '%s' with args: %s", field_name, arguments)
        query = build_field_document(operation, field)

        try:
            body = await self._client.post(query, arguments or {})
        except BackendError:
            logger.warning("Backend request for tool '%s' failed", field_name)
            raise

        if not isinstance(body, dict):
            msg = f"Unexpected response body for '{field_name}': {body!r}"
            raise BackendError(msg)

        errors = body.get("errors")
        if errors:
            logger.warning("Tool '%s' returned GraphQL errors: %s", field_name, errors)
            raise GraphQLResponseError(errors)

        data = body.get("data")
        if data is None:
            data = {}
        elif not isinstance(data, dict):
            msg = f"Unexpected data member for '{field_name}': {data!r}"
            raise BackendError(msg)
        value = data.get(field_name)
        logger.debug("Execution of '%s' successful", field_name)
        return text_result(value)
