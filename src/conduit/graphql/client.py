"""HTTP client for the backend GraphQL endpoint.

Wraps a single :class:`httpx.AsyncClient`. Used once at startup for
introspection and then for every tool invocation. No retries, no
caching: each call is one POST.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

import httpx

from conduit.core.errors import BackendError, IntrospectionError
from conduit.graphql.schema import SchemaDescription

if TYPE_CHECKING:
    from types import TracebackType

logger = logging.getLogger(__name__)

INTROSPECTION_QUERY = """
query IntrospectionQuery {
  __schema {
    queryType { name }
    mutationType { name }
    subscriptionType { name }
    types {
      kind
      name
      description
      fields(includeDeprecated: true) {
        name
        description
        args {
          name
          description
          type { ...TypeRef }
          defaultValue
        }
        type { ...TypeRef }
      }
    }
  }
}

fragment TypeRef on __Type {
  kind
  name
  ofType {
    kind
    name
    ofType {
      kind
      name
      ofType {
        kind
        name
        ofType {
          kind
          name
          ofType {
            kind
            name
            ofType {
              kind
              name
              ofType {
                kind
                name
              }
            }
          }
        }
      }
    }
  }
}
"""


class GraphQLClient:
    """POSTs GraphQL documents to a single endpoint.

    Usable as an async context manager; the underlying connection pool
    is closed on exit. An explicit ``transport`` can be supplied for
    tests (e.g. :class:`httpx.MockTransport`).
    """

    def __init__(
        self,
        url: str,
        token: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self._token = token
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @property
    def has_token(self) -> bool:
        return bool(self._token)

    def headers(self) -> dict[str, str]:
        """Outbound headers, with the bearer credential when configured."""
        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def post(self, query: str, variables: dict[str, Any] | None = None) -> Any:
        """Send one document and return the decoded JSON body.

        Raises:
            BackendError: On transport failure, non-2xx status, or a body
                that is not JSON.
        """
        payload: dict[str, Any] = {"query": query}
        if variables is not None:
            payload["variables"] = variables

        try:
            response = await self._client.post(
                self.url, json=payload, headers=self.headers()
            )
        except httpx.HTTPError as e:
            msg = f"Request to {self.url} failed: {e}"
            raise BackendError(msg) from e

        if not response.is_success:
            reason = response.reason_phrase or response.text[:200]
            msg = f"Backend returned HTTP {response.status_code}: {reason}"
            raise BackendError(msg, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            msg = f"Backend returned a non-JSON body: {e}"
            raise BackendError(msg, status_code=response.status_code) from e

    async def introspect(self) -> SchemaDescription:
        """Fetch and parse the backend schema.

        Raises:
            BackendError: If the endpoint cannot be reached.
            IntrospectionError: If the backend reports errors or returns no
                schema.
        """
        logger.info("Fetching schema from %s", self.url)
        start = time.monotonic()

        result = await self.post(INTROSPECTION_QUERY)
        if not isinstance(result, dict):
            msg = "Introspection response is not a JSON object"
            raise IntrospectionError(msg)
        if result.get("errors"):
            msg = f"GraphQL introspection query failed: {result['errors']}"
            raise IntrospectionError(msg)

        schema = SchemaDescription.from_introspection(result.get("data") or {})
        elapsed_ms = (time.monotonic() - start) * 1000
        logger.info(
            "Built client schema in %.1fms: %d queries, %d mutations",
            elapsed_ms,
            len(schema.query_fields),
            len(schema.mutation_fields or {}),
        )
        return schema

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> GraphQLClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
