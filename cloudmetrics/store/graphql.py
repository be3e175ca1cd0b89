"""
Hasura GraphQL transport.

Posts queries with the admin secret attached and unwraps the `data` object.
Any failure (transport, HTTP status, undecodable body, GraphQL `errors`)
becomes a StoreError carrying the backend's message verbatim. Uniqueness
violations become ConflictError so callers can tell racing writers apart
from broken backends.

Usage:
    from cloudmetrics.store.graphql import GraphQLAccess

    gql = GraphQLAccess("http://localhost:8080/v1/graphql", secret="...")
    data = gql.execute("query { credential { name } }")
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from cloudmetrics.config import GraphQLConfig
from cloudmetrics.errors import ConflictError, StoreError

logger = logging.getLogger(__name__)

ADMIN_SECRET_HEADER = "x-hasura-admin-secret"
CONSTRAINT_VIOLATION = "constraint-violation"


class GraphQLAccess:
    """Synchronous client for one GraphQL endpoint."""

    def __init__(
        self,
        url: str,
        secret: str = "",
        *,
        client: httpx.Client | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.url = url
        self.secret = secret
        self._client = client or httpx.Client(timeout=timeout)

    @classmethod
    def from_config(cls, cfg: GraphQLConfig) -> GraphQLAccess:
        return cls(cfg.endpoint, cfg.admin_secret, timeout=cfg.timeout)

    def execute(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Run a query or mutation and return its `data` object."""
        headers = {ADMIN_SECRET_HEADER: self.secret} if self.secret else {}
        try:
            resp = self._client.post(
                self.url,
                json={"query": query, "variables": variables or {}},
                headers=headers,
            )
        except httpx.HTTPError as e:
            raise StoreError(f"GraphQL request to {self.url} failed: {e}") from e

        try:
            payload = resp.json()
        except ValueError as e:
            raise StoreError(
                f"GraphQL response could not be decoded (HTTP {resp.status_code}): {resp.text}"
            ) from e

        errors = payload.get("errors") if isinstance(payload, dict) else None
        if errors:
            raise _store_error(errors)
        if resp.is_error:
            raise StoreError(f"GraphQL request failed (HTTP {resp.status_code}): {resp.text}")
        if not isinstance(payload, dict):
            raise StoreError(f"GraphQL response is not an object: {resp.text}")
        return payload.get("data") or {}

    def close(self) -> None:
        self._client.close()


def _store_error(errors: list[Any]) -> StoreError:
    messages = []
    conflict = False
    for err in errors:
        if not isinstance(err, dict):
            messages.append(str(err))
            continue
        messages.append(str(err.get("message", err)))
        extensions = err.get("extensions") or {}
        if extensions.get("code") == CONSTRAINT_VIOLATION:
            conflict = True

    detail = "; ".join(messages)
    if conflict:
        return ConflictError(detail)
    return StoreError(detail)
