"""
Tenant-scoped resource access over Hasura.

Each resource kind lives in one table keyed by (tenant, name). The
subclasses in `credentials` and `exporters` only declare their table and
columns; the queries are built here.

"Not found" is always a None result, never an exception. Everything else
that goes wrong in the backend surfaces as StoreError from GraphQLAccess.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Protocol

from cloudmetrics.models import InsertOp, ResourceKind, UpdateOp
from cloudmetrics.store.graphql import GraphQLAccess

logger = logging.getLogger(__name__)


class ResourceAccess(Protocol):
    """What the reconciler and API need from a store, per resource kind."""

    kind: ResourceKind

    def list(self, tenant: str) -> list[dict[str, Any]]: ...

    def get(self, tenant: str, name: str) -> dict[str, Any] | None: ...

    def insert(self, tenant: str, inserts: Sequence[InsertOp]) -> None: ...

    def update(self, tenant: str, update: UpdateOp) -> None: ...

    def delete(self, tenant: str, name: str) -> dict[str, Any] | None: ...


class HasuraResourceAccess:
    """CRUD for one Hasura table with a (tenant, name) primary key."""

    kind: ResourceKind
    table: str
    # Columns returned by list/get
    read_columns: tuple[str, ...]
    # Columns changed by an update, with their GraphQL variable types
    update_columns: dict[str, str]

    def __init__(self, graphql: GraphQLAccess) -> None:
        self.graphql = graphql

    def list(self, tenant: str) -> list[dict[str, Any]]:
        query = (
            f"query List{self._suffix}($tenant: String!) {{ "
            f"{self.table}(where: {{tenant: {{_eq: $tenant}}}}) {{ {self._columns} }} }}"
        )
        data = self.graphql.execute(query, {"tenant": tenant})
        rows = data.get(self.table) or []
        logger.debug("Listing %d %ss for tenant %s", len(rows), self.kind, tenant)
        return rows

    def get(self, tenant: str, name: str) -> dict[str, Any] | None:
        query = (
            f"query Get{self._suffix}($tenant: String!, $name: String!) {{ "
            f"{self.table}_by_pk(tenant: $tenant, name: $name) {{ {self._columns} }} }}"
        )
        data = self.graphql.execute(query, {"tenant": tenant, "name": name})
        return data.get(f"{self.table}_by_pk")

    def insert(self, tenant: str, inserts: Sequence[InsertOp]) -> None:
        query = (
            f"mutation Create{self._suffix}s($objects: [{self.table}_insert_input!]!) {{ "
            f"insert_{self.table}(objects: $objects) {{ affected_rows }} }}"
        )
        objects = [{"tenant": tenant, **op.to_variables()} for op in inserts]
        self.graphql.execute(query, {"objects": objects})

    def update(self, tenant: str, update: UpdateOp) -> None:
        declarations = "".join(f", ${col}: {typ}" for col, typ in self.update_columns.items())
        assignments = ", ".join(f"{col}: ${col}" for col in self.update_columns)
        query = (
            f"mutation Update{self._suffix}($tenant: String!, $name: String!, "
            f"$updated_at: timestamptz!{declarations}) {{ "
            f"update_{self.table}_by_pk(pk_columns: {{tenant: $tenant, name: $name}}, "
            f"_set: {{{assignments}, updated_at: $updated_at}}) {{ name }} }}"
        )
        self.graphql.execute(query, {"tenant": tenant, **update.to_variables()})

    def delete(self, tenant: str, name: str) -> dict[str, Any] | None:
        query = (
            f"mutation Delete{self._suffix}($tenant: String!, $name: String!) {{ "
            f"delete_{self.table}_by_pk(tenant: $tenant, name: $name) {{ name }} }}"
        )
        data = self.graphql.execute(query, {"tenant": tenant, "name": name})
        return data.get(f"delete_{self.table}_by_pk")

    @property
    def _suffix(self) -> str:
        return self.table.capitalize()

    @property
    def _columns(self) -> str:
        return " ".join(self.read_columns)
