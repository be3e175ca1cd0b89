"""
Store access — Hasura-backed, tenant-scoped CRUD per resource kind.

Usage:
    from cloudmetrics.store import build_stores

    credentials, exporters = build_stores(get_config().graphql)
    rows = credentials.list("tenant-a")
"""

from __future__ import annotations

from cloudmetrics.config import GraphQLConfig
from cloudmetrics.store.access import HasuraResourceAccess, ResourceAccess
from cloudmetrics.store.credentials import CredentialAccess
from cloudmetrics.store.exporters import ExporterAccess
from cloudmetrics.store.graphql import GraphQLAccess


def build_stores(cfg: GraphQLConfig) -> tuple[CredentialAccess, ExporterAccess]:
    """Create credential and exporter access sharing one GraphQL client."""
    graphql = GraphQLAccess.from_config(cfg)
    return CredentialAccess(graphql), ExporterAccess(graphql)


__all__ = [
    "CredentialAccess",
    "ExporterAccess",
    "GraphQLAccess",
    "HasuraResourceAccess",
    "ResourceAccess",
    "build_stores",
]
