"""Exporter table access."""

from __future__ import annotations

from cloudmetrics.models import ResourceKind
from cloudmetrics.store.access import HasuraResourceAccess


class ExporterAccess(HasuraResourceAccess):
    kind = ResourceKind.EXPORTER
    table = "exporter"
    read_columns = ("name", "type", "credential", "config", "created_at", "updated_at")
    update_columns = {"credential": "String", "config": "json!"}
