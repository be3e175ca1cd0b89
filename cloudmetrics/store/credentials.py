"""Credential table access. The secret `value` column is written, never read."""

from __future__ import annotations

from cloudmetrics.models import ResourceKind
from cloudmetrics.store.access import HasuraResourceAccess


class CredentialAccess(HasuraResourceAccess):
    kind = ResourceKind.CREDENTIAL
    table = "credential"
    read_columns = ("name", "type", "created_at", "updated_at")
    update_columns = {"value": "json!"}
