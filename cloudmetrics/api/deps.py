"""API dependency injection — tenant extraction and store access."""

from __future__ import annotations

from fastapi import Request

from cloudmetrics.errors import TenantError
from cloudmetrics.store import ResourceAccess

TENANT_HEADER = "X-Scope-OrgID"


def get_tenant(request: Request) -> str:
    """Return the single, non-empty tenant ID carried by the request.

    Raises TenantError when the header is missing, repeated or empty.
    """
    tenants = request.headers.getlist(TENANT_HEADER)
    if not tenants:
        raise TenantError(f"missing tenant ID in request to {request.url}")
    if len(tenants) != 1 or not tenants[0]:
        raise TenantError(f"invalid tenant ID in request to {request.url}")
    return tenants[0]


def get_credential_access(request: Request) -> ResourceAccess:
    return request.app.state.credentials


def get_exporter_access(request: Request) -> ResourceAccess:
    return request.app.state.exporters
