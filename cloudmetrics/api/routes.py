"""
Credential and exporter routes.

Both resource kinds expose the same four endpoints, each with and without
a trailing slash:

    GET    /api/v1/<kind>s          list, one YAML document per resource
    POST   /api/v1/<kind>s          insert/update a YAML document stream
    GET    /api/v1/<kind>s/{name}   single resource
    DELETE /api/v1/<kind>s/{name}   delete, echoes the name

Store calls are synchronous and run in the threadpool.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from starlette.concurrency import run_in_threadpool

from cloudmetrics.api.deps import get_credential_access, get_exporter_access, get_tenant
from cloudmetrics.documents import dump_documents
from cloudmetrics.errors import NotFoundError, StoreError
from cloudmetrics.models import Batch, ResourceKind, credential_info, exporter_info
from cloudmetrics.reconcile import commit, plan_credentials, plan_exporters
from cloudmetrics.store import ResourceAccess
from cloudmetrics.timestamps import now_timestamp

logger = logging.getLogger(__name__)

YAML_MEDIA_TYPE = "application/yaml"

Planner = Callable[[bytes, Mapping[str, str], str], Batch]


def _yaml_response(docs: list[dict]) -> Response:
    return Response(content=dump_documents(docs), media_type=YAML_MEDIA_TYPE)


def list_resources(access: ResourceAccess, tenant: str) -> list[dict]:
    try:
        return access.list(tenant)
    except StoreError as e:
        logger.warning("Listing %ss for tenant %s failed: %s", access.kind, tenant, e.detail)
        raise e.for_operation(f"Listing {access.kind}s for tenant {tenant}") from e


def write_resources(access: ResourceAccess, tenant: str, body: bytes, plan: Planner) -> Batch:
    """List existing resources once, plan the batch against them, then commit it."""
    existing = {row["name"]: row.get("type") or "" for row in list_resources(access, tenant)}
    batch = plan(body, existing, now_timestamp())
    commit(access, tenant, batch)
    return batch


def get_resource(access: ResourceAccess, tenant: str, name: str) -> dict:
    logger.debug("Getting %s: %s/%s", access.kind, tenant, name)
    try:
        row = access.get(tenant, name)
    except StoreError as e:
        logger.warning("Get: %s %s/%s failed: %s", access.kind, tenant, name, e.detail)
        raise e.for_operation(f"Getting {access.kind}") from e
    if row is None:
        logger.debug("Get: %s %s/%s not found", access.kind, tenant, name)
        raise NotFoundError(access.kind, tenant, name)
    return row


def delete_resource(access: ResourceAccess, tenant: str, name: str) -> dict:
    logger.debug("Deleting %s: %s/%s", access.kind, tenant, name)
    try:
        row = access.delete(tenant, name)
    except StoreError as e:
        logger.warning("Delete: %s %s/%s failed: %s", access.kind, tenant, name, e.detail)
        raise e.for_operation(f"Deleting {access.kind}") from e
    if row is None:
        logger.debug("Delete: %s %s/%s not found", access.kind, tenant, name)
        raise NotFoundError(access.kind, tenant, name)
    return row


def resource_router(
    kind: ResourceKind,
    access_dependency: Callable[[Request], ResourceAccess],
    to_info: Callable[[dict], dict],
    plan: Planner,
) -> APIRouter:
    """Build the list/write/get/delete routes for one resource kind."""
    router = APIRouter(prefix=f"/api/v1/{kind}s", tags=[f"{kind}s"])

    @router.get("")
    @router.get("/", include_in_schema=False)
    async def api_list(
        tenant: str = Depends(get_tenant),
        access: ResourceAccess = Depends(access_dependency),
    ):
        rows = await run_in_threadpool(list_resources, access, tenant)
        return _yaml_response([to_info(row) for row in rows])

    @router.post("")
    @router.post("/", include_in_schema=False)
    async def api_write(
        request: Request,
        tenant: str = Depends(get_tenant),
        access: ResourceAccess = Depends(access_dependency),
    ):
        body = await request.body()
        await run_in_threadpool(write_resources, access, tenant, body, plan)
        return Response(status_code=200)

    @router.get("/{name}")
    @router.get("/{name}/", include_in_schema=False)
    async def api_get(
        name: str,
        tenant: str = Depends(get_tenant),
        access: ResourceAccess = Depends(access_dependency),
    ):
        row = await run_in_threadpool(get_resource, access, tenant, name)
        return _yaml_response([to_info(row)])

    @router.delete("/{name}")
    @router.delete("/{name}/", include_in_schema=False)
    async def api_delete(
        name: str,
        tenant: str = Depends(get_tenant),
        access: ResourceAccess = Depends(access_dependency),
    ):
        row = await run_in_threadpool(delete_resource, access, tenant, name)
        return _yaml_response([{"name": row["name"]}])

    return router


credentials_router = resource_router(
    ResourceKind.CREDENTIAL, get_credential_access, credential_info, plan_credentials
)
exporters_router = resource_router(
    ResourceKind.EXPORTER, get_exporter_access, exporter_info, plan_exporters
)
