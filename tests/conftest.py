"""
Shared fixtures for the cloudmetrics test suite.

Provides in-memory store access doubles, an app wired to them, and an
async HTTP client over ASGITransport.
"""

from __future__ import annotations

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport

from cloudmetrics.api.app import create_app
from cloudmetrics.errors import ConflictError
from cloudmetrics.models import ResourceKind


class FakeAccess:
    """In-memory ResourceAccess keyed by (tenant, name).

    `failures` maps an operation ("list", "get", "insert", "delete", or
    "update:<name>") to the exception it should raise.
    """

    def __init__(self, kind: ResourceKind) -> None:
        self.kind = kind
        self.rows: dict[tuple[str, str], dict] = {}
        self.calls: list[tuple] = []
        self.failures: dict[str, Exception] = {}

    def seed(self, tenant: str, **row) -> None:
        self.rows[(tenant, row["name"])] = row

    def _check(self, operation: str) -> None:
        if operation in self.failures:
            raise self.failures[operation]

    def list(self, tenant):
        self.calls.append(("list", tenant))
        self._check("list")
        return [dict(row) for (t, _), row in self.rows.items() if t == tenant]

    def get(self, tenant, name):
        self.calls.append(("get", tenant, name))
        self._check("get")
        row = self.rows.get((tenant, name))
        return dict(row) if row else None

    def insert(self, tenant, inserts):
        self.calls.append(("insert", tenant, list(inserts)))
        self._check("insert")
        names = [op.name for op in inserts]
        for name in names:
            if (tenant, name) in self.rows or names.count(name) > 1:
                raise ConflictError(f"Uniqueness violation: {self.kind} {name} exists")
        for op in inserts:
            self.rows[(tenant, op.name)] = {
                "name": op.name,
                "type": op.type,
                **op.fields,
                "created_at": op.created_at,
                "updated_at": op.updated_at,
            }

    def update(self, tenant, update):
        self.calls.append(("update", tenant, update))
        self._check(f"update:{update.name}")
        row = self.rows[(tenant, update.name)]
        row.update(update.fields)
        row["updated_at"] = update.updated_at

    def delete(self, tenant, name):
        self.calls.append(("delete", tenant, name))
        self._check("delete")
        row = self.rows.pop((tenant, name), None)
        return {"name": row["name"]} if row else None

    def writes(self) -> list[tuple]:
        return [c for c in self.calls if c[0] in ("insert", "update")]


@pytest.fixture
def credentials():
    return FakeAccess(ResourceKind.CREDENTIAL)


@pytest.fixture
def exporters():
    return FakeAccess(ResourceKind.EXPORTER)


@pytest.fixture
def app(credentials, exporters):
    return create_app(credentials=credentials, exporters=exporters)


@pytest_asyncio.fixture
async def test_client(app):
    """Async HTTP client wrapping the FastAPI app via ASGITransport."""
    transport = ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def tenant_headers():
    return {"X-Scope-OrgID": "tenant-a"}
