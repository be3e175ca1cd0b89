"""Tests for the Hasura GraphQL transport, against httpx.MockTransport."""

import json

import httpx
import pytest

from cloudmetrics.config import GraphQLConfig
from cloudmetrics.errors import ConflictError, StoreError
from cloudmetrics.store.graphql import ADMIN_SECRET_HEADER, GraphQLAccess

URL = "http://hasura.test/v1/graphql"


def _access(handler, secret="s3cret"):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return GraphQLAccess(URL, secret, client=client)


class TestExecute:
    def test_returns_data_and_sends_secret(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"data": {"credential": []}})

        data = _access(handler).execute("query { credential { name } }", {"tenant": "t"})
        assert data == {"credential": []}
        [request] = seen
        assert request.method == "POST"
        assert request.headers[ADMIN_SECRET_HEADER] == "s3cret"
        assert json.loads(request.content) == {
            "query": "query { credential { name } }",
            "variables": {"tenant": "t"},
        }

    def test_no_secret_header_when_unset(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"data": {}})

        _access(handler, secret="").execute("query { x }")
        assert ADMIN_SECRET_HEADER not in seen[0].headers

    def test_null_data(self):
        access = _access(lambda request: httpx.Response(200, json={"data": None}))
        assert access.execute("query { x }") == {}

    def test_graphql_errors(self):
        body = {"errors": [{"message": "field not found"}, {"message": "also bad"}]}
        access = _access(lambda request: httpx.Response(200, json=body))
        with pytest.raises(StoreError) as exc:
            access.execute("query { x }")
        assert type(exc.value) is StoreError
        assert exc.value.detail == "field not found; also bad"

    def test_constraint_violation_is_conflict(self):
        body = {
            "errors": [
                {
                    "message": "Uniqueness violation",
                    "extensions": {"code": "constraint-violation", "path": "$.selectionSet"},
                }
            ]
        }
        access = _access(lambda request: httpx.Response(200, json=body))
        with pytest.raises(ConflictError, match="Uniqueness violation"):
            access.execute("mutation { x }")

    def test_http_error_status(self):
        access = _access(lambda request: httpx.Response(502, text="bad gateway"))
        with pytest.raises(StoreError, match="bad gateway"):
            access.execute("query { x }")

    def test_http_error_status_with_json(self):
        access = _access(lambda request: httpx.Response(503, json={"data": None}))
        with pytest.raises(StoreError, match="HTTP 503"):
            access.execute("query { x }")

    def test_transport_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(StoreError, match="connection refused") as exc:
            _access(handler).execute("query { x }")
        assert URL in exc.value.detail

    def test_non_object_payload(self):
        access = _access(lambda request: httpx.Response(200, json=[1, 2]))
        with pytest.raises(StoreError, match="not an object"):
            access.execute("query { x }")


class TestFromConfig:
    def test_uses_endpoint_and_secret(self):
        access = GraphQLAccess.from_config(GraphQLConfig(endpoint=URL, admin_secret="x", timeout=3))
        try:
            assert access.url == URL
            assert access.secret == "x"
        finally:
            access.close()
