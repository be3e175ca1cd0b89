"""API middleware — correlation IDs and request metrics."""

from __future__ import annotations

import time
import uuid

from fastapi import Request
from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

REQUESTS = Counter(
    "cloudmetrics_http_requests_total",
    "HTTP requests handled, by route, method and status code.",
    ["route", "method", "status"],
)
LATENCY = Histogram(
    "cloudmetrics_http_request_duration_seconds",
    "HTTP request latency, by route and method.",
    ["route", "method"],
)


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Attach a unique X-Correlation-Id to every request/response."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        correlation_id = request.headers.get("x-correlation-id") or uuid.uuid4().hex
        request.state.correlation_id = correlation_id
        response = await call_next(request)
        response.headers["X-Correlation-Id"] = correlation_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Count requests and record latency per matched route template.

    A request whose handler raises is counted as a 500.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            route = request.scope.get("route")
            path = getattr(route, "path", "unmatched")
            LATENCY.labels(path, request.method).observe(time.perf_counter() - start)
            REQUESTS.labels(path, request.method, str(status)).inc()
