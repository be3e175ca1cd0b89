"""
cloudmetrics API — FastAPI app for tenant credentials and exporters.

Start:
  cloudmetrics serve --listen 127.0.0.1:8989
  # or
  uvicorn cloudmetrics.api.app:create_app --factory --port 8989
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from cloudmetrics import __version__
from cloudmetrics.api.middleware import CorrelationMiddleware, MetricsMiddleware
from cloudmetrics.api.routes import credentials_router, exporters_router
from cloudmetrics.config import Config, get_config
from cloudmetrics.errors import APIError
from cloudmetrics.store import GraphQLAccess, ResourceAccess, build_stores

logger = logging.getLogger(__name__)


def create_app(
    config: Config | None = None,
    *,
    credentials: ResourceAccess | None = None,
    exporters: ResourceAccess | None = None,
) -> FastAPI:
    """Build the app with its store access injected.

    When no stores are passed, Hasura-backed ones are built from `config`
    and closed on shutdown.
    """
    owned: GraphQLAccess | None = None
    if credentials is None or exporters is None:
        cfg = config or get_config()
        logger.info("graphql URL: %s", cfg.graphql.endpoint)
        built_credentials, built_exporters = build_stores(cfg.graphql)
        owned = built_credentials.graphql
        credentials = credentials or built_credentials
        exporters = exporters or built_exporters

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if owned is not None:
            owned.close()

    app = FastAPI(title="cloudmetrics", version=__version__, lifespan=lifespan)
    app.state.credentials = credentials
    app.state.exporters = exporters

    app.add_middleware(MetricsMiddleware)
    app.add_middleware(CorrelationMiddleware)

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
        else:
            logger.debug("%s %s rejected: %s", request.method, request.url.path, exc)
        return JSONResponse(exc.to_dict(), status_code=exc.status_code)

    @app.get("/health")
    async def health():
        return {"status": "ok", "version": __version__}

    @app.get("/metrics")
    async def metrics():
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(credentials_router)
    app.include_router(exporters_router)
    return app
