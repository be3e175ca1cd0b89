"""HTTP API for tenant credentials and exporters."""

from __future__ import annotations

from cloudmetrics.api.app import create_app

__all__ = ["create_app"]
