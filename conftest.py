"""
Root-level shared test fixtures.

Inherited by the tests/ suite and the package-local store tests.
"""

from __future__ import annotations

import pytest

from cloudmetrics.config import reset_config


@pytest.fixture
def clean_env(monkeypatch):
    """Remove env vars that leak between tests and reset the config singleton."""
    for key in [
        "GRAPHQL_ENDPOINT",
        "HASURA_GRAPHQL_ADMIN_SECRET",
        "CLOUDMETRICS_GRAPHQL_TIMEOUT",
        "CLOUDMETRICS_LISTEN",
        "CLOUDMETRICS_LOG_LEVEL",
    ]:
        monkeypatch.delenv(key, raising=False)
    reset_config()
    yield monkeypatch
    reset_config()
