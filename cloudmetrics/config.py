"""
Centralized configuration for cloudmetrics.

All configuration is loaded from environment variables with sensible defaults.

Usage:
    from cloudmetrics.config import get_config
    cfg = get_config()
    print(cfg.graphql.endpoint)   # "http://localhost:8080/v1/graphql"
    print(cfg.listen)             # "127.0.0.1:8989"
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

DEFAULT_GRAPHQL_ENDPOINT = "http://localhost:8080/v1/graphql"

LOG_LEVELS = ("error", "warning", "info", "debug")


@dataclass(frozen=True)
class GraphQLConfig:
    """Hasura GraphQL endpoint parameters."""

    endpoint: str = DEFAULT_GRAPHQL_ENDPOINT
    admin_secret: str = ""
    timeout: float = 10.0


@dataclass(frozen=True)
class Config:
    """Top-level cloudmetrics configuration."""

    graphql: GraphQLConfig = field(default_factory=GraphQLConfig)
    listen: str = "127.0.0.1:8989"
    log_level: str = "info"

    @property
    def host(self) -> str:
        return split_listen_address(self.listen)[0]

    @property
    def port(self) -> int:
        return split_listen_address(self.listen)[1]


def split_listen_address(listen: str) -> tuple[str, int]:
    """Split ``host:port`` (host may be empty for all interfaces).

    Raises ValueError on a malformed address.
    """
    host, sep, port = listen.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"listen address must be HOST:PORT, got {listen!r}")
    return host or "0.0.0.0", int(port)


# Singleton
_config: Config | None = None


def get_config() -> Config:
    """Get or create the singleton config from environment variables."""
    global _config
    if _config is not None:
        return _config
    _config = _load_from_env()
    return _config


def _load_from_env() -> Config:
    """Load configuration from environment variables."""
    endpoint = os.environ.get("GRAPHQL_ENDPOINT", "")
    if not endpoint:
        # Dev environment default
        endpoint = DEFAULT_GRAPHQL_ENDPOINT
        logger.warning("missing GRAPHQL_ENDPOINT, trying %s", endpoint)

    graphql = GraphQLConfig(
        endpoint=endpoint,
        admin_secret=os.environ.get("HASURA_GRAPHQL_ADMIN_SECRET", ""),
        timeout=float(os.environ.get("CLOUDMETRICS_GRAPHQL_TIMEOUT", "10")),
    )

    return Config(
        graphql=graphql,
        listen=os.environ.get("CLOUDMETRICS_LISTEN", "127.0.0.1:8989"),
        log_level=os.environ.get("CLOUDMETRICS_LOG_LEVEL", "info").lower(),
    )


def reset_config() -> None:
    """Reset the singleton config (for testing)."""
    global _config
    _config = None
