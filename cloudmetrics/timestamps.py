"""Batch timestamps — one `now` per write request, shared by every record."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime


def now_timestamp(clock: Callable[[], datetime] | None = None) -> str:
    """Current time in UTC as RFC 3339 text, e.g. ``2021-04-01T12:30:00Z``.

    Suitable for a Hasura ``timestamptz`` column. `clock` must return an
    aware datetime; it exists so tests can pin the value.
    """
    current = clock() if clock is not None else datetime.now(UTC)
    return current.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
