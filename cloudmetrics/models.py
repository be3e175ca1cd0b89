"""
Resource records and write operations.

Submitted records are pydantic models that forbid unknown fields. Write
operations are plain dataclasses shared by both resource kinds; the
kind-specific columns travel in `fields`.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictStr

logger = logging.getLogger(__name__)


class ResourceKind(StrEnum):
    CREDENTIAL = "credential"
    EXPORTER = "exporter"


class CredentialRecord(BaseModel):
    """Full credential entry (with secret value) received in a write request."""

    model_config = ConfigDict(extra="forbid")

    name: StrictStr = Field(min_length=1)
    type: StrictStr = ""
    # Nested YAML or a JSON payload string, depending on type
    value: Any


class ExporterRecord(BaseModel):
    """Exporter entry received in a write request."""

    model_config = ConfigDict(extra="forbid")

    name: StrictStr = Field(min_length=1)
    type: StrictStr = ""
    credential: StrictStr | None = None
    config: Any


@dataclass(frozen=True)
class Submission:
    """A decoded record that passed per-record validation."""

    name: str
    type: str
    fields: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class InsertOp:
    name: str
    type: str
    fields: dict[str, Any]
    created_at: str
    updated_at: str

    def to_variables(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            **self.fields,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass(frozen=True)
class UpdateOp:
    name: str
    fields: dict[str, Any]
    updated_at: str

    def to_variables(self) -> dict[str, Any]:
        return {"name": self.name, **self.fields, "updated_at": self.updated_at}


@dataclass
class Batch:
    """Insert and update operations planned for one write request."""

    inserts: list[InsertOp] = field(default_factory=list)
    updates: list[UpdateOp] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.inserts) + len(self.updates)


def credential_info(row: dict) -> dict:
    """Convert a credential row to its read shape. Never includes the secret value."""
    info = {"name": row["name"]}
    for key in ("type", "created_at", "updated_at"):
        if row.get(key):
            info[key] = row[key]
    return info


def exporter_info(row: dict) -> dict:
    """Convert an exporter row to its read shape, re-expanding the stored JSON config."""
    config = expand_config(row["name"], row.get("config"))
    info: dict[str, Any] = {"name": row["name"]}
    if row.get("type"):
        info["type"] = row["type"]
    if row.get("credential"):
        info["credential"] = row["credential"]
    if config:
        info["config"] = config
    for key in ("created_at", "updated_at"):
        if row.get(key):
            info[key] = row[key]
    return info


def expand_config(name: str, raw: Any) -> dict:
    """Parse a stored JSON config back into a document tree.

    Falls back to passing the raw value through under a ``json`` key when it
    does not parse to a map.
    """
    if raw is None or isinstance(raw, dict):
        return raw or {}
    try:
        config = json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.warning("Failed to decode JSON config for exporter %s (err: %s): %s", name, e, raw)
        return {"json": raw}
    if not isinstance(config, dict):
        logger.warning("JSON config for exporter %s is not a map: %s", name, raw)
        return {"json": raw}
    return config
