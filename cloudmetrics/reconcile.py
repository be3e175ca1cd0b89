"""
Batch reconciliation — decide insert vs update for each submitted record.

A write request carries a stream of records. Each one is decoded and
validated, then compared against the tenant's existing resources (fetched
once per request): known names become updates, new names become inserts.
Any decode, validation or type-change failure rejects the whole batch
before anything is written.

Once a batch is planned, `commit` writes it without atomicity: inserts go
in one bulk call, then updates one by one in submission order. The first
store failure stops processing and earlier writes stay applied.

Usage:
    from cloudmetrics.reconcile import commit, plan_exporters

    batch = plan_exporters(body, existing={"cw": "cloudwatch"}, now=now_timestamp())
    commit(exporter_access, tenant, batch)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping

from cloudmetrics.credentials import validate_credential_value
from cloudmetrics.documents import normalize, parse_records, to_json
from cloudmetrics.errors import (
    EmptyBatchError,
    ShapeError,
    StoreError,
    TypeChangeError,
    UnsupportedTypeError,
)
from cloudmetrics.models import (
    Batch,
    CredentialRecord,
    ExporterRecord,
    InsertOp,
    ResourceKind,
    Submission,
    UpdateOp,
)
from cloudmetrics.store.access import ResourceAccess

logger = logging.getLogger(__name__)


def reconcile(
    kind: ResourceKind,
    existing: Mapping[str, str],
    submitted: Iterable[Submission],
    now: str,
) -> Batch:
    """Split submissions into insert and update operations.

    Args:
        kind: Resource kind, used in error messages.
        existing: Name -> stored type for the tenant's current resources.
        submitted: Validated records, consumed in order.
        now: Timestamp stamped on every operation in the batch.

    Raises:
        TypeChangeError: A record names an existing resource with a different type.
        ShapeError: A new resource has no type.
        EmptyBatchError: No records were submitted.
    """
    batch = Batch()
    for sub in submitted:
        if sub.name in existing:
            current = existing[sub.name]
            if sub.type and sub.type != current:
                logger.debug("Invalid %s '%s' type change", kind, sub.name)
                raise TypeChangeError(kind, sub.name, current=current, attempted=sub.type)
            # No-op updates are not detected; updated_at is bumped regardless
            batch.updates.append(UpdateOp(name=sub.name, fields=sub.fields, updated_at=now))
        else:
            if not sub.type:
                raise ShapeError(
                    f"{kind.capitalize()} '{sub.name}' is missing a type (required when creating)",
                    name=sub.name,
                )
            batch.inserts.append(
                InsertOp(
                    name=sub.name,
                    type=sub.type,
                    fields=sub.fields,
                    created_at=now,
                    updated_at=now,
                )
            )

    if not batch:
        logger.debug("Writing %ss: No data provided", kind)
        raise EmptyBatchError(kind)

    logger.debug(
        "Writing %ss: %d insert, %d update", kind, len(batch.inserts), len(batch.updates)
    )
    return batch


def prepare_credentials(
    records: Iterable[tuple[int, CredentialRecord]],
    existing: Mapping[str, str],
) -> Iterator[Submission]:
    """Validate credential values, yielding submissions with JSON `value` payloads.

    A record without a type is validated against the stored type of the same name.
    """
    for _, record in records:
        cred_type = record.type or existing.get(record.name, "")
        try:
            value = validate_credential_value(record.name, cred_type, record.value)
        except (ShapeError, UnsupportedTypeError) as e:
            logger.debug("Invalid credential value format: %s", e)
            raise
        yield Submission(name=record.name, type=record.type, fields={"value": value})


def prepare_exporters(records: Iterable[tuple[int, ExporterRecord]]) -> Iterator[Submission]:
    """Normalize exporter configs to JSON, yielding submissions."""
    for _, record in records:
        if not isinstance(record.config, dict):
            logger.debug("Invalid exporter '%s' config type", record.name)
            raise ShapeError(
                f"Exporter '{record.name}' config is invalid (must be YAML map)",
                name=record.name,
            )
        try:
            config = to_json(normalize(record.config))
        except ShapeError as e:
            logger.debug("Unable to serialize exporter '%s' config as JSON: %s", record.name, e)
            raise ShapeError(
                f"Exporter '{record.name}' config could not be encoded as JSON: {e.message}",
                name=record.name,
            ) from e

        # TODO validate that the referenced credential exists and suits the exporter
        # type (cloudwatch exporters need aws-key credentials)
        credential = record.credential or None
        yield Submission(
            name=record.name,
            type=record.type,
            fields={"credential": credential, "config": config},
        )


def plan_credentials(body: bytes | str, existing: Mapping[str, str], now: str) -> Batch:
    records = parse_records(body, CredentialRecord, ResourceKind.CREDENTIAL)
    return reconcile(
        ResourceKind.CREDENTIAL, existing, prepare_credentials(records, existing), now
    )


def plan_exporters(body: bytes | str, existing: Mapping[str, str], now: str) -> Batch:
    records = parse_records(body, ExporterRecord, ResourceKind.EXPORTER)
    return reconcile(ResourceKind.EXPORTER, existing, prepare_exporters(records), now)


def commit(access: ResourceAccess, tenant: str, batch: Batch) -> None:
    """Write a planned batch. Not atomic: nothing is rolled back on failure.

    Raises:
        StoreError: The first failed write, naming the operation.
    """
    kind = access.kind
    if batch.inserts:
        try:
            access.insert(tenant, batch.inserts)
        except StoreError as e:
            logger.warning("Insert: %d %ss failed: %s", len(batch.inserts), kind, e.detail)
            raise e.for_operation(f"Creating {len(batch.inserts)} {kind}s") from e

    for update in batch.updates:
        try:
            access.update(tenant, update)
        except StoreError as e:
            logger.warning("Update: %s %s failed: %s", kind.capitalize(), update.name, e.detail)
            raise e.for_operation(f"Updating {kind} {update.name}") from e
