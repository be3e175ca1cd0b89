"""
Error taxonomy for the credential/exporter API.

Every failure the core can produce is one of a small closed set of kinds.
Each exception carries the structured fields callers need (resource name,
failing record index, current vs attempted type) plus the HTTP status the
API layer responds with, so nothing has to parse messages.

Usage:
    from cloudmetrics.errors import TypeChangeError

    raise TypeChangeError("exporter", "cw", current="cloudwatch", attempted="stackdriver")
"""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    TENANT = "tenant"
    DECODE = "decode"
    SHAPE = "shape"
    UNSUPPORTED_TYPE = "unsupported_type"
    TYPE_CHANGE = "type_change"
    EMPTY_BATCH = "empty_batch"
    NOT_FOUND = "not_found"
    STORE = "store"
    CONFLICT = "conflict"


class APIError(Exception):
    """Base class for all errors surfaced to API callers."""

    kind: ErrorKind
    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"error": self.message, "kind": str(self.kind)}


class TenantError(APIError):
    """Missing or invalid tenant identifier on the request."""

    kind = ErrorKind.TENANT


class DecodeError(APIError):
    """A record in the submitted document stream could not be decoded."""

    kind = ErrorKind.DECODE

    def __init__(self, resource: str, index: int, reason: str) -> None:
        super().__init__(f"Decoding {resource} input at index={index} failed: {reason}")
        self.resource = resource
        self.index = index
        self.reason = reason


class ShapeError(APIError):
    """A credential value or exporter config does not match its schema."""

    kind = ErrorKind.SHAPE

    def __init__(self, message: str, *, name: str | None = None) -> None:
        super().__init__(message)
        self.name = name


class UnsupportedTypeError(APIError):
    kind = ErrorKind.UNSUPPORTED_TYPE

    def __init__(self, resource: str, type_: str, expected: list[str]) -> None:
        super().__init__(
            f"unsupported {resource} type: {type_!r} (expected {' or '.join(expected)})"
        )
        self.resource = resource
        self.type = type_
        self.expected = expected


class TypeChangeError(APIError):
    """Attempt to change the immutable type of an existing resource."""

    kind = ErrorKind.TYPE_CHANGE

    def __init__(self, resource: str, name: str, *, current: str, attempted: str) -> None:
        super().__init__(
            f"{resource.capitalize()} '{name}' type cannot be updated "
            f"(current={current}, updated={attempted})"
        )
        self.resource = resource
        self.name = name
        self.current = current
        self.attempted = attempted


class EmptyBatchError(APIError):
    kind = ErrorKind.EMPTY_BATCH

    def __init__(self, resource: str) -> None:
        super().__init__(f"Missing {resource} YAML data in request body")
        self.resource = resource


class NotFoundError(APIError):
    kind = ErrorKind.NOT_FOUND
    status_code = 404

    def __init__(self, resource: str, tenant: str, name: str) -> None:
        super().__init__(f"{resource.capitalize()} not found: {tenant}/{name}")
        self.resource = resource
        self.tenant = tenant
        self.name = name


class StoreError(APIError):
    """Backend failure. `detail` is the backend's message, verbatim."""

    kind = ErrorKind.STORE
    status_code = 500

    def __init__(self, detail: str, *, operation: str | None = None) -> None:
        message = f"{operation} failed: {detail}" if operation else detail
        super().__init__(message)
        self.detail = detail
        self.operation = operation

    def for_operation(self, operation: str) -> StoreError:
        """Return a copy of this error (same class) naming the failed operation."""
        return type(self)(self.detail, operation=operation)


class ConflictError(StoreError):
    """The store rejected a write on a uniqueness constraint."""

    kind = ErrorKind.CONFLICT
    status_code = 409
