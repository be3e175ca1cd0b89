"""
Credential value validation.

Each credential type has one fixed value shape. The set of types is closed:
adding one means adding a branch here, not configuration.

Usage:
    from cloudmetrics.credentials.validation import validate_credential_value

    payload = validate_credential_value(
        "prod", "aws-key", {"AWS_ACCESS_KEY_ID": "A", "AWS_SECRET_ACCESS_KEY": "B"}
    )
"""

from __future__ import annotations

import json
from enum import StrEnum
from typing import Any

from cloudmetrics.errors import ShapeError, UnsupportedTypeError


class CredentialType(StrEnum):
    AWS_KEY = "aws-key"
    GCP_SERVICE_ACCOUNT = "gcp-service-account"


AWS_KEY_FIELDS = ("AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY")


def validate_credential_value(name: str, cred_type: str, value: Any) -> str:
    """Check `value` against the shape for `cred_type` and return it as JSON text.

    Raises:
        UnsupportedTypeError: `cred_type` is not a known credential type.
        ShapeError: `value` does not match the type's shape.
    """
    if cred_type == CredentialType.AWS_KEY:
        return _validate_aws_key(name, value)
    if cred_type == CredentialType.GCP_SERVICE_ACCOUNT:
        return _validate_gcp_service_account(name, value)
    raise UnsupportedTypeError("credential", cred_type, [str(t) for t in CredentialType])


def _validate_aws_key(name: str, value: Any) -> str:
    # Regular YAML fields, not a nested string
    def fail(reason: str) -> ShapeError:
        return ShapeError(
            f"expected {CredentialType.AWS_KEY} credential '{name}' value to contain "
            f"YAML string fields: {' and '.join(AWS_KEY_FIELDS)} ({reason})",
            name=name,
        )

    if not isinstance(value, dict):
        raise fail("expected a map")
    if len(value) != 2:
        raise fail("wrong size")
    if any(key not in value for key in AWS_KEY_FIELDS):
        raise fail("missing fields")
    key_id, secret = (value[key] for key in AWS_KEY_FIELDS)
    if not isinstance(key_id, str) or not isinstance(secret, str):
        raise fail("non-string fields")

    return json.dumps(
        {"AWS_ACCESS_KEY_ID": key_id, "AWS_SECRET_ACCESS_KEY": secret},
        separators=(",", ":"),
    )


def _reject_constant(constant: str) -> Any:
    raise ValueError(f"{constant} is not valid JSON")


def _validate_gcp_service_account(name: str, value: Any) -> str:
    # Literal contents of a service account key file
    if not isinstance(value, str):
        raise ShapeError(
            f"expected {CredentialType.GCP_SERVICE_ACCOUNT} credential '{name}' "
            "value to be a JSON string",
            name=name,
        )
    try:
        json.loads(value, parse_constant=_reject_constant)
    except ValueError as e:
        raise ShapeError(
            f"{CredentialType.GCP_SERVICE_ACCOUNT} credential '{name}' value "
            "is not a valid JSON string",
            name=name,
        ) from e
    return value
