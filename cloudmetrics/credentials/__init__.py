"""
Credential handling — value shapes per credential type.

Public API:
    validate_credential_value(name, type, value)  → canonical JSON text
    CredentialType                                → the supported type tags
"""

from __future__ import annotations

from cloudmetrics.credentials.validation import (
    AWS_KEY_FIELDS,
    CredentialType,
    validate_credential_value,
)

__all__ = ["AWS_KEY_FIELDS", "CredentialType", "validate_credential_value"]
