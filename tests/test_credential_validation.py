"""Tests for cloudmetrics.credentials.validation — per-type value shapes (pure unit tests)."""

import json

import pytest

from cloudmetrics.credentials import CredentialType, validate_credential_value
from cloudmetrics.errors import ShapeError, UnsupportedTypeError

AWS_VALUE = {"AWS_ACCESS_KEY_ID": "A", "AWS_SECRET_ACCESS_KEY": "B"}


class TestAwsKey:
    def test_valid(self):
        result = validate_credential_value("c1", "aws-key", AWS_VALUE)
        assert result == '{"AWS_ACCESS_KEY_ID":"A","AWS_SECRET_ACCESS_KEY":"B"}'

    def test_key_order_irrelevant(self):
        value = {"AWS_SECRET_ACCESS_KEY": "B", "AWS_ACCESS_KEY_ID": "A"}
        assert json.loads(validate_credential_value("c1", "aws-key", value)) == AWS_VALUE

    def test_extra_key(self):
        value = {**AWS_VALUE, "AWS_REGION": "us-east-1"}
        with pytest.raises(ShapeError, match="wrong size") as exc:
            validate_credential_value("c1", "aws-key", value)
        assert exc.value.name == "c1"

    def test_single_key(self):
        with pytest.raises(ShapeError, match="wrong size"):
            validate_credential_value("c1", "aws-key", {"AWS_ACCESS_KEY_ID": "A"})

    def test_misnamed_key(self):
        value = {"AWS_ACCESS_KEY_ID": "A", "AWS_SECRET_KEY": "B"}
        with pytest.raises(ShapeError, match="missing fields"):
            validate_credential_value("c1", "aws-key", value)

    def test_non_string_value(self):
        value = {"AWS_ACCESS_KEY_ID": 12345, "AWS_SECRET_ACCESS_KEY": "B"}
        with pytest.raises(ShapeError, match="non-string fields"):
            validate_credential_value("c1", "aws-key", value)

    def test_string_value_rejected(self):
        with pytest.raises(ShapeError, match="expected a map"):
            validate_credential_value("c1", "aws-key", json.dumps(AWS_VALUE))

    def test_message_names_credential_and_fields(self):
        with pytest.raises(ShapeError) as exc:
            validate_credential_value("prod-aws", "aws-key", None)
        assert "prod-aws" in exc.value.message
        assert "AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY" in exc.value.message


class TestGcpServiceAccount:
    def test_valid_returned_unchanged(self):
        payload = '{"a":1}'
        assert validate_credential_value("c2", "gcp-service-account", payload) is payload

    def test_formatting_preserved(self):
        payload = '{\n  "type": "service_account",\n  "project_id": "p"\n}\n'
        assert validate_credential_value("c2", "gcp-service-account", payload) == payload

    def test_invalid_json(self):
        with pytest.raises(ShapeError, match="not a valid JSON string"):
            validate_credential_value("c2", "gcp-service-account", "{not valid json")

    def test_empty_string(self):
        with pytest.raises(ShapeError):
            validate_credential_value("c2", "gcp-service-account", "")

    def test_nan_constant_rejected(self):
        with pytest.raises(ShapeError):
            validate_credential_value("c2", "gcp-service-account", '{"a": NaN}')

    def test_map_rejected(self):
        with pytest.raises(ShapeError, match="to be a JSON string"):
            validate_credential_value("c2", "gcp-service-account", {"a": 1})


class TestDispatch:
    def test_unknown_type(self):
        with pytest.raises(UnsupportedTypeError) as exc:
            validate_credential_value("c3", "azure-key", "x")
        assert exc.value.type == "azure-key"
        assert "aws-key or gcp-service-account" in exc.value.message

    def test_empty_type(self):
        with pytest.raises(UnsupportedTypeError):
            validate_credential_value("c3", "", AWS_VALUE)

    def test_supported_types_closed(self):
        assert {str(t) for t in CredentialType} == {"aws-key", "gcp-service-account"}
