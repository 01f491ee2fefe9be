"""Unit tests for response envelope construction."""

import json

import pytest

from hi_gateway.gateway.envelope import (
    build_envelope,
    envelope_to_json,
    failure,
    is_valid_json,
    success,
)
from hi_gateway.models.envelope import Status


class TestIsValidJson:
    """Test JSON object/array detection."""

    @pytest.mark.parametrize("text", ['{"a":1}', "  [1, 2]  ", "{}", "[]"])
    def test_objects_and_arrays(self, text):
        assert is_valid_json(text) is True

    @pytest.mark.parametrize(
        "text",
        [None, "", "bad input", "42", '"quoted"', "{not json}", "[1, 2", "true"],
    )
    def test_everything_else(self, text):
        assert is_valid_json(text) is False


class TestBuildEnvelope:
    """Test the output mapping."""

    def test_key_order(self):
        """Test keys appear in wire order."""
        output = build_envelope(failure("hi-gateway-consumer", "PARAM", "bad input"))

        assert list(output) == ["status", "output", "awsFunction", "apiXmlRequest", "apiXmlResponse"]
        assert list(output["output"]) == ["severity", "code", "reason"]

    def test_string_reason_kept(self):
        output = build_envelope(failure("hi-gateway-consumer", "PARAM", "bad input"))

        assert output["status"] == "FAILURE"
        assert output["output"] == {"severity": "ERROR", "code": "PARAM", "reason": "bad input"}
        assert output["awsFunction"] == "hi-gateway-consumer"
        assert output["apiXmlRequest"] is None
        assert output["apiXmlResponse"] is None

    def test_json_reason_embedded(self):
        """Test a JSON object reason is nested rather than encoded twice."""
        envelope = success("hi-gateway-consumer", '{"ihiNumber":"x","givenName":["a","b"]}', "<req/>", "<resp/>")

        output = build_envelope(envelope)

        assert output["status"] == "SUCCESS"
        assert output["output"]["severity"] == "INFO"
        assert output["output"]["code"] == ""
        assert output["output"]["reason"] == {"ihiNumber": "x", "givenName": ["a", "b"]}
        assert output["apiXmlRequest"] == "<req/>"
        assert output["apiXmlResponse"] == "<resp/>"


class TestEnvelopeToJson:
    """Test compact serialization."""

    def test_compact_and_nested(self):
        text = envelope_to_json(success("f", '{"a": 1}'))

        assert text.startswith('{"status":"SUCCESS","output":{"severity":"INFO","code":"","reason":{"a":1}}')
        assert json.loads(text)["awsFunction"] == "f"

    def test_non_ascii_preserved(self):
        text = envelope_to_json(failure("f", "PARAM", "Nguyễn not found"))

        assert "Nguyễn" in text


class TestFactories:
    """Test success and failure factories."""

    def test_failure_custom_severity(self):
        envelope = failure("f", "01439", "No IHI", severity="WARNING")

        assert envelope.status == Status.FAILURE
        assert envelope.severity == "WARNING"
        assert envelope.is_success is False

    def test_success(self):
        assert success("f", "{}").is_success is True
