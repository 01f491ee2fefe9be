"""Unit tests for WS-Security header construction."""

from datetime import datetime, timezone

import pytest

from hi_gateway.security.ws_security import (
    WSSE_NS,
    WSU_NS,
    build_security_header,
    create_timestamp,
    format_timestamp,
)


def _parse(value: str) -> datetime:
    return datetime.strptime(value, "%Y-%m-%dT%H:%M:%S.%fZ").replace(tzinfo=timezone.utc)


class TestFormatTimestamp:
    """Test xs:dateTime formatting."""

    def test_millisecond_precision(self):
        """Test microseconds are cut to milliseconds with a Z suffix."""
        value = datetime(2025, 1, 31, 23, 59, 59, 123456, tzinfo=timezone.utc)

        assert format_timestamp(value) == "2025-01-31T23:59:59.123Z"


class TestCreateTimestamp:
    """Test wsu:Timestamp creation."""

    def test_timestamp_structure(self):
        """Test Created and Expires children and a TS- identifier."""
        # Act
        timestamp = create_timestamp()

        # Assert
        assert timestamp.tag == f"{{{WSU_NS}}}Timestamp"
        assert timestamp.get(f"{{{WSU_NS}}}Id").startswith("TS-")
        assert [child.tag for child in timestamp] == [
            f"{{{WSU_NS}}}Created",
            f"{{{WSU_NS}}}Expires",
        ]

    def test_validity_window(self):
        """Test Expires lies the requested minutes after Created."""
        timestamp = create_timestamp(validity_minutes=10)

        created = _parse(timestamp[0].text)
        expires = _parse(timestamp[1].text)
        assert (expires - created).total_seconds() == pytest.approx(600, abs=1)

    def test_unique_ids(self):
        """Test every timestamp gets its own identifier."""
        first = create_timestamp().get(f"{{{WSU_NS}}}Id")
        second = create_timestamp().get(f"{{{WSU_NS}}}Id")

        assert first != second

    @pytest.mark.parametrize("minutes", [0, -5])
    def test_invalid_validity(self, minutes):
        """Test non-positive validity raises ValueError."""
        with pytest.raises(ValueError) as exc_info:
            create_timestamp(validity_minutes=minutes)

        assert "Invalid validity_minutes" in str(exc_info.value)


class TestBuildSecurityHeader:
    """Test wsse:Security header assembly."""

    def test_security_holds_timestamp(self):
        """Test the header wraps exactly one timestamp."""
        security = build_security_header()

        assert security.tag == f"{{{WSSE_NS}}}Security"
        assert len(security) == 1
        assert security[0].tag == f"{{{WSU_NS}}}Timestamp"
