"""WS-Security header construction for registry transactions."""

import logging
import uuid
from datetime import datetime, timedelta, timezone

from lxml import etree

logger = logging.getLogger(__name__)

WSSE_NS = "http://docs.oasis-open.org/wss/2004/01/oasis-200401-wss-wssecurity-secext-1.0.xsd"
WSU_NS = "http://docs.oasis-open.org/wss/2004/01/oasis-200401-wss-wssecurity-utility-1.0.xsd"

etree.register_namespace("wsse", WSSE_NS)
etree.register_namespace("wsu", WSU_NS)


def format_timestamp(value: datetime) -> str:
    """Format a UTC datetime as xs:dateTime with millisecond precision.

    Args:
        value: Timezone-aware UTC datetime

    Returns:
        Timestamp such as ``2025-01-31T23:59:59.123Z``
    """
    return value.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


def create_timestamp(validity_minutes: int = 5) -> etree._Element:
    """Create WS-Security timestamp element.

    Args:
        validity_minutes: How long the timestamp is valid (in minutes)

    Returns:
        lxml element for wsu:Timestamp

    Raises:
        ValueError: If validity_minutes is not positive
    """
    if validity_minutes <= 0:
        raise ValueError(
            f"Invalid validity_minutes: {validity_minutes}. "
            "Must be a positive integer."
        )

    now = datetime.now(timezone.utc)
    expires = now + timedelta(minutes=validity_minutes)
    timestamp_id = f"TS-{uuid.uuid4()}"

    timestamp = etree.Element(
        f"{{{WSU_NS}}}Timestamp",
        attrib={f"{{{WSU_NS}}}Id": timestamp_id},
    )
    created = etree.SubElement(timestamp, f"{{{WSU_NS}}}Created")
    created.text = format_timestamp(now)
    expires_elem = etree.SubElement(timestamp, f"{{{WSU_NS}}}Expires")
    expires_elem.text = format_timestamp(expires)

    logger.debug(f"Created timestamp {timestamp_id} valid until {expires_elem.text}")
    return timestamp


def build_security_header(validity_minutes: int = 5) -> etree._Element:
    """Build a wsse:Security header holding a timestamp.

    Args:
        validity_minutes: Timestamp validity window

    Returns:
        lxml element for wsse:Security with soap mustUnderstand unset
    """
    security = etree.Element(f"{{{WSSE_NS}}}Security")
    security.append(create_timestamp(validity_minutes))
    return security
