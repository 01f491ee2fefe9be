"""Audit trail functionality for HI Gateway.

This module provides structured audit logging for client provisioning and
registry transactions.
"""

import time
import uuid
from typing import Any, Dict, Optional

from .logger import get_logger

logger = get_logger(__name__)


def log_audit_event(event_type: str, details: Dict[str, Any]) -> None:
    """Log an audit trail event.

    Creates a structured audit log entry. Audit events are logged at INFO level
    for successful operations and ERROR level for failures.

    Args:
        event_type: Type of event (e.g., "CLIENT_PROVISIONED", "INVOCATION_COMPLETED")
        details: Dictionary with event details. Common fields include:
                - status: "success" or "failure"
                - operation: Operation key
                - endpoint: Registry endpoint URI
                - duration: Operation duration in seconds
                - error_message: Error details (if status is failure)
                - correlation_id: Optional correlation ID for related events

    Example:
        >>> log_audit_event("CLIENT_PROVISIONED", {
        ...     "status": "success",
        ...     "operation": "ConsumerSearchIHI",
        ...     "endpoint": "https://www5.medicareaustralia.gov.au/cert/soap/services/",
        ... })
    """
    details = dict(details)
    if "timestamp" not in details:
        details["timestamp"] = time.time()

    if "correlation_id" not in details:
        details["correlation_id"] = str(uuid.uuid4())

    message_parts = [f"AUDIT [{event_type}]"]

    field_order = [
        "status",
        "operation",
        "endpoint",
        "duration",
        "error_message",
        "correlation_id",
    ]

    for field in field_order:
        if field in details:
            value = details[field]
            if field == "duration" and isinstance(value, (int, float)):
                message_parts.append(f"{field}={value:.2f}s")
            else:
                message_parts.append(f"{field}={value}")

    for key, value in details.items():
        if key not in field_order and key != "timestamp":
            message_parts.append(f"{key}={value}")

    audit_message = " | ".join(message_parts)

    status = details.get("status", "unknown")
    if status == "failure":
        logger.error(audit_message)
    else:
        logger.info(audit_message)


def log_transaction(
    transaction_type: str,
    request: str,
    response: Optional[str],
    status: str = "success",
) -> None:
    """Log a complete registry transaction with request and response.

    The header line is logged at INFO level; the full SOAP envelopes at DEBUG.

    Args:
        transaction_type: Operation key (e.g., "ConsumerSearchIHI")
        request: Full request SOAP envelope
        response: Full response SOAP envelope, None when no response arrived
        status: Transaction status ("success", "fault" or "failure")

    Example:
        >>> log_transaction("ConsumerSearchIHI", request_xml, response_xml, "success")
    """
    correlation_id = str(uuid.uuid4())
    response_text = response or ""

    logger.info(
        f"TRANSACTION [{transaction_type}] | "
        f"status={status} | "
        f"correlation_id={correlation_id} | "
        f"request_size={len(request)} bytes | "
        f"response_size={len(response_text)} bytes"
    )

    logger.debug(
        f"TRANSACTION REQUEST [{transaction_type}] | "
        f"correlation_id={correlation_id}\n"
        f"{request}"
    )

    logger.debug(
        f"TRANSACTION RESPONSE [{transaction_type}] | "
        f"correlation_id={correlation_id}\n"
        f"{response_text}"
    )
