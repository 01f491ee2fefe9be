"""Normalization of registry faults into FAILURE envelopes."""

import logging
from typing import Optional

from ..hi_transactions.operations import get_fault_descriptor
from ..hi_transactions.parsers import parse_service_messages
from ..models.envelope import ErrorCode, ResponseEnvelope, Severity
from ..utils.exceptions import ServiceFault
from .envelope import failure

logger = logging.getLogger(__name__)


def normalize_fault(
    operation_key: str,
    fault: ServiceFault,
    operation_name: str,
    raw_request: Optional[str] = None,
    raw_response: Optional[str] = None,
) -> ResponseEnvelope:
    """Turn a registry fault into a FAILURE envelope.

    The first structured service message supplies severity, code and reason
    when the operation has a registered fault shape and the fault detail
    decodes to at least one message. Otherwise the envelope carries severity
    ERROR, code FaultException and the raw SOAP response as reason.

    Args:
        operation_key: Key of the operation that faulted
        fault: The fault raised by the client
        operation_name: Name of the handling function
        raw_request: Raw SOAP request, attached verbatim
        raw_response: Raw SOAP response, attached verbatim

    Returns:
        FAILURE ResponseEnvelope
    """
    raw_response = raw_response if raw_response is not None else fault.raw_response

    descriptor = get_fault_descriptor(operation_key)
    if descriptor is not None and fault.detail is not None:
        messages = parse_service_messages(fault.detail, descriptor.namespace)
        if messages:
            first = messages[0]
            logger.info(f"{operation_key} fault: {first.severity} {first.code} {first.reason}")
            return failure(
                operation_name,
                code=first.code,
                reason=first.reason,
                severity=first.severity,
                raw_request=raw_request,
                raw_response=raw_response,
            )
    elif descriptor is None:
        logger.warning(f"No fault shape registered for {operation_key}, returning raw fault text")

    return failure(
        operation_name,
        code=ErrorCode.FAULT_EXCEPTION.value,
        reason=raw_response if raw_response is not None else fault.fault_string,
        severity=Severity.ERROR.value,
        raw_request=raw_request,
        raw_response=raw_response,
    )
