"""Response parsers for registry transactions (results and SOAP faults)."""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from lxml import etree

from ..utils.exceptions import ServiceFault

logger = logging.getLogger(__name__)

# SOAP namespaces
SOAP_11_NS = "http://schemas.xmlsoap.org/soap/envelope/"


@dataclass
class ServiceMessage:
    """One structured message from a registry fault or result.

    Attributes:
        code: Registry message code (e.g., "01439")
        severity: Registry severity text (e.g., "ERROR", "WARNING")
        reason: Human-readable reason
        details: Optional additional detail text

    Example:
        >>> messages = parse_service_messages(fault.detail, namespace)
        >>> print(messages[0].code, messages[0].reason)
        01439 No IHI found
    """

    code: str
    severity: str
    reason: str
    details: Optional[str] = None


def parse_envelope(response_xml: Union[str, bytes]) -> etree._Element:
    """Parse a SOAP 1.1 envelope and return its Body element.

    Args:
        response_xml: Raw SOAP envelope

    Returns:
        The soap:Body element

    Raises:
        ValueError: If the XML is malformed or has no SOAP body
    """
    try:
        if isinstance(response_xml, bytes):
            root = etree.fromstring(response_xml)
        else:
            root = etree.fromstring(response_xml.encode("utf-8"))
    except etree.XMLSyntaxError as e:
        raise ValueError(f"Invalid SOAP response XML: {e}. Response is not valid XML.") from e

    body = root.find(f"{{{SOAP_11_NS}}}Body")
    if body is None:
        raise ValueError("No SOAP Body element found in response.")
    return body


def find_fault(body: etree._Element, raw_response: Optional[str] = None) -> Optional[ServiceFault]:
    """Build a ServiceFault from a SOAP 1.1 Fault in the body, if any.

    Args:
        body: soap:Body element
        raw_response: Raw response text attached to the fault

    Returns:
        ServiceFault, or None when the body carries no fault
    """
    fault_elem = body.find(f"{{{SOAP_11_NS}}}Fault")
    if fault_elem is None:
        return None

    faultcode_elem = fault_elem.find("faultcode")
    fault_code = faultcode_elem.text if faultcode_elem is not None and faultcode_elem.text else "Unknown"

    faultstring_elem = fault_elem.find("faultstring")
    fault_string = (
        faultstring_elem.text
        if faultstring_elem is not None and faultstring_elem.text
        else "No fault message provided"
    )

    detail_elem = fault_elem.find("detail")

    logger.error(f"SOAP Fault received - Code: {fault_code}, Message: {fault_string}")
    return ServiceFault(
        fault_code=fault_code,
        fault_string=fault_string,
        detail=detail_elem,
        raw_response=raw_response,
    )


def _child_text(element: etree._Element, namespace: str, name: str) -> Optional[str]:
    child = element.find(f"{{{namespace}}}{name}")
    if child is None or child.text is None:
        return None
    return child.text.strip()


def parse_service_messages(detail: Optional[etree._Element], namespace: str) -> list[ServiceMessage]:
    """Decode the service messages of a fault detail.

    Only ``serviceMessage`` elements in ``namespace`` are recognised.

    Args:
        detail: Fault detail element, may be None
        namespace: Namespace of the ``serviceMessages`` shape

    Returns:
        Messages in document order; empty when none can be decoded
    """
    if detail is None:
        return []

    messages = []
    for message_elem in detail.iter(f"{{{namespace}}}serviceMessage"):
        messages.append(
            ServiceMessage(
                code=_child_text(message_elem, namespace, "code") or "",
                severity=_child_text(message_elem, namespace, "severity") or "",
                reason=_child_text(message_elem, namespace, "reason") or "",
                details=_child_text(message_elem, namespace, "details"),
            )
        )

    logger.debug(f"Decoded {len(messages)} service messages")
    return messages


def element_to_dict(element: etree._Element) -> Any:
    """Convert an element into JSON-ready data keyed by local names.

    Leaf elements become their text, elements with children become dicts and
    repeated children become lists. Attributes are ignored.

    Example:
        >>> element_to_dict(etree.fromstring("<r><a>1</a><a>2</a><b>x</b></r>"))
        {'a': ['1', '2'], 'b': 'x'}
    """
    children = [child for child in element if isinstance(child.tag, str)]
    if not children:
        return (element.text or "").strip()

    result: dict[str, Any] = {}
    for child in children:
        name = etree.QName(child).localname
        value = element_to_dict(child)
        if name in result:
            existing = result[name]
            if isinstance(existing, list):
                existing.append(value)
            else:
                result[name] = [existing, value]
        else:
            result[name] = value
    return result


def find_result(body: etree._Element, result_field: str) -> Optional[etree._Element]:
    """Find the result element of a response body by local name."""
    for element in body.iter():
        if isinstance(element.tag, str) and etree.QName(element).localname == result_field:
            return element
    return None
