"""Flask application for the mock registry endpoint.

Answers the liveness GET on ``/`` and SOAP POSTs on ``/<service>/<version>``
for every registered operation. A successful call echoes the request's
top-level fields inside the operation's result element. A family name of
``FAULT`` produces a service-message fault; ``RAWFAULT`` produces a fault
without a structured detail.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from flask import Flask, Response, jsonify, request
from lxml import etree

from ..hi_transactions.operations import OPERATIONS, OperationDescriptor, get_fault_descriptor
from ..hi_transactions.parsers import SOAP_11_NS, parse_envelope

SERVICE_MESSAGE_FAULT_TRIGGER = "FAULT"
RAW_FAULT_TRIGGER = "RAWFAULT"

MOCK_SERVICE_MESSAGE = {
    "code": "01439",
    "severity": "ERROR",
    "reason": "No IHI found for the supplied search criteria.",
}

_server_start_time: Optional[datetime] = None
_request_count: int = 0

app = Flask(__name__)

logger = logging.getLogger("hi_gateway.mock_server")


def _services() -> dict[str, OperationDescriptor]:
    return {d.binding.path: d for d in OPERATIONS.values()}


def _soap(body_xml: str) -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<soap:Envelope xmlns:soap="{SOAP_11_NS}">'
        f"<soap:Body>{body_xml}</soap:Body>"
        "</soap:Envelope>"
    )


def generate_soap_fault(
    faultcode: str,
    faultstring: str,
    detail_xml: Optional[str] = None,
    http_status: int = 500,
) -> tuple[Response, int]:
    """Generate SOAP 1.1 fault response.

    Args:
        faultcode: SOAP fault code (e.g., 'soap:Client', 'soap:Server')
        faultstring: Human-readable fault description
        detail_xml: Optional serialized content of the ``detail`` element
        http_status: HTTP status code (default: 500)

    Returns:
        Tuple of (Response object, HTTP status code)
    """
    detail = f"<detail>{detail_xml}</detail>" if detail_xml else ""
    fault_xml = _soap(
        "<soap:Fault>"
        f"<faultcode>{faultcode}</faultcode>"
        f"<faultstring>{faultstring}</faultstring>"
        f"{detail}"
        "</soap:Fault>"
    )

    logger.warning(f"SOAP Fault generated: {faultcode} - {faultstring}")
    return Response(fault_xml, mimetype="text/xml; charset=utf-8"), http_status


def service_messages_xml(namespace: str, code: str, severity: str, reason: str) -> str:
    """Serialized ``serviceMessages`` holding one message."""
    return (
        f'<serviceMessages xmlns="{namespace}">'
        f"<highestSeverity>{severity}</highestSeverity>"
        "<serviceMessage>"
        f"<code>{code}</code><severity>{severity}</severity><reason>{reason}</reason>"
        "</serviceMessage>"
        "</serviceMessages>"
    )


def _family_names(request_elem: etree._Element) -> set[str]:
    return {
        (elem.text or "").strip().upper()
        for elem in request_elem.iter()
        if isinstance(elem.tag, str) and etree.QName(elem).localname == "familyName"
    }


def build_result(descriptor: OperationDescriptor, request_elem: etree._Element) -> str:
    """Canned response body echoing the request's top-level fields."""
    namespace = descriptor.binding.namespace
    response = etree.Element(f"{{{namespace}}}{descriptor.binding.request_element}Response", nsmap={None: namespace})
    result = etree.SubElement(response, f"{{{namespace}}}{descriptor.result_field}")
    for child in list(request_elem):
        if isinstance(child.tag, str):
            result.append(child)
    messages = etree.SubElement(result, f"{{{namespace}}}serviceMessages")
    etree.SubElement(messages, f"{{{namespace}}}highestSeverity").text = "INFO"
    return etree.tostring(response, encoding="unicode")


@app.before_request
def log_request():
    """Log all incoming requests."""
    global _request_count
    _request_count += 1

    logger.info(
        f"Request #{_request_count}: {request.method} {request.path} "
        f"(Content-Length: {request.content_length or 0})"
    )
    if request.headers.get("SOAPAction"):
        logger.debug(f"SOAPAction: {request.headers['SOAPAction']}")


@app.route("/", methods=["GET"])
def liveness():
    """Liveness probe answered with 200."""
    return Response("OK", mimetype="text/plain"), 200


@app.route("/health", methods=["GET"])
def health_check():
    """Health check endpoint with uptime and request count."""
    uptime_seconds = 0
    if _server_start_time:
        uptime_seconds = int((datetime.now(timezone.utc) - _server_start_time).total_seconds())

    return jsonify({
        "status": "healthy",
        "services": sorted(_services()),
        "uptime_seconds": uptime_seconds,
        "request_count": _request_count,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }), 200


@app.route("/<service>/<version>", methods=["POST"])
def soap_endpoint(service: str, version: str):
    """Answer a registry operation."""
    descriptor = _services().get(f"{service}/{version}")
    if descriptor is None:
        return generate_soap_fault("soap:Client", f"Unknown service {service}/{version}", http_status=404)

    try:
        body = parse_envelope(request.get_data())
    except ValueError as e:
        return generate_soap_fault("soap:Client", f"Malformed SOAP request: {e}", http_status=400)

    request_elem = next((child for child in body if isinstance(child.tag, str)), None)
    if request_elem is None:
        return generate_soap_fault("soap:Client", "Empty SOAP body", http_status=400)

    family_names = _family_names(request_elem)
    if RAW_FAULT_TRIGGER in family_names:
        return generate_soap_fault("soap:Server", "An internal error occurred in the mock registry")

    if SERVICE_MESSAGE_FAULT_TRIGGER in family_names:
        fault_descriptor = get_fault_descriptor(descriptor.key)
        detail = service_messages_xml(fault_descriptor.namespace, **MOCK_SERVICE_MESSAGE)
        return generate_soap_fault("soap:Client", "Service message fault", detail_xml=detail)

    logger.info(f"Answering {descriptor.key}")
    return Response(_soap(build_result(descriptor, request_elem)), mimetype="text/xml; charset=utf-8"), 200


def run_server(host: str = "127.0.0.1", port: int = 8080, debug: bool = False) -> None:
    """Run the Flask mock registry.

    Args:
        host: Host address (default: 127.0.0.1)
        port: Port number (default: 8080)
        debug: Enable debug mode (default: False)
    """
    global _server_start_time
    _server_start_time = datetime.now(timezone.utc)

    logger.info(f"Starting mock registry on http://{host}:{port}")
    logger.info(f"Point the Uri parameter at http://{host}:{port}/")
    app.run(host=host, port=port, debug=debug, use_reloader=False)
