"""SOAP client for registry operations.

Builds the SOAP 1.1 envelope for one operation (product, user, organisation
and WS-Security timestamp header elements, detached signature over them),
posts it over TLS 1.2+ with the client certificate and turns the response
into a result element or a ServiceFault. The raw request and response are kept
on the client for audit.
"""

import logging
import os
import ssl
import tempfile
import time
from threading import Lock
from typing import Any, Optional

import requests
from lxml import etree
from requests.adapters import HTTPAdapter
from urllib3.util.ssl_ import create_urllib3_context

from ..config.schema import TransportConfig
from ..logging_audit import log_transaction
from ..models.certificates import CertificateBundle
from ..models.identity import Product, QualifiedId
from ..security.certificate_manager import convert_key_to_pem, convert_to_pem
from ..security.signer import HeaderSigner
from ..security.ws_security import WSU_NS, build_security_header
from ..utils.exceptions import TransportError
from .operations import OperationDescriptor, get_fault_descriptor
from .parsers import SOAP_11_NS, find_fault, find_result, parse_envelope
from .serialization import to_element

logger = logging.getLogger(__name__)

etree.register_namespace("soap", SOAP_11_NS)

HEADER_IDS = ("product", "user", "hpio")

_sessions: dict[str, requests.Session] = {}
_sessions_lock = Lock()


class TLS12Adapter(HTTPAdapter):
    """Force TLS 1.2+ and present the client certificate.

    The certificate and key are written to short-lived PEM files because
    ``SSLContext.load_cert_chain`` only reads from disk.

    Example:
        >>> session = requests.Session()
        >>> session.mount('https://', TLS12Adapter(bundle))
    """

    def __init__(self, cert_bundle: Optional[CertificateBundle] = None, **kwargs: Any) -> None:
        self.cert_bundle = cert_bundle
        super().__init__(**kwargs)

    def init_poolmanager(self, *args, **kwargs):
        """Initialize connection pool with TLS 1.2+ enforcement.

        Args:
            *args: Positional arguments for pool manager
            **kwargs: Keyword arguments for pool manager

        Returns:
            Initialized pool manager with TLS 1.2+ context
        """
        context = create_urllib3_context()
        context.minimum_version = ssl.TLSVersion.TLSv1_2
        if self.cert_bundle is not None:
            _load_client_certificate(context, self.cert_bundle)
        kwargs['ssl_context'] = context
        return super().init_poolmanager(*args, **kwargs)


def _load_client_certificate(context: ssl.SSLContext, bundle: CertificateBundle) -> None:
    cert_pem = convert_to_pem(bundle.certificate) + b"".join(convert_to_pem(c) for c in bundle.chain)
    key_pem = convert_key_to_pem(bundle.private_key)

    paths = []
    try:
        for content in (cert_pem, key_pem):
            handle, path = tempfile.mkstemp(suffix=".pem")
            paths.append(path)
            with os.fdopen(handle, "wb") as f:
                f.write(content)
        context.load_cert_chain(certfile=paths[0], keyfile=paths[1])
    finally:
        for path in paths:
            os.unlink(path)


def get_session(cert_bundle: CertificateBundle, verify_tls: bool = True) -> requests.Session:
    """Return the process-wide session for a client certificate.

    Sessions are cached by certificate thumbprint so warm invocations reuse
    their connection pool.

    Args:
        cert_bundle: Client certificate bundle
        verify_tls: Whether to verify the registry's server certificate

    Returns:
        requests.Session with a TLS12Adapter mounted for https
    """
    thumbprint = cert_bundle.info.thumbprint
    with _sessions_lock:
        session = _sessions.get(thumbprint)
        if session is None:
            session = requests.Session()
            session.mount('https://', TLS12Adapter(cert_bundle))
            _sessions[thumbprint] = session
            logger.debug(f"Created registry session for certificate {thumbprint}")
        session.verify = verify_tls
        return session


def clear_sessions() -> None:
    """Close and forget every cached session."""
    with _sessions_lock:
        for session in _sessions.values():
            session.close()
        _sessions.clear()


class RegistryClient:
    """Client handle bound to one operation, endpoint, identity set and certificate.

    A handle serves exactly one invocation.

    Attributes:
        descriptor: Operation the handle is bound to
        endpoint_uri: Registry endpoint URI
        product: Product identity of the operation's release
        user: Acting user identity
        hpio: Organisation identity, None when not supplied
        cert_bundle: Client certificate bundle
        transport: Transport configuration (timeouts, TLS verification)
        soap_request: Raw SOAP request of the invocation, once sent
        soap_response: Raw SOAP response of the invocation, once received

    Example:
        >>> client = RegistryClient(descriptor, uri, product, user, hpio, bundle, config.transport)
        >>> result = client.invoke(request, action="basicMedicareSearch")
        >>> client.soap_request.startswith("<soap:Envelope")
        True
    """

    def __init__(
        self,
        descriptor: OperationDescriptor,
        endpoint_uri: str,
        product: Product,
        user: QualifiedId,
        hpio: Optional[QualifiedId],
        cert_bundle: CertificateBundle,
        transport: TransportConfig,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.descriptor = descriptor
        self.endpoint_uri = endpoint_uri
        self.product = product
        self.user = user
        self.hpio = hpio
        self.cert_bundle = cert_bundle
        self.transport = transport
        self.session = session or get_session(cert_bundle, transport.verify_tls)
        self.soap_request: Optional[str] = None
        self.soap_response: Optional[str] = None
        self._invoked = False

        if not transport.verify_tls:
            logger.warning(
                "TLS certificate verification is DISABLED. "
                "This should only be used against a local mock registry."
            )

    @property
    def url(self) -> str:
        """Full URL of the operation's service."""
        return f"{self.endpoint_uri.rstrip('/')}/{self.descriptor.binding.path}"

    def _header_namespace(self) -> str:
        fault_descriptor = get_fault_descriptor(self.descriptor.key)
        return fault_descriptor.namespace if fault_descriptor else self.descriptor.binding.namespace

    def build_envelope(self, request: Any) -> etree._Element:
        """Build the signed SOAP envelope for a request.

        Args:
            request: Typed request of the bound operation

        Returns:
            soap:Envelope element
        """
        binding = self.descriptor.binding
        header_ns = self._header_namespace()

        envelope = etree.Element(f"{{{SOAP_11_NS}}}Envelope")
        header = etree.SubElement(envelope, f"{{{SOAP_11_NS}}}Header")
        body = etree.SubElement(envelope, f"{{{SOAP_11_NS}}}Body")

        references = []
        for header_id, identity in zip(HEADER_IDS, (self.product, self.user, self.hpio)):
            if identity is None:
                continue
            element = to_element(identity, header_id, header_ns)
            element.set(f"{{{WSU_NS}}}Id", header_id)
            header.append(element)
            references.append(f"#{header_id}")

        security = build_security_header(self.transport.timestamp_validity_minutes)
        header.append(security)
        timestamp = security[0]
        references.append(f"#{timestamp.get(f'{{{WSU_NS}}}Id')}")

        body.append(to_element(request, binding.request_element, binding.namespace))

        signature = HeaderSigner(self.cert_bundle).sign(envelope, references)
        signature_block = etree.SubElement(header, f"{{{header_ns}}}signature")
        signature_block.append(signature)

        return envelope

    def invoke(self, request: Any, action: Optional[str] = None) -> etree._Element:
        """Send the request and return the operation's result element.

        Args:
            request: Typed request of the bound operation
            action: Variant action, None for the operation's default action

        Returns:
            Result element named by the descriptor's result field

        Raises:
            ServiceFault: If the registry answers with a SOAP fault
            TransportError: If the request cannot be sent or the HTTP status
                signals failure without a fault body
            ValueError: If the response is not a SOAP envelope or lacks the
                result element
        """
        if self._invoked:
            raise TransportError("This client handle has already been used. Provision a new client.")
        self._invoked = True

        key = self.descriptor.key
        self.soap_request = etree.tostring(self.build_envelope(request), encoding="unicode")
        headers = {
            "Content-Type": "text/xml; charset=utf-8",
            "SOAPAction": f'"{self.descriptor.binding.soap_action(action)}"',
        }

        logger.info(f"Invoking {key} at {self.url}")
        start_time = time.time()
        try:
            response = self.session.post(
                self.url,
                data=self.soap_request.encode("utf-8"),
                headers=headers,
                timeout=(self.transport.timeout_connect, self.transport.timeout_read),
            )
        except requests.RequestException as e:
            log_transaction(key, self.soap_request, None, "failure")
            raise TransportError(f"Registry request failed: {e}") from e

        self.soap_response = response.text
        logger.info(f"{key} answered HTTP {response.status_code} in {time.time() - start_time:.2f}s")

        try:
            body = parse_envelope(response.content)
        except ValueError:
            log_transaction(key, self.soap_request, self.soap_response, "failure")
            if response.status_code >= 400:
                raise TransportError(
                    f"Registry returned HTTP {response.status_code}: {response.reason}"
                ) from None
            raise

        fault = find_fault(body, self.soap_response)
        if fault is not None:
            log_transaction(key, self.soap_request, self.soap_response, "fault")
            raise fault

        if response.status_code >= 400:
            log_transaction(key, self.soap_request, self.soap_response, "failure")
            raise TransportError(f"Registry returned HTTP {response.status_code}: {response.reason}")

        result = find_result(body, self.descriptor.result_field)
        if result is None:
            log_transaction(key, self.soap_request, self.soap_response, "failure")
            raise ValueError(f"Response does not contain {self.descriptor.result_field}.")

        log_transaction(key, self.soap_request, self.soap_response, "success")
        return result
