"""Custom exception classes for HI Gateway.

All exceptions inherit from HIGatewayError to allow catching all custom exceptions.
Every class carries the envelope ``code`` it is reported under when it reaches
an entry point.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import requests


class HIGatewayError(Exception):
    """Base exception for all HI Gateway custom exceptions."""

    code: str = ""


class ValidationError(HIGatewayError):
    """Raised when caller input is missing or ambiguous.

    Examples:
        - Missing internalMode, internalUserId or internalHPIO
        - Unrecognised internalMode for an entry surface
        - Request without the minimum search criteria
    """

    code = "PARAM"


class ConfigurationError(HIGatewayError):
    """Raised when local configuration loading or validation fails.

    Examples:
        - Invalid configuration file format
        - Configuration value out of range
    """

    pass


class TransportError(HIGatewayError):
    """Raised when network/transport issues occur talking to the registry.

    Examples:
        - Connection timeout
        - TLS handshake failure
        - Network unreachable
    """

    pass


class ProvisioningError(HIGatewayError):
    """Base exception for client provisioning failures.

    Examples:
        - Parameter store lookup failure
        - Registry endpoint not reachable
        - Client certificate missing or expired
    """

    code = "CERTIFICATE"


class ConfigUnavailableError(ProvisioningError):
    """Raised when a required remote configuration parameter cannot be resolved.

    Examples:
        - Parameter store call rejected (access denied, throttled)
        - Parameter missing from the combined lookup response
    """

    pass


class EndpointUnavailableError(ProvisioningError):
    """Raised when the registry liveness probe does not succeed.

    Examples:
        - Non-200 response from the endpoint URI
        - Connection refused
    """

    pass


class CertificateError(ProvisioningError):
    """Raised when the client certificate cannot be used.

    Examples:
        - Certificate object not retrievable
        - Wrong PKCS#12 passphrase
        - Certificate past its not-after date
    """

    pass


class CertificateUnavailableError(CertificateError):
    """Raised when the certificate blob is absent, empty or cannot be loaded."""

    pass


class CertificateExpiredError(CertificateError):
    """Raised when certificate has expired.

    This is a specific case of certificate failure for expired certificates.
    """

    pass


class UnknownOperationError(ProvisioningError):
    """Raised when an operation key has no registered descriptor."""

    pass


class ServiceFault(HIGatewayError):
    """Raised when the registry answers with a SOAP fault.

    Attributes:
        fault_code: SOAP faultcode text
        fault_string: SOAP faultstring text
        detail: The fault ``detail`` element, if present
        raw_response: The raw SOAP response body

    Example:
        >>> try:
        ...     client.invoke(request)
        ... except ServiceFault as fault:
        ...     print(fault.fault_string)
    """

    code = "FaultException"

    def __init__(
        self,
        fault_code: str,
        fault_string: str,
        detail: Optional[object] = None,
        raw_response: Optional[str] = None,
    ) -> None:
        super().__init__(fault_string or fault_code)
        self.fault_code = fault_code
        self.fault_string = fault_string
        self.detail = detail
        self.raw_response = raw_response


class ErrorCategory(Enum):
    """Error categorization used when reporting a failure.

    Attributes:
        INPUT: The caller must fix the request (PARAM)
        UNAVAILABLE: The system cannot serve the request right now
        REJECTED: The registry refused the request
        INTERNAL: Any other failure

    Example:
        >>> category = categorize_error(ValidationError("Missing internalMode"))
        >>> category == ErrorCategory.INPUT
        True
    """

    INPUT = "INPUT"
    UNAVAILABLE = "UNAVAILABLE"
    REJECTED = "REJECTED"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorInfo:
    """Structured error information for a FAILURE envelope.

    Attributes:
        category: Error category
        error_type: Exception class name (e.g., "CertificateExpiredError")
        severity: Envelope severity
        code: Envelope code (PARAM, CERTIFICATE, FaultException or empty)
        message: Caller-facing reason
        remediation: Actionable guidance for operators
        technical_details: Optional technical details for debugging

    Example:
        >>> info = create_error_info(CertificateExpiredError("expired"))
        >>> info.code
        'CERTIFICATE'
    """

    category: ErrorCategory
    error_type: str
    severity: str
    code: str
    message: str
    remediation: str
    technical_details: Optional[str] = None


def categorize_error(exception: Exception) -> ErrorCategory:
    """Categorize exception for reporting.

    Args:
        exception: The exception to categorize

    Returns:
        ErrorCategory describing who has to act on the failure

    Example:
        >>> categorize_error(EndpointUnavailableError("down"))
        <ErrorCategory.UNAVAILABLE: 'UNAVAILABLE'>
    """
    if isinstance(exception, ValidationError):
        return ErrorCategory.INPUT

    if isinstance(exception, ServiceFault):
        return ErrorCategory.REJECTED

    if isinstance(exception, (ProvisioningError, TransportError)):
        return ErrorCategory.UNAVAILABLE

    if isinstance(exception, (requests.ConnectionError, requests.Timeout)):
        return ErrorCategory.UNAVAILABLE

    return ErrorCategory.INTERNAL


def create_error_info(exception: Exception) -> ErrorInfo:
    """Create structured error information from exception.

    Args:
        exception: Exception that occurred

    Returns:
        ErrorInfo with envelope fields and remediation guidance
    """
    category = categorize_error(exception)
    code = exception.code if isinstance(exception, HIGatewayError) else ""

    technical_details = None
    if exception.__cause__ is not None:
        technical_details = f"Caused by: {type(exception.__cause__).__name__}: {exception.__cause__}"

    return ErrorInfo(
        category=category,
        error_type=type(exception).__name__,
        severity="ERROR",
        code=code,
        message=str(exception),
        remediation=_generate_remediation(exception, category),
        technical_details=technical_details,
    )


def _generate_remediation(exception: Exception, category: ErrorCategory) -> str:
    """Generate actionable remediation message for an error.

    Args:
        exception: Exception that occurred
        category: Error category

    Returns:
        Actionable remediation message
    """
    if isinstance(exception, CertificateExpiredError):
        return (
            "Client certificate has expired. Upload a renewed PKCS#12 file to the "
            "certificate bucket and update the Certificate/Password parameter."
        )

    if isinstance(exception, CertificateUnavailableError):
        return (
            "Client certificate could not be loaded. Check Certificate/S3Bucket, "
            "Certificate/S3ObjectKey and Certificate/Password parameters."
        )

    if isinstance(exception, ConfigUnavailableError):
        return (
            "Parameter store lookup failed. Check that every parameter under the "
            "configured prefix exists and the function role may read it."
        )

    if isinstance(exception, UnknownOperationError):
        return "No operation is registered under this key. Check the surface mode tables."

    if isinstance(exception, EndpointUnavailableError):
        return "Registry endpoint is not reachable. Retry later or check the Uri parameter."

    if category == ErrorCategory.INPUT:
        return "Check all input fields and resubmit."

    if category == ErrorCategory.REJECTED:
        return "The registry rejected the request. See the service message for details."

    return "Unexpected failure. Check the function logs for the full traceback."
