"""Response envelope model.

Every invocation, successful or not, is answered with one ResponseEnvelope.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Status(str, Enum):
    """Overall invocation outcome."""

    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"


class Severity(str, Enum):
    """Severity values produced locally.

    Structured service messages carry their own severity text, which is
    passed through unchanged.
    """

    INFO = "INFO"
    ERROR = "ERROR"


class ErrorCode(str, Enum):
    """Codes produced locally.

    Structured service messages carry their own code, which is passed through
    unchanged.
    """

    NONE = ""
    PARAM = "PARAM"
    CERTIFICATE = "CERTIFICATE"
    FAULT_EXCEPTION = "FaultException"


@dataclass
class ResponseEnvelope:
    """Uniform outcome of one invocation.

    Attributes:
        status: SUCCESS or FAILURE
        severity: Envelope severity text
        code: Envelope code text
        reason: Diagnostic string or serialized JSON fragment
        operation_name: Name of the function that handled the invocation
        raw_request: Raw SOAP request, when one was sent
        raw_response: Raw SOAP response, when one was received
    """

    status: Status
    severity: str
    code: str
    reason: str
    operation_name: str
    raw_request: Optional[str] = None
    raw_response: Optional[str] = None

    @property
    def is_success(self) -> bool:
        """Check if the invocation succeeded."""
        return self.status == Status.SUCCESS
