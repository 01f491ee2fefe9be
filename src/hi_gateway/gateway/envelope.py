"""Response envelope construction.

Every invocation answers with the same JSON shape. A ``reason`` that already
holds a JSON object or array is embedded as nested JSON so service results are
never encoded twice.
"""

import json
from typing import Any, Optional

from ..models.envelope import ErrorCode, ResponseEnvelope, Severity, Status


def is_valid_json(text: Optional[str]) -> bool:
    """Check whether text is a JSON object or array.

    Only trimmed text delimited by ``{}`` or ``[]`` that parses is accepted;
    bare scalars such as ``"bad input"`` or ``42`` are not.

    Example:
        >>> is_valid_json(' {"a":1} ')
        True
        >>> is_valid_json("bad input")
        False
    """
    if not text:
        return False
    trimmed = text.strip()
    if not (
        (trimmed.startswith("{") and trimmed.endswith("}"))
        or (trimmed.startswith("[") and trimmed.endswith("]"))
    ):
        return False
    try:
        json.loads(trimmed)
    except ValueError:
        return False
    return True


def build_envelope(envelope: ResponseEnvelope) -> dict[str, Any]:
    """Build the output mapping for an envelope, keys in wire order."""
    reason: Any = envelope.reason
    if is_valid_json(reason):
        reason = json.loads(reason)

    return {
        "status": Status(envelope.status).value,
        "output": {
            "severity": envelope.severity,
            "code": envelope.code,
            "reason": reason,
        },
        "awsFunction": envelope.operation_name,
        "apiXmlRequest": envelope.raw_request,
        "apiXmlResponse": envelope.raw_response,
    }


def envelope_to_json(envelope: ResponseEnvelope) -> str:
    """Serialize an envelope as compact JSON.

    Example:
        >>> envelope_to_json(failure("hi-consumer", "PARAM", "bad input"))
        '{"status":"FAILURE","output":{"severity":"ERROR","code":"PARAM","reason":"bad input"},...}'
    """
    return json.dumps(build_envelope(envelope), separators=(",", ":"), ensure_ascii=False)


def success(
    operation_name: str,
    reason: str,
    raw_request: Optional[str] = None,
    raw_response: Optional[str] = None,
) -> ResponseEnvelope:
    """SUCCESS envelope with severity INFO and an empty code."""
    return ResponseEnvelope(
        status=Status.SUCCESS,
        severity=Severity.INFO.value,
        code=ErrorCode.NONE.value,
        reason=reason,
        operation_name=operation_name,
        raw_request=raw_request,
        raw_response=raw_response,
    )


def failure(
    operation_name: str,
    code: str,
    reason: str,
    severity: str = Severity.ERROR.value,
    raw_request: Optional[str] = None,
    raw_response: Optional[str] = None,
) -> ResponseEnvelope:
    """FAILURE envelope, severity ERROR unless given."""
    return ResponseEnvelope(
        status=Status.FAILURE,
        severity=severity,
        code=code,
        reason=reason,
        operation_name=operation_name,
        raw_request=raw_request,
        raw_response=raw_response,
    )
