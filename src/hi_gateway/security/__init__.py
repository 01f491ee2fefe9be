"""Security module.

Client certificate loading, WS-Security headers and message signing.
"""

from .certificate_manager import (
    get_certificate_info,
    load_pkcs12_bundle,
    validate_not_expired,
)
from .signer import HeaderSigner
from .ws_security import build_security_header

__all__ = [
    "get_certificate_info",
    "load_pkcs12_bundle",
    "validate_not_expired",
    "HeaderSigner",
    "build_security_header",
]
