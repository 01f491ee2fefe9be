"""Data models for client certificate handling."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Optional

from cryptography import x509


@dataclass
class CertificateInfo:
    """Certificate information for display and audit logging.

    Contains extracted metadata from X.509 certificates without
    exposing sensitive key material.

    Attributes:
        subject: Certificate subject Distinguished Name (DN)
        issuer: Certificate issuer Distinguished Name (DN)
        not_before: Certificate validity start date
        not_after: Certificate expiration date
        serial_number: Certificate serial number (upper-case hex)
        thumbprint: SHA-1 fingerprint (upper-case hex)
        key_size: Public key size in bits (e.g., 2048, 4096)
    """

    subject: str
    issuer: str
    not_before: datetime
    not_after: datetime
    serial_number: str
    thumbprint: str
    key_size: Optional[int]


@dataclass
class CertificateBundle:
    """Client certificate with its private key and chain.

    Attributes:
        certificate: X.509 certificate
        private_key: Private key
        chain: Additional certificates from the PKCS#12 file
        info: Extracted certificate information
    """

    certificate: x509.Certificate
    private_key: Any
    chain: List[x509.Certificate]
    info: CertificateInfo
