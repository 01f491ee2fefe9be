"""Certificate management for the registry client certificate.

The client certificate is a PKCS#12 blob fetched from the object store. This
module loads it, extracts display/audit information and checks expiry.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    pkcs12,
)

from ..models.certificates import CertificateBundle, CertificateInfo
from ..utils.exceptions import CertificateExpiredError, CertificateUnavailableError

logger = logging.getLogger(__name__)

CERTIFICATE_MISSING_MESSAGE = (
    "The certificate is missing. Please contact the system administrator."
)
CERTIFICATE_EXPIRED_MESSAGE = (
    "The certificate has expired. Please contact the system administrator."
)


def get_certificate_info(cert: x509.Certificate) -> CertificateInfo:
    """Extract certificate information for display and logging.

    Args:
        cert: X.509 certificate

    Returns:
        CertificateInfo dataclass with certificate details

    Example:
        >>> info = get_certificate_info(bundle.certificate)
        >>> print(info.thumbprint)
        3F2A...
    """
    public_key = cert.public_key()
    key_size = public_key.key_size if hasattr(public_key, "key_size") else None

    return CertificateInfo(
        subject=cert.subject.rfc4514_string(),
        issuer=cert.issuer.rfc4514_string(),
        not_before=cert.not_valid_before_utc,
        not_after=cert.not_valid_after_utc,
        serial_number=format(cert.serial_number, "X"),
        thumbprint=cert.fingerprint(hashes.SHA1()).hex().upper(),
        key_size=key_size,
    )


def check_expiration_warning(
    cert: x509.Certificate, warning_days: int = 30
) -> bool:
    """Check if certificate is expiring soon and log warning.

    Args:
        cert: X.509 certificate to check
        warning_days: Number of days before expiration to warn (default: 30)

    Returns:
        True if certificate expires within warning_days, False otherwise
    """
    now = datetime.now(timezone.utc)
    warning_date = now + timedelta(days=warning_days)

    if now <= cert.not_valid_after_utc < warning_date:
        days_remaining = (cert.not_valid_after_utc - now).days
        logger.warning(
            f"Client certificate expiring soon: {days_remaining} days remaining "
            f"(expires: {cert.not_valid_after_utc.strftime('%Y-%m-%d')})"
        )
        return True

    return False


def load_pkcs12_bundle(data: Optional[bytes], password: Optional[str]) -> CertificateBundle:
    """Load certificate, private key, and chain from PKCS#12 bytes.

    Args:
        data: PKCS#12 blob as fetched from the object store
        password: Passphrase of the blob

    Returns:
        CertificateBundle containing certificate, key, chain, and info

    Raises:
        CertificateUnavailableError: If the blob is empty, corrupt, has no
            certificate or key, or the passphrase is wrong

    Example:
        >>> bundle = load_pkcs12_bundle(blob, "secret")
        >>> print(bundle.info.subject)
    """
    if not data:
        logger.error("Client certificate blob is empty")
        raise CertificateUnavailableError(CERTIFICATE_MISSING_MESSAGE)

    pass_bytes = password.encode("utf-8") if password else None

    try:
        private_key, certificate, additional_certs = pkcs12.load_key_and_certificates(
            data, password=pass_bytes
        )
    except TypeError as e:
        logger.error(f"Failed to load PKCS12 blob: incorrect password ({e})")
        raise CertificateUnavailableError(CERTIFICATE_MISSING_MESSAGE) from e
    except ValueError as e:
        logger.error(f"Failed to load PKCS12 blob: {e}")
        raise CertificateUnavailableError(CERTIFICATE_MISSING_MESSAGE) from e

    if certificate is None or private_key is None:
        logger.error("PKCS12 blob does not contain both a certificate and a private key")
        raise CertificateUnavailableError(CERTIFICATE_MISSING_MESSAGE)

    chain: List[x509.Certificate] = list(additional_certs or [])
    info = get_certificate_info(certificate)

    logger.info(f"Loaded PKCS12 certificate: {info.subject}")
    logger.info(f"Certificate expires: {info.not_after.strftime('%Y-%m-%d')}")

    check_expiration_warning(certificate)

    return CertificateBundle(
        certificate=certificate,
        private_key=private_key,
        chain=chain,
        info=info,
    )


def validate_not_expired(bundle: CertificateBundle, now: Optional[datetime] = None) -> None:
    """Validate that certificate has not expired.

    Args:
        bundle: Loaded certificate bundle
        now: Current time (UTC); defaults to the system clock

    Raises:
        CertificateExpiredError: If ``now`` is past the certificate's not-after time
    """
    now = now or datetime.now(timezone.utc)
    not_after = bundle.info.not_after

    if now > not_after:
        days_expired = (now - not_after).days
        logger.error(
            f"Client certificate expired {days_expired} days ago on "
            f"{not_after.strftime('%Y-%m-%d')}"
        )
        raise CertificateExpiredError(CERTIFICATE_EXPIRED_MESSAGE)


def convert_to_pem(cert: x509.Certificate) -> bytes:
    """Convert certificate to PEM format bytes.

    Args:
        cert: X.509 certificate to convert

    Returns:
        Certificate in PEM format as bytes
    """
    return cert.public_bytes(Encoding.PEM)


def convert_key_to_pem(private_key) -> bytes:
    """Convert private key to unencrypted PKCS#8 PEM bytes.

    Args:
        private_key: Private key to convert

    Returns:
        Private key in PEM format as bytes
    """
    return private_key.private_bytes(
        encoding=Encoding.PEM,
        format=PrivateFormat.PKCS8,
        encryption_algorithm=NoEncryption(),
    )
