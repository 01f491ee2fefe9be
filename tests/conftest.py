"""
Shared pytest configuration and fixtures.

Certificates are generated on the fly with cryptography so no key material is
checked into the repository.
"""

import io
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional
from unittest.mock import MagicMock

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import BestAvailableEncryption, pkcs12
from cryptography.x509.oid import NameOID

from hi_gateway.config import reset_config_cache
from hi_gateway.config.schema import Config
from hi_gateway.hi_transactions.soap_client import clear_sessions
from hi_gateway.provisioning.parameter_store import RegistrySettings
from hi_gateway.security.certificate_manager import load_pkcs12_bundle

CERT_PASSWORD = "secret"
REGISTRY_URI = "https://hi.example.test/services/"
PARAMETER_PREFIX = "/AustralianDigitalHealth"

PARAMETER_VALUES = {
    "Uri": REGISTRY_URI,
    "Product/Platform": "Linux",
    "Product/ProductName": "Better Clinics PMS",
    "Product/ProductVersion": "1.0",
    "Product/Vendor/Id": "BCL00000",
    "Product/Vendor/Qualifier": "http://ns.electronichealth.net.au/id/hi/vendorid/1.0",
    "User/Qualifier": "http://ns.betterclinics.example/id/{appname}/userid/1.0",
    "Hpio/Qualifier": "HTTP://NS.ELECTRONICHEALTH.NET.AU/ID/HI/HPIO/1.0",
    "Certificate/S3Bucket": "hi-certificates",
    "Certificate/S3ObjectKey": "client/fac_sign.p12",
    "Certificate/Password": CERT_PASSWORD,
}


@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    """One RSA key for all generated certificates."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def _certificate(key: rsa.RSAPrivateKey, not_before: datetime, not_after: datetime) -> x509.Certificate:
    name = x509.Name([
        x509.NameAttribute(NameOID.COMMON_NAME, "general.8003629900019338.id.electronichealth.net.au"),
        x509.NameAttribute(NameOID.ORGANIZATION_NAME, "Better Clinics Test"),
    ])
    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(0x1A2B3C)
        .not_valid_before(not_before)
        .not_valid_after(not_after)
        .sign(key, hashes.SHA256())
    )


@pytest.fixture(scope="session")
def make_pkcs12(rsa_key) -> Callable[..., bytes]:
    """Factory building PKCS#12 blobs with a given validity window."""

    def _make(days_valid: int = 365, expired: bool = False, password: str = CERT_PASSWORD) -> bytes:
        now = datetime.now(timezone.utc)
        if expired:
            not_before, not_after = now - timedelta(days=60), now - timedelta(days=1)
        else:
            not_before, not_after = now - timedelta(days=1), now + timedelta(days=days_valid)
        cert = _certificate(rsa_key, not_before, not_after)
        return pkcs12.serialize_key_and_certificates(
            name=b"hi-client",
            key=rsa_key,
            cert=cert,
            cas=None,
            encryption_algorithm=BestAvailableEncryption(password.encode("utf-8")),
        )

    return _make


@pytest.fixture(scope="session")
def valid_pkcs12(make_pkcs12) -> bytes:
    """PKCS#12 blob valid for a year."""
    return make_pkcs12()


@pytest.fixture(scope="session")
def expired_pkcs12(make_pkcs12) -> bytes:
    """PKCS#12 blob that expired yesterday."""
    return make_pkcs12(expired=True)


@pytest.fixture
def cert_bundle(valid_pkcs12):
    """Loaded certificate bundle."""
    return load_pkcs12_bundle(valid_pkcs12, CERT_PASSWORD)


@pytest.fixture
def registry_settings() -> RegistrySettings:
    """Registry settings as resolved from the parameter store."""
    return RegistrySettings(
        uri=PARAMETER_VALUES["Uri"],
        platform=PARAMETER_VALUES["Product/Platform"],
        product_name=PARAMETER_VALUES["Product/ProductName"],
        product_version=PARAMETER_VALUES["Product/ProductVersion"],
        vendor_id=PARAMETER_VALUES["Product/Vendor/Id"],
        vendor_qualifier=PARAMETER_VALUES["Product/Vendor/Qualifier"],
        user_qualifier=PARAMETER_VALUES["User/Qualifier"],
        hpio_qualifier=PARAMETER_VALUES["Hpio/Qualifier"],
        certificate_bucket=PARAMETER_VALUES["Certificate/S3Bucket"],
        certificate_object_key=PARAMETER_VALUES["Certificate/S3ObjectKey"],
        certificate_password=CERT_PASSWORD,
    )


def ssm_response(names: list[str], values: Optional[dict[str, str]] = None) -> dict[str, Any]:
    """Fake GetParameters response for the requested absolute names."""
    values = PARAMETER_VALUES if values is None else values
    parameters = []
    for name in names:
        relative = name[len(PARAMETER_PREFIX) + 1:]
        if relative in values:
            parameters.append({"Name": name, "Value": values[relative]})
    return {"Parameters": parameters, "InvalidParameters": []}


@pytest.fixture
def ssm_client() -> MagicMock:
    """boto3 SSM client double answering with PARAMETER_VALUES."""
    client = MagicMock()
    client.get_parameters.side_effect = lambda Names, WithDecryption: ssm_response(Names)
    return client


@pytest.fixture
def s3_client(valid_pkcs12) -> MagicMock:
    """boto3 S3 client double returning the valid PKCS#12 blob."""
    client = MagicMock()
    client.get_object.return_value = {"Body": io.BytesIO(valid_pkcs12)}
    return client


@pytest.fixture
def config() -> Config:
    """Default configuration."""
    return Config()


@pytest.fixture
def base_payload() -> dict[str, str]:
    """The three mandatory input fields for a consumer search."""
    return {
        "internalMode": "1",
        "internalUserId": "jsmith",
        "internalHPIO": "8003620833337558",
    }


@pytest.fixture(autouse=True)
def _isolate_process_state(monkeypatch):
    """Start every test with no cached configuration or sessions."""
    for name in ("HI_GATEWAY_CONFIG_FILE", "HI_GATEWAY_LOG_LEVEL", "HI_GATEWAY_VERIFY_TLS"):
        monkeypatch.delenv(name, raising=False)
    reset_config_cache()
    clear_sessions()
    yield
    reset_config_cache()
    clear_sessions()


@pytest.fixture
def cert_password() -> str:
    """Passphrase of the generated PKCS#12 blobs."""
    return CERT_PASSWORD
