"""Unit tests for client provisioning."""

import io
from unittest.mock import MagicMock, patch

import pytest
import requests

from hi_gateway.models.identity import Release3Product, Release3QualifiedId, Release50Product
from hi_gateway.provisioning.certificate_store import CertificateStore
from hi_gateway.provisioning.parameter_store import ParameterStore
from hi_gateway.provisioning.provisioner import ENDPOINT_UNAVAILABLE_MESSAGE, ClientProvisioner
from hi_gateway.security.certificate_manager import (
    CERTIFICATE_EXPIRED_MESSAGE,
    CERTIFICATE_MISSING_MESSAGE,
)
from hi_gateway.utils.exceptions import (
    CertificateExpiredError,
    CertificateUnavailableError,
    ConfigUnavailableError,
    EndpointUnavailableError,
    UnknownOperationError,
)

REGISTRY_URI = "https://hi.example.test/services/"


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def provisioner(config, ssm_client, s3_client, session):
    """Provisioner wired to boto3 doubles and a fake session."""
    return ClientProvisioner(
        config,
        parameter_store=ParameterStore(config.parameters, client=ssm_client),
        certificate_store=CertificateStore(config.certificate_store, client=s3_client),
        session_factory=lambda bundle, verify_tls: session,
    )


@pytest.fixture
def liveness_ok():
    with patch("hi_gateway.provisioning.provisioner.requests.get") as get:
        get.return_value = MagicMock(status_code=200)
        yield get


class TestCheckEndpoint:
    """Test the registry liveness probe."""

    def test_probe_uses_liveness_timeout(self, provisioner, liveness_ok, config):
        provisioner.check_endpoint(REGISTRY_URI)

        liveness_ok.assert_called_once_with(
            REGISTRY_URI,
            timeout=config.transport.liveness_timeout,
            verify=config.transport.verify_tls,
        )

    @pytest.mark.parametrize("status_code", [404, 500, 503, 302])
    def test_non_200_unavailable(self, provisioner, status_code):
        with patch("hi_gateway.provisioning.provisioner.requests.get") as get:
            get.return_value = MagicMock(status_code=status_code)

            with pytest.raises(EndpointUnavailableError) as exc_info:
                provisioner.check_endpoint(REGISTRY_URI)

        assert str(exc_info.value) == ENDPOINT_UNAVAILABLE_MESSAGE

    def test_connection_error_unavailable(self, provisioner):
        with patch("hi_gateway.provisioning.provisioner.requests.get") as get:
            get.side_effect = requests.ConnectionError("refused")

            with pytest.raises(EndpointUnavailableError) as exc_info:
                provisioner.check_endpoint(REGISTRY_URI)

        assert exc_info.value.code == "CERTIFICATE"


class TestProvision:
    """Test end-to-end provisioning of a client handle."""

    def test_consumer_search_client(self, provisioner, liveness_ok, session):
        """Test the handle carries release 3.0 identities and the endpoint."""
        # Act
        client = provisioner.provision("ConsumerSearchIHI", "jsmith", "8003620833337558")

        # Assert
        assert client.url == "https://hi.example.test/services/ConsumerSearchIHI/3.0"
        assert client.session is session
        assert isinstance(client.product, Release3Product)
        assert client.product.product_name == "Better Clinics PMS"
        assert client.product.vendor.id == "BCL00000"
        assert isinstance(client.user, Release3QualifiedId)
        assert client.user.id == "jsmith"
        assert client.user.qualifier == "http://ns.betterclinics.example/id/betterclinicspms/userid/1.0"
        assert client.hpio.id == "8003620833337558"
        assert client.hpio.qualifier == "http://ns.electronichealth.net.au/id/hi/hpio/1.0"

    def test_identity_types_follow_operation(self, provisioner, liveness_ok):
        client = provisioner.provision("ProviderSearchForProviderIndividual", "jsmith", "8003620833337558")

        assert isinstance(client.product, Release50Product)
        assert client.product.release == "5.0"

    def test_blank_hpio_omitted(self, provisioner, liveness_ok):
        client = provisioner.provision("ConsumerSearchIHI", "jsmith", "  ")

        assert client.hpio is None

    def test_unknown_operation_before_lookups(self, provisioner, ssm_client):
        """Test an unknown key fails before any remote call."""
        with pytest.raises(UnknownOperationError) as exc_info:
            provisioner.provision("ConsumerDeleteIHI", "jsmith", "8003620833337558")

        assert exc_info.value.code == "CERTIFICATE"
        ssm_client.get_parameters.assert_not_called()

    def test_missing_parameter(self, provisioner, ssm_client):
        ssm_client.get_parameters.side_effect = lambda Names, WithDecryption: {"Parameters": []}

        with pytest.raises(ConfigUnavailableError):
            provisioner.provision("ConsumerSearchIHI", "jsmith", "8003620833337558")

    def test_endpoint_down_skips_certificate(self, provisioner, s3_client):
        with patch("hi_gateway.provisioning.provisioner.requests.get") as get:
            get.return_value = MagicMock(status_code=503)

            with pytest.raises(EndpointUnavailableError):
                provisioner.provision("ConsumerSearchIHI", "jsmith", "8003620833337558")

        s3_client.get_object.assert_not_called()

    def test_expired_certificate(self, provisioner, liveness_ok, s3_client, expired_pkcs12):
        s3_client.get_object.return_value = {"Body": io.BytesIO(expired_pkcs12)}

        with pytest.raises(CertificateExpiredError) as exc_info:
            provisioner.provision("ConsumerSearchIHI", "jsmith", "8003620833337558")

        assert str(exc_info.value) == CERTIFICATE_EXPIRED_MESSAGE

    def test_wrong_certificate_password(self, provisioner, liveness_ok, ssm_client):
        ssm_client.get_parameters.side_effect = None
        ssm_client.get_parameters.return_value = {
            "Parameters": [
                {"Name": f"/AustralianDigitalHealth/{name}", "Value": value}
                for name, value in {
                    "Uri": REGISTRY_URI,
                    "Product/Platform": "Linux",
                    "Product/ProductName": "PMS",
                    "Product/ProductVersion": "1.0",
                    "Product/Vendor/Id": "V1",
                    "Product/Vendor/Qualifier": "http://vendor",
                    "User/Qualifier": "http://user",
                    "Hpio/Qualifier": "http://hpio",
                    "Certificate/S3Bucket": "bucket",
                    "Certificate/S3ObjectKey": "key",
                    "Certificate/Password": "wrong",
                }.items()
            ]
        }

        with pytest.raises(CertificateUnavailableError) as exc_info:
            provisioner.provision("ConsumerSearchIHI", "jsmith", "8003620833337558")

        assert str(exc_info.value) == CERTIFICATE_MISSING_MESSAGE


class TestProvisioningAudit:
    """Test provisioning audit events."""

    def test_success_audit(self, provisioner, liveness_ok, cert_bundle):
        with patch("hi_gateway.provisioning.provisioner.log_audit_event") as audit:
            provisioner.provision("ConsumerUpdateIHI", "jsmith", "8003620833337558")

        event_type, details = audit.call_args.args
        assert event_type == "CLIENT_PROVISIONED"
        assert details["status"] == "success"
        assert details["operation"] == "ConsumerUpdateIHI"
        assert details["endpoint"] == REGISTRY_URI
        assert details["release"] == "3.2"
        assert details["certificate_thumbprint"] == cert_bundle.info.thumbprint
        assert details["certificate_serial"] == "1A2B3C"
        assert "secret" not in " ".join(str(v) for v in details.values())

    def test_failure_audit(self, provisioner):
        with patch("hi_gateway.provisioning.provisioner.requests.get") as get, \
                patch("hi_gateway.provisioning.provisioner.log_audit_event") as audit:
            get.return_value = MagicMock(status_code=500)

            with pytest.raises(EndpointUnavailableError):
                provisioner.provision("ConsumerSearchIHI", "jsmith", "8003620833337558")

        event_type, details = audit.call_args.args
        assert event_type == "CLIENT_PROVISIONING_FAILED"
        assert details["status"] == "failure"
        assert details["error_message"] == ENDPOINT_UNAVAILABLE_MESSAGE
