"""Client provisioning.

Given an operation key and the caller's user and organisation identifiers,
resolves the registry settings, probes the endpoint, loads and validates the
client certificate, builds the identities of the operation's schema release
and returns a ready-to-call client handle.
"""

import time
from typing import Callable, Optional

import requests

from ..config.schema import Config
from ..hi_transactions.operations import get_descriptor
from ..hi_transactions.soap_client import RegistryClient, get_session
from ..logging_audit import get_operation_logger, log_audit_event
from ..models.certificates import CertificateBundle
from ..security.certificate_manager import load_pkcs12_bundle, validate_not_expired
from ..utils.exceptions import EndpointUnavailableError, ProvisioningError
from .certificate_store import CertificateStore
from .identity import build_hpio, build_product, build_user
from .parameter_store import ParameterStore, RegistrySettings

logger = get_operation_logger("provisioning")

ENDPOINT_UNAVAILABLE_MESSAGE = (
    "The Australian Digital Health System is unavailable at this time. Please try again later."
)


class ClientProvisioner:
    """Builds one registry client handle per invocation.

    Attributes:
        config: Local configuration
        parameter_store: Source of the registry settings
        certificate_store: Source of the client certificate blob

    Example:
        >>> provisioner = ClientProvisioner(get_config())
        >>> client = provisioner.provision("ConsumerSearchIHI", "jsmith", "8003620000000000")
        >>> client.url
        'https://www5.medicareaustralia.gov.au/cert/soap/services/ConsumerSearchIHI/3.0'
    """

    def __init__(
        self,
        config: Config,
        parameter_store: Optional[ParameterStore] = None,
        certificate_store: Optional[CertificateStore] = None,
        session_factory: Callable[[CertificateBundle, bool], requests.Session] = get_session,
    ) -> None:
        self.config = config
        self.parameter_store = parameter_store or ParameterStore(config.parameters)
        self.certificate_store = certificate_store or CertificateStore(config.certificate_store)
        self.session_factory = session_factory

    def check_endpoint(self, uri: str) -> None:
        """Probe the registry endpoint with a GET.

        Raises:
            EndpointUnavailableError: If the probe fails or does not answer 200
        """
        try:
            response = requests.get(
                uri,
                timeout=self.config.transport.liveness_timeout,
                verify=self.config.transport.verify_tls,
            )
        except requests.RequestException as e:
            logger.error(f"Liveness probe of {uri} failed: {e}")
            raise EndpointUnavailableError(ENDPOINT_UNAVAILABLE_MESSAGE) from e

        if response.status_code != 200:
            logger.error(f"Liveness probe of {uri} answered HTTP {response.status_code}")
            raise EndpointUnavailableError(ENDPOINT_UNAVAILABLE_MESSAGE)

        logger.debug(f"Liveness probe of {uri} answered HTTP 200")

    def load_certificate(self, settings: RegistrySettings) -> CertificateBundle:
        """Fetch, load and validate the client certificate.

        Raises:
            CertificateUnavailableError: If the blob cannot be fetched or loaded
            CertificateExpiredError: If the certificate is past its not-after time
        """
        blob = self.certificate_store.fetch(settings.certificate_bucket, settings.certificate_object_key)
        bundle = load_pkcs12_bundle(blob, settings.certificate_password)
        validate_not_expired(bundle)
        return bundle

    def provision(self, operation_key: str, user_id: str, hpio: Optional[str]) -> RegistryClient:
        """Provision a client handle for one operation.

        Args:
            operation_key: Key of the operation to bind the handle to
            user_id: Identifier of the acting user
            hpio: HPI-O of the organisation, blank for none

        Returns:
            RegistryClient ready for a single invocation

        Raises:
            UnknownOperationError: If ``operation_key`` is not registered
            ConfigUnavailableError: If a registry setting cannot be resolved
            EndpointUnavailableError: If the endpoint liveness probe fails
            CertificateUnavailableError: If the certificate cannot be obtained
            CertificateExpiredError: If the certificate has expired
        """
        start_time = time.time()
        descriptor = get_descriptor(operation_key)

        try:
            settings = self.parameter_store.load_settings()
            self.check_endpoint(settings.uri)
            bundle = self.load_certificate(settings)
        except ProvisioningError as e:
            log_audit_event("CLIENT_PROVISIONING_FAILED", {
                "status": "failure",
                "operation": operation_key,
                "duration": time.time() - start_time,
                "error_message": str(e),
            })
            raise

        types = descriptor.identity_types
        product = build_product(
            types.product,
            types.qualified_id,
            platform=settings.platform,
            product_name=settings.product_name,
            product_version=settings.product_version,
            vendor_id=settings.vendor_id,
            vendor_qualifier=settings.vendor_qualifier,
        )
        user = build_user(types.qualified_id, user_id, settings.user_qualifier, settings.product_name)
        organisation = build_hpio(types.qualified_id, hpio, settings.hpio_qualifier)

        client = RegistryClient(
            descriptor=descriptor,
            endpoint_uri=settings.uri,
            product=product,
            user=user,
            hpio=organisation,
            cert_bundle=bundle,
            transport=self.config.transport,
            session=self.session_factory(bundle, self.config.transport.verify_tls),
        )

        log_audit_event("CLIENT_PROVISIONED", {
            "status": "success",
            "operation": operation_key,
            **settings.audit_details(),
            "duration": time.time() - start_time,
            "user": f"{user.qualifier}/{user.id}",
            "hpio": f"{organisation.qualifier}/{organisation.id}" if organisation else "none",
            "release": types.product.release,
            "certificate_thumbprint": bundle.info.thumbprint,
            "certificate_serial": bundle.info.serial_number,
        })
        return client
