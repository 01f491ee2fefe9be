"""Registry settings from the remote parameter store (AWS SSM).

Every invocation resolves the registry endpoint, product identity, qualifier
templates and certificate coordinates from SSM. Lookups are batched because
GetParameters accepts at most 10 names per call.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Sequence

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..config.schema import ParameterStoreConfig
from ..utils.exceptions import ConfigUnavailableError

logger = logging.getLogger(__name__)

URI = "Uri"
PRODUCT_PLATFORM = "Product/Platform"
PRODUCT_NAME = "Product/ProductName"
PRODUCT_VERSION = "Product/ProductVersion"
VENDOR_ID = "Product/Vendor/Id"
VENDOR_QUALIFIER = "Product/Vendor/Qualifier"
USER_QUALIFIER = "User/Qualifier"
HPIO_QUALIFIER = "Hpio/Qualifier"
CERTIFICATE_BUCKET = "Certificate/S3Bucket"
CERTIFICATE_OBJECT_KEY = "Certificate/S3ObjectKey"
CERTIFICATE_PASSWORD = "Certificate/Password"

REQUIRED_PARAMETERS = (
    URI,
    PRODUCT_PLATFORM,
    PRODUCT_NAME,
    PRODUCT_VERSION,
    VENDOR_ID,
    VENDOR_QUALIFIER,
    USER_QUALIFIER,
    HPIO_QUALIFIER,
    CERTIFICATE_BUCKET,
    CERTIFICATE_OBJECT_KEY,
    CERTIFICATE_PASSWORD,
)


@dataclass(frozen=True)
class RegistrySettings:
    """Operation-independent settings resolved for one invocation.

    Attributes:
        uri: Registry endpoint URI
        platform: Product platform
        product_name: Registered product name
        product_version: Product version
        vendor_id: Vendor identifier
        vendor_qualifier: Vendor identifier qualifier
        user_qualifier: User qualifier template (may contain ``{appname}``)
        hpio_qualifier: HPI-O qualifier
        certificate_bucket: Bucket holding the PKCS#12 client certificate
        certificate_object_key: Object key of the client certificate
        certificate_password: Passphrase of the client certificate
    """

    uri: str
    platform: str
    product_name: str
    product_version: str
    vendor_id: str
    vendor_qualifier: str
    user_qualifier: str
    hpio_qualifier: str
    certificate_bucket: str
    certificate_object_key: str
    certificate_password: str

    def audit_details(self) -> dict[str, str]:
        """Non-secret settings for the audit log."""
        return {
            "endpoint": self.uri,
            "product": f"{self.product_name} {self.product_version} ({self.platform})",
            "vendor": f"{self.vendor_qualifier}{self.vendor_id}",
        }


def _batched(names: Sequence[str], size: int) -> Iterator[Sequence[str]]:
    for start in range(0, len(names), size):
        yield names[start:start + size]


class ParameterStore:
    """Batched reader for the gateway's SSM parameters.

    Attributes:
        config: Parameter store configuration (prefix, batch size, decryption)

    Example:
        >>> store = ParameterStore(config.parameters)
        >>> settings = store.load_settings()
        >>> settings.uri
        'https://www5.medicareaustralia.gov.au/cert/soap/services/'
    """

    def __init__(self, config: ParameterStoreConfig, client: Optional[Any] = None) -> None:
        self.config = config
        self._client = client

    def _get_ssm(self) -> Any:
        if self._client is None:
            if self.config.region:
                self._client = boto3.client("ssm", region_name=self.config.region)
            else:
                self._client = boto3.client("ssm")
        return self._client

    def full_name(self, name: str) -> str:
        """Return the absolute parameter name for a relative one."""
        return f"{self.config.prefix}/{name}"

    def get_parameters(self, names: Sequence[str]) -> dict[str, str]:
        """Fetch parameters by relative name.

        Args:
            names: Relative parameter names (e.g. ``Product/ProductName``)

        Returns:
            Mapping of relative name to value

        Raises:
            ConfigUnavailableError: If the store call fails or any name is
                absent from the combined response
        """
        full_names = [self.full_name(name) for name in names]
        values: dict[str, str] = {}

        try:
            for batch in _batched(full_names, self.config.batch_size):
                response = self._get_ssm().get_parameters(
                    Names=list(batch),
                    WithDecryption=self.config.with_decryption,
                )
                for parameter in response.get("Parameters", []):
                    values[parameter["Name"]] = parameter["Value"]
        except (ClientError, BotoCoreError) as exc:
            logger.error(f"SSM GetParameters failed: {exc}")
            raise ConfigUnavailableError(f"SSM parameters error: {exc}") from exc

        missing = [name for name in full_names if name not in values]
        if missing:
            logger.error(f"Missing SSM parameters: {', '.join(missing)}")
            raise ConfigUnavailableError(f"Missing SSM parameters: {', '.join(missing)}")

        logger.debug(f"Resolved {len(values)} SSM parameters under {self.config.prefix}")
        return {name: values[self.full_name(name)] for name in names}

    def load_settings(self) -> RegistrySettings:
        """Resolve every parameter the client provisioner needs.

        Returns:
            RegistrySettings for this invocation

        Raises:
            ConfigUnavailableError: If any parameter cannot be resolved
        """
        values = self.get_parameters(REQUIRED_PARAMETERS)
        return RegistrySettings(
            uri=values[URI],
            platform=values[PRODUCT_PLATFORM],
            product_name=values[PRODUCT_NAME],
            product_version=values[PRODUCT_VERSION],
            vendor_id=values[VENDOR_ID],
            vendor_qualifier=values[VENDOR_QUALIFIER],
            user_qualifier=values[USER_QUALIFIER],
            hpio_qualifier=values[HPIO_QUALIFIER],
            certificate_bucket=values[CERTIFICATE_BUCKET],
            certificate_object_key=values[CERTIFICATE_OBJECT_KEY],
            certificate_password=values[CERTIFICATE_PASSWORD],
        )
