"""Client certificate retrieval from the object store (AWS S3)."""

import logging
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..config.schema import CertificateStoreConfig
from ..utils.exceptions import CertificateUnavailableError

logger = logging.getLogger(__name__)


class CertificateStore:
    """Fetches the PKCS#12 client certificate blob.

    Example:
        >>> store = CertificateStore(config.certificate_store)
        >>> blob = store.fetch("my-cert-bucket", "certs/hi-client.p12")
    """

    def __init__(self, config: CertificateStoreConfig, client: Optional[Any] = None) -> None:
        self.config = config
        self._client = client

    def _get_s3(self) -> Any:
        if self._client is None:
            self._client = boto3.client("s3", region_name=self.config.region)
        return self._client

    def fetch(self, bucket: str, key: str) -> bytes:
        """Download the certificate object.

        Args:
            bucket: Bucket name
            key: Object key

        Returns:
            Raw object bytes (possibly empty)

        Raises:
            CertificateUnavailableError: If the object cannot be retrieved
        """
        try:
            response = self._get_s3().get_object(Bucket=bucket, Key=key)
            body = response["Body"].read()
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            logger.error(f"S3 get_object s3://{bucket}/{key} failed ({code}): {exc}")
            raise CertificateUnavailableError(f"Get Certificate from S3 error: {exc}") from exc
        except BotoCoreError as exc:
            logger.error(f"S3 get_object s3://{bucket}/{key} failed: {exc}")
            raise CertificateUnavailableError(f"Get Certificate from S3 error: {exc}") from exc

        logger.info(f"Fetched client certificate s3://{bucket}/{key} ({len(body)} bytes)")
        return body
