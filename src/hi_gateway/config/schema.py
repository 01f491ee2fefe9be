"""Configuration schema models using pydantic.

This module defines the local configuration structure and validation rules
using pydantic. Registry coordinates (endpoint, product identity, certificate
location) are not part of it: they are resolved per invocation from the remote
parameter store under ``parameters.prefix``.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ParameterStoreConfig(BaseModel):
    """Configuration for the remote parameter store (AWS SSM).

    Attributes:
        prefix: Path prefix under which all gateway parameters live
        batch_size: Names per GetParameters call (the store accepts at most 10)
        with_decryption: Whether SecureString parameters are decrypted
        region: AWS region of the parameter store (None uses the session default)
    """

    prefix: str = Field(
        default="/AustralianDigitalHealth",
        description="Parameter path prefix",
    )
    batch_size: int = Field(
        default=10,
        ge=1,
        le=10,
        description="Parameter names per lookup call",
    )
    with_decryption: bool = Field(
        default=True,
        description="Decrypt SecureString parameters",
    )
    region: Optional[str] = Field(
        default=None,
        description="AWS region for the parameter store",
    )

    @field_validator("prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        """Validate the prefix is an absolute parameter path.

        Args:
            v: Prefix string to validate

        Returns:
            Prefix without a trailing slash

        Raises:
            ValueError: If prefix does not start with '/'
        """
        if not v.startswith("/"):
            raise ValueError(f"Invalid parameter prefix: {v}. Must start with /")
        return v.rstrip("/")


class CertificateStoreConfig(BaseModel):
    """Configuration for the certificate object store (AWS S3).

    Attributes:
        region: AWS region of the certificate bucket
    """

    region: str = Field(
        default="ap-southeast-2",
        description="AWS region of the certificate bucket",
    )


class TransportConfig(BaseModel):
    """Configuration for HTTPS transport to the registry.

    Attributes:
        verify_tls: Whether to verify the registry's TLS certificate
        timeout_connect: Connection timeout in seconds
        timeout_read: Read timeout in seconds
        liveness_timeout: Timeout for the liveness probe in seconds
        timestamp_validity_minutes: Validity window of the WS-Security timestamp
    """

    verify_tls: bool = True
    timeout_connect: int = Field(
        default=10,
        ge=1,
        description="Connection timeout in seconds",
    )
    timeout_read: int = Field(
        default=60,
        ge=1,
        description="Read timeout in seconds",
    )
    liveness_timeout: int = Field(
        default=10,
        ge=1,
        description="Liveness probe timeout in seconds",
    )
    timestamp_validity_minutes: int = Field(
        default=5,
        ge=1,
        description="WS-Security timestamp validity in minutes",
    )


class LoggingConfig(BaseModel):
    """Configuration for logging.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file, None for console only
        redact_pii: Whether to redact PII from logs
    """

    level: str = Field(
        default="INFO",
        description="Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_file: Optional[Path] = Field(
        default=None,
        description="Log file path (console only when unset)",
    )
    redact_pii: bool = Field(
        default=True,
        description="Redact PII from logs",
    )

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level.

        Args:
            v: Log level string

        Returns:
            Validated log level (uppercase)

        Raises:
            ValueError: If log level is not valid
        """
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(valid_levels)}"
            )
        return v_upper


class Config(BaseModel):
    """Root configuration model.

    Attributes:
        parameters: Remote parameter store settings
        certificate_store: Certificate object store settings
        transport: HTTPS transport settings
        logging: Logging settings

    Example:
        >>> config = Config(parameters=ParameterStoreConfig(prefix="/Test"))
        >>> config.parameters.prefix
        '/Test'
        >>> config.certificate_store.region
        'ap-southeast-2'
    """

    parameters: ParameterStoreConfig = ParameterStoreConfig()
    certificate_store: CertificateStoreConfig = CertificateStoreConfig()
    transport: TransportConfig = TransportConfig()
    logging: LoggingConfig = LoggingConfig()
