"""Configuration manager for loading and managing local configuration.

This module provides the main configuration loading functionality,
including support for JSON configuration files, environment variable overrides,
and configuration validation.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from hi_gateway.config.defaults import DEFAULT_CONFIG, DEFAULT_CONFIG_PATH
from hi_gateway.config.schema import Config
from hi_gateway.utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Environment variable prefix for all configuration overrides
ENV_PREFIX = "HI_GATEWAY_"

_cached_config: Optional[Config] = None


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file and environment variables.

    Configuration is loaded with the following precedence (highest to lowest):
    1. CLI arguments (handled by caller)
    2. Environment variables (HI_GATEWAY_* prefix)
    3. Configuration file (JSON)
    4. Default values

    Args:
        config_path: Path to configuration file. If None, uses
            HI_GATEWAY_CONFIG_FILE or ./config/config.json

    Returns:
        Validated Config instance

    Raises:
        ConfigurationError: If configuration is invalid or malformed

    Example:
        >>> config = load_config(Path("custom/config.json"))
        >>> prefix = config.parameters.prefix
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(os.getenv(f"{ENV_PREFIX}CONFIG_FILE", DEFAULT_CONFIG_PATH))

    config_dict = _load_config_file(config_path)
    config_dict = _apply_env_overrides(config_dict)
    _check_sensitive_values(config_dict)

    try:
        return Config(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(
            f"Configuration validation failed:\n{e}\n\n"
            f"Fix: Check your configuration file at {config_path} and ensure all "
            f"values match the expected format."
        ) from e


def get_config() -> Config:
    """Return the process-wide configuration, loading it on first use.

    Warm function containers reuse the loaded configuration across
    invocations; it is never mutated after loading.

    Returns:
        Validated Config instance
    """
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reset_config_cache() -> None:
    """Forget the cached configuration so the next get_config() reloads it."""
    global _cached_config
    _cached_config = None


def _load_config_file(config_path: Path) -> dict[str, Any]:
    """Load configuration file or return defaults.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary

    Raises:
        ConfigurationError: If JSON is malformed or unreadable
    """
    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_dict = json.load(f)
            logger.info(f"Loaded configuration from {config_path}")
            return config_dict
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Invalid JSON in config file: {config_path}\n"
                f"Error: {e}\n"
                f"Fix: Check JSON syntax at line {e.lineno}, column {e.colno}"
            ) from e
        except OSError as e:
            raise ConfigurationError(
                f"Failed to read config file: {config_path}\n"
                f"Error: {e}\n"
                f"Fix: Check file permissions and path"
            ) from e

    logger.debug(f"Config file not found: {config_path}. Using default configuration.")
    return json.loads(json.dumps(DEFAULT_CONFIG))


def _apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides with HI_GATEWAY_ prefix.

    Environment variables follow the pattern: HI_GATEWAY_<FIELD>
    For example: HI_GATEWAY_PARAMETER_PREFIX, HI_GATEWAY_LOG_LEVEL

    Args:
        config_dict: Configuration dictionary to update

    Returns:
        Updated configuration dictionary with environment overrides applied
    """
    # Parameter store section
    if prefix := os.getenv(f"{ENV_PREFIX}PARAMETER_PREFIX"):
        config_dict.setdefault("parameters", {})["prefix"] = prefix
        logger.debug("Override: parameter prefix from environment")

    if batch_size := os.getenv(f"{ENV_PREFIX}PARAMETER_BATCH_SIZE"):
        config_dict.setdefault("parameters", {})["batch_size"] = _parse_int("PARAMETER_BATCH_SIZE", batch_size)
        logger.debug("Override: parameter batch_size from environment")

    if ssm_region := os.getenv(f"{ENV_PREFIX}PARAMETER_REGION"):
        config_dict.setdefault("parameters", {})["region"] = ssm_region
        logger.debug("Override: parameter region from environment")

    # Certificate store section
    if s3_region := os.getenv(f"{ENV_PREFIX}CERTIFICATE_REGION"):
        config_dict.setdefault("certificate_store", {})["region"] = s3_region
        logger.debug("Override: certificate store region from environment")

    # Transport section
    if verify_tls := os.getenv(f"{ENV_PREFIX}VERIFY_TLS"):
        config_dict.setdefault("transport", {})["verify_tls"] = _parse_bool(verify_tls)
        logger.debug("Override: verify_tls from environment")

    if timeout_connect := os.getenv(f"{ENV_PREFIX}TIMEOUT_CONNECT"):
        config_dict.setdefault("transport", {})["timeout_connect"] = _parse_int("TIMEOUT_CONNECT", timeout_connect)
        logger.debug("Override: timeout_connect from environment")

    if timeout_read := os.getenv(f"{ENV_PREFIX}TIMEOUT_READ"):
        config_dict.setdefault("transport", {})["timeout_read"] = _parse_int("TIMEOUT_READ", timeout_read)
        logger.debug("Override: timeout_read from environment")

    if liveness_timeout := os.getenv(f"{ENV_PREFIX}LIVENESS_TIMEOUT"):
        config_dict.setdefault("transport", {})["liveness_timeout"] = _parse_int("LIVENESS_TIMEOUT", liveness_timeout)
        logger.debug("Override: liveness_timeout from environment")

    # Logging section
    if log_level := os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
        config_dict.setdefault("logging", {})["level"] = log_level
        logger.debug("Override: log_level from environment")

    if log_file := os.getenv(f"{ENV_PREFIX}LOG_FILE"):
        config_dict.setdefault("logging", {})["log_file"] = log_file
        logger.debug("Override: log_file from environment")

    if redact_pii := os.getenv(f"{ENV_PREFIX}REDACT_PII"):
        config_dict.setdefault("logging", {})["redact_pii"] = _parse_bool(redact_pii)
        logger.debug("Override: redact_pii from environment")

    return config_dict


def _parse_int(name: str, value: str) -> int:
    """Parse an integer environment override.

    Raises:
        ConfigurationError: If the value is not an integer
    """
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(
            f"Invalid value for {ENV_PREFIX}{name}: {value!r}\n"
            f"Fix: Set {ENV_PREFIX}{name} to a whole number"
        ) from None


def _parse_bool(value: str) -> bool:
    """Parse boolean value from string.

    Args:
        value: String value to parse (case-insensitive)

    Returns:
        Boolean value
    """
    return value.lower() in ("true", "1", "yes", "on")


def _check_sensitive_values(config_dict: dict[str, Any]) -> None:
    """Warn when secrets appear in the local configuration file.

    The certificate passphrase belongs in the parameter store as a
    SecureString, never in a local file.

    Args:
        config_dict: Configuration dictionary to check
    """
    for section in ("parameters", "certificate_store"):
        if "password" in config_dict.get(section, {}):
            logger.warning(
                "WARNING: certificate password found in configuration file! "
                "Store it as the Certificate/Password SecureString parameter instead."
            )
