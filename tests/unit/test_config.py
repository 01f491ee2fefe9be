"""Unit tests for configuration management.

Tests cover configuration loading, validation, environment variable overrides,
and error handling.
"""

import json
import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from hi_gateway.config import (
    Config,
    LoggingConfig,
    ParameterStoreConfig,
    TransportConfig,
    get_config,
    load_config,
    reset_config_cache,
)
from hi_gateway.config.defaults import DEFAULT_CONFIG
from hi_gateway.utils.exceptions import ConfigurationError


class TestConfigurationSchema:
    """Test pydantic configuration models validation."""

    def test_parameter_prefix_strips_trailing_slash(self) -> None:
        """Test prefix is normalized without a trailing slash."""
        config = ParameterStoreConfig(prefix="/Test/HI/")
        assert config.prefix == "/Test/HI"

    def test_parameter_prefix_must_be_absolute(self) -> None:
        """Test relative prefixes are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            ParameterStoreConfig(prefix="AustralianDigitalHealth")

        assert "Must start with /" in str(exc_info.value)

    def test_batch_size_limited_to_ten(self) -> None:
        """Test batch size above the store ceiling is rejected."""
        with pytest.raises(ValidationError):
            ParameterStoreConfig(batch_size=11)

    def test_batch_size_must_be_positive(self) -> None:
        """Test zero batch size is rejected."""
        with pytest.raises(ValidationError):
            ParameterStoreConfig(batch_size=0)

    def test_logging_config_case_insensitive(self) -> None:
        """Test log level is upper-cased."""
        assert LoggingConfig(level="debug").level == "DEBUG"

    def test_logging_config_invalid_level(self) -> None:
        """Test invalid log level raises ValidationError."""
        with pytest.raises(ValidationError) as exc_info:
            LoggingConfig(level="VERBOSE")

        assert "Invalid log level" in str(exc_info.value)

    def test_transport_config_invalid_timeout(self) -> None:
        """Test zero timeouts are rejected."""
        with pytest.raises(ValidationError):
            TransportConfig(timeout_connect=0)

    def test_defaults(self) -> None:
        """Test root defaults match the deployment defaults."""
        config = Config()

        assert config.parameters.prefix == "/AustralianDigitalHealth"
        assert config.parameters.batch_size == 10
        assert config.parameters.with_decryption is True
        assert config.certificate_store.region == "ap-southeast-2"
        assert config.transport.verify_tls is True
        assert config.transport.timestamp_validity_minutes == 5
        assert config.logging.log_file is None


class TestConfigurationLoading:
    """Test configuration file loading."""

    def test_load_config_with_valid_file(self, tmp_path: Path) -> None:
        """Test loading valid configuration file."""
        # Arrange
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({
            "parameters": {"prefix": "/Staging/HI", "region": "ap-southeast-2"},
            "transport": {"liveness_timeout": 3},
        }))

        # Act
        config = load_config(config_file)

        # Assert
        assert config.parameters.prefix == "/Staging/HI"
        assert config.parameters.region == "ap-southeast-2"
        assert config.transport.liveness_timeout == 3
        assert config.transport.timeout_read == 60

    def test_load_config_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        """Test loading missing configuration file uses defaults."""
        config = load_config(tmp_path / "nonexistent.json")

        assert config.parameters.prefix == DEFAULT_CONFIG["parameters"]["prefix"]
        assert config.certificate_store.region == DEFAULT_CONFIG["certificate_store"]["region"]

    def test_load_config_malformed_json(self, tmp_path: Path) -> None:
        """Test loading malformed JSON raises ConfigurationError."""
        config_file = tmp_path / "bad.json"
        config_file.write_text("{invalid json")

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(config_file)

        assert "Invalid JSON" in str(exc_info.value)
        assert "Check JSON syntax" in str(exc_info.value)

    def test_load_config_with_validation_error(self, tmp_path: Path) -> None:
        """Test loading configuration with validation errors."""
        config_file = tmp_path / "invalid.json"
        config_file.write_text(json.dumps({"parameters": {"batch_size": 50}}))

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(config_file)

        assert "Configuration validation failed" in str(exc_info.value)
        assert "Fix:" in str(exc_info.value)

    def test_config_file_from_environment(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test HI_GATEWAY_CONFIG_FILE selects the file."""
        config_file = tmp_path / "env.json"
        config_file.write_text(json.dumps({"logging": {"level": "WARNING"}}))
        monkeypatch.setenv("HI_GATEWAY_CONFIG_FILE", str(config_file))

        assert load_config().logging.level == "WARNING"


class TestEnvironmentVariableOverrides:
    """Test environment variable override functionality."""

    def test_env_override_parameter_prefix(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test environment variable overrides the parameter prefix."""
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"parameters": {"prefix": "/FromFile"}}))
        monkeypatch.setenv("HI_GATEWAY_PARAMETER_PREFIX", "/FromEnv")

        config = load_config(config_file)

        assert config.parameters.prefix == "/FromEnv"

    def test_env_override_boolean_values(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test environment variable overrides boolean values correctly."""
        monkeypatch.setenv("HI_GATEWAY_VERIFY_TLS", "false")
        monkeypatch.setenv("HI_GATEWAY_REDACT_PII", "yes")

        config = load_config(tmp_path / "missing.json")

        assert config.transport.verify_tls is False
        assert config.logging.redact_pii is True

    @pytest.mark.parametrize(
        "name", ["PARAMETER_BATCH_SIZE", "TIMEOUT_CONNECT", "TIMEOUT_READ", "LIVENESS_TIMEOUT"]
    )
    def test_env_override_non_integer_rejected(
        self, name: str, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test a non-integer numeric override raises ConfigurationError with a fix hint."""
        monkeypatch.setenv(f"HI_GATEWAY_{name}", "ten")

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(tmp_path / "missing.json")

        assert f"HI_GATEWAY_{name}" in str(exc_info.value)
        assert "Fix:" in str(exc_info.value)

    def test_env_override_numeric_values(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test environment variable overrides numeric values."""
        monkeypatch.setenv("HI_GATEWAY_PARAMETER_BATCH_SIZE", "5")
        monkeypatch.setenv("HI_GATEWAY_TIMEOUT_READ", "90")
        monkeypatch.setenv("HI_GATEWAY_LIVENESS_TIMEOUT", "2")

        config = load_config(tmp_path / "missing.json")

        assert config.parameters.batch_size == 5
        assert config.transport.timeout_read == 90
        assert config.transport.liveness_timeout == 2

    def test_env_override_regions(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test region overrides for both stores."""
        monkeypatch.setenv("HI_GATEWAY_PARAMETER_REGION", "us-east-1")
        monkeypatch.setenv("HI_GATEWAY_CERTIFICATE_REGION", "eu-west-1")

        config = load_config(tmp_path / "missing.json")

        assert config.parameters.region == "us-east-1"
        assert config.certificate_store.region == "eu-west-1"


class TestConfigurationCache:
    """Test the process-wide configuration cache."""

    def test_get_config_is_cached(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test get_config returns the same instance until reset."""
        monkeypatch.setenv("HI_GATEWAY_CONFIG_FILE", str(tmp_path / "missing.json"))

        first = get_config()
        assert get_config() is first

        reset_config_cache()
        assert get_config() is not first


class TestSensitiveValueWarnings:
    """Test warnings for secrets in local configuration."""

    def test_warn_password_in_config(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test a password in the file logs a warning."""
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"certificate_store": {"password": "secret"}}))

        with caplog.at_level(logging.WARNING):
            load_config(config_file)

        assert "certificate password found in configuration file" in caplog.text
