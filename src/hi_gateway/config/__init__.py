"""Config module.

This module provides configuration management functionality.
"""

from hi_gateway.config.manager import get_config, load_config, reset_config_cache
from hi_gateway.config.schema import (
    CertificateStoreConfig,
    Config,
    LoggingConfig,
    ParameterStoreConfig,
    TransportConfig,
)

__all__ = [
    "load_config",
    "get_config",
    "reset_config_cache",
    "Config",
    "ParameterStoreConfig",
    "CertificateStoreConfig",
    "TransportConfig",
    "LoggingConfig",
]
