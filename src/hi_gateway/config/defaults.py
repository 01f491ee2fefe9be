"""Default configuration values.

This module defines the default configuration values used when no configuration
file is provided or when configuration values are not specified.
"""

from typing import Any

# Used as a fallback when no configuration file is present
DEFAULT_CONFIG: dict[str, Any] = {
    "parameters": {
        "prefix": "/AustralianDigitalHealth",
        # GetParameters rejects more than 10 names per call
        "batch_size": 10,
        "with_decryption": True,
        "region": None,
    },
    "certificate_store": {
        "region": "ap-southeast-2",
    },
    "transport": {
        "verify_tls": True,
        "timeout_connect": 10,
        "timeout_read": 60,
        "liveness_timeout": 10,
        "timestamp_validity_minutes": 5,
    },
    "logging": {
        "level": "INFO",
        # Console only; the function host collects stdout/stderr
        "log_file": None,
        "redact_pii": True,
    },
}

DEFAULT_CONFIG_PATH = "config/config.json"
