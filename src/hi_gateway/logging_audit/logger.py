"""Logging configuration and logger factory for HI Gateway.

This module provides centralized logging configuration with support for:
- Console handler (always) and optional rotating file handler
- PII redaction via custom formatters
- Per-surface operation loggers
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from .formatters import PIIRedactingFormatter

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
MAX_LOG_FILE_SIZE = 10 * 1024 * 1024  # 10MB
BACKUP_COUNT = 5

_logging_configured = False

OPERATION_LOGGERS = {
    "consumer": "hi_gateway.consumer",
    "provider": "hi_gateway.provider",
    "organisation": "hi_gateway.organisation",
    "provisioning": "hi_gateway.provisioning",
}

logger = logging.getLogger(__name__)


def configure_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    redact_pii: bool = False,
) -> None:
    """Configure logging for HI Gateway.

    Sets up a console handler and, when ``log_file`` is given, a rotating file
    handler at DEBUG level. This function is idempotent - it can be called
    multiple times safely, e.g. once per warm function invocation.

    Args:
        level: Log level for console output (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Path to log file. If None, logs go to the console only.
        redact_pii: Whether to redact PII (identifiers, names, e-mail) from logs

    Raises:
        ValueError: If invalid log level is provided
        RuntimeError: If log directory cannot be created

    Example:
        >>> configure_logging(level="DEBUG", redact_pii=True)
        >>> configure_logging(level="INFO", log_file=Path("logs/hi-gateway.log"))
    """
    global _logging_configured

    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(
            f"Invalid log level: {level}. "
            f"Must be one of: DEBUG, INFO, WARNING, ERROR, CRITICAL"
        )

    if log_file is not None:
        log_dir = log_file.parent
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise RuntimeError(
                f"Failed to create log directory: {log_dir}. "
                f"Ensure write permissions are available. Error: {e}"
            ) from e

    root_logger = logging.getLogger()

    if _logging_configured:
        root_logger.handlers.clear()

    root_logger.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(
        PIIRedactingFormatter(fmt=DEFAULT_LOG_FORMAT, redact_pii=redact_pii)
    )
    root_logger.addHandler(console_handler)

    if log_file is not None:
        try:
            file_handler = RotatingFileHandler(
                filename=str(log_file),
                maxBytes=MAX_LOG_FILE_SIZE,
                backupCount=BACKUP_COUNT,
                encoding="utf-8",
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(
                PIIRedactingFormatter(fmt=DEFAULT_LOG_FORMAT, redact_pii=redact_pii)
            )
            root_logger.addHandler(file_handler)
        except OSError as e:
            root_logger.warning(
                f"Failed to create file handler for {log_file}: {e}. "
                f"Logging to console only."
            )

    _logging_configured = True


def get_logger(module_name: str) -> logging.Logger:
    """Get a logger for the specified module.

    Args:
        module_name: Name of the module, typically __name__

    Returns:
        Logger instance for the module

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Processing started")
    """
    return logging.getLogger(module_name)


def get_operation_logger(operation: str) -> logging.Logger:
    """Get a logger for an entry surface or the provisioning step.

    Supported operations: consumer, provider, organisation, provisioning.

    Args:
        operation: Operation logger name

    Returns:
        Logger instance for the operation

    Raises:
        ValueError: If operation is not a recognized type

    Example:
        >>> logger = get_operation_logger("consumer")
        >>> logger.info("SearchIHI started")
    """
    if operation not in OPERATION_LOGGERS:
        raise ValueError(
            f"Unknown operation: {operation}. "
            f"Must be one of: {', '.join(OPERATION_LOGGERS.keys())}"
        )
    return logging.getLogger(OPERATION_LOGGERS[operation])
