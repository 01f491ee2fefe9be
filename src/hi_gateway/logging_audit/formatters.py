"""Custom log formatters for HI Gateway.

This module provides specialized formatters for logging, including PII redaction.
"""

import logging
import re
from typing import List, Tuple


class PIIRedactingFormatter(logging.Formatter):
    """Formatter that redacts Personally Identifiable Information (PII) from log messages.

    Healthcare identifiers (IHI, HPI-I, HPI-O), Medicare card numbers, e-mail
    addresses and name assignments are masked. SOAP payloads logged at DEBUG
    level carry all of these, so redaction is on by default in configuration.

    Attributes:
        redact_pii: Whether to enable PII redaction
        patterns: List of (regex_pattern, replacement_text) tuples for redaction

    Example:
        >>> formatter = PIIRedactingFormatter(redact_pii=True)
        >>> handler = logging.StreamHandler()
        >>> handler.setFormatter(formatter)
    """

    def __init__(
        self,
        fmt: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt: str | None = None,
        redact_pii: bool = False,
    ) -> None:
        """Initialize the PIIRedactingFormatter.

        Args:
            fmt: Log message format string
            datefmt: Date format string (optional)
            redact_pii: Whether to enable PII redaction
        """
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.redact_pii = redact_pii

        self.patterns: List[Tuple[re.Pattern[str], str]] = [
            # Healthcare identifiers: 16 digits starting 8003 (IHI), 8003 61 (HPI-I), 8003 62 (HPI-O)
            (re.compile(r"\b800360\d{10}\b"), "[IHI-REDACTED]"),
            (re.compile(r"\b80036[12]\d{10}\b"), "[HPI-REDACTED]"),
            # Medicare card number: 10 digits, optionally spaced 4-5-1
            (re.compile(r"\b[2-6]\d{3}\s?\d{5}\s?\d\b"), "[MEDICARE-REDACTED]"),
            (re.compile(r"[\w.+-]+@[\w-]+\.[\w.-]+"), "[EMAIL-REDACTED]"),
            # Matches: familyNameField="Smith", givenName=Jane
            (
                re.compile(r"(family[_ ]?name|given[_ ]?name)(Field)?=[\"']?([^\"',|]+)[\"']?", re.IGNORECASE),
                r"\1\2=[NAME-REDACTED]",
            ),
            # Matches: <familyName>Smith</familyName>
            (
                re.compile(r"<((?:\w+:)?(?:familyName|givenName|details))>[^<]*</"),
                r"<\1>[REDACTED]</",
            ),
        ]

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with optional PII redaction.

        Args:
            record: Log record to format

        Returns:
            Formatted log message with PII redacted if enabled
        """
        original = super().format(record)

        if self.redact_pii:
            for pattern, replacement in self.patterns:
                original = pattern.sub(replacement, original)

        return original
