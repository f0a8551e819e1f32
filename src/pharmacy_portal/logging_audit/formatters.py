"""Custom log formatters for the pharmacy portal.

This module provides specialized formatters for logging, including PII and
credential redaction.
"""

import logging
import re
from typing import List, Tuple


class PIIRedactingFormatter(logging.Formatter):
    """Formatter that redacts credentials always and patient PII on demand.

    Credential patterns (HTTP Basic values, API keys, passwords, bearer tokens)
    are masked regardless of ``redact_pii``. Patient names, phone numbers and
    dates of birth are masked only when ``redact_pii`` is enabled.

    Attributes:
        redact_pii: Whether to enable PII redaction
        credential_patterns: (regex, replacement) pairs that always apply
        patterns: (regex, replacement) pairs applied when redact_pii is True

    Example:
        >>> formatter = PIIRedactingFormatter(
        ...     fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        ...     redact_pii=True
        ... )
        >>> handler = logging.StreamHandler()
        >>> handler.setFormatter(formatter)
    """

    def __init__(
        self,
        fmt: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt: str | None = None,
        redact_pii: bool = False,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.redact_pii = redact_pii

        self.credential_patterns: List[Tuple[re.Pattern[str], str]] = [
            # Authorization: Basic dXNlcjpwYXNz / Bearer eyJ...
            (re.compile(r'\b(Basic|Bearer)\s+[A-Za-z0-9+/=._-]+'), r'\1 [CREDENTIAL-REDACTED]'),
            # "APIKey": "abc", 'password': 'x', apikey=abc
            (
                re.compile(
                    r'(["\']?(?:APIKey|api_key|apikey|password|p_password|anon_key)["\']?\s*[:=]\s*)'
                    r'["\']?[^"\',\s}]+["\']?',
                    re.IGNORECASE,
                ),
                r'\1[CREDENTIAL-REDACTED]',
            ),
        ]

        self.patterns: List[Tuple[re.Pattern[str], str]] = [
            # name="John Doe", patient_name='Jane Smith', "LastName": "Doe"
            (
                re.compile(r'((?:name|LastName)["\']?\s*[:=]\s*)["\']([^"\']+)["\']', re.IGNORECASE),
                r'\1"[NAME-REDACTED]"',
            ),
            # "Patient: John Doe"
            (re.compile(r'(Patient):\s+([A-Z][a-z]+(?:\s+[A-Z][a-z]+)+)'),
             r'\1: [NAME-REDACTED]'),
            # (614) 555-1234, 614-555-1234, 6145551234
            (re.compile(r'\(?\b\d{3}\)?[\s.-]?\d{3}[\s.-]?\d{4}\b'), '[PHONE-REDACTED]'),
            # DOB as YYYY-MM-DD after a dob key
            (re.compile(r'((?:dob|DOB)["\']?\s*[:=]\s*["\']?)\d{4}-\d{2}-\d{2}'),
             r'\1[DOB-REDACTED]'),
        ]

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with redaction applied.

        Args:
            record: Log record to format

        Returns:
            Formatted log message with credentials (and optionally PII) masked
        """
        original = super().format(record)

        for pattern, replacement in self.credential_patterns:
            original = pattern.sub(replacement, original)

        if self.redact_pii:
            for pattern, replacement in self.patterns:
                original = pattern.sub(replacement, original)

        return original
