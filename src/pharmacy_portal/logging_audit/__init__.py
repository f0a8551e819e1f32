"""Logging Audit module.

This module provides logging configuration and audit trail functionality.
"""

from .audit import log_audit_event, log_transaction, redact_payload
from .formatters import PIIRedactingFormatter
from .logger import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
    "log_audit_event",
    "log_transaction",
    "redact_payload",
    "PIIRedactingFormatter",
]
