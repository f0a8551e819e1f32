"""Shared utilities: exception hierarchy and error classification."""

from pharmacy_portal.utils.exceptions import (
    AuditSinkError,
    ConfigurationError,
    ErrorCategory,
    ErrorInfo,
    PharmacyPortalError,
    SubmissionError,
    TransportError,
    UpstreamRejectionError,
    ValidationError,
    categorize_error,
    create_error_info,
)

__all__ = [
    "AuditSinkError",
    "ConfigurationError",
    "ErrorCategory",
    "ErrorInfo",
    "PharmacyPortalError",
    "SubmissionError",
    "TransportError",
    "UpstreamRejectionError",
    "ValidationError",
    "categorize_error",
    "create_error_info",
]
