"""Custom exception classes for the pharmacy portal.

All exceptions inherit from PharmacyPortalError to allow catching all custom exceptions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import requests


class PharmacyPortalError(Exception):
    """Base exception for all pharmacy portal custom exceptions."""

    pass


class ValidationError(PharmacyPortalError):
    """Raised when form data validation fails.

    Examples:
        - Missing patient name
        - Date of birth not in YYYY-MM-DD format
        - Consent not given
    """

    pass


class ConfigurationError(PharmacyPortalError):
    """Raised when configuration loading or validation fails.

    Examples:
        - Missing BestRX credentials
        - Invalid configuration file format
        - Audit store URL not configured
    """

    pass


class TransportError(PharmacyPortalError):
    """Raised when network/transport issues occur.

    Examples:
        - Connection refused
        - Read timeout
        - Response body is not JSON
    """

    pass


class UpstreamRejectionError(PharmacyPortalError):
    """Raised when the pharmacy API rejects a request.

    Carries the user-facing message that was mapped from the BestRX
    error code or HTTP status.
    """

    pass


class AuditSinkError(PharmacyPortalError):
    """Raised when an RPC call to the audit store fails.

    Examples:
        - Store returned HTTP 4xx/5xx
        - Store unreachable
    """

    pass


class SubmissionError(PharmacyPortalError):
    """Raised when a direct form submission (contact, waitlist, splash) fails.

    The message is always safe to show to the end user; the underlying
    cause is chained via ``__cause__``.
    """

    pass


class ErrorCategory(Enum):
    """Error categorization used for logging and CLI exit codes.

    Attributes:
        CONFIGURATION: Required setting missing, fails before any network call
        VALIDATION: Malformed input rejected before reaching the pharmacy API
        UPSTREAM_REJECTION: Pharmacy API returned a recognized failure
        TRANSPORT: Network, timeout or response parse failure
        AUDIT_SINK: Audit store write failed (never fatal for refill/transfer)
    """

    CONFIGURATION = "CONFIGURATION"
    VALIDATION = "VALIDATION"
    UPSTREAM_REJECTION = "UPSTREAM_REJECTION"
    TRANSPORT = "TRANSPORT"
    AUDIT_SINK = "AUDIT_SINK"


@dataclass
class ErrorInfo:
    """Structured error information for logging.

    Attributes:
        category: Error category
        error_type: Exception class name (e.g., "ConnectionError")
        message: Error message
        is_fatal: Whether the error terminates the submission
        technical_details: Optional chained cause for debugging
    """

    category: ErrorCategory
    error_type: str
    message: str
    is_fatal: bool
    technical_details: Optional[str] = None


def categorize_error(exception: Exception) -> ErrorCategory:
    """Categorize an exception.

    Args:
        exception: The exception to categorize

    Returns:
        ErrorCategory for the exception

    Example:
        >>> categorize_error(requests.ConnectionError("Network unreachable"))
        ErrorCategory.TRANSPORT
        >>> categorize_error(ConfigurationError("BESTRX_API_KEY missing"))
        ErrorCategory.CONFIGURATION
    """
    if isinstance(exception, ConfigurationError):
        return ErrorCategory.CONFIGURATION

    if isinstance(exception, ValidationError):
        return ErrorCategory.VALIDATION

    if isinstance(exception, (AuditSinkError, SubmissionError)):
        return ErrorCategory.AUDIT_SINK

    if isinstance(exception, UpstreamRejectionError):
        return ErrorCategory.UPSTREAM_REJECTION

    if isinstance(exception, (TransportError, requests.RequestException)):
        return ErrorCategory.TRANSPORT

    # Anything else escaping the HTTP layer (JSON decode errors included)
    return ErrorCategory.TRANSPORT


def create_error_info(exception: Exception) -> ErrorInfo:
    """Create structured error information from exception.

    Args:
        exception: Exception that occurred

    Returns:
        ErrorInfo with categorization
    """
    category = categorize_error(exception)

    technical_details = None
    if exception.__cause__ is not None:
        technical_details = (
            f"Caused by: {type(exception.__cause__).__name__}: {exception.__cause__}"
        )

    return ErrorInfo(
        category=category,
        error_type=type(exception).__name__,
        message=str(exception),
        is_fatal=not isinstance(exception, AuditSinkError),
        technical_details=technical_details,
    )
