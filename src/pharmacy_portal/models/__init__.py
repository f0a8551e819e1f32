"""Models module.

This module provides form models and result dataclasses for the application.
"""

from pharmacy_portal.models.forms import (
    ContactReason,
    ContactRequest,
    RefillRequest,
    ServicePreference,
    SplashSignup,
    TransferRequest,
    WaitlistRequest,
)
from pharmacy_portal.models.responses import (
    AuditOutcome,
    PrimaryResult,
    SubmissionKind,
    SubmissionOutcome,
    SubmissionResult,
    SubmissionStatus,
)

__all__ = [
    "ContactReason",
    "ContactRequest",
    "RefillRequest",
    "ServicePreference",
    "SplashSignup",
    "TransferRequest",
    "WaitlistRequest",
    "AuditOutcome",
    "PrimaryResult",
    "SubmissionKind",
    "SubmissionOutcome",
    "SubmissionResult",
    "SubmissionStatus",
]
