"""Submission module.

This module sequences pharmacy API calls, audit store writes and direct
form submissions.
"""

from pharmacy_portal.submission.forms import FormSubmissionService
from pharmacy_portal.submission.orchestrator import (
    SubmissionOrchestrator,
    refill_audit_params,
    transfer_audit_params,
)
from pharmacy_portal.submission.status import SubmissionTracker

__all__ = [
    "FormSubmissionService",
    "SubmissionOrchestrator",
    "SubmissionTracker",
    "refill_audit_params",
    "transfer_audit_params",
]
