"""Submission result data models.

This module defines the values produced by a submission: the public
``SubmissionResult`` handed back to callers, and the two internal results
(``PrimaryResult`` for the pharmacy API call, ``AuditOutcome`` for the audit
store write) it is collapsed from.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class SubmissionStatus(Enum):
    """Caller-side status of a single submission."""

    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    ERROR = "error"


class SubmissionKind(Enum):
    """Which pharmacy operation a submission performs."""

    REFILL = "REFILL"
    TRANSFER = "TRANSFER"


@dataclass(frozen=True)
class SubmissionResult:
    """Terminal result of a refill or transfer submission.

    Attributes:
        success: Whether the pharmacy accepted the request
        message: User-facing sentence, safe to display as is
        data: Raw pharmacy response body on success, otherwise None

    Example:
        >>> result = SubmissionResult(success=False, message="Patient not found in system.")
        >>> result.to_dict()
        {'success': False, 'message': 'Patient not found in system.', 'data': None}
    """

    success: bool
    message: str
    data: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {"success": self.success, "message": self.message, "data": self.data}


@dataclass(frozen=True)
class PrimaryResult:
    """Outcome of the call to the pharmacy API.

    Attributes:
        success: Whether the response was a recognized success
        message: User-facing message
        body: Decoded JSON body, None when no body could be decoded
        http_status: HTTP status code, None when no response was received
        processing_time_ms: Round-trip latency in milliseconds
    """

    success: bool
    message: str
    body: Any = None
    http_status: Optional[int] = None
    processing_time_ms: int = 0


@dataclass(frozen=True)
class AuditOutcome:
    """Outcome of the best-effort audit store write.

    Attributes:
        attempted: Whether a write was issued at all
        recorded: Whether the store accepted the record
        error: Failure description for logs, never shown to users
    """

    attempted: bool
    recorded: bool
    error: Optional[str] = None

    @classmethod
    def skipped(cls, reason: str) -> "AuditOutcome":
        return cls(attempted=False, recorded=False, error=reason)


@dataclass(frozen=True)
class SubmissionOutcome:
    """Internal pairing of primary and audit results.

    Only ``primary`` decides what the caller sees; ``audit`` is kept for
    logging and inspection.
    """

    kind: SubmissionKind
    primary: PrimaryResult
    audit: AuditOutcome = field(default_factory=lambda: AuditOutcome.skipped("primary failed"))

    def to_result(self) -> SubmissionResult:
        """Collapse to the public result; the audit outcome never changes it."""
        if self.primary.success:
            return SubmissionResult(
                success=True, message=self.primary.message, data=self.primary.body
            )
        return SubmissionResult(success=False, message=self.primary.message)
