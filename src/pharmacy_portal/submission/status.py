"""Caller-side submission status tracking."""

import logging
from typing import Any, Callable, Optional, TypeVar

from pharmacy_portal.models.responses import SubmissionResult, SubmissionStatus
from pharmacy_portal.utils.exceptions import PharmacyPortalError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_ERROR_MESSAGE = "Submission failed. Please try again."


class SubmissionTracker:
    """Tracks one in-flight submission: idle, submitting, success or error.

    Example:
        >>> tracker = SubmissionTracker()
        >>> result = tracker.run(orchestrator.submit_refill, form)
        >>> tracker.status
        <SubmissionStatus.SUCCESS: 'success'>
    """

    def __init__(self) -> None:
        self.status = SubmissionStatus.IDLE
        self.error: Optional[str] = None

    @property
    def is_submitting(self) -> bool:
        return self.status is SubmissionStatus.SUBMITTING

    def reset(self) -> None:
        self.status = SubmissionStatus.IDLE
        self.error = None

    def run(self, submit: Callable[..., T], *args: Any) -> T:
        """Call ``submit(*args)`` and record how it ended.

        A ``SubmissionResult`` with ``success=False`` counts as an error and
        its message is kept in ``error``. Raised exceptions are recorded and
        re-raised.
        """
        self.status = SubmissionStatus.SUBMITTING
        self.error = None

        try:
            result = submit(*args)
        except PharmacyPortalError as e:
            self.status = SubmissionStatus.ERROR
            self.error = str(e)
            raise
        except Exception:
            self.status = SubmissionStatus.ERROR
            self.error = DEFAULT_ERROR_MESSAGE
            raise

        if isinstance(result, SubmissionResult) and not result.success:
            self.status = SubmissionStatus.ERROR
            self.error = result.message
        else:
            self.status = SubmissionStatus.SUCCESS

        logger.debug(f"Submission finished with status {self.status.value}")
        return result
