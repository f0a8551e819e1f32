"""Audit trail functionality for the pharmacy portal.

This module provides structured audit logging for tracking form submissions
and pharmacy API transactions. It complements (does not replace) the audit
store write performed after a successful BestRX submission: log lines are
written even when the store is unreachable.
"""

import json
import time
import uuid
from typing import Any, Dict, Optional

from .logger import get_logger

logger = get_logger(__name__)

# Payload keys that must never reach a log line in clear text
_CREDENTIAL_KEYS = frozenset({"userName", "APIKey"})
_MASK = "***"


def redact_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of a BestRX payload with credential fields masked.

    Args:
        payload: Refill or transfer payload

    Returns:
        Shallow copy with ``userName`` and ``APIKey`` replaced by ``***``

    Example:
        >>> redact_payload({"userName": "u", "APIKey": "k", "RxNo": "1"})
        {'userName': '***', 'APIKey': '***', 'RxNo': '1'}
    """
    return {
        key: (_MASK if key in _CREDENTIAL_KEYS and value else value)
        for key, value in payload.items()
    }


def log_audit_event(event_type: str, details: Dict[str, Any]) -> None:
    """Log an audit trail event.

    Creates a structured audit log entry with standard fields. Audit events
    are logged at INFO level for successful operations, WARNING for
    non-fatal failures (``status="degraded"``) and ERROR for failures.

    Args:
        event_type: Type of operation (e.g., "REFILL_SUBMITTED",
                   "TRANSFER_REJECTED", "AUDIT_WRITE_FAILED")
        details: Dictionary with event details. Common fields include:
                - status: "success", "failure" or "degraded"
                - http_status: Upstream HTTP status code
                - duration: Operation duration in seconds
                - error_message: Error details (if status is failure)
                - correlation_id: Optional correlation ID for tracking related events

    Example:
        >>> log_audit_event("REFILL_SUBMITTED", {
        ...     "status": "success",
        ...     "rx_count": 2,
        ...     "duration": 0.8
        ... })
    """
    details = dict(details)
    details.setdefault("timestamp", time.time())
    details.setdefault("correlation_id", str(uuid.uuid4()))

    message_parts = [f"AUDIT [{event_type}]"]

    field_order = [
        "status",
        "http_status",
        "rx_count",
        "duration",
        "error_message",
        "correlation_id",
    ]

    for field in field_order:
        if field in details:
            value = details[field]
            if field == "duration" and isinstance(value, (int, float)):
                message_parts.append(f"{field}={value:.2f}s")
            else:
                message_parts.append(f"{field}={value}")

    for key, value in details.items():
        if key not in field_order and key != "timestamp":
            message_parts.append(f"{key}={value}")

    audit_message = " | ".join(message_parts)

    status = details.get("status", "unknown")
    if status == "failure":
        logger.error(audit_message)
    elif status == "degraded":
        logger.warning(audit_message)
    else:
        logger.info(audit_message)


def log_transaction(
    transaction_type: str,
    request: Dict[str, Any],
    response: Optional[Any],
    status: str = "success",
    correlation_id: Optional[str] = None,
) -> str:
    """Log a complete pharmacy API transaction with request and response.

    The request is passed through :func:`redact_payload` before it is
    serialized. Bodies are logged at DEBUG level to keep INFO logs short.

    Args:
        transaction_type: Type of transaction (e.g., "BESTRX_REFILL")
        request: Request payload (credentials are masked before logging)
        response: Decoded response body, or None if no body was received
        status: Transaction status ("success" or "failure")
        correlation_id: Correlation ID; generated if not given

    Returns:
        The correlation ID used for the log lines
    """
    correlation_id = correlation_id or str(uuid.uuid4())
    request_text = json.dumps(redact_payload(request), default=str)
    response_text = json.dumps(response, default=str) if response is not None else ""

    logger.info(
        f"TRANSACTION [{transaction_type}] | "
        f"status={status} | "
        f"correlation_id={correlation_id} | "
        f"request_size={len(request_text)} bytes | "
        f"response_size={len(response_text)} bytes"
    )

    logger.debug(
        f"TRANSACTION REQUEST [{transaction_type}] | "
        f"correlation_id={correlation_id}\n"
        f"{request_text}"
    )

    if response is not None:
        logger.debug(
            f"TRANSACTION RESPONSE [{transaction_type}] | "
            f"correlation_id={correlation_id}\n"
            f"{response_text}"
        )

    return correlation_id
