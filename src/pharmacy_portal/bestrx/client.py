"""BestRX REST client.

Posts refill and transfer payloads to BestRX and interprets the response.
Every call produces a ``PrimaryResult``; transport and parse failures are
converted to the fixed connectivity message and never raised to the caller.
"""

import logging
import time
from typing import Any, Optional

import requests

from pharmacy_portal.bestrx.errors import (
    CONNECTION_FAILED_MESSAGE,
    REFILL_SUCCESS_MESSAGE,
    REFILL_UNPROCESSED_MESSAGE,
    TRANSFER_SUCCESS_MESSAGE,
    TRANSFER_UNPROCESSED_MESSAGE,
    map_error_code,
)
from pharmacy_portal.bestrx.responses import (
    RefillAccepted,
    TransferAccepted,
    TransferRejected,
    UnrecognizedResponse,
    decode_refill_response,
    decode_transfer_response,
)
from pharmacy_portal.config.schema import EndpointsConfig
from pharmacy_portal.logging_audit.audit import log_transaction
from pharmacy_portal.models.responses import PrimaryResult
from pharmacy_portal.transport.http_client import ConnectionPool
from pharmacy_portal.utils.exceptions import TransportError

logger = logging.getLogger(__name__)


def _is_success_status(status_code: int) -> bool:
    return 200 <= status_code < 300


class BestRXClient:
    """Client for the BestRX refill and transfer endpoints.

    Attributes:
        endpoints: Refill and transfer URLs
        pool: Connection pool providing the HTTP session

    Example:
        >>> client = BestRXClient(config.endpoints, ConnectionPool())
        >>> result = client.send_refill(payload)
        >>> result.success
        True
    """

    def __init__(self, endpoints: EndpointsConfig, pool: ConnectionPool) -> None:
        self.endpoints = endpoints
        self.pool = pool

        for url in (endpoints.refill_url, endpoints.transfer_url):
            if url.startswith("http://"):
                logger.warning(
                    f"SECURITY WARNING: Using HTTP transport (not HTTPS) for {url}. "
                    "This is only acceptable for the local mock server."
                )

    def send_refill(self, payload: dict[str, Any]) -> PrimaryResult:
        """Submit a refill payload.

        Args:
            payload: Body built by ``build_refill_payload``

        Returns:
            PrimaryResult; ``body`` holds the raw response on success
        """
        return self._send(
            transaction_type="BESTRX_REFILL",
            url=self.endpoints.refill_url,
            payload=payload,
            headers={"Content-Type": "application/json"},
            interpret=self._interpret_refill,
        )

    def send_transfer(self, payload: dict[str, Any], auth_header: str) -> PrimaryResult:
        """Submit a transfer payload with HTTP Basic authentication.

        Args:
            payload: Body built by ``build_transfer_payload``
            auth_header: Value built by ``build_basic_auth_header``

        Returns:
            PrimaryResult; ``body`` holds the raw response on success
        """
        return self._send(
            transaction_type="BESTRX_TRANSFER",
            url=self.endpoints.transfer_url,
            payload=payload,
            headers={
                "Content-Type": "application/json",
                "Authorization": auth_header,
            },
            interpret=self._interpret_transfer,
        )

    def _send(self, transaction_type, url, payload, headers, interpret) -> PrimaryResult:
        start_time = time.time()
        logger.info(f"Submitting {transaction_type} to {url}")

        try:
            status_code, body = self._post(url, payload, headers)
        except TransportError as e:
            processing_time_ms = int((time.time() - start_time) * 1000)
            logger.error(f"{transaction_type} transport failure: {e.__cause__ or e}")
            log_transaction(transaction_type, payload, None, status="failure")
            return PrimaryResult(
                success=False,
                message=CONNECTION_FAILED_MESSAGE,
                processing_time_ms=processing_time_ms,
            )

        processing_time_ms = int((time.time() - start_time) * 1000)
        result = interpret(status_code, body, processing_time_ms)

        log_transaction(
            transaction_type,
            payload,
            body,
            status="success" if result.success else "failure",
        )
        logger.info(
            f"{transaction_type} completed: success={result.success}, "
            f"http_status={status_code}, time={processing_time_ms}ms"
        )
        return result

    def _post(self, url: str, payload: dict[str, Any], headers: dict[str, str]) -> tuple[int, Any]:
        """POST JSON and decode the JSON response.

        Raises:
            TransportError: On connection failure, timeout, or a non-JSON body
        """
        session = self.pool.get_session()
        try:
            response = session.post(
                url,
                json=payload,
                headers=headers,
                timeout=self.pool.config.timeout,
            )
            body = response.json()
        except requests.Timeout as e:
            raise TransportError(f"Request to {url} timed out") from e
        except requests.exceptions.JSONDecodeError as e:
            raise TransportError(f"Response from {url} is not valid JSON") from e
        except requests.RequestException as e:
            raise TransportError(f"Request to {url} failed") from e
        except ValueError as e:
            raise TransportError(f"Response from {url} is not valid JSON") from e

        return response.status_code, body

    def _interpret_refill(self, status_code: int, body: Any, processing_time_ms: int) -> PrimaryResult:
        decoded = decode_refill_response(body)

        if _is_success_status(status_code) and isinstance(decoded, RefillAccepted):
            return PrimaryResult(
                success=True,
                message=REFILL_SUCCESS_MESSAGE,
                body=body,
                http_status=status_code,
                processing_time_ms=processing_time_ms,
            )

        extracted: Optional[str] = None
        if not isinstance(decoded, UnrecognizedResponse) and decoded.first_failure is not None:
            extracted = decoded.first_failure.to_user_message(status_code)

        if _is_success_status(status_code):
            fallback = REFILL_UNPROCESSED_MESSAGE
        else:
            fallback = map_error_code(None, status_code)

        return PrimaryResult(
            success=False,
            message=extracted or fallback,
            body=body,
            http_status=status_code,
            processing_time_ms=processing_time_ms,
        )

    def _interpret_transfer(self, status_code: int, body: Any, processing_time_ms: int) -> PrimaryResult:
        decoded = decode_transfer_response(body)

        if _is_success_status(status_code) and isinstance(decoded, TransferAccepted):
            return PrimaryResult(
                success=True,
                message=TRANSFER_SUCCESS_MESSAGE,
                body=body,
                http_status=status_code,
                processing_time_ms=processing_time_ms,
            )

        extracted: Optional[str] = None
        if isinstance(decoded, TransferRejected):
            extracted = decoded.detail.to_user_message(status_code)

        if _is_success_status(status_code):
            fallback = TRANSFER_UNPROCESSED_MESSAGE
        else:
            fallback = map_error_code(None, status_code)

        return PrimaryResult(
            success=False,
            message=extracted or fallback,
            body=body,
            http_status=status_code,
            processing_time_ms=processing_time_ms,
        )
