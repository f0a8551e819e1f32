"""Mock BestRX refill and transfer endpoints for testing."""

import logging
import time
import uuid
from typing import Any

from flask import Blueprint, Response, jsonify, request

from .config import REFILL_PATH, TRANSFER_PATH, BestRXBehavior, MockServerConfig

bestrx_bp = Blueprint("bestrx", __name__)

bestrx_logger = logging.getLogger("pharmacy_portal.mock_server.bestrx")

_config: MockServerConfig | None = None

# Payloads received since startup, newest last. Read by tests running the
# server in-process.
received_requests: list[dict[str, Any]] = []


def _apply_delay(behavior: BestRXBehavior) -> None:
    if behavior.response_delay_ms > 0:
        bestrx_logger.debug(f"Applying response delay: {behavior.response_delay_ms}ms")
        time.sleep(behavior.response_delay_ms / 1000.0)


def build_refill_response(payload: dict[str, Any], behavior: BestRXBehavior) -> tuple[dict[str, Any], int]:
    """Build the SendRefillRequest reply for a request payload.

    Every requested prescription is echoed back with status OK, or with
    status Error and the configured error code when one is set.

    Returns:
        Tuple of (response body, HTTP status code)
    """
    items = payload.get("RxInRefillRequest") or []
    forced_failure = behavior.error_code is not None or behavior.http_status is not None

    entries = []
    for item in items:
        rx_number = item.get("RxNumber") if isinstance(item, dict) else None
        if forced_failure:
            entry = {"RxNumber": rx_number, "Status": "Error"}
            if behavior.error_code:
                entry["ErrorCode"] = behavior.error_code
            if behavior.error_message:
                entry["ErrorMessage"] = behavior.error_message
        else:
            entry = {"RxNumber": rx_number, "Status": "OK"}
        entries.append(entry)

    return {"RxInRefillResponse": entries}, behavior.http_status or 200


def build_transfer_response(behavior: BestRXBehavior) -> tuple[dict[str, Any], int]:
    """Build the submitrxtransferrequest reply.

    Returns:
        Tuple of (response body, HTTP status code)
    """
    if behavior.error_code is None and behavior.http_status is None:
        return {
            "IsValid": True,
            "RxTransferred": True,
            "TransferID": str(uuid.uuid4()),
        }, 200

    body: dict[str, Any] = {"IsValid": False, "RxTransferred": False}
    if behavior.error_code:
        body["ErrorCode"] = behavior.error_code
    if behavior.error_message:
        body["ErrorMessage"] = behavior.error_message
    return body, behavior.http_status or 200


@bestrx_bp.route(REFILL_PATH, methods=["POST"])
def handle_refill() -> tuple[Response, int]:
    """Handle a refill request.

    The body carries the API key and username; when authentication is
    required and either is missing the reply is HTTP 403 with an empty
    object, matching BestRX.
    """
    behavior = _config.refill_behavior if _config else BestRXBehavior()
    _apply_delay(behavior)

    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        bestrx_logger.warning("Refill request body is not a JSON object")
        return jsonify({"ErrorCode": "ERROR_GENERIC", "ErrorMessage": "Invalid request body"}), 400

    received_requests.append({"endpoint": "refill", "payload": payload})

    if behavior.require_auth and not (payload.get("APIKey") and payload.get("userName")):
        bestrx_logger.warning("Refill request rejected: missing credentials")
        return jsonify({}), 403

    body, status = build_refill_response(payload, behavior)
    bestrx_logger.info(
        f"Refill request for {len(body['RxInRefillResponse'])} prescription(s): HTTP {status}"
    )
    return jsonify(body), status


@bestrx_bp.route(TRANSFER_PATH, methods=["POST"])
def handle_transfer() -> tuple[Response, int]:
    """Handle a transfer request authenticated with HTTP Basic."""
    behavior = _config.transfer_behavior if _config else BestRXBehavior()
    _apply_delay(behavior)

    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        bestrx_logger.warning("Transfer request body is not a JSON object")
        return jsonify({"IsValid": False, "ErrorMessage": "Invalid request body"}), 400

    received_requests.append({"endpoint": "transfer", "payload": payload})

    auth = request.authorization
    if behavior.require_auth and (auth is None or auth.type != "basic" or not auth.username):
        bestrx_logger.warning("Transfer request rejected: missing Basic credentials")
        return jsonify({}), 403

    body, status = build_transfer_response(behavior)
    bestrx_logger.info(f"Transfer request for Rx {payload.get('RxNo')}: HTTP {status}")
    return jsonify(body), status


def register_bestrx_endpoints(app, config: MockServerConfig) -> None:
    """Register the BestRX endpoints with the Flask app.

    Args:
        app: Flask application instance
        config: Mock server configuration
    """
    global _config
    _config = config

    if bestrx_bp.name not in app.blueprints:
        app.register_blueprint(bestrx_bp)
        bestrx_logger.info(f"Registered BestRX endpoints: {REFILL_PATH}, {TRANSFER_PATH}")
    else:
        bestrx_logger.debug("BestRX endpoints already registered")
