"""Mock PostgREST RPC endpoint standing in for the audit store."""

import logging
import random
import time
import uuid
from typing import Any

from flask import Blueprint, Response, jsonify, request

from .config import RPC_PATH_PREFIX, MockServerConfig, RPCStoreBehavior

rpc_bp = Blueprint("rpc", __name__)

rpc_logger = logging.getLogger("pharmacy_portal.mock_server.rpc")

_config: MockServerConfig | None = None

# Accepted calls since startup, newest last
rpc_calls: list[dict[str, Any]] = []


@rpc_bp.route(f"{RPC_PATH_PREFIX}/<function>", methods=["POST"])
def handle_rpc(function: str) -> tuple[Response, int]:
    """Accept an RPC call and return a new record id as a JSON string."""
    behavior = _config.rpc_behavior if _config else RPCStoreBehavior()

    if behavior.response_delay_ms > 0:
        time.sleep(behavior.response_delay_ms / 1000.0)

    if not request.headers.get("apikey"):
        rpc_logger.warning(f"RPC {function} rejected: no apikey header")
        return jsonify({"message": "No API key found in request"}), 401

    params = request.get_json(silent=True)
    if not isinstance(params, dict):
        return jsonify({"message": "Request body must be a JSON object"}), 400

    if behavior.failure_rate > 0 and random.random() < behavior.failure_rate:
        rpc_logger.warning(f"RPC {function} failing (failure_rate={behavior.failure_rate})")
        return jsonify({"message": behavior.failure_message}), 500

    record_id = str(uuid.uuid4())
    rpc_calls.append({"function": function, "params": params, "id": record_id})
    rpc_logger.info(f"RPC {function} stored record {record_id}")
    return jsonify(record_id), 200


def register_rpc_endpoint(app, config: MockServerConfig) -> None:
    """Register the RPC endpoint with the Flask app."""
    global _config
    _config = config

    if rpc_bp.name not in app.blueprints:
        app.register_blueprint(rpc_bp)
        rpc_logger.info(f"Registered RPC endpoint: {RPC_PATH_PREFIX}/<function>")
