"""Flask application for mock BestRX and audit store endpoints."""

import logging
import signal
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path

from flask import Flask, jsonify, request

from pharmacy_portal import __version__

from .bestrx_endpoints import bestrx_bp, register_bestrx_endpoints
from .config import MockServerConfig, load_config
from .rpc_endpoint import register_rpc_endpoint, rpc_bp

# Server state tracking
_server_start_time: datetime | None = None
_request_count: int = 0
_config: MockServerConfig | None = None

app = Flask(__name__)
app.register_blueprint(bestrx_bp)
app.register_blueprint(rpc_bp)

logger = logging.getLogger("pharmacy_portal.mock_server")


def setup_logging(config: MockServerConfig) -> logging.Logger:
    """Configure logging for mock server with rotation.

    Args:
        config: Mock server configuration

    Returns:
        Configured logger instance
    """
    logger.setLevel(config.log_level)
    logger.handlers.clear()

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    log_path = Path(config.log_path)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5,
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    return logger


@app.before_request
def log_request():
    """Log all incoming requests (method and path only; bodies carry PII)."""
    global _request_count
    _request_count += 1

    logger.info(
        f"Request #{_request_count}: {request.method} {request.path} "
        f"(Content-Length: {request.content_length or 0})"
    )


@app.route("/health", methods=["GET"])
def health_check():
    """Health check endpoint."""
    uptime_seconds = 0
    if _server_start_time:
        uptime_seconds = int((datetime.now(timezone.utc) - _server_start_time).total_seconds())

    config = _config or MockServerConfig()

    return jsonify({
        "status": "healthy",
        "version": __version__,
        "port": config.http_port,
        "endpoints": config.endpoints,
        "uptime_seconds": uptime_seconds,
        "request_count": _request_count,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }), 200


@app.errorhandler(404)
def not_found(error):
    return jsonify({"message": f"No mock endpoint at {request.path}"}), 404


@app.errorhandler(500)
def internal_error(error):
    logger.error(f"Internal error: {error}")
    return jsonify({"message": "Internal Server Error"}), 500


def setup_graceful_shutdown():
    """Register SIGTERM/SIGINT handlers (main thread only)."""
    def shutdown_handler(signum, frame):
        logger.info(f"Received shutdown signal ({signum}), stopping mock server")
        sys.exit(0)

    try:
        signal.signal(signal.SIGTERM, shutdown_handler)
        signal.signal(signal.SIGINT, shutdown_handler)
    except ValueError as e:
        # Signal registration only works in main thread
        logger.warning(
            f"Could not register signal handlers (not in main thread): {e}. "
            f"Graceful shutdown via signals will not be available."
        )


def initialize_app(config: MockServerConfig) -> None:
    """Initialize Flask app with configuration.

    May be called again to swap the configured behavior of a running app.

    Args:
        config: Mock server configuration
    """
    global _config, _server_start_time
    _config = config
    _server_start_time = datetime.now(timezone.utc)

    setup_logging(config)
    register_bestrx_endpoints(app, config)
    register_rpc_endpoint(app, config)
    logger.info("Mock server application initialized")


def run_server(
    host: str = "127.0.0.1",
    port: int = 8080,
    config: MockServerConfig | None = None,
    debug: bool = False,
) -> None:
    """Run the Flask mock server over plain HTTP.

    Args:
        host: Host address
        port: Port number
        config: Mock server configuration (loads from file if not provided)
        debug: Enable debug mode
    """
    if config is None:
        config = load_config()

    config = config.model_copy(update={"host": host, "http_port": port})
    initialize_app(config)
    setup_graceful_shutdown()

    logger.info(f"Starting BestRX mock server on http://{host}:{port}")
    logger.info(f"Health check available at: http://{host}:{port}/health")

    app.run(
        host=host,
        port=port,
        debug=debug,
        use_reloader=False,
    )


if __name__ == "__main__":
    run_server()
