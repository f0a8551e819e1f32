"""Integration test fixtures and configuration.

This module provides fixtures for integration tests, including:
- A mock server running on a real port in a background thread
- Portal configuration pointed at that server

The server runs in-process so tests can swap its behavior with
``initialize_app`` and read the requests it received.
"""

import logging
import socket
import threading
import time
from pathlib import Path
from typing import Callable, Generator

import pytest
import requests
from werkzeug.serving import make_server

from pharmacy_portal.config.schema import (
    AuditStoreConfig,
    BestRXConfig,
    Config,
    EndpointsConfig,
    TransportConfig,
)
from pharmacy_portal.mock_server.app import app, initialize_app
from pharmacy_portal.mock_server.config import REFILL_PATH, TRANSFER_PATH, MockServerConfig

logger = logging.getLogger(__name__)


# =============================================================================
# Utility Functions
# =============================================================================


def find_free_port() -> int:
    """Find an available port on localhost.

    Returns:
        int: An available port number.
    """
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        s.listen(1)
        port = s.getsockname()[1]
    return port


def wait_for_server(url: str, timeout: float = 10.0, interval: float = 0.1) -> bool:
    """Wait for server to become available.

    Args:
        url: URL to check (e.g., health endpoint).
        timeout: Maximum time to wait in seconds.
        interval: Time between checks in seconds.

    Returns:
        bool: True if server became available, False if timeout.
    """
    start_time = time.time()
    while time.time() - start_time < timeout:
        try:
            response = requests.get(url, timeout=1)
            if response.status_code == 200:
                return True
        except requests.exceptions.RequestException:
            pass
        time.sleep(interval)
    return False


# =============================================================================
# Mock Server Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def mock_log_path(tmp_path_factory: pytest.TempPathFactory) -> Path:
    return tmp_path_factory.mktemp("mock-logs") / "mock-server.log"


@pytest.fixture(scope="session")
def mock_server(mock_log_path: Path) -> Generator[str, None, None]:
    """Session-scoped mock server on a free port.

    Yields:
        str: Base URL, e.g. "http://127.0.0.1:51234".
    """
    host = "127.0.0.1"
    port = find_free_port()
    initialize_app(MockServerConfig(http_port=port, log_level="WARNING", log_path=str(mock_log_path)))

    server = make_server(host, port, app, threaded=True)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    base_url = f"http://{host}:{port}"
    if not wait_for_server(f"{base_url}/health", timeout=10.0):
        server.shutdown()
        pytest.fail(f"Mock server failed to start at {base_url}")

    logger.info(f"Mock server started at {base_url}")

    yield base_url

    server.shutdown()
    thread.join(timeout=5)
    logger.info("Mock server stopped")


@pytest.fixture
def configure_mock(
    mock_server: str, mock_log_path: Path
) -> Generator[Callable[..., None], None, None]:
    """Swap the running server's behavior for one test.

    Usage:
        def test_rejection(configure_mock):
            configure_mock(transfer_behavior=BestRXBehavior(error_code="ERROR0080"))
    """

    def _configure(**fields) -> None:
        initialize_app(MockServerConfig(log_level="WARNING", log_path=str(mock_log_path), **fields))

    _configure()
    yield _configure
    _configure()


@pytest.fixture
def mock_config(mock_server: str, tmp_path: Path) -> Config:
    """Portal configuration pointed at the mock server with every credential set."""
    return Config(
        endpoints=EndpointsConfig(
            refill_url=f"{mock_server}{REFILL_PATH}",
            transfer_url=f"{mock_server}{TRANSFER_PATH}",
        ),
        bestrx=BestRXConfig(
            pharmacy_number="1234567",
            api_key="integration-key",
            username="integration-user",
            password="integration-pass",
        ),
        audit_store=AuditStoreConfig(url=mock_server, anon_key="integration-anon"),
        transport=TransportConfig(timeout_connect=2, timeout_read=5),
    )
