"""Mock BestRX and audit store server for local testing."""

from pharmacy_portal.mock_server.config import MockServerConfig, load_config

__all__ = ["MockServerConfig", "load_config"]
