"""Unit tests for the pooled HTTP session."""

import pytest

from pharmacy_portal.config.schema import TransportConfig
from pharmacy_portal.transport.http_client import ConnectionPool, ConnectionPoolConfig


class TestConnectionPoolConfig:
    """Tests for ConnectionPoolConfig."""

    def test_from_transport_config(self):
        # Arrange
        transport = TransportConfig(verify_tls=False, timeout_connect=3, timeout_read=7)

        # Act
        config = ConnectionPoolConfig.from_transport_config(transport)

        # Assert
        assert config.timeout == (3, 7)
        assert config.verify_tls is False

    @pytest.mark.parametrize(
        "kwargs",
        [{"max_connections": 0}, {"connect_timeout": 0}, {"read_timeout": 0}],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            ConnectionPoolConfig(**kwargs)


class TestConnectionPool:
    """Tests for ConnectionPool."""

    def test_session_reused(self):
        with ConnectionPool() as pool:
            assert pool.get_session() is pool.get_session()

    def test_retries_disabled(self):
        # Arrange
        pool = ConnectionPool()

        # Act
        adapter = pool.get_session().get_adapter("https://example.com")

        # Assert
        assert adapter.max_retries.total == 0
        pool.close()

    def test_verify_flag_applied(self):
        pool = ConnectionPool(ConnectionPoolConfig(verify_tls=False))
        assert pool.get_session().verify is False
        pool.close()

    def test_close_resets_session(self):
        # Arrange
        pool = ConnectionPool()
        first = pool.get_session()

        # Act
        pool.close()

        # Assert
        assert pool.get_session() is not first
        pool.close()
