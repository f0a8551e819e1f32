"""Unit tests for SupabaseRPCClient."""

from unittest.mock import MagicMock

import pytest
import requests

from pharmacy_portal.audit_store.rpc_client import SupabaseRPCClient
from pharmacy_portal.config.schema import AuditStoreConfig
from pharmacy_portal.utils.exceptions import AuditSinkError, ConfigurationError


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def client(session):
    pool = MagicMock()
    pool.get_session.return_value = session
    pool.config.timeout = (10, 30)
    return SupabaseRPCClient("https://example.supabase.co/", "anon-key-value", pool)


class TestSupabaseRPCClient:
    """Tests for RPC invocation."""

    def test_posts_to_rpc_path(self, client, session, mock_response_factory):
        # Arrange
        session.post.return_value = mock_response_factory(200, "abc-123")

        # Act
        result = client.rpc("submit_waitlist_entry", {"p_email": "a@b.co"})

        # Assert
        assert result == "abc-123"
        args, kwargs = session.post.call_args
        assert args[0] == "https://example.supabase.co/rest/v1/rpc/submit_waitlist_entry"
        assert kwargs["json"] == {"p_email": "a@b.co"}
        assert kwargs["headers"]["apikey"] == "anon-key-value"
        assert kwargs["headers"]["Authorization"] == "Bearer anon-key-value"

    def test_empty_body_returns_none(self, client, session, mock_response_factory):
        session.post.return_value = mock_response_factory(204, None)
        assert client.rpc("fn", {}) is None

    def test_http_error_includes_postgrest_message(self, client, session, mock_response_factory):
        # Arrange
        session.post.return_value = mock_response_factory(400, {"message": "null value in column"})

        # Act & Assert
        with pytest.raises(AuditSinkError, match="HTTP 400: null value in column"):
            client.rpc("submit_refill_request", {})

    def test_connection_error(self, client, session):
        # Arrange
        session.post.side_effect = requests.ConnectionError("refused")

        # Act & Assert
        with pytest.raises(AuditSinkError, match="could not reach"):
            client.rpc("fn", {})

    def test_error_does_not_leak_key(self, client, session, mock_response_factory):
        # Arrange
        session.post.return_value = mock_response_factory(500, {})

        # Act
        with pytest.raises(AuditSinkError) as exc_info:
            client.rpc("fn", {})

        # Assert
        assert "anon-key-value" not in str(exc_info.value)

    def test_from_config_requires_both_values(self):
        with pytest.raises(ConfigurationError):
            SupabaseRPCClient.from_config(AuditStoreConfig(url="https://x.supabase.co"), MagicMock())
