"""Unit tests for mock server module."""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from pharmacy_portal.mock_server import bestrx_endpoints, rpc_endpoint
from pharmacy_portal.mock_server.app import app, initialize_app
from pharmacy_portal.mock_server.config import (
    REFILL_PATH,
    TRANSFER_PATH,
    BestRXBehavior,
    MockServerConfig,
    RPCStoreBehavior,
    load_config,
)

REFILL_PAYLOAD = {
    "userName": "user",
    "APIKey": "key",
    "PharmacyNumber": "1",
    "LastName": "Doe",
    "DOB": "1980-02-14",
    "Phone": "6145551234",
    "DeliveryOption": "pickup",
    "RxInRefillRequest": [
        {"RxNumber": "111", "MedicationName": "A"},
        {"RxNumber": "222", "MedicationName": ""},
    ],
}
BASIC_AUTH = {"Authorization": "Basic dXNlcjpwYXNz"}


@pytest.fixture
def make_client(tmp_path: Path):
    """Initialize the app with the given config fields and return a test client."""

    def _make(**fields):
        config = MockServerConfig(log_path=str(tmp_path / "mock.log"), **fields)
        initialize_app(config)
        app.config["TESTING"] = True
        return app.test_client()

    yield _make
    initialize_app(MockServerConfig(log_path=str(tmp_path / "mock.log")))


class TestMockServerConfig:
    """Tests for MockServerConfig and load_config."""

    def test_defaults(self):
        config = MockServerConfig()
        assert config.host == "127.0.0.1"
        assert config.http_port == 8080
        assert config.refill_behavior.require_auth is True
        assert config.rpc_behavior.failure_rate == 0.0

    def test_invalid_port(self):
        with pytest.raises(ValueError, match="Invalid port"):
            MockServerConfig(http_port=70000)

    def test_load_from_file(self, tmp_path: Path):
        # Arrange
        config_file = tmp_path / "mock.json"
        config_file.write_text(
            json.dumps({"http_port": 9090, "transfer_behavior": {"error_code": "ERROR0080"}})
        )

        # Act
        config = load_config(config_file)

        # Assert
        assert config.http_port == 9090
        assert config.transfer_behavior.error_code == "ERROR0080"

    def test_missing_explicit_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.json")

    def test_env_override(self, tmp_path: Path):
        with patch.dict(os.environ, {"MOCK_SERVER_HTTP_PORT": "9191"}):
            config = load_config(_write(tmp_path, {}))
        assert config.http_port == 9191

    def test_env_override_not_integer(self, tmp_path: Path):
        with patch.dict(os.environ, {"MOCK_SERVER_HTTP_PORT": "eighty"}):
            with pytest.raises(ValueError, match="Must be an integer"):
                load_config(_write(tmp_path, {}))


def _write(tmp_path: Path, data: dict) -> Path:
    path = tmp_path / "mock-config.json"
    path.write_text(json.dumps(data))
    return path


class TestHealth:
    """Tests for /health."""

    def test_health(self, make_client):
        # Act
        response = make_client().get("/health")

        # Assert
        assert response.status_code == 200
        data = response.get_json()
        assert data["status"] == "healthy"
        assert REFILL_PATH in data["endpoints"]


class TestRefillEndpoint:
    """Tests for the mock refill endpoint."""

    def test_all_ok(self, make_client):
        # Act
        response = make_client().post(REFILL_PATH, json=REFILL_PAYLOAD)

        # Assert
        assert response.status_code == 200
        items = response.get_json()["RxInRefillResponse"]
        assert [i["Status"] for i in items] == ["OK", "OK"]
        assert [i["RxNumber"] for i in items] == ["111", "222"]

    def test_records_request(self, make_client):
        # Arrange
        client = make_client()
        before = len(bestrx_endpoints.received_requests)

        # Act
        client.post(REFILL_PATH, json=REFILL_PAYLOAD)

        # Assert
        assert len(bestrx_endpoints.received_requests) == before + 1
        assert bestrx_endpoints.received_requests[-1]["endpoint"] == "refill"

    def test_missing_credentials_403(self, make_client):
        # Arrange
        payload = dict(REFILL_PAYLOAD, APIKey="")

        # Act
        response = make_client().post(REFILL_PATH, json=payload)

        # Assert
        assert response.status_code == 403
        assert response.get_json() == {}

    def test_forced_error_code(self, make_client):
        # Arrange
        client = make_client(refill_behavior=BestRXBehavior(error_code="ERROR_RX_INACTIVE"))

        # Act
        response = client.post(REFILL_PATH, json=REFILL_PAYLOAD)

        # Assert
        assert response.status_code == 200
        item = response.get_json()["RxInRefillResponse"][0]
        assert item["Status"] == "Error"
        assert item["ErrorCode"] == "ERROR_RX_INACTIVE"

    def test_forced_http_status(self, make_client):
        client = make_client(refill_behavior=BestRXBehavior(http_status=500))
        assert client.post(REFILL_PATH, json=REFILL_PAYLOAD).status_code == 500

    def test_non_json_body(self, make_client):
        response = make_client().post(REFILL_PATH, data="not json", content_type="text/plain")
        assert response.status_code == 400


class TestTransferEndpoint:
    """Tests for the mock transfer endpoint."""

    def test_success(self, make_client):
        # Act
        response = make_client().post(TRANSFER_PATH, json={"RxNo": "1"}, headers=BASIC_AUTH)

        # Assert
        body = response.get_json()
        assert response.status_code == 200
        assert body["IsValid"] is True
        assert body["RxTransferred"] is True

    def test_requires_basic_auth(self, make_client):
        response = make_client().post(TRANSFER_PATH, json={"RxNo": "1"})
        assert response.status_code == 403

    def test_auth_optional(self, make_client):
        client = make_client(transfer_behavior=BestRXBehavior(require_auth=False))
        assert client.post(TRANSFER_PATH, json={"RxNo": "1"}).status_code == 200

    def test_forced_error(self, make_client):
        # Arrange
        client = make_client(
            transfer_behavior=BestRXBehavior(error_code="ERROR0069", error_message="Cannot transfer")
        )

        # Act
        body = client.post(TRANSFER_PATH, json={"RxNo": "1"}, headers=BASIC_AUTH).get_json()

        # Assert
        assert body == {
            "IsValid": False,
            "RxTransferred": False,
            "ErrorCode": "ERROR0069",
            "ErrorMessage": "Cannot transfer",
        }


class TestRPCEndpoint:
    """Tests for the mock RPC endpoint."""

    def test_stores_call(self, make_client):
        # Arrange
        client = make_client()

        # Act
        response = client.post(
            "/rest/v1/rpc/submit_waitlist_entry",
            json={"p_email": "a@b.co"},
            headers={"apikey": "anon"},
        )

        # Assert
        assert response.status_code == 200
        assert rpc_endpoint.rpc_calls[-1]["function"] == "submit_waitlist_entry"
        assert response.get_json() == rpc_endpoint.rpc_calls[-1]["id"]

    def test_requires_apikey(self, make_client):
        response = make_client().post("/rest/v1/rpc/fn", json={})
        assert response.status_code == 401

    def test_failure_rate(self, make_client):
        # Arrange
        client = make_client(rpc_behavior=RPCStoreBehavior(failure_rate=1.0, failure_message="db down"))

        # Act
        response = client.post("/rest/v1/rpc/fn", json={}, headers={"apikey": "anon"})

        # Assert
        assert response.status_code == 500
        assert response.get_json() == {"message": "db down"}

    def test_unknown_path(self, make_client):
        assert make_client().get("/nope").status_code == 404
