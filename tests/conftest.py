"""
Shared pytest configuration and fixtures.

This module provides fixtures and configuration used across all test suites
(unit and integration tests).
"""

from datetime import date
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from pharmacy_portal.config.schema import (
    AuditStoreConfig,
    BestRXConfig,
    Config,
)
from pharmacy_portal.models.forms import RefillRequest, TransferRequest

# Variables read by load_config; cleared for every test so a developer's
# shell or .env cannot leak credentials into assertions.
PORTAL_ENV_VARS = (
    "BESTRX_PHARMACY_NUMBER",
    "BESTRX_API_KEY",
    "BESTRX_USERNAME",
    "BESTRX_PASSWORD",
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "PHARMACY_PORTAL_REFILL_URL",
    "PHARMACY_PORTAL_TRANSFER_URL",
    "PHARMACY_PORTAL_VERIFY_TLS",
    "PHARMACY_PORTAL_TIMEOUT_CONNECT",
    "PHARMACY_PORTAL_TIMEOUT_READ",
    "PHARMACY_PORTAL_LOG_LEVEL",
    "PHARMACY_PORTAL_LOG_FILE",
    "PHARMACY_PORTAL_REDACT_PII",
)

FIXED_TODAY = date(2024, 6, 1)


@pytest.fixture(autouse=True)
def clean_portal_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove portal environment variables and stub out .env loading."""
    for var in PORTAL_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr("pharmacy_portal.config.manager.load_dotenv", lambda *a, **kw: False)


@pytest.fixture
def project_root() -> Path:
    """
    Return the project root directory.

    Returns:
        Path: Absolute path to the project root directory.
    """
    return Path(__file__).parent.parent


@pytest.fixture
def src_dir(project_root: Path) -> Path:
    return project_root / "src"


@pytest.fixture
def refill_form_data() -> dict[str, Any]:
    """Refill form as posted by the website (camelCase keys)."""
    return {
        "patientName": "Jane Q Doe",
        "dob": "1980-02-14",
        "phone": "(614) 555-1234",
        "email": "jane@example.com",
        "prescriptionNumbers": "111, 222",
        "medicationNames": "Lisinopril",
        "preferredService": "pickup",
        "notes": "",
        "consent": True,
    }


@pytest.fixture
def transfer_form_data() -> dict[str, Any]:
    """Transfer form as posted by the website (camelCase keys)."""
    return {
        "rxNumber": "7654321",
        "rxFillDate": "2024-05-20",
        "transferToPharmacyName": "Main Street Pharmacy",
        "transferToPharmacyAddress1": "12 Main St",
        "transferToPharmacyCity": "Columbus",
        "transferToPharmacyState": "OH",
        "transferToPharmacyZip": "43004",
        "transferToPharmacyPhone": "614-555-9876",
        "consent": True,
    }


@pytest.fixture
def refill_form(refill_form_data: dict[str, Any]) -> RefillRequest:
    return RefillRequest.model_validate(refill_form_data)


@pytest.fixture
def transfer_form(transfer_form_data: dict[str, Any]) -> TransferRequest:
    return TransferRequest.model_validate(transfer_form_data)


@pytest.fixture
def full_config() -> Config:
    """Config with every BestRX credential and the audit store set."""
    return Config(
        bestrx=BestRXConfig(
            pharmacy_number="1234567",
            api_key="test-api-key",
            username="portal-user",
            password="s3cret-pass",
        ),
        audit_store=AuditStoreConfig(
            url="https://example.supabase.co",
            anon_key="anon-key-value",
        ),
    )


@pytest.fixture
def mock_response_factory():
    """Build MagicMock responses shaped like requests.Response."""

    def _make(status_code: int, body: Any = None, json_error: Exception | None = None) -> MagicMock:
        response = MagicMock()
        response.status_code = status_code
        response.content = b"" if body is None else b"{...}"
        if json_error is not None:
            response.json.side_effect = json_error
        else:
            response.json.return_value = body
        return response

    return _make
