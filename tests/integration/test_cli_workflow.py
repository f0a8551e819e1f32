"""Integration tests for CLI workflows.

Runs the pharmacy-portal commands against the mock server, configured only
through environment variables the way a deployment would be.
"""

import json
import socket
from pathlib import Path

import pytest
from click.testing import CliRunner

from pharmacy_portal.cli.main import cli
from pharmacy_portal.mock_server import rpc_endpoint
from pharmacy_portal.mock_server.config import REFILL_PATH, TRANSFER_PATH, BestRXBehavior

pytestmark = pytest.mark.integration


@pytest.fixture
def portal_env(mock_server: str, configure_mock, monkeypatch: pytest.MonkeyPatch) -> str:
    monkeypatch.setenv("PHARMACY_PORTAL_REFILL_URL", f"{mock_server}{REFILL_PATH}")
    monkeypatch.setenv("PHARMACY_PORTAL_TRANSFER_URL", f"{mock_server}{TRANSFER_PATH}")
    monkeypatch.setenv("BESTRX_PHARMACY_NUMBER", "1234567")
    monkeypatch.setenv("BESTRX_API_KEY", "cli-secret-key")
    monkeypatch.setenv("BESTRX_USERNAME", "cli-user")
    monkeypatch.setenv("BESTRX_PASSWORD", "cli-secret-pass")
    monkeypatch.setenv("SUPABASE_URL", mock_server)
    monkeypatch.setenv("SUPABASE_ANON_KEY", "cli-anon")
    return mock_server


class TestCLIWorkflows:
    """Integration tests for complete CLI workflows."""

    def test_dry_run_then_submit_refill(self, portal_env, tmp_path: Path, refill_form_data):
        """Preview the payload, then send it and save the outcome."""
        # Arrange
        runner = CliRunner()
        log_file = tmp_path / "portal.log"
        form_file = tmp_path / "refill.json"
        form_file.write_text(json.dumps(refill_form_data))
        output = tmp_path / "results" / "refill.json"

        # Act - Step 1: Dry run
        preview = runner.invoke(
            cli, ["--log-file", str(log_file), "refill", "submit", str(form_file), "--dry-run"]
        )

        # Assert - nothing missing, credentials masked
        assert preview.exit_code == 0
        assert "missing credentials" not in preview.output
        assert "cli-secret-key" not in preview.output

        # Act - Step 2: Submit
        result = runner.invoke(
            cli,
            ["--log-file", str(log_file), "refill", "submit", str(form_file), "--output", str(output)],
        )

        # Assert
        assert result.exit_code == 0
        assert "Refill request submitted successfully" in result.output
        saved = json.loads(output.read_text())
        assert saved["success"] is True
        assert saved["audit"]["recorded"] is True
        assert "cli-secret-key" not in log_file.read_text()

    def test_transfer_rejection_exit_code(
        self, portal_env, configure_mock, tmp_path: Path, transfer_form_data
    ):
        # Arrange
        configure_mock(transfer_behavior=BestRXBehavior(error_code="ERROR0027"))
        form_file = tmp_path / "transfer.json"
        form_file.write_text(json.dumps(transfer_form_data))

        # Act
        result = CliRunner().invoke(
            cli, ["--log-file", str(tmp_path / "portal.log"), "transfer", "submit", str(form_file)]
        )

        # Assert
        assert result.exit_code == 2
        assert "Prescription not found. Please verify the prescription number." in result.output

    def test_contact_form_saved(self, portal_env, tmp_path: Path):
        # Arrange
        form_file = tmp_path / "contact.json"
        form_file.write_text(
            json.dumps(
                {
                    "name": "Sam Lee",
                    "phone": "614-555-0000",
                    "email": "sam@example.com",
                    "reason": "general",
                    "message": "Do you deliver on weekends?",
                    "consent": True,
                }
            )
        )

        # Act
        result = CliRunner().invoke(
            cli, ["--log-file", str(tmp_path / "portal.log"), "forms", "contact", str(form_file)]
        )

        # Assert
        assert result.exit_code == 0
        assert f"Record ID: {rpc_endpoint.rpc_calls[-1]['id']}" in result.output
        assert rpc_endpoint.rpc_calls[-1]["function"] == "submit_contact_form"

    def test_mock_status_reports_running_server(self, portal_env, tmp_path: Path):
        # Arrange
        port = portal_env.rsplit(":", 1)[1]

        # Act
        result = CliRunner().invoke(
            cli,
            ["--log-file", str(tmp_path / "portal.log"), "mock", "status", "--port", port, "--json"],
        )

        # Assert
        assert result.exit_code == 0
        assert '"running": true' in result.output
        assert '"status": "healthy"' in result.output

    def test_mock_status_when_down(self, tmp_path: Path):
        # Arrange
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.bind(("127.0.0.1", 0))
            port = s.getsockname()[1]

        # Act
        result = CliRunner().invoke(
            cli,
            ["--log-file", str(tmp_path / "portal.log"), "mock", "status", "--port", str(port)],
        )

        # Assert
        assert result.exit_code == 1
        assert "not responding" in result.output
