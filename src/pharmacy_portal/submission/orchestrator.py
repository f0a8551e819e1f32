"""Refill and transfer submission orchestration.

Each submission makes exactly one call to BestRX and, only when BestRX
accepts the request, at most one audit write to the RPC store. The audit
write is best effort: its failure is logged and never changes the result
returned to the caller. Nothing is retried.
"""

import logging
import time
from datetime import date
from typing import Any, Callable, Optional

from pharmacy_portal.audit_store.rpc_client import RPCClient, SupabaseRPCClient
from pharmacy_portal.bestrx.client import BestRXClient
from pharmacy_portal.bestrx.errors import NOT_CONFIGURED_MESSAGE
from pharmacy_portal.bestrx.payloads import (
    build_basic_auth_header,
    build_refill_payload,
    build_transfer_payload,
)
from pharmacy_portal.config.schema import Config
from pharmacy_portal.logging_audit.audit import log_audit_event
from pharmacy_portal.models.forms import RefillRequest, TransferRequest
from pharmacy_portal.models.responses import (
    AuditOutcome,
    PrimaryResult,
    SubmissionKind,
    SubmissionOutcome,
    SubmissionResult,
)
from pharmacy_portal.transport.http_client import ConnectionPool, ConnectionPoolConfig
from pharmacy_portal.utils.exceptions import create_error_info

logger = logging.getLogger(__name__)

REFILL_AUDIT_FUNCTION = "submit_refill_request"
TRANSFER_AUDIT_FUNCTION = "submit_transfer_request"


def refill_audit_params(form: RefillRequest, bestrx_response: Any) -> dict[str, Any]:
    """RPC parameters for recording a refill: the form as entered plus the BestRX reply."""
    return {
        "p_patient_name": form.patient_name,
        "p_dob": form.dob,
        "p_phone": form.phone,
        "p_email": form.email or "",
        "p_prescription_numbers": form.prescription_numbers,
        "p_medication_names": form.medication_names,
        "p_preferred_service": form.preferred_service,
        "p_notes": form.notes or "",
        "p_consent": form.consent,
        "p_bestrx_response": bestrx_response,
    }


def transfer_audit_params(form: TransferRequest, bestrx_response: Any) -> dict[str, Any]:
    """RPC parameters for recording a transfer: the form as entered plus the BestRX reply."""
    return {
        "p_rx_number": form.rx_number,
        "p_rx_fill_date": form.rx_fill_date,
        "p_transfer_to_pharmacy_name": form.transfer_to_pharmacy_name,
        "p_transfer_to_pharmacy_address1": form.transfer_to_pharmacy_address1,
        "p_transfer_to_pharmacy_address2": form.transfer_to_pharmacy_address2 or "",
        "p_transfer_to_pharmacy_city": form.transfer_to_pharmacy_city,
        "p_transfer_to_pharmacy_state": form.transfer_to_pharmacy_state,
        "p_transfer_to_pharmacy_zip": form.transfer_to_pharmacy_zip,
        "p_transfer_to_pharmacy_phone": form.transfer_to_pharmacy_phone,
        "p_transfer_to_pharmacy_ncpdp": form.transfer_to_pharmacy_ncpdp or "",
        "p_transfer_rx_remark": form.transfer_rx_remark or "",
        "p_consent": form.consent,
        "p_bestrx_response": bestrx_response,
    }


class SubmissionOrchestrator:
    """Submits refill and transfer requests to BestRX with an audit trail.

    Configuration is injected at construction; the orchestrator never reads
    the process environment.

    Attributes:
        config: Application configuration (credentials, endpoints, transport)
        bestrx_client: Client for the pharmacy API
        audit_client: RPC client for the audit store, None when not configured

    Example:
        >>> orchestrator = SubmissionOrchestrator(load_config())
        >>> result = orchestrator.submit_refill(refill_form)
        >>> result.message
        'Refill request submitted successfully'
    """

    def __init__(
        self,
        config: Config,
        bestrx_client: Optional[BestRXClient] = None,
        audit_client: Optional[RPCClient] = None,
        today: Optional[Callable[[], date]] = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            config: Application configuration
            bestrx_client: Override pharmacy API client (built from config if None)
            audit_client: Override audit RPC client (built from config if None
                and the audit store is configured)
            today: Clock for the transfer date stamp (UTC today if None)
        """
        self.config = config
        self._pool: Optional[ConnectionPool] = None

        if bestrx_client is None or (audit_client is None and config.audit_store.is_configured):
            self._pool = ConnectionPool(
                ConnectionPoolConfig.from_transport_config(config.transport)
            )

        self.bestrx_client = bestrx_client or BestRXClient(config.endpoints, self._pool)

        if audit_client is None and config.audit_store.is_configured:
            audit_client = SupabaseRPCClient.from_config(config.audit_store, self._pool)
        self.audit_client = audit_client

        if self.audit_client is None:
            logger.warning(
                "Audit store not configured; successful submissions will not be recorded"
            )

        self._today = today

    def submit_refill(self, form: RefillRequest) -> SubmissionResult:
        """Submit a refill request and return the user-facing result."""
        return self.run_refill(form).to_result()

    def submit_transfer(self, form: TransferRequest) -> SubmissionResult:
        """Submit a transfer request and return the user-facing result."""
        return self.run_transfer(form).to_result()

    def run_refill(self, form: RefillRequest) -> SubmissionOutcome:
        """Submit a refill request, keeping both primary and audit outcomes.

        Args:
            form: Validated refill form

        Returns:
            SubmissionOutcome; call ``to_result()`` for the public result
        """
        kind = SubmissionKind.REFILL
        start_time = time.time()
        bestrx = self.config.bestrx

        missing = bestrx.missing_for_refill()
        if missing:
            return self._not_configured(kind, missing)

        payload = build_refill_payload(
            form,
            pharmacy_number=bestrx.pharmacy_number,
            api_key=bestrx.api_key,
            username=bestrx.username,
        )
        primary = self.bestrx_client.send_refill(payload)

        if not primary.success:
            return self._rejected(kind, primary, start_time)

        audit = self._record_audit(
            REFILL_AUDIT_FUNCTION, refill_audit_params(form, primary.body)
        )
        log_audit_event(
            "REFILL_SUBMITTED",
            {
                "status": "success",
                "http_status": primary.http_status,
                "rx_count": len(payload["RxInRefillRequest"]),
                "duration": time.time() - start_time,
                "audit_recorded": audit.recorded,
            },
        )
        return SubmissionOutcome(kind=kind, primary=primary, audit=audit)

    def run_transfer(self, form: TransferRequest) -> SubmissionOutcome:
        """Submit a transfer request, keeping both primary and audit outcomes.

        Args:
            form: Validated transfer form

        Returns:
            SubmissionOutcome; call ``to_result()`` for the public result
        """
        kind = SubmissionKind.TRANSFER
        start_time = time.time()
        bestrx = self.config.bestrx

        missing = bestrx.missing_for_transfer()
        if missing:
            return self._not_configured(kind, missing)

        today = self._today() if self._today else None
        payload = build_transfer_payload(form, bestrx.pharmacy_number, today=today)
        auth_header = build_basic_auth_header(bestrx.username, bestrx.password)
        primary = self.bestrx_client.send_transfer(payload, auth_header)

        if not primary.success:
            return self._rejected(kind, primary, start_time)

        audit = self._record_audit(
            TRANSFER_AUDIT_FUNCTION, transfer_audit_params(form, primary.body)
        )
        log_audit_event(
            "TRANSFER_SUBMITTED",
            {
                "status": "success",
                "http_status": primary.http_status,
                "duration": time.time() - start_time,
                "audit_recorded": audit.recorded,
            },
        )
        return SubmissionOutcome(kind=kind, primary=primary, audit=audit)

    def _not_configured(self, kind: SubmissionKind, missing: list[str]) -> SubmissionOutcome:
        # Names only: values are credentials
        log_audit_event(
            f"{kind.value}_NOT_CONFIGURED",
            {"status": "failure", "missing": ",".join(missing)},
        )
        return SubmissionOutcome(
            kind=kind,
            primary=PrimaryResult(success=False, message=NOT_CONFIGURED_MESSAGE),
            audit=AuditOutcome.skipped("service not configured"),
        )

    def _rejected(
        self, kind: SubmissionKind, primary: PrimaryResult, start_time: float
    ) -> SubmissionOutcome:
        log_audit_event(
            f"{kind.value}_REJECTED",
            {
                "status": "failure",
                "http_status": primary.http_status,
                "duration": time.time() - start_time,
                "error_message": primary.message,
            },
        )
        return SubmissionOutcome(
            kind=kind,
            primary=primary,
            audit=AuditOutcome.skipped("primary failed"),
        )

    def _record_audit(self, function: str, params: dict[str, Any]) -> AuditOutcome:
        """Write the audit record; every failure is absorbed here."""
        if self.audit_client is None:
            return AuditOutcome.skipped("audit store not configured")

        try:
            self.audit_client.rpc(function, params)
        except Exception as e:
            error_info = create_error_info(e)
            logger.warning(f"Failed to save {function} to audit store: {error_info.message}")
            if error_info.technical_details:
                logger.debug(error_info.technical_details)
            log_audit_event(
                "AUDIT_WRITE_FAILED",
                {
                    "status": "degraded",
                    "function": function,
                    "category": error_info.category.value,
                    "error_message": f"{error_info.error_type}: {error_info.message}",
                },
            )
            return AuditOutcome(attempted=True, recorded=False, error=error_info.message)

        logger.debug(f"Audit record written via {function}")
        return AuditOutcome(attempted=True, recorded=True)

    def close(self) -> None:
        """Release pooled connections owned by this orchestrator."""
        if self._pool is not None:
            self._pool.close()

    def __enter__(self) -> "SubmissionOrchestrator":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
