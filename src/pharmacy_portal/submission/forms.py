"""Direct form submissions to the audit store.

Contact, waitlist and splash signups do not go through BestRX; the RPC store
is their only destination, so a failed write is a failed submission.
"""

import logging
from typing import Any, Optional

from pharmacy_portal.audit_store.rpc_client import RPCClient, SupabaseRPCClient
from pharmacy_portal.config.schema import Config
from pharmacy_portal.logging_audit.audit import log_audit_event
from pharmacy_portal.models.forms import ContactRequest, SplashSignup, WaitlistRequest
from pharmacy_portal.transport.http_client import ConnectionPool, ConnectionPoolConfig
from pharmacy_portal.utils.exceptions import (
    ConfigurationError,
    SubmissionError,
    create_error_info,
)

logger = logging.getLogger(__name__)

SAVE_FAILED_MESSAGE = "Unable to save your submission. Please try again later."

CONTACT_FUNCTION = "submit_contact_form"
WAITLIST_FUNCTION = "submit_waitlist_entry"
SPLASH_FUNCTION = "submit_splash_modal_signup"


class FormSubmissionService:
    """Saves contact, waitlist and splash submissions.

    Attributes:
        rpc_client: RPC client for the audit store
    """

    def __init__(self, rpc_client: Optional[RPCClient]) -> None:
        self.rpc_client = rpc_client

    @classmethod
    def from_config(
        cls, config: Config, pool: Optional[ConnectionPool] = None
    ) -> "FormSubmissionService":
        """Build the service with a Supabase client from configuration.

        Raises:
            ConfigurationError: If the audit store is not configured
        """
        if pool is None:
            pool = ConnectionPool(ConnectionPoolConfig.from_transport_config(config.transport))
        return cls(SupabaseRPCClient.from_config(config.audit_store, pool))

    def submit_contact(self, form: ContactRequest) -> Any:
        return self._call(
            CONTACT_FUNCTION,
            {
                "p_name": form.name,
                "p_phone": form.phone,
                "p_email": form.email,
                "p_reason": form.reason,
                "p_message": form.message,
                "p_consent": form.consent,
            },
        )

    def submit_waitlist(self, form: WaitlistRequest) -> Any:
        return self._call(
            WAITLIST_FUNCTION,
            {"p_name": form.name, "p_email": form.email, "p_phone": form.phone},
        )

    def submit_splash_signup(self, form: SplashSignup) -> Any:
        return self._call(SPLASH_FUNCTION, {"p_email": form.email})

    def _call(self, function: str, params: dict[str, Any]) -> Any:
        """Invoke the RPC and return its result (usually the new record id).

        Raises:
            ConfigurationError: If no RPC client is available
            SubmissionError: If the store rejects or cannot be reached
        """
        if self.rpc_client is None:
            raise ConfigurationError(
                "Audit store is not configured. Set SUPABASE_URL and SUPABASE_ANON_KEY."
            )

        try:
            result = self.rpc_client.rpc(function, params)
        except Exception as e:
            error_info = create_error_info(e)
            logger.error(f"Error submitting {function}: {error_info.message}")
            log_audit_event(
                "FORM_SUBMISSION_FAILED",
                {
                    "status": "failure",
                    "function": function,
                    "category": error_info.category.value,
                    "error_message": error_info.message,
                },
            )
            raise SubmissionError(SAVE_FAILED_MESSAGE) from e

        log_audit_event("FORM_SUBMITTED", {"status": "success", "function": function})
        return result
