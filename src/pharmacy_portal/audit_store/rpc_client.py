"""Supabase RPC client for the audit store.

Form submissions are persisted by calling Postgres functions exposed through
PostgREST: ``POST {url}/rest/v1/rpc/<function>`` with the function's
parameters as a JSON object.
"""

import logging
from typing import Any, Optional, Protocol

import requests

from pharmacy_portal.config.schema import AuditStoreConfig
from pharmacy_portal.transport.http_client import ConnectionPool
from pharmacy_portal.utils.exceptions import AuditSinkError, ConfigurationError

logger = logging.getLogger(__name__)

RPC_PATH = "/rest/v1/rpc/"


class RPCClient(Protocol):
    """Anything that can invoke a named remote procedure."""

    def rpc(self, function: str, params: dict[str, Any]) -> Any:
        ...


class SupabaseRPCClient:
    """Calls Postgres functions on a Supabase project.

    Attributes:
        base_url: Project URL without trailing slash
        pool: Connection pool providing the HTTP session

    Example:
        >>> client = SupabaseRPCClient.from_config(config.audit_store, pool)
        >>> client.rpc("submit_waitlist_entry", {"p_name": "Ann", ...})
        'c5a1...'
    """

    def __init__(self, base_url: str, anon_key: str, pool: ConnectionPool) -> None:
        self.base_url = base_url.rstrip("/")
        self._anon_key = anon_key
        self.pool = pool

    @classmethod
    def from_config(cls, config: AuditStoreConfig, pool: ConnectionPool) -> "SupabaseRPCClient":
        """Create a client from configuration.

        Raises:
            ConfigurationError: If URL or anon key is missing
        """
        if not config.is_configured:
            raise ConfigurationError(
                "Audit store is not configured. Set SUPABASE_URL and SUPABASE_ANON_KEY."
            )
        return cls(config.url, config.anon_key, pool)

    def rpc(self, function: str, params: dict[str, Any]) -> Any:
        """Invoke a Postgres function.

        Args:
            function: Function name, e.g. "submit_refill_request"
            params: Named parameters (``p_*``)

        Returns:
            The function's return value (decoded JSON), or None for an empty body

        Raises:
            AuditSinkError: On transport failure or a non-2xx response
        """
        url = f"{self.base_url}{RPC_PATH}{function}"
        session = self.pool.get_session()

        logger.debug(f"Calling RPC {function}")
        try:
            response = session.post(
                url,
                json=params,
                headers={
                    "apikey": self._anon_key,
                    "Authorization": f"Bearer {self._anon_key}",
                    "Content-Type": "application/json",
                },
                timeout=self.pool.config.timeout,
            )
        except requests.RequestException as e:
            raise AuditSinkError(f"RPC {function} could not reach the audit store") from e

        if not 200 <= response.status_code < 300:
            detail = _error_detail(response)
            raise AuditSinkError(
                f"RPC {function} failed with HTTP {response.status_code}"
                + (f": {detail}" if detail else "")
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise AuditSinkError(f"RPC {function} returned a non-JSON body") from e


def _error_detail(response: requests.Response) -> Optional[str]:
    """PostgREST error bodies carry a ``message`` field."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return None
