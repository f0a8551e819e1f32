"""Configuration schema models using pydantic.

This module defines the configuration structure and validation rules using pydantic.
All configuration values are validated according to the schema defined here.

Credentials (API key, password, anon key) are declared with ``repr=False`` so
they never show up when a config object is printed or logged.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

BESTRX_REFILL_URL = (
    "https://webservice.bcsbestrx.com/bcswebservice/v2/webrefillservice/SendRefillRequest"
)
BESTRX_TRANSFER_URL = (
    "https://dataservice.bestrxconnect.com/prescription/submitrxtransferrequest"
)

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _validate_http_url(v: str) -> str:
    if not v.startswith(("http://", "https://")):
        raise ValueError(
            f"Invalid URL: {v}. Must start with http:// or https://"
        )
    return v


class EndpointsConfig(BaseModel):
    """Configuration for BestRX endpoint URLs.

    The defaults are the production BestRX endpoints. Override them only to
    point at the local mock server.

    Attributes:
        refill_url: SendRefillRequest endpoint URL
        transfer_url: submitrxtransferrequest endpoint URL
    """

    refill_url: str = Field(default=BESTRX_REFILL_URL, description="Refill endpoint URL")
    transfer_url: str = Field(default=BESTRX_TRANSFER_URL, description="Transfer endpoint URL")

    @field_validator("refill_url", "transfer_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate URL is valid HTTP/HTTPS.

        Raises:
            ValueError: If URL does not start with http:// or https://
        """
        return _validate_http_url(v)


class BestRXConfig(BaseModel):
    """BestRX pharmacy account credentials.

    Every field is optional at load time; the orchestrator checks the ones
    each operation needs right before submitting.

    Attributes:
        pharmacy_number: BestRX pharmacy account number
        api_key: API key used by refill requests
        username: Account username (refill body and transfer Basic auth)
        password: Account password (transfer Basic auth)
    """

    pharmacy_number: Optional[str] = None
    api_key: Optional[str] = Field(default=None, repr=False)
    username: Optional[str] = None
    password: Optional[str] = Field(default=None, repr=False)

    def missing_for_refill(self) -> list[str]:
        """Return names of credentials required by refill that are not set."""
        return [
            name
            for name in ("username", "api_key", "pharmacy_number")
            if not getattr(self, name)
        ]

    def missing_for_transfer(self) -> list[str]:
        """Return names of credentials required by transfer that are not set."""
        return [
            name
            for name in ("username", "password", "pharmacy_number")
            if not getattr(self, name)
        ]


class AuditStoreConfig(BaseModel):
    """Configuration for the Supabase RPC audit store.

    Attributes:
        url: Project URL, e.g. https://xyz.supabase.co
        anon_key: Public anon key sent as ``apikey`` and bearer token
    """

    url: Optional[str] = None
    anon_key: Optional[str] = Field(default=None, repr=False)

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _validate_http_url(v).rstrip("/")

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.anon_key)


class TransportConfig(BaseModel):
    """Configuration for HTTP/HTTPS transport.

    Attributes:
        verify_tls: Whether to verify TLS certificates
        timeout_connect: Connection timeout in seconds
        timeout_read: Read timeout in seconds
        max_connections: Connection pool size per session
    """

    verify_tls: bool = True
    timeout_connect: int = Field(
        default=10,
        ge=1,
        description="Connection timeout in seconds"
    )
    timeout_read: int = Field(
        default=30,
        ge=1,
        description="Read timeout in seconds"
    )
    max_connections: int = Field(
        default=10,
        ge=1,
        description="Maximum pooled connections per session"
    )


class LoggingConfig(BaseModel):
    """Configuration for logging.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file
        redact_pii: Whether to redact PII from logs
    """

    level: str = Field(
        default="INFO",
        description="Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL"
    )
    log_file: Path = Field(
        default=Path("logs/pharmacy-portal.log"),
        description="Log file path"
    )
    redact_pii: bool = Field(
        default=True,
        description="Redact PII from logs"
    )

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level.

        Args:
            v: Log level string

        Returns:
            Validated log level (uppercase)

        Raises:
            ValueError: If log level is not valid
        """
        v_upper = v.upper()
        if v_upper not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
            )
        return v_upper


class Config(BaseModel):
    """Root configuration model.

    Attributes:
        endpoints: BestRX endpoint URLs
        bestrx: BestRX account credentials
        audit_store: Supabase RPC audit store
        transport: HTTP/HTTPS transport configuration
        logging: Logging configuration

    Example:
        >>> config = Config(bestrx=BestRXConfig(pharmacy_number="1234567"))
        >>> config.endpoints.refill_url.endswith("SendRefillRequest")
        True
    """

    endpoints: EndpointsConfig = EndpointsConfig()
    bestrx: BestRXConfig = BestRXConfig()
    audit_store: AuditStoreConfig = AuditStoreConfig()
    transport: TransportConfig = TransportConfig()
    logging: LoggingConfig = LoggingConfig()
