"""Default configuration values.

This module defines the default configuration values used when no configuration
file is provided or when configuration values are not specified.

Credentials have no defaults: they come from the environment (or a .env file)
and must never be committed.
"""

from typing import Any

from pharmacy_portal.config.schema import BESTRX_REFILL_URL, BESTRX_TRANSFER_URL

DEFAULT_CONFIG: dict[str, Any] = {
    "endpoints": {
        "refill_url": BESTRX_REFILL_URL,
        "transfer_url": BESTRX_TRANSFER_URL,
    },
    "bestrx": {},
    "audit_store": {},
    "transport": {
        # Verify TLS certificates by default for security
        "verify_tls": True,
        "timeout_connect": 10,
        "timeout_read": 30,
        "max_connections": 10,
    },
    "logging": {
        "level": "INFO",
        "log_file": "logs/pharmacy-portal.log",
        # Patient data is redacted unless the operator opts out
        "redact_pii": True,
    },
}

DEFAULT_CONFIG_PATH = "config/config.json"

# Keys that belong in the environment, never in a config file
SENSITIVE_KEYS = {
    "bestrx": ("api_key", "password"),
    "audit_store": ("anon_key",),
}
