"""Config module.

This module provides configuration management functionality.
"""

from pharmacy_portal.config.manager import (
    get_audit_store_config,
    get_bestrx_config,
    get_logging_config,
    get_transport_config,
    load_config,
)
from pharmacy_portal.config.schema import (
    AuditStoreConfig,
    BestRXConfig,
    Config,
    EndpointsConfig,
    LoggingConfig,
    TransportConfig,
)

__all__ = [
    # Main configuration loading
    "load_config",
    # Helper functions
    "get_bestrx_config",
    "get_audit_store_config",
    "get_transport_config",
    "get_logging_config",
    # Configuration models
    "Config",
    "EndpointsConfig",
    "BestRXConfig",
    "AuditStoreConfig",
    "TransportConfig",
    "LoggingConfig",
]
