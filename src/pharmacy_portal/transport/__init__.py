"""Transport module.

This module provides pooled HTTP sessions shared by the pharmacy API client
and the audit store client.
"""

from pharmacy_portal.transport.http_client import ConnectionPool, ConnectionPoolConfig

__all__ = [
    "ConnectionPool",
    "ConnectionPoolConfig",
]
