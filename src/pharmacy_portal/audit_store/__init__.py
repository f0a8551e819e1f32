"""Audit store module.

This module provides the RPC client used to persist form submissions.
"""

from pharmacy_portal.audit_store.rpc_client import RPCClient, SupabaseRPCClient

__all__ = [
    "RPCClient",
    "SupabaseRPCClient",
]
