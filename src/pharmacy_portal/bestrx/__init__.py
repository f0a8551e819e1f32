"""BestRX integration module.

This module provides payload construction, response decoding, error mapping
and the HTTP client for the BestRX pharmacy API.
"""

from pharmacy_portal.bestrx.client import BestRXClient
from pharmacy_portal.bestrx.errors import ERROR_MESSAGES, map_error_code
from pharmacy_portal.bestrx.payloads import (
    build_basic_auth_header,
    build_refill_payload,
    build_transfer_payload,
    format_phone_for_bestrx,
)
from pharmacy_portal.bestrx.responses import (
    decode_refill_response,
    decode_transfer_response,
    extract_refill_error_message,
    extract_transfer_error_message,
    validate_refill_response,
    validate_transfer_response,
)

__all__ = [
    "BestRXClient",
    "ERROR_MESSAGES",
    "map_error_code",
    "build_basic_auth_header",
    "build_refill_payload",
    "build_transfer_payload",
    "format_phone_for_bestrx",
    "decode_refill_response",
    "decode_transfer_response",
    "extract_refill_error_message",
    "extract_transfer_error_message",
    "validate_refill_response",
    "validate_transfer_response",
]
