"""BestRX response decoding and error extraction.

BestRX bodies are untrusted JSON of unknown shape. Each body is decoded once
through a pydantic schema into one variant of a small tagged union; the
validators and error extractors are defined over those variants instead of
probing raw dicts.

Refill success shape::

    {"RxInRefillResponse": [{"RxNumber": "111", "Status": "OK"}, ...]}

Transfer success shape::

    {"IsValid": true, "RxTransferred": true}
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from pharmacy_portal.bestrx.errors import map_error_code

logger = logging.getLogger(__name__)

REFILL_OK_STATUS = "OK"


class _RefillItemSchema(BaseModel):
    model_config = ConfigDict(extra="allow")

    Status: Any = None
    ErrorCode: Any = None
    ErrorMessage: Any = None


class _RefillBodySchema(BaseModel):
    model_config = ConfigDict(extra="allow")

    RxInRefillResponse: list[Any]


class _TransferBodySchema(BaseModel):
    model_config = ConfigDict(extra="allow")

    IsValid: Any = None
    RxTransferred: Any = None
    ErrorCode: Any = None
    ErrorMessage: Any = None


@dataclass(frozen=True)
class ErrorDetail:
    """Error code and raw message reported by BestRX, either may be absent."""

    code: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def from_fields(cls, code: Any, message: Any) -> "ErrorDetail":
        return cls(
            code=str(code) if code else None,
            message=str(message) if message else None,
        )

    def to_user_message(self, http_status: Optional[int] = None) -> Optional[str]:
        """Mapped code message, else raw message, else None."""
        if self.code:
            return map_error_code(self.code, http_status)
        if self.message:
            return self.message
        return None


@dataclass(frozen=True)
class RefillAccepted:
    """At least one prescription came back with status OK.

    ``first_failure`` is set when the batch was only partly accepted.
    """

    item_count: int
    first_failure: Optional[ErrorDetail] = None


@dataclass(frozen=True)
class RefillRejected:
    """Per-item list present but no item has status OK."""

    item_count: int
    first_failure: Optional[ErrorDetail] = None


@dataclass(frozen=True)
class TransferAccepted:
    """Both IsValid and RxTransferred are strictly true."""


@dataclass(frozen=True)
class TransferRejected:
    """Transfer body is an object but not a strict success."""

    detail: ErrorDetail


@dataclass(frozen=True)
class UnrecognizedResponse:
    """Body does not match any known BestRX shape."""

    reason: str


RefillResponse = Union[RefillAccepted, RefillRejected, UnrecognizedResponse]
TransferResponse = Union[TransferAccepted, TransferRejected, UnrecognizedResponse]


def decode_refill_response(body: Any) -> RefillResponse:
    """Decode a SendRefillRequest response body.

    Args:
        body: Decoded JSON body of any type

    Returns:
        RefillAccepted, RefillRejected or UnrecognizedResponse
    """
    try:
        schema = _RefillBodySchema.model_validate(body)
    except PydanticValidationError as e:
        logger.debug(f"Refill response did not match schema: {e.error_count()} error(s)")
        return UnrecognizedResponse(reason="missing or invalid RxInRefillResponse list")

    items = [
        _RefillItemSchema.model_validate(entry)
        for entry in schema.RxInRefillResponse
        if isinstance(entry, dict)
    ]

    first_failure = None
    for item in items:
        if item.Status != REFILL_OK_STATUS:
            first_failure = ErrorDetail.from_fields(item.ErrorCode, item.ErrorMessage)
            break

    if any(item.Status == REFILL_OK_STATUS for item in items):
        return RefillAccepted(item_count=len(items), first_failure=first_failure)
    return RefillRejected(item_count=len(items), first_failure=first_failure)


def decode_transfer_response(body: Any) -> TransferResponse:
    """Decode a submitrxtransferrequest response body.

    Args:
        body: Decoded JSON body of any type

    Returns:
        TransferAccepted, TransferRejected or UnrecognizedResponse
    """
    try:
        schema = _TransferBodySchema.model_validate(body)
    except PydanticValidationError:
        return UnrecognizedResponse(reason="transfer response is not an object")

    # Identity checks: 1, "true" and other truthy values do not count
    if schema.IsValid is True and schema.RxTransferred is True:
        return TransferAccepted()
    return TransferRejected(detail=ErrorDetail.from_fields(schema.ErrorCode, schema.ErrorMessage))


def validate_refill_response(body: Any) -> bool:
    """True iff at least one per-item entry has status ``"OK"``."""
    return isinstance(decode_refill_response(body), RefillAccepted)


def validate_transfer_response(body: Any) -> bool:
    """True iff ``IsValid`` and ``RxTransferred`` are both strictly ``True``."""
    return isinstance(decode_transfer_response(body), TransferAccepted)


def extract_refill_error_message(body: Any, http_status: Optional[int] = None) -> Optional[str]:
    """Message for the first per-item entry whose status is not ``"OK"``.

    Args:
        body: Decoded JSON body of any type
        http_status: HTTP status, used when the entry's code is unknown

    Returns:
        Mapped code message, else the entry's raw ErrorMessage, else None
    """
    decoded = decode_refill_response(body)
    if isinstance(decoded, UnrecognizedResponse) or decoded.first_failure is None:
        return None
    return decoded.first_failure.to_user_message(http_status)


def extract_transfer_error_message(body: Any, http_status: Optional[int] = None) -> Optional[str]:
    """Message from the top-level ErrorCode / ErrorMessage fields.

    Args:
        body: Decoded JSON body of any type
        http_status: HTTP status, used when the code is unknown

    Returns:
        Mapped code message, else the raw ErrorMessage, else None
    """
    decoded = decode_transfer_response(body)
    if isinstance(decoded, TransferRejected):
        return decoded.detail.to_user_message(http_status)
    return None
