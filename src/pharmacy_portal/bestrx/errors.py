"""BestRX error code mapping.

Maps BestRX error codes and HTTP statuses to the fixed set of user-facing
sentences shown on the website. ``map_error_code`` never returns an empty
string.
"""

from typing import Optional

GENERIC_ERROR_CODE = "ERROR_GENERIC"

REFILL_ERROR_MESSAGES: dict[str, str] = {
    "ERROR_INVALID_PHARMACY": "Invalid pharmacy number. Please verify your pharmacy details.",
    "ERROR_INVALID_PATIENT": "Patient information not found. Please verify your name and date of birth.",
    "ERROR_RX_NOT_FOUND": "One or more prescription numbers were not found. Please verify the numbers.",
    "ERROR_RX_INACTIVE": "One or more prescriptions are no longer active. Please contact us for assistance.",
    "ERROR_RX_REFILLED": "One or more prescriptions have already been refilled recently.",
    GENERIC_ERROR_CODE: "An error occurred while processing your request. Please try again.",
}

TRANSFER_ERROR_MESSAGES: dict[str, str] = {
    "ERROR0027": "Prescription not found. Please verify the prescription number.",
    "ERROR0069": "Prescription cannot be transferred. Please contact the pharmacy.",
    "ERROR0070": "Invalid destination pharmacy information.",
    "ERROR0080": "Patient not found in system.",
    "ERROR0003": "Patient date of birth does not match.",
    "ERROR0082": "Transfer limit exceeded. Please try again later.",
}

ERROR_MESSAGES: dict[str, str] = {**REFILL_ERROR_MESSAGES, **TRANSFER_ERROR_MESSAGES}

HTTP_STATUS_MESSAGES: dict[int, str] = {
    400: "Invalid request. Please check your information and try again.",
    403: "Authentication failed. Please contact support.",
    500: "Service temporarily unavailable. Please try again later.",
}

GENERIC_MESSAGE = REFILL_ERROR_MESSAGES[GENERIC_ERROR_CODE]

NOT_CONFIGURED_MESSAGE = "Pharmacy service is not properly configured. Please contact support."
CONNECTION_FAILED_MESSAGE = "Unable to connect to pharmacy service. Please try again later."
REFILL_UNPROCESSED_MESSAGE = "Unable to process refill request. Please try again."
TRANSFER_UNPROCESSED_MESSAGE = "Unable to process transfer request. Please try again."
REFILL_SUCCESS_MESSAGE = "Refill request submitted successfully"
TRANSFER_SUCCESS_MESSAGE = "Transfer request submitted successfully"


def map_error_code(code: Optional[str], http_status: Optional[int] = None) -> str:
    """Map a BestRX error code (or HTTP status) to a user-facing message.

    Lookup order: known error code, then HTTP status, then the generic
    message.

    Args:
        code: BestRX error code, e.g. "ERROR0027"; None or "" when absent
        http_status: HTTP status of the response, if known

    Returns:
        Non-empty user-facing message

    Example:
        >>> map_error_code("ERROR0080")
        'Patient not found in system.'
        >>> map_error_code(None, 403)
        'Authentication failed. Please contact support.'
        >>> map_error_code("SOMETHING_NEW")
        'An error occurred while processing your request. Please try again.'
    """
    if code:
        message = ERROR_MESSAGES.get(code)
        if message:
            return message

    if http_status is not None and http_status in HTTP_STATUS_MESSAGES:
        return HTTP_STATUS_MESSAGES[http_status]

    return GENERIC_MESSAGE
