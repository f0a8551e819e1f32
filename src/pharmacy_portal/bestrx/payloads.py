"""BestRX payload construction.

Pure functions that translate validated website forms into the JSON bodies
expected by the BestRX refill and transfer endpoints. Field names and
nesting are dictated by BestRX and must be reproduced exactly.
"""

import base64
import re
from datetime import date, datetime, timezone
from typing import Any, Optional

from pharmacy_portal.models.forms import RefillRequest, TransferRequest

_NON_DIGIT = re.compile(r"[^0-9]")

DEFAULT_DELIVERY_OPTION = "Pickup"


def format_phone_for_bestrx(phone: str) -> str:
    """Strip every non-digit character from a phone number.

    Example:
        >>> format_phone_for_bestrx("(614) 555-1234")
        '6145551234'
    """
    return _NON_DIGIT.sub("", phone)


def split_list_field(value: str) -> list[str]:
    """Split a comma separated form field into trimmed, non-empty tokens."""
    return [token.strip() for token in value.split(",") if token.strip()]


def extract_last_name(patient_name: str) -> str:
    """Return the final whitespace separated token of a full name.

    A name without whitespace is returned unchanged.
    """
    tokens = patient_name.split()
    return tokens[-1] if tokens else patient_name


def build_refill_payload(
    form: RefillRequest,
    pharmacy_number: str,
    api_key: str,
    username: str,
) -> dict[str, Any]:
    """Build the SendRefillRequest body.

    Prescription numbers are paired with medication names by position. When
    fewer medication names than prescription numbers are given, the missing
    names are sent as empty strings; extra names are ignored.

    Args:
        form: Validated refill form
        pharmacy_number: BestRX pharmacy account number
        api_key: BestRX API key
        username: BestRX account username

    Returns:
        Payload dict ready to be sent as JSON

    Example:
        >>> payload = build_refill_payload(form, "1234567", "key", "user")
        >>> payload["RxInRefillRequest"]
        [{'RxNumber': '111', 'MedicationName': 'Drug A'}, {'RxNumber': '222', 'MedicationName': ''}]
    """
    rx_numbers = split_list_field(form.prescription_numbers)
    medications = split_list_field(form.medication_names)

    rx_in_refill_request = [
        {
            "RxNumber": rx_number,
            "MedicationName": medications[index] if index < len(medications) else "",
        }
        for index, rx_number in enumerate(rx_numbers)
    ]

    return {
        "userName": username,
        "APIKey": api_key,
        "PharmacyNumber": pharmacy_number,
        "LastName": extract_last_name(form.patient_name),
        "DOB": form.dob,
        "Phone": format_phone_for_bestrx(form.phone),
        "DeliveryOption": form.preferred_service or DEFAULT_DELIVERY_OPTION,
        "RxInRefillRequest": rx_in_refill_request,
    }


def build_transfer_payload(
    form: TransferRequest,
    pharmacy_number: str,
    today: Optional[date] = None,
) -> dict[str, Any]:
    """Build the submitrxtransferrequest body.

    ``TransferDate`` is the date the request is sent (UTC), not a form field.

    Args:
        form: Validated transfer form
        pharmacy_number: BestRX pharmacy account number
        today: Date to stamp; defaults to the current UTC date

    Returns:
        Payload dict ready to be sent as JSON
    """
    transfer_date = today or datetime.now(timezone.utc).date()

    return {
        "PharmacyNumber": pharmacy_number,
        "RxNo": form.rx_number,
        "RxFillDate": form.rx_fill_date,
        "TransferToPharmacy": {
            "Name": form.transfer_to_pharmacy_name,
            "Address": form.transfer_to_pharmacy_address1,
            "Address2": form.transfer_to_pharmacy_address2 or "",
            "City": form.transfer_to_pharmacy_city,
            "State": form.transfer_to_pharmacy_state,
            "Zip": form.transfer_to_pharmacy_zip,
            "Phone": format_phone_for_bestrx(form.transfer_to_pharmacy_phone),
            "NCPDP": form.transfer_to_pharmacy_ncpdp or "",
        },
        "TransferDate": transfer_date.isoformat(),
        "Comments": form.transfer_rx_remark or "",
    }


def build_basic_auth_header(username: str, password: str) -> str:
    """Build an HTTP Basic ``Authorization`` header value.

    Example:
        >>> build_basic_auth_header("user", "pass")
        'Basic dXNlcjpwYXNz'
    """
    credentials = f"{username}:{password}".encode("utf-8")
    return f"Basic {base64.b64encode(credentials).decode('ascii')}"
