"""Website form data models.

This module defines the pydantic models for every form the pharmacy website
submits. Models accept the camelCase keys posted by the website as well as
snake_case keys, and are immutable once validated.
"""

import re
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class ServicePreference(str, Enum):
    """How the patient wants to receive a refill."""

    PICKUP = "pickup"
    DELIVERY = "delivery"


class ContactReason(str, Enum):
    """Reason selected on the contact form."""

    GENERAL = "general"
    NEW = "new"
    TRANSFER = "transfer"
    REFILL = "refill"
    RPM = "rpm"


class FormModel(BaseModel):
    """Base model shared by all website forms."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        use_enum_values=True,
    )


def _phone_field(**kwargs):
    return Field(
        min_length=7,
        max_length=30,
        **kwargs,
    )


def _check_email(v: str) -> str:
    if not _EMAIL_RE.match(v):
        raise ValueError("Invalid email address")
    return v


def _check_consent(v: bool) -> bool:
    if v is not True:
        raise ValueError("Consent is required")
    return v


class RefillRequest(FormModel):
    """Prescription refill request.

    ``prescription_numbers`` and ``medication_names`` are free text lists
    separated by commas; they are paired by position when the BestRX payload
    is built, and their lengths may differ.

    Attributes:
        patient_name: Patient full name
        dob: Date of birth, YYYY-MM-DD
        phone: Contact phone number, any formatting
        email: Optional email; an empty string is treated as absent
        prescription_numbers: Comma separated Rx numbers
        medication_names: Comma separated medication names
        preferred_service: pickup or delivery
        notes: Optional free text notes
        consent: Must be True
    """

    patient_name: str = Field(min_length=1)
    dob: str = Field(pattern=DATE_PATTERN)
    phone: str = _phone_field()
    email: Optional[str] = None
    prescription_numbers: str = Field(min_length=1)
    medication_names: str = Field(min_length=1)
    preferred_service: ServicePreference
    notes: Optional[str] = None
    consent: bool

    @field_validator("email")
    @classmethod
    def blank_email_is_absent(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        return _check_email(v)

    @field_validator("consent")
    @classmethod
    def consent_given(cls, v: bool) -> bool:
        return _check_consent(v)


class TransferRequest(FormModel):
    """Prescription transfer request to another pharmacy.

    Attributes:
        rx_number: Prescription number to transfer
        rx_fill_date: Last fill date, YYYY-MM-DD
        transfer_to_pharmacy_name: Destination pharmacy name
        transfer_to_pharmacy_address1: Destination address line 1
        transfer_to_pharmacy_address2: Optional address line 2
        transfer_to_pharmacy_city: Destination city
        transfer_to_pharmacy_state: Two letter state code
        transfer_to_pharmacy_zip: ZIP code
        transfer_to_pharmacy_phone: Destination phone, any formatting
        transfer_to_pharmacy_ncpdp: Optional NCPDP identifier
        transfer_rx_remark: Optional remark
        consent: Must be True
    """

    rx_number: str = Field(min_length=1)
    rx_fill_date: str = Field(pattern=DATE_PATTERN)

    transfer_to_pharmacy_name: str = Field(min_length=1)
    transfer_to_pharmacy_address1: str = Field(min_length=1)
    transfer_to_pharmacy_address2: Optional[str] = None
    transfer_to_pharmacy_city: str = Field(min_length=1)
    transfer_to_pharmacy_state: str = Field(min_length=2)
    transfer_to_pharmacy_zip: str = Field(min_length=3)
    transfer_to_pharmacy_phone: str = _phone_field()
    transfer_to_pharmacy_ncpdp: Optional[str] = Field(
        default=None, alias="transferToPharmacyNCPDP"
    )

    transfer_rx_remark: Optional[str] = None
    consent: bool

    @field_validator("consent")
    @classmethod
    def consent_given(cls, v: bool) -> bool:
        return _check_consent(v)


class ContactRequest(FormModel):
    """General contact form."""

    name: str = Field(min_length=1)
    phone: str = _phone_field()
    email: str
    reason: ContactReason
    message: str = Field(min_length=1)
    consent: bool

    @field_validator("email")
    @classmethod
    def valid_email(cls, v: str) -> str:
        return _check_email(v)


class WaitlistRequest(FormModel):
    """Waitlist signup form."""

    name: str = Field(min_length=1)
    email: str
    phone: str = _phone_field()

    @field_validator("email")
    @classmethod
    def valid_email(cls, v: str) -> str:
        return _check_email(v)


class SplashSignup(FormModel):
    """Email capture from the splash modal."""

    email: str

    @field_validator("email")
    @classmethod
    def valid_email(cls, v: str) -> str:
        return _check_email(v)
