"""Unit tests for BestRX payload construction."""

import base64
from datetime import date

import pytest

from pharmacy_portal.bestrx.payloads import (
    build_basic_auth_header,
    build_refill_payload,
    build_transfer_payload,
    extract_last_name,
    format_phone_for_bestrx,
    split_list_field,
)
from pharmacy_portal.models.forms import RefillRequest


class TestPhoneFormatting:
    """Tests for format_phone_for_bestrx."""

    def test_strips_formatting(self):
        assert format_phone_for_bestrx("(614) 555-1234") == "6145551234"

    def test_idempotent(self):
        # Arrange
        once = format_phone_for_bestrx("+1 (614) 555.1234 ext 9")

        # Act
        twice = format_phone_for_bestrx(once)

        # Assert
        assert once == "161455512349"
        assert twice == once

    def test_no_digits(self):
        assert format_phone_for_bestrx("call me") == ""


class TestListSplitting:
    """Tests for split_list_field and extract_last_name."""

    def test_trims_and_drops_empty_tokens(self):
        assert split_list_field(" 111 ,, 222 ,  ,333") == ["111", "222", "333"]

    def test_only_separators(self):
        assert split_list_field(" , , ") == []

    def test_last_name_is_final_token(self):
        assert extract_last_name("Mary Ann  Smith") == "Smith"

    def test_single_token_name_used_whole(self):
        assert extract_last_name("Cher") == "Cher"


class TestBuildRefillPayload:
    """Tests for build_refill_payload."""

    def test_payload_shape(self, refill_form):
        # Arrange & Act
        payload = build_refill_payload(
            refill_form, pharmacy_number="1234567", api_key="key", username="user"
        )

        # Assert
        assert payload == {
            "userName": "user",
            "APIKey": "key",
            "PharmacyNumber": "1234567",
            "LastName": "Doe",
            "DOB": "1980-02-14",
            "Phone": "6145551234",
            "DeliveryOption": "pickup",
            "RxInRefillRequest": [
                {"RxNumber": "111", "MedicationName": "Lisinopril"},
                {"RxNumber": "222", "MedicationName": ""},
            ],
        }

    def test_extra_medications_ignored(self, refill_form_data):
        # Arrange
        refill_form_data["prescriptionNumbers"] = "111"
        refill_form_data["medicationNames"] = "A, B, C"
        form = RefillRequest.model_validate(refill_form_data)

        # Act
        payload = build_refill_payload(form, "1", "k", "u")

        # Assert
        assert payload["RxInRefillRequest"] == [{"RxNumber": "111", "MedicationName": "A"}]

    @pytest.mark.parametrize(
        "numbers,expected",
        [
            ("111", 1),
            ("111,222,333", 3),
            ("111, ,222,", 2),
        ],
    )
    def test_item_count_matches_prescription_tokens(self, refill_form_data, numbers, expected):
        # Arrange
        refill_form_data["prescriptionNumbers"] = numbers
        form = RefillRequest.model_validate(refill_form_data)

        # Act
        payload = build_refill_payload(form, "1", "k", "u")

        # Assert
        assert len(payload["RxInRefillRequest"]) == expected

    def test_delivery_option_passed_through(self, refill_form_data):
        # Arrange
        refill_form_data["preferredService"] = "delivery"
        form = RefillRequest.model_validate(refill_form_data)

        # Act
        payload = build_refill_payload(form, "1", "k", "u")

        # Assert
        assert payload["DeliveryOption"] == "delivery"

    def test_delivery_option_defaults_to_pickup_when_empty(self, refill_form):
        # Arrange
        form = refill_form.model_copy(update={"preferred_service": ""})

        # Act
        payload = build_refill_payload(form, "1", "k", "u")

        # Assert
        assert payload["DeliveryOption"] == "Pickup"


class TestBuildTransferPayload:
    """Tests for build_transfer_payload."""

    def test_payload_shape(self, transfer_form):
        # Arrange & Act
        payload = build_transfer_payload(transfer_form, "1234567", today=date(2024, 6, 1))

        # Assert
        assert payload == {
            "PharmacyNumber": "1234567",
            "RxNo": "7654321",
            "RxFillDate": "2024-05-20",
            "TransferToPharmacy": {
                "Name": "Main Street Pharmacy",
                "Address": "12 Main St",
                "Address2": "",
                "City": "Columbus",
                "State": "OH",
                "Zip": "43004",
                "Phone": "6145559876",
                "NCPDP": "",
            },
            "TransferDate": "2024-06-01",
            "Comments": "",
        }

    def test_optional_fields_carried(self, transfer_form_data):
        # Arrange
        from pharmacy_portal.models.forms import TransferRequest

        transfer_form_data.update(
            {
                "transferToPharmacyAddress2": "Suite 4",
                "transferToPharmacyNCPDP": "0123456",
                "transferRxRemark": "Please call first",
            }
        )
        form = TransferRequest.model_validate(transfer_form_data)

        # Act
        payload = build_transfer_payload(form, "1", today=date(2024, 6, 1))

        # Assert
        assert payload["TransferToPharmacy"]["Address2"] == "Suite 4"
        assert payload["TransferToPharmacy"]["NCPDP"] == "0123456"
        assert payload["Comments"] == "Please call first"

    def test_transfer_date_defaults_to_today(self, transfer_form):
        # Act
        payload = build_transfer_payload(transfer_form, "1")

        # Assert
        assert len(payload["TransferDate"]) == 10
        assert payload["TransferDate"] != transfer_form.rx_fill_date


class TestBasicAuthHeader:
    """Tests for build_basic_auth_header."""

    def test_known_value(self):
        assert build_basic_auth_header("user", "pass") == "Basic dXNlcjpwYXNz"

    def test_round_trips_to_credentials(self):
        # Act
        header = build_basic_auth_header("portal-user", "p:w")

        # Assert
        scheme, encoded = header.split(" ", 1)
        assert scheme == "Basic"
        assert base64.b64decode(encoded).decode("utf-8") == "portal-user:p:w"
