"""Unit tests for the Reservation domain model."""

from datetime import date, datetime, timezone

import pytest
from pydantic import ValidationError

from reservation_service.exceptions import InvalidStatusTransitionError
from reservation_service.models.reservation import (
    RESERVATION_ID_ALPHABET,
    PaymentMode,
    ReservationRequest,
    ReservationResponse,
    ReservationStatus,
    generate_reservation_id,
)


def test_generated_id_is_eight_uppercase_alphanumerics():
    """Test reservation ids match the external reference format."""
    for _ in range(50):
        reservation_id = generate_reservation_id()
        assert len(reservation_id) == 8
        assert all(char in RESERVATION_ID_ALPHABET for char in reservation_id)


def test_create_sets_id_and_equal_timestamps(make_reservation):
    """Test factory generates the id and stamps created/updated alike."""
    reservation = make_reservation()

    assert len(reservation.id) == 8
    assert reservation.created_at == reservation.updated_at
    assert reservation.created_at.tzinfo is not None


def test_create_keeps_supplied_id(make_reservation):
    """Test an explicit id is used as-is."""
    reservation = make_reservation(reservation_id="ABC12345")

    assert reservation.id == "ABC12345"


def test_reservation_is_immutable(make_reservation):
    """Test direct field assignment is rejected."""
    reservation = make_reservation()

    with pytest.raises(ValidationError):
        reservation.status = ReservationStatus.CONFIRMED


def test_transition_returns_updated_copy(make_reservation):
    """Test status change produces a new record and leaves the original."""
    reservation = make_reservation()
    later = datetime(2030, 1, 1, tzinfo=timezone.utc)

    confirmed = reservation.transition_to(ReservationStatus.CONFIRMED, later)

    assert confirmed.status == ReservationStatus.CONFIRMED
    assert confirmed.updated_at == later
    assert confirmed.created_at == reservation.created_at
    assert reservation.status == ReservationStatus.PENDING_PAYMENT


@pytest.mark.parametrize("terminal", [ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED])
def test_terminal_status_cannot_change(make_reservation, terminal):
    """Test no transition leaves a terminal status."""
    reservation = make_reservation(status=terminal)

    with pytest.raises(InvalidStatusTransitionError):
        reservation.transition_to(ReservationStatus.PENDING_PAYMENT)


def test_awaiting_bank_transfer_flag(make_reservation):
    """Test only pending bank transfers await a payment update."""
    assert make_reservation().is_awaiting_bank_transfer is True
    assert make_reservation(payment_mode=PaymentMode.CREDIT_CARD).is_awaiting_bank_transfer is False
    assert make_reservation(status=ReservationStatus.CANCELLED).is_awaiting_bank_transfer is False


def test_request_accepts_camel_case_payload():
    """Test the creation API field names parse into the request model."""
    request = ReservationRequest.model_validate(
        {
            "customerName": "John Doe",
            "roomNumber": "101",
            "startDate": "2026-03-10",
            "endDate": "2026-03-12",
            "segment": "LARGE",
            "paymentMode": "CREDIT_CARD",
            "paymentReference": "PAYREF-123456",
        }
    )

    assert request.start_date == date(2026, 3, 10)
    assert request.payment_mode == PaymentMode.CREDIT_CARD
    assert request.payment_reference == "PAYREF-123456"


def test_response_serializes_with_api_names():
    """Test the response uses reservationId on the wire."""
    response = ReservationResponse(reservation_id="ABC12345", status=ReservationStatus.CONFIRMED)

    assert response.model_dump(mode="json", by_alias=True) == {
        "reservationId": "ABC12345",
        "status": "CONFIRMED",
    }
