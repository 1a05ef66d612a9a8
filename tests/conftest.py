"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from datetime import date, timedelta
from unittest.mock import AsyncMock

import pytest

from reservation_service.models.payment import PaymentConfirmationStatus
from reservation_service.models.reservation import (
    PaymentMode,
    Reservation,
    ReservationRequest,
    ReservationStatus,
    RoomSegment,
)
from reservation_service.storage.memory_reservation_repo import InMemoryReservationRepository

TODAY = date(2026, 3, 1)


@pytest.fixture
def today():
    """Fixed calendar date used as 'today' by services under test."""
    return TODAY


@pytest.fixture
def memory_repo():
    """Empty in-memory reservation store."""
    return InMemoryReservationRepository()


@pytest.fixture
def mock_verifier():
    """Payment verifier confirming every card payment."""
    verifier = AsyncMock()
    verifier.verify.return_value = PaymentConfirmationStatus.CONFIRMED
    return verifier


@pytest.fixture
def make_request():
    """Factory for creation requests starting a week from TODAY."""

    def _make(**overrides) -> ReservationRequest:
        data = {
            "customer_name": "John Doe",
            "room_number": "101",
            "start_date": TODAY + timedelta(days=7),
            "end_date": TODAY + timedelta(days=10),
            "segment": RoomSegment.MEDIUM,
            "payment_mode": PaymentMode.CASH,
            "payment_reference": None,
        }
        data.update(overrides)
        return ReservationRequest(**data)

    return _make


@pytest.fixture
def make_reservation():
    """Factory for stored reservations."""

    def _make(**overrides) -> Reservation:
        data = {
            "customer_name": "Jane Roe",
            "room_number": "101",
            "start_date": TODAY + timedelta(days=7),
            "end_date": TODAY + timedelta(days=10),
            "segment": RoomSegment.SMALL,
            "payment_mode": PaymentMode.BANK_TRANSFER,
            "status": ReservationStatus.PENDING_PAYMENT,
        }
        data.update(overrides)
        return Reservation.create(**data)

    return _make
