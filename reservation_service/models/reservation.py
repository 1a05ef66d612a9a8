"""Reservation domain model."""

import secrets
import string
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from reservation_service.exceptions import InvalidStatusTransitionError

RESERVATION_ID_LENGTH = 8
RESERVATION_ID_ALPHABET = string.ascii_uppercase + string.digits


class ReservationStatus(str, Enum):
    """Reservation status enumeration."""

    PENDING_PAYMENT = "PENDING_PAYMENT"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        """Terminal statuses never change again."""
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED})

# Statuses that occupy a room for the no-overlap rule
ACTIVE_STATUSES = frozenset({ReservationStatus.PENDING_PAYMENT, ReservationStatus.CONFIRMED})


class PaymentMode(str, Enum):
    """How the guest pays; drives the confirmation path."""

    CASH = "CASH"
    BANK_TRANSFER = "BANK_TRANSFER"
    CREDIT_CARD = "CREDIT_CARD"


class RoomSegment(str, Enum):
    """Room size category."""

    SMALL = "SMALL"
    MEDIUM = "MEDIUM"
    LARGE = "LARGE"
    EXTRA_LARGE = "EXTRA_LARGE"


def generate_reservation_id() -> str:
    """Generate an 8-character uppercase alphanumeric reservation id."""
    return "".join(
        secrets.choice(RESERVATION_ID_ALPHABET) for _ in range(RESERVATION_ID_LENGTH)
    )


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Reservation(BaseModel):
    """Reservation entity. Immutable; status changes produce a new record."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(pattern=r"^[A-Z0-9]{8}$", description="External reference, e.g. ABC12345")
    customer_name: str = Field(min_length=2, max_length=100)
    room_number: str = Field(min_length=1, max_length=10)
    start_date: date
    end_date: date
    segment: RoomSegment
    payment_mode: PaymentMode
    payment_reference: Optional[str] = Field(default=None, max_length=100)
    status: ReservationStatus
    created_at: datetime
    updated_at: datetime

    @classmethod
    def create(
        cls,
        *,
        customer_name: str,
        room_number: str,
        start_date: date,
        end_date: date,
        segment: RoomSegment,
        payment_mode: PaymentMode,
        status: ReservationStatus,
        payment_reference: Optional[str] = None,
        reservation_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> "Reservation":
        """Build a new reservation, generating its id and timestamps."""
        timestamp = now or utcnow()
        return cls(
            id=reservation_id or generate_reservation_id(),
            customer_name=customer_name,
            room_number=room_number,
            start_date=start_date,
            end_date=end_date,
            segment=segment,
            payment_mode=payment_mode,
            payment_reference=payment_reference,
            status=status,
            created_at=timestamp,
            updated_at=timestamp,
        )

    @property
    def is_awaiting_bank_transfer(self) -> bool:
        """Check if the reservation waits for a bank transfer to confirm it."""
        return (
            self.status == ReservationStatus.PENDING_PAYMENT
            and self.payment_mode == PaymentMode.BANK_TRANSFER
        )

    def transition_to(
        self, status: ReservationStatus, now: Optional[datetime] = None
    ) -> "Reservation":
        """Return a copy in the new status with a fresh updated_at."""
        if self.status.is_terminal:
            raise InvalidStatusTransitionError(
                f"Reservation {self.id} is already {self.status.value}"
            )
        return self.model_copy(update={"status": status, "updated_at": now or utcnow()})


class ReservationRequest(BaseModel):
    """Input model for reservation creation."""

    model_config = ConfigDict(populate_by_name=True)

    customer_name: str = Field(alias="customerName")
    room_number: str = Field(alias="roomNumber")
    start_date: date = Field(alias="startDate")
    end_date: date = Field(alias="endDate")
    segment: RoomSegment
    payment_mode: PaymentMode = Field(alias="paymentMode")
    payment_reference: Optional[str] = Field(default=None, alias="paymentReference")


class ReservationResponse(BaseModel):
    """Result of a successful admission."""

    model_config = ConfigDict(populate_by_name=True)

    reservation_id: str = Field(alias="reservationId")
    status: ReservationStatus
