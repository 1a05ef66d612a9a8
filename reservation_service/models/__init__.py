"""Models package - Pydantic domain models."""

from .payment import PaymentConfirmationStatus, PaymentStatusResponse, PaymentUpdateEvent
from .reservation import (
    ACTIVE_STATUSES,
    PaymentMode,
    Reservation,
    ReservationRequest,
    ReservationResponse,
    ReservationStatus,
    RoomSegment,
)

__all__ = [
    "ACTIVE_STATUSES",
    "PaymentConfirmationStatus",
    "PaymentMode",
    "PaymentStatusResponse",
    "PaymentUpdateEvent",
    "Reservation",
    "ReservationRequest",
    "ReservationResponse",
    "ReservationStatus",
    "RoomSegment",
]
