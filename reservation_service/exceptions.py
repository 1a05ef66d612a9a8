"""Domain exceptions for the reservation service."""

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class FieldError:
    """A single violated rule on a request field."""

    field: str
    message: str


class ReservationServiceError(Exception):
    """Base exception for reservation service errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ReservationValidationError(ReservationServiceError):
    """Request violates a shape or business rule."""

    def __init__(self, message: str, errors: Optional[list[FieldError]] = None):
        super().__init__(message)
        self.errors = errors or []


class RoomConflictError(ReservationServiceError):
    """Room is already booked for an overlapping period."""

    def __init__(self, room_number: str, start_date: date, end_date: date):
        super().__init__(
            f"Room {room_number} is already booked for the requested period"
        )
        self.room_number = room_number
        self.start_date = start_date
        self.end_date = end_date


class PaymentRejectedError(ReservationServiceError):
    """Payment authority rejected the card payment."""


class InvalidPaymentReferenceError(ReservationServiceError):
    """Payment reference was not found or is invalid."""


class PaymentServiceUnavailableError(ReservationServiceError):
    """Payment authority could not be reached or the circuit is open."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class CircuitOpenError(ReservationServiceError):
    """Circuit breaker rejected the call without attempting it."""


class MessageFormatError(ReservationServiceError):
    """Inbound payment update could not be parsed."""


class InvalidStatusTransitionError(ReservationServiceError):
    """Attempt to move a reservation out of a terminal status."""


class ReservationIdCollisionError(ReservationServiceError):
    """Store already holds a reservation with the generated id."""
