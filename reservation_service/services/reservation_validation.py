"""Reservation request validation.

Validates creation requests against business rules before admission:
- Customer name and room number shape
- Date range ordering and start not in the past
- Maximum stay length
- Payment reference length (matches the store column)
"""

from datetime import date

from reservation_service.exceptions import FieldError
from reservation_service.logging import get_logger
from reservation_service.models.reservation import ReservationRequest

logger = get_logger(__name__)

# Business rules
MIN_CUSTOMER_NAME_LENGTH = 2
MAX_CUSTOMER_NAME_LENGTH = 100
MIN_ROOM_NUMBER_LENGTH = 1
MAX_ROOM_NUMBER_LENGTH = 10
MAX_STAY_DAYS = 30
MAX_PAYMENT_REFERENCE_LENGTH = 100


class ValidationResult:
    """Result of request validation."""

    def __init__(self):
        self.errors: list[FieldError] = []

    @property
    def is_valid(self) -> bool:
        """Check if validation passed."""
        return len(self.errors) == 0

    def add_error(self, field: str, message: str) -> None:
        """Add validation error."""
        self.errors.append(FieldError(field=field, message=message))

    @property
    def summary(self) -> str:
        """First error message, used as the error detail."""
        return self.errors[0].message if self.errors else ""


def validate_reservation_request(
    request: ReservationRequest,
    today: date,
    max_stay_days: int = MAX_STAY_DAYS,
) -> ValidationResult:
    """
    Validate a reservation request.

    Args:
        request: Parsed creation request
        today: Current calendar date
        max_stay_days: Longest allowed stay

    Returns:
        ValidationResult listing every violated rule
    """
    result = ValidationResult()

    customer_name = request.customer_name.strip()
    if not customer_name:
        result.add_error("customerName", "Customer name is required")
    elif not MIN_CUSTOMER_NAME_LENGTH <= len(request.customer_name) <= MAX_CUSTOMER_NAME_LENGTH:
        result.add_error(
            "customerName",
            f"Customer name must be between {MIN_CUSTOMER_NAME_LENGTH} "
            f"and {MAX_CUSTOMER_NAME_LENGTH} characters",
        )

    room_number = request.room_number.strip()
    if not room_number:
        result.add_error("roomNumber", "Room number is required")
    elif not MIN_ROOM_NUMBER_LENGTH <= len(request.room_number) <= MAX_ROOM_NUMBER_LENGTH:
        result.add_error(
            "roomNumber",
            f"Room number must be between {MIN_ROOM_NUMBER_LENGTH} "
            f"and {MAX_ROOM_NUMBER_LENGTH} characters",
        )

    if (
        request.payment_reference is not None
        and len(request.payment_reference) > MAX_PAYMENT_REFERENCE_LENGTH
    ):
        result.add_error(
            "paymentReference",
            f"Payment reference must be at most {MAX_PAYMENT_REFERENCE_LENGTH} characters",
        )

    if request.start_date < today:
        result.add_error("startDate", "Start date must be today or in the future")

    if request.end_date <= request.start_date:
        result.add_error("endDate", "Reservation end date must be after start date")
    elif (request.end_date - request.start_date).days > max_stay_days:
        result.add_error("endDate", f"The max reservation duration is {max_stay_days} days")

    if not result.is_valid:
        logger.warning(
            "reservation_validation_failed",
            room_number=request.room_number,
            errors=[f"{error.field}: {error.message}" for error in result.errors],
        )

    return result
