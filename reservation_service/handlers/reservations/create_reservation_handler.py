"""Create reservation handler.

Transport-agnostic entry point for the creation API: parses the request
body, runs admission and maps every outcome to a status code and a
problem-detail body.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import ValidationError

from reservation_service.exceptions import (
    InvalidPaymentReferenceError,
    PaymentRejectedError,
    PaymentServiceUnavailableError,
    ReservationValidationError,
    RoomConflictError,
)
from reservation_service.logging import get_logger
from reservation_service.models.reservation import ReservationRequest
from reservation_service.services.admission import AdmissionController

logger = get_logger(__name__)

STATUS_TITLES = {
    201: "Created",
    400: "Bad Request",
    409: "Conflict",
    500: "Internal Server Error",
    503: "Service Unavailable",
}


@dataclass
class HandlerResponse:
    """Status code and JSON-serializable body."""

    status_code: int
    body: dict[str, Any] = field(default_factory=dict)


def problem_detail(
    status_code: int,
    detail: str,
    errors: Optional[dict[str, str]] = None,
    **properties: Any,
) -> HandlerResponse:
    """Build a problem-detail error response."""
    body: dict[str, Any] = {
        "title": STATUS_TITLES.get(status_code, "Error"),
        "status": status_code,
        "detail": detail,
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }
    if errors:
        body["errors"] = errors
    body.update(properties)
    return HandlerResponse(status_code=status_code, body=body)


def _schema_errors(error: ValidationError) -> dict[str, str]:
    """Flatten pydantic errors to {field: message}, first message per field."""
    errors: dict[str, str] = {}
    for item in error.errors():
        field_name = ".".join(str(part) for part in item["loc"]) or "body"
        errors.setdefault(field_name, item["msg"])
    return errors


async def handle_create_reservation(
    payload: dict[str, Any], admission: AdmissionController
) -> HandlerResponse:
    """
    Process a reservation creation request.

    Args:
        payload: Decoded JSON request body
        admission: Admission controller

    Returns:
        HandlerResponse: 201 with {reservationId, status} on success; 400, 409,
        503 or 500 problem details otherwise
    """
    try:
        request = ReservationRequest.model_validate(payload)
    except ValidationError as e:
        errors = _schema_errors(e)
        logger.warning("reservation_request_invalid", errors=errors)
        return problem_detail(400, "Validation failed for request body", errors)

    try:
        response = await admission.admit(request)

    except ReservationValidationError as e:
        errors = {error.field: error.message for error in e.errors}
        return problem_detail(400, e.message, errors or None)

    except (PaymentRejectedError, InvalidPaymentReferenceError) as e:
        return problem_detail(400, e.message)

    except RoomConflictError as e:
        return problem_detail(409, e.message)

    except PaymentServiceUnavailableError as e:
        cause = str(e.cause) if e.cause is not None else e.message
        logger.warning("payment_service_unavailable", room_number=request.room_number, cause=cause)
        return problem_detail(
            503,
            "Try later - payment service temporarily unavailable",
            cause=cause,
        )

    except Exception as e:
        logger.error(
            "reservation_creation_failed",
            room_number=request.room_number,
            error=str(e),
            exc_info=True,
        )
        return problem_detail(500, "An unexpected error occurred. Please try again later.")

    return HandlerResponse(
        status_code=201,
        body=response.model_dump(mode="json", by_alias=True),
    )
