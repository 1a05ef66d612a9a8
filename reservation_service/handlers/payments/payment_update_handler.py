"""Payment update handler for bank transfer confirmations.

Decodes an inbound payment update, extracts the reservation id from the
transaction description and confirms the matching reservation. Processing
is idempotent: redelivered or duplicate events leave the reservation as is.
"""

import re
from enum import Enum
from typing import Callable

from pydantic import ValidationError

from reservation_service.exceptions import MessageFormatError
from reservation_service.logging import get_logger
from reservation_service.models.payment import PaymentUpdateEvent
from reservation_service.models.reservation import ReservationStatus
from reservation_service.storage.repository_base import RepositoryFactory

logger = get_logger(__name__)

RESERVATION_ID_PATTERN = re.compile(r"^[A-Z0-9]{8}$")


class ConfirmationOutcome(str, Enum):
    """Result of handling one payment update."""

    CONFIRMED = "CONFIRMED"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_PROCESSED = "ALREADY_PROCESSED"


def decode_payment_update(payload: bytes | str) -> PaymentUpdateEvent:
    """Parse a raw payment update; malformed payloads raise MessageFormatError."""
    try:
        return PaymentUpdateEvent.model_validate_json(payload)
    except ValidationError as e:
        # Field locations only; input values may carry account numbers, so
        # the ValidationError is not chained either
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'body'}: {error['msg']}"
            for error in e.errors(include_input=False)
        )
        raise MessageFormatError(f"Unable to parse payment update message: {problems}") from None


def extract_reservation_id(event: PaymentUpdateEvent) -> str:
    """Take the reservation id from "<endToEndRef> <reservationId>"."""
    description = event.transaction_description
    if description is None or not description.strip():
        raise MessageFormatError("Missing transactionDescription")

    parts = description.split()
    if len(parts) < 2:
        raise MessageFormatError(
            "Invalid transactionDescription format - expected '<endToEndRef> <reservationId>'"
        )

    reservation_id = parts[1]
    if not RESERVATION_ID_PATTERN.match(reservation_id):
        raise MessageFormatError(
            f"Invalid reservationId (must be exactly 8 uppercase alphanumeric): {reservation_id}"
        )
    return reservation_id


class PaymentConfirmationHandler:
    """Confirms pending bank transfer reservations from payment updates."""

    def __init__(
        self,
        repositories: RepositoryFactory,
        decode: Callable[[bytes | str], PaymentUpdateEvent] = decode_payment_update,
    ):
        self.repositories = repositories
        self.decode = decode

    async def handle(self, payload: bytes | str) -> ConfirmationOutcome:
        """
        Process one payment update.

        Args:
            payload: Raw event value

        Returns:
            What happened to the referenced reservation

        Raises:
            MessageFormatError: Payload or transaction description is malformed
        """
        event = self.decode(payload)
        reservation_id = extract_reservation_id(event)

        logger.info(
            "payment_update_received",
            reservation_id=reservation_id,
            payment_id=event.payment_id,
        )

        async with self.repositories() as repository:
            reservation = await repository.get_by_id(reservation_id)

            if reservation is None:
                logger.warning("payment_update_reservation_not_found", reservation_id=reservation_id)
                return ConfirmationOutcome.NOT_FOUND

            if not reservation.is_awaiting_bank_transfer:
                logger.info(
                    "payment_update_skipped",
                    reservation_id=reservation_id,
                    status=reservation.status.value,
                    payment_mode=reservation.payment_mode.value,
                )
                return ConfirmationOutcome.ALREADY_PROCESSED

            confirmed = await repository.transition_status(
                reservation_id,
                ReservationStatus.PENDING_PAYMENT,
                ReservationStatus.CONFIRMED,
            )

        if confirmed is None:
            # Cancelled or confirmed between the read and the update
            logger.info("payment_update_skipped", reservation_id=reservation_id, reason="status changed")
            return ConfirmationOutcome.ALREADY_PROCESSED

        logger.info(
            "reservation_confirmed",
            reservation_id=reservation_id,
            payment_id=event.payment_id,
            amount_received=str(event.amount_received) if event.amount_received is not None else None,
        )
        return ConfirmationOutcome.CONFIRMED
