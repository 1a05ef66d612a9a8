"""Reservation admission service.

Validates a creation request, checks the room for conflicts, settles the
payment mode and persists the reservation. The conflict check and the
insert run under one room guard so concurrent admissions for the same room
cannot both pass the check.
"""

from datetime import date
from typing import Callable

from reservation_service.exceptions import (
    PaymentRejectedError,
    ReservationIdCollisionError,
    ReservationValidationError,
    RoomConflictError,
)
from reservation_service.logging import get_logger
from reservation_service.models.payment import PaymentConfirmationStatus
from reservation_service.models.reservation import (
    PaymentMode,
    Reservation,
    ReservationRequest,
    ReservationResponse,
    ReservationStatus,
)
from reservation_service.services.overlap_detector import OverlapDetector
from reservation_service.services.payment_verifier import PaymentVerifier
from reservation_service.services.reservation_validation import (
    MAX_STAY_DAYS,
    validate_reservation_request,
)
from reservation_service.storage.repository_base import RepositoryFactory, ReservationRepository

logger = get_logger(__name__)

MAX_ID_ATTEMPTS = 3

INITIAL_STATUS = {
    PaymentMode.CASH: ReservationStatus.CONFIRMED,
    PaymentMode.BANK_TRANSFER: ReservationStatus.PENDING_PAYMENT,
    PaymentMode.CREDIT_CARD: ReservationStatus.PENDING_PAYMENT,
}


class AdmissionController:
    """Admits new reservations."""

    def __init__(
        self,
        repositories: RepositoryFactory,
        payment_verifier: PaymentVerifier,
        today: Callable[[], date] = date.today,
        max_stay_days: int = MAX_STAY_DAYS,
    ):
        """
        Initialize admission controller.

        Args:
            repositories: Opens one store unit of work per admission
            payment_verifier: Verifies credit card payments
            today: Calendar date provider
            max_stay_days: Longest allowed stay
        """
        self.repositories = repositories
        self.payment_verifier = payment_verifier
        self.today = today
        self.max_stay_days = max_stay_days

    async def admit(self, request: ReservationRequest) -> ReservationResponse:
        """
        Admit a reservation request.

        Returns:
            Reservation id and initial status

        Raises:
            ReservationValidationError: Request breaks a business rule
            RoomConflictError: Room already booked for an overlapping period
            PaymentRejectedError: Card payment was rejected
            InvalidPaymentReferenceError: Card payment reference unknown
            PaymentServiceUnavailableError: Payment authority unreachable
        """
        validation = validate_reservation_request(
            request, self.today(), self.max_stay_days
        )
        if not validation.is_valid:
            raise ReservationValidationError(validation.summary, validation.errors)

        async with self.repositories() as repository:
            async with repository.room_guard(request.room_number):
                detector = OverlapDetector(repository)
                if await detector.has_conflict(
                    request.room_number, request.start_date, request.end_date
                ):
                    raise RoomConflictError(
                        request.room_number, request.start_date, request.end_date
                    )

                status = INITIAL_STATUS[request.payment_mode]
                if request.payment_mode == PaymentMode.CREDIT_CARD:
                    status = await self._settle_card_payment(request)

                reservation = await self._persist(repository, request, status)

        logger.info(
            "reservation_created",
            reservation_id=reservation.id,
            room_number=reservation.room_number,
            start_date=reservation.start_date.isoformat(),
            end_date=reservation.end_date.isoformat(),
            payment_mode=reservation.payment_mode.value,
            status=reservation.status.value,
        )

        return ReservationResponse(reservation_id=reservation.id, status=reservation.status)

    async def _settle_card_payment(self, request: ReservationRequest) -> ReservationStatus:
        """Verify the card payment; only a confirmed payment admits the stay."""
        reference = request.payment_reference
        if reference is None or not reference.strip():
            raise ReservationValidationError(
                "paymentReference is required for credit card payments"
            )

        result = await self.payment_verifier.verify(reference)

        if result != PaymentConfirmationStatus.CONFIRMED:
            logger.info(
                "card_payment_rejected",
                room_number=request.room_number,
                payment_reference=reference,
            )
            raise PaymentRejectedError("The card payment was rejected")

        return ReservationStatus.CONFIRMED

    async def _persist(
        self,
        repository: ReservationRepository,
        request: ReservationRequest,
        status: ReservationStatus,
    ) -> Reservation:
        """Insert the reservation, regenerating the id on the rare collision."""
        collision: ReservationIdCollisionError | None = None

        for _ in range(MAX_ID_ATTEMPTS):
            reservation = Reservation.create(
                customer_name=request.customer_name,
                room_number=request.room_number,
                start_date=request.start_date,
                end_date=request.end_date,
                segment=request.segment,
                payment_mode=request.payment_mode,
                payment_reference=request.payment_reference,
                status=status,
            )
            try:
                return await repository.create(reservation)
            except ReservationIdCollisionError as e:
                collision = e
                logger.warning("reservation_id_collision", reservation_id=reservation.id)

        raise collision
