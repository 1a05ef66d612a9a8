"""Expiration job service.

Background job that cancels bank transfer reservations still unpaid shortly
before their start date. Runs on a schedule and moves status from
PENDING_PAYMENT to CANCELLED.
"""

from datetime import date, timedelta
from typing import Callable

from reservation_service.logging import get_logger
from reservation_service.models.reservation import ReservationStatus
from reservation_service.storage.repository_base import RepositoryFactory

logger = get_logger(__name__)

BANK_TRANSFER_GRACE_DAYS = 2


class ReservationExpiryJob:
    """Background job to cancel overdue unpaid bank transfer reservations."""

    def __init__(
        self,
        repositories: RepositoryFactory,
        today: Callable[[], date] = date.today,
        grace_days: int = BANK_TRANSFER_GRACE_DAYS,
    ):
        """
        Initialize expiration job.

        Args:
            repositories: Opens store units of work
            today: Calendar date provider
            grace_days: Reservations starting within this many days must be paid
        """
        self.repositories = repositories
        self.today = today
        self.grace_days = grace_days

    async def run(self) -> dict[str, int]:
        """
        Execute one sweep.

        A failure on one reservation is logged and does not stop the others;
        a failure to fetch candidates aborts the sweep until the next tick.
        Never raises.

        Returns:
            Dictionary with counts: {"cancelled": n, "skipped": n, "failed": n}
        """
        threshold = self.today() + timedelta(days=self.grace_days)
        logger.info("expiry_sweep_started", threshold=threshold.isoformat())

        try:
            async with self.repositories() as repository:
                overdue = await repository.find_overdue_unpaid(threshold)
        except Exception as e:
            logger.error(
                "expiry_sweep_error",
                threshold=threshold.isoformat(),
                error=str(e),
                exc_info=True,
            )
            return {"cancelled": 0, "skipped": 0, "failed": 0}

        cancelled_count = 0
        skipped_count = 0
        failed_count = 0

        for reservation in overdue:
            try:
                async with self.repositories() as repository:
                    cancelled = await repository.transition_status(
                        reservation.id,
                        ReservationStatus.PENDING_PAYMENT,
                        ReservationStatus.CANCELLED,
                    )

                if cancelled is None:
                    # Confirmed or cancelled since the fetch
                    skipped_count += 1
                    logger.info("reservation_cancel_skipped", reservation_id=reservation.id)
                    continue

                cancelled_count += 1
                logger.info(
                    "reservation_cancelled",
                    reservation_id=reservation.id,
                    room_number=reservation.room_number,
                    start_date=reservation.start_date.isoformat(),
                )

            except Exception as e:
                failed_count += 1
                logger.error(
                    "reservation_cancel_failed",
                    reservation_id=reservation.id,
                    error=str(e),
                    exc_info=True,
                )

        result = {
            "cancelled": cancelled_count,
            "skipped": skipped_count,
            "failed": failed_count,
        }

        logger.info("expiry_sweep_completed", **result)

        return result
