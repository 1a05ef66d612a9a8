"""Booking conflict detection for rooms."""

from datetime import date

from reservation_service.logging import get_logger
from reservation_service.storage.repository_base import ReservationRepository

logger = get_logger(__name__)


def ranges_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """Half-open [start, end) overlap; ranges sharing an edge do not overlap."""
    return a_start < b_end and b_start < a_end


class OverlapDetector:
    """Checks a candidate stay against the active reservations of a room."""

    def __init__(self, repository: ReservationRepository):
        """
        Initialize overlap detector.

        Args:
            repository: Store view used for the check; must be the same unit
                of work as the insert that follows it
        """
        self.repository = repository

    async def has_conflict(self, room_number: str, start_date: date, end_date: date) -> bool:
        """Check if any active reservation of the room overlaps the range."""
        overlapping = await self.repository.find_overlapping(room_number, start_date, end_date)

        if overlapping:
            logger.info(
                "room_conflict_detected",
                room_number=room_number,
                start_date=start_date.isoformat(),
                end_date=end_date.isoformat(),
                conflicting_ids=[reservation.id for reservation in overlapping],
            )
            return True

        return False
