"""In-process reservation repository for local runs and tests."""

import asyncio
from contextlib import asynccontextmanager
from datetime import date, datetime, timezone
from typing import AsyncIterator, Optional

from reservation_service.exceptions import ReservationIdCollisionError
from reservation_service.models.reservation import (
    ACTIVE_STATUSES,
    Reservation,
    ReservationStatus,
)
from reservation_service.services.overlap_detector import ranges_overlap
from reservation_service.storage.repository_base import ReservationRepository


class InMemoryReservationRepository(ReservationRepository):
    """Dict-backed repository with per-room admission locks."""

    def __init__(self) -> None:
        self._reservations: dict[str, Reservation] = {}
        self._room_locks: dict[str, asyncio.Lock] = {}

    @asynccontextmanager
    async def scope(self) -> AsyncIterator["InMemoryReservationRepository"]:
        """Unit-of-work scope; the in-memory store has no session to open."""
        yield self

    async def get_by_id(self, id: str) -> Optional[Reservation]:
        return self._reservations.get(id)

    async def create(self, entity: Reservation) -> Reservation:
        if entity.id in self._reservations:
            raise ReservationIdCollisionError(f"Reservation id already exists: {entity.id}")
        self._reservations[entity.id] = entity
        return entity

    async def find_overlapping(
        self, room_number: str, start_date: date, end_date: date
    ) -> list[Reservation]:
        return [
            reservation
            for reservation in self._reservations.values()
            if reservation.room_number == room_number
            and reservation.status in ACTIVE_STATUSES
            and ranges_overlap(
                reservation.start_date, reservation.end_date, start_date, end_date
            )
        ]

    async def find_overdue_unpaid(self, threshold: date) -> list[Reservation]:
        overdue = [
            reservation
            for reservation in self._reservations.values()
            if reservation.is_awaiting_bank_transfer and reservation.start_date <= threshold
        ]
        return sorted(overdue, key=lambda reservation: reservation.start_date)

    async def transition_status(
        self,
        reservation_id: str,
        expected: ReservationStatus,
        new_status: ReservationStatus,
    ) -> Optional[Reservation]:
        # No await between read and write, so this is atomic on the event loop
        current = self._reservations.get(reservation_id)
        if current is None or current.status != expected:
            return None
        updated = current.transition_to(new_status, datetime.now(timezone.utc))
        self._reservations[reservation_id] = updated
        return updated

    @asynccontextmanager
    async def room_guard(self, room_number: str) -> AsyncIterator[None]:
        lock = self._room_locks.setdefault(room_number, asyncio.Lock())
        async with lock:
            yield

    def all(self) -> list[Reservation]:
        """Snapshot of every stored reservation."""
        return list(self._reservations.values())
