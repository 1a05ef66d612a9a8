"""Repository base interfaces."""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from datetime import date
from typing import Callable, Generic, Optional, TypeVar

from reservation_service.models.reservation import Reservation, ReservationStatus

T = TypeVar("T")


class RepositoryBase(ABC, Generic[T]):
    """Base repository interface."""

    @abstractmethod
    async def get_by_id(self, id: str) -> Optional[T]:
        """Retrieve entity by ID."""
        pass

    @abstractmethod
    async def create(self, entity: T) -> T:
        """Persist a new entity."""
        pass


class ReservationRepository(RepositoryBase[Reservation]):
    """Query contracts the reservation store must support."""

    @abstractmethod
    async def find_overlapping(
        self, room_number: str, start_date: date, end_date: date
    ) -> list[Reservation]:
        """Active reservations of a room whose [start, end) overlaps the range."""
        pass

    @abstractmethod
    async def find_overdue_unpaid(self, threshold: date) -> list[Reservation]:
        """Pending bank transfer reservations starting on or before threshold."""
        pass

    @abstractmethod
    async def transition_status(
        self,
        reservation_id: str,
        expected: ReservationStatus,
        new_status: ReservationStatus,
    ) -> Optional[Reservation]:
        """Move a reservation from expected to new_status.

        Returns None when the reservation is missing or no longer in the
        expected status.
        """
        pass

    @abstractmethod
    def room_guard(self, room_number: str) -> AbstractAsyncContextManager[None]:
        """Serialize conflict check and insert for one room."""
        pass


RepositoryFactory = Callable[[], AbstractAsyncContextManager[ReservationRepository]]
