"""PostgreSQL repository for Reservation entities."""

from contextlib import asynccontextmanager
from datetime import date, datetime, timezone
from typing import AsyncIterator, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from reservation_service.exceptions import ReservationIdCollisionError, RoomConflictError
from reservation_service.logging import get_logger
from reservation_service.models.reservation import (
    ACTIVE_STATUSES,
    PaymentMode,
    Reservation,
    ReservationStatus,
)
from reservation_service.storage.db_models import NO_OVERLAP_CONSTRAINT, ReservationTable
from reservation_service.storage.repository_base import ReservationRepository

logger = get_logger(__name__)


class PostgresReservationRepository(ReservationRepository):
    """Reservation repository using PostgreSQL."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def get_by_id(self, id: str) -> Optional[Reservation]:
        """Retrieve reservation by ID."""
        stmt = select(ReservationTable).where(ReservationTable.id == id)
        result = await self.session.execute(stmt)
        db_reservation = result.scalar_one_or_none()

        if not db_reservation:
            return None

        return self._to_domain_model(db_reservation)

    async def create(self, entity: Reservation) -> Reservation:
        """Insert a new reservation and commit, releasing any room guard.

        Raises:
            RoomConflictError: Exclusion constraint rejected the stay
            ReservationIdCollisionError: Id already taken
        """
        db_reservation = ReservationTable(
            id=entity.id,
            customer_name=entity.customer_name,
            room_number=entity.room_number,
            start_date=entity.start_date,
            end_date=entity.end_date,
            segment=entity.segment,
            payment_mode=entity.payment_mode,
            payment_reference=entity.payment_reference,
            status=entity.status,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

        # Savepoint so a rejected insert keeps the outer transaction and its room lock
        try:
            async with self.session.begin_nested():
                self.session.add(db_reservation)
        except IntegrityError as e:
            if NO_OVERLAP_CONSTRAINT in str(e.orig):
                raise RoomConflictError(
                    entity.room_number, entity.start_date, entity.end_date
                ) from e
            if "reservations_pkey" in str(e.orig):
                raise ReservationIdCollisionError(
                    f"Reservation id already exists: {entity.id}"
                ) from e
            raise
        await self.session.commit()

        return self._to_domain_model(db_reservation)

    async def find_overlapping(
        self, room_number: str, start_date: date, end_date: date
    ) -> list[Reservation]:
        """Get active reservations of a room overlapping [start_date, end_date)."""
        stmt = (
            select(ReservationTable)
            .where(ReservationTable.room_number == room_number)
            .where(ReservationTable.status.in_(list(ACTIVE_STATUSES)))
            .where(ReservationTable.start_date < end_date)
            .where(ReservationTable.end_date > start_date)
        )
        result = await self.session.execute(stmt)
        db_reservations = result.scalars().all()

        return [self._to_domain_model(db_res) for db_res in db_reservations]

    async def find_overdue_unpaid(self, threshold: date) -> list[Reservation]:
        """Get pending bank transfer reservations starting on or before threshold."""
        stmt = (
            select(ReservationTable)
            .where(ReservationTable.status == ReservationStatus.PENDING_PAYMENT)
            .where(ReservationTable.payment_mode == PaymentMode.BANK_TRANSFER)
            .where(ReservationTable.start_date <= threshold)
            .order_by(ReservationTable.start_date.asc())
        )
        result = await self.session.execute(stmt)
        db_reservations = result.scalars().all()

        return [self._to_domain_model(db_res) for db_res in db_reservations]

    async def transition_status(
        self,
        reservation_id: str,
        expected: ReservationStatus,
        new_status: ReservationStatus,
    ) -> Optional[Reservation]:
        """Compare-and-set the status of a reservation."""
        stmt = (
            update(ReservationTable)
            .where(ReservationTable.id == reservation_id)
            .where(ReservationTable.status == expected)
            .values(status=new_status, updated_at=datetime.now(timezone.utc))
            .returning(ReservationTable)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        db_reservation = result.scalars().first()
        await self.session.commit()

        if not db_reservation:
            return None

        return self._to_domain_model(db_reservation)

    @asynccontextmanager
    async def room_guard(self, room_number: str) -> AsyncIterator[None]:
        """Hold a transaction-scoped advisory lock on the room.

        The lock is released when the surrounding transaction commits or
        rolls back.
        """
        await self.session.execute(
            select(func.pg_advisory_xact_lock(func.hashtext(room_number)))
        )
        logger.debug("room_guard_acquired", room_number=room_number)
        yield

    def _to_domain_model(self, db_reservation: ReservationTable) -> Reservation:
        """Convert database model to domain model."""
        return Reservation(
            id=db_reservation.id,
            customer_name=db_reservation.customer_name,
            room_number=db_reservation.room_number,
            start_date=db_reservation.start_date,
            end_date=db_reservation.end_date,
            segment=db_reservation.segment,
            payment_mode=db_reservation.payment_mode,
            payment_reference=db_reservation.payment_reference,
            status=db_reservation.status,
            created_at=db_reservation.created_at,
            updated_at=db_reservation.updated_at,
        )
