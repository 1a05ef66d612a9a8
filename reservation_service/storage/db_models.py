"""SQLAlchemy database models.

Maps domain models to PostgreSQL tables.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, Enum, Index, String, func, text
from sqlalchemy.dialects.postgresql import ExcludeConstraint
from sqlalchemy.orm import DeclarativeBase

from reservation_service.models.reservation import PaymentMode, ReservationStatus, RoomSegment

NO_OVERLAP_CONSTRAINT = "reservations_no_overlap"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class ReservationTable(Base):
    """Reservation entity table."""

    __tablename__ = "reservations"

    id = Column(String(8), primary_key=True)
    customer_name = Column(String(100), nullable=False)
    room_number = Column(String(10), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    segment = Column(Enum(RoomSegment, native_enum=True), nullable=False)
    payment_mode = Column(Enum(PaymentMode, native_enum=True), nullable=False)
    payment_reference = Column(String(100), nullable=True)
    status = Column(Enum(ReservationStatus, native_enum=True), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        Index("ix_reservations_room_dates", room_number, start_date, end_date),
        Index("ix_reservations_status_mode_start", status, payment_mode, start_date),
        # Requires the btree_gist extension for the equality on room_number
        ExcludeConstraint(
            (room_number, "="),
            (func.daterange(start_date, end_date), "&&"),
            name=NO_OVERLAP_CONSTRAINT,
            using="gist",
            where=text("status IN ('PENDING_PAYMENT', 'CONFIRMED')"),
        ),
    )
