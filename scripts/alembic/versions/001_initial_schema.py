"""Initial schema with reservations and the room overlap exclusion constraint

Revision ID: 001_initial_schema
Revises: 
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create reservations schema."""
    # Needed for "room_number WITH =" inside a gist exclusion constraint
    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")

    # Create enum types
    op.execute("CREATE TYPE roomsegment AS ENUM ('SMALL', 'MEDIUM', 'LARGE', 'EXTRA_LARGE')")
    op.execute("CREATE TYPE paymentmode AS ENUM ('CASH', 'BANK_TRANSFER', 'CREDIT_CARD')")
    op.execute("CREATE TYPE reservationstatus AS ENUM ('PENDING_PAYMENT', 'CONFIRMED', 'CANCELLED')")

    # Create reservations table
    op.create_table(
        'reservations',
        sa.Column('id', sa.String(length=8), nullable=False),
        sa.Column('customer_name', sa.String(length=100), nullable=False),
        sa.Column('room_number', sa.String(length=10), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('segment', postgresql.ENUM('SMALL', 'MEDIUM', 'LARGE', 'EXTRA_LARGE', name='roomsegment', create_type=False), nullable=False),
        sa.Column('payment_mode', postgresql.ENUM('CASH', 'BANK_TRANSFER', 'CREDIT_CARD', name='paymentmode', create_type=False), nullable=False),
        sa.Column('payment_reference', sa.String(length=100), nullable=True),
        sa.Column('status', postgresql.ENUM('PENDING_PAYMENT', 'CONFIRMED', 'CANCELLED', name='reservationstatus', create_type=False), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("id ~ '^[A-Z0-9]{8}$'", name='check_reservation_id_format'),
        sa.CheckConstraint('end_date > start_date', name='check_end_after_start'),
        sa.PrimaryKeyConstraint('id', name='reservations_pkey')
    )
    op.create_index('ix_reservations_room_dates', 'reservations', ['room_number', 'start_date', 'end_date'])
    op.create_index('ix_reservations_status_mode_start', 'reservations', ['status', 'payment_mode', 'start_date'])

    # No two active reservations of a room may overlap; daterange is [start, end)
    op.execute(
        """
        ALTER TABLE reservations
        ADD CONSTRAINT reservations_no_overlap
        EXCLUDE USING gist (room_number WITH =, daterange(start_date, end_date) WITH &&)
        WHERE (status IN ('PENDING_PAYMENT', 'CONFIRMED'))
        """
    )


def downgrade() -> None:
    """Drop reservations schema."""
    op.drop_table('reservations')
    op.execute("DROP TYPE IF EXISTS reservationstatus")
    op.execute("DROP TYPE IF EXISTS paymentmode")
    op.execute("DROP TYPE IF EXISTS roomsegment")
