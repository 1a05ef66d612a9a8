"""Unit tests for the reservation expiry job."""

from datetime import timedelta

import pytest

from reservation_service.models.reservation import PaymentMode, ReservationStatus
from reservation_service.services.expiration_job import ReservationExpiryJob
from reservation_service.storage.memory_reservation_repo import InMemoryReservationRepository


class BrokenFetchRepository(InMemoryReservationRepository):
    async def find_overdue_unpaid(self, threshold):
        raise ConnectionError("database unavailable")


class FlakyRepository(InMemoryReservationRepository):
    """Fails to cancel one specific reservation."""

    def __init__(self, failing_id):
        super().__init__()
        self.failing_id = failing_id

    async def transition_status(self, reservation_id, expected, new_status):
        if reservation_id == self.failing_id:
            raise ConnectionError("write failed")
        return await super().transition_status(reservation_id, expected, new_status)


class PaidMeanwhileRepository(InMemoryReservationRepository):
    """Confirms every candidate right after it is fetched."""

    async def find_overdue_unpaid(self, threshold):
        overdue = await super().find_overdue_unpaid(threshold)
        for reservation in overdue:
            await self.transition_status(
                reservation.id, ReservationStatus.PENDING_PAYMENT, ReservationStatus.CONFIRMED
            )
        return overdue


def _job(repo, today):
    return ReservationExpiryJob(repo.scope, today=lambda: today, grace_days=2)


@pytest.mark.asyncio
async def test_cancels_reservations_inside_grace_window(memory_repo, make_reservation, today):
    """Test unpaid bank transfers starting within two days are cancelled."""
    due_today = await memory_repo.create(
        make_reservation(start_date=today, end_date=today + timedelta(days=1))
    )
    due_at_threshold = await memory_repo.create(
        make_reservation(
            room_number="102",
            start_date=today + timedelta(days=2),
            end_date=today + timedelta(days=4),
        )
    )
    not_due = await memory_repo.create(
        make_reservation(
            room_number="103",
            start_date=today + timedelta(days=3),
            end_date=today + timedelta(days=5),
        )
    )

    result = await _job(memory_repo, today).run()

    assert result == {"cancelled": 2, "skipped": 0, "failed": 0}
    assert (await memory_repo.get_by_id(due_today.id)).status == ReservationStatus.CANCELLED
    assert (await memory_repo.get_by_id(due_at_threshold.id)).status == ReservationStatus.CANCELLED
    assert (await memory_repo.get_by_id(not_due.id)).status == ReservationStatus.PENDING_PAYMENT


@pytest.mark.asyncio
async def test_leaves_other_reservations_alone(memory_repo, make_reservation, today):
    """Test confirmed stays and pending card payments are never swept."""
    start = {"start_date": today, "end_date": today + timedelta(days=1)}
    confirmed = await memory_repo.create(make_reservation(status=ReservationStatus.CONFIRMED, **start))
    card = await memory_repo.create(
        make_reservation(room_number="102", payment_mode=PaymentMode.CREDIT_CARD, **start)
    )

    result = await _job(memory_repo, today).run()

    assert result == {"cancelled": 0, "skipped": 0, "failed": 0}
    assert (await memory_repo.get_by_id(confirmed.id)).status == ReservationStatus.CONFIRMED
    assert (await memory_repo.get_by_id(card.id)).status == ReservationStatus.PENDING_PAYMENT


@pytest.mark.asyncio
async def test_failure_on_one_reservation_continues(make_reservation, today):
    """Test one failing cancellation does not stop the sweep."""
    first = make_reservation(start_date=today, end_date=today + timedelta(days=1))
    second = make_reservation(
        room_number="102", start_date=today + timedelta(days=1), end_date=today + timedelta(days=2)
    )
    repo = FlakyRepository(failing_id=first.id)
    await repo.create(first)
    await repo.create(second)

    result = await _job(repo, today).run()

    assert result == {"cancelled": 1, "skipped": 0, "failed": 1}
    assert (await repo.get_by_id(first.id)).status == ReservationStatus.PENDING_PAYMENT
    assert (await repo.get_by_id(second.id)).status == ReservationStatus.CANCELLED


@pytest.mark.asyncio
async def test_fetch_failure_returns_zero_counts(today):
    """Test a failed candidate query aborts the sweep without raising."""
    result = await _job(BrokenFetchRepository(), today).run()

    assert result == {"cancelled": 0, "skipped": 0, "failed": 0}


@pytest.mark.asyncio
async def test_reservation_paid_after_fetch_is_skipped(make_reservation, today):
    """Test a confirmation racing the sweep wins over the cancellation."""
    repo = PaidMeanwhileRepository()
    reservation = await repo.create(make_reservation(start_date=today, end_date=today + timedelta(days=1)))

    result = await _job(repo, today).run()

    assert result == {"cancelled": 0, "skipped": 1, "failed": 0}
    assert (await repo.get_by_id(reservation.id)).status == ReservationStatus.CONFIRMED
