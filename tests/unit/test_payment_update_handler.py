"""Unit tests for bank transfer payment update handling."""

import json
from decimal import Decimal

import pytest

from reservation_service.exceptions import MessageFormatError
from reservation_service.handlers.payments import (
    ConfirmationOutcome,
    PaymentConfirmationHandler,
    decode_payment_update,
    extract_reservation_id,
)
from reservation_service.models.payment import PaymentUpdateEvent
from reservation_service.models.reservation import PaymentMode, ReservationStatus


def _payload(description, **overrides) -> bytes:
    data = {
        "paymentId": "PAY-0001",
        "debtorAccountNumber": "NL91ABNA0417164300",
        "amountReceived": 250.00,
        "transactionDescription": description,
    }
    data.update(overrides)
    return json.dumps(data).encode("utf-8")


@pytest.fixture
def handler(memory_repo):
    return PaymentConfirmationHandler(memory_repo.scope)


def test_decode_reads_event_fields():
    """Test the feed's field names map onto the event."""
    event = decode_payment_update(_payload("E2E-REF ABC12345"))

    assert event.payment_id == "PAY-0001"
    assert event.amount_received == Decimal("250")
    assert event.transaction_description == "E2E-REF ABC12345"


@pytest.mark.parametrize("payload", [b"not json", b"[1, 2]", b'{"amountReceived": "lots"}'])
def test_decode_rejects_malformed_payloads(payload):
    """Test unparseable payloads raise MessageFormatError."""
    with pytest.raises(MessageFormatError):
        decode_payment_update(payload)


def test_extract_reservation_id_takes_second_token():
    """Test the id is the token after the end-to-end reference."""
    event = PaymentUpdateEvent(transaction_description="E2E-REF  ABC12345 extra")

    assert extract_reservation_id(event) == "ABC12345"


@pytest.mark.parametrize(
    "description",
    [None, "", "   ", "ABC12345", "E2E-REF abc12345", "E2E-REF ABC1234", "E2E-REF ABC123456"],
)
def test_extract_rejects_bad_descriptions(description):
    """Test missing or malformed descriptions are format errors."""
    event = PaymentUpdateEvent(transaction_description=description)

    with pytest.raises(MessageFormatError):
        extract_reservation_id(event)


@pytest.mark.asyncio
async def test_confirms_pending_bank_transfer(handler, memory_repo, make_reservation):
    """Test a payment update confirms the referenced reservation."""
    reservation = await memory_repo.create(make_reservation(reservation_id="ABC12345"))

    outcome = await handler.handle(_payload("E2E-REF ABC12345"))

    assert outcome == ConfirmationOutcome.CONFIRMED
    stored = await memory_repo.get_by_id("ABC12345")
    assert stored.status == ReservationStatus.CONFIRMED
    assert stored.updated_at >= reservation.updated_at


@pytest.mark.asyncio
async def test_duplicate_update_is_a_no_op(handler, memory_repo, make_reservation):
    """Test redelivery of the same event changes nothing."""
    await memory_repo.create(make_reservation(reservation_id="ABC12345"))
    await handler.handle(_payload("E2E-REF ABC12345"))
    confirmed = await memory_repo.get_by_id("ABC12345")

    outcome = await handler.handle(_payload("E2E-REF ABC12345"))

    assert outcome == ConfirmationOutcome.ALREADY_PROCESSED
    assert await memory_repo.get_by_id("ABC12345") == confirmed


@pytest.mark.asyncio
async def test_unknown_reservation(handler, memory_repo):
    """Test events for unknown ids are acknowledged without changes."""
    outcome = await handler.handle(_payload("E2E-REF ZZZ99999"))

    assert outcome == ConfirmationOutcome.NOT_FOUND
    assert memory_repo.all() == []


@pytest.mark.asyncio
async def test_cancelled_reservation_is_not_revived(handler, memory_repo, make_reservation):
    """Test a payment arriving after cancellation leaves it cancelled."""
    await memory_repo.create(
        make_reservation(reservation_id="ABC12345", status=ReservationStatus.CANCELLED)
    )

    outcome = await handler.handle(_payload("E2E-REF ABC12345"))

    assert outcome == ConfirmationOutcome.ALREADY_PROCESSED
    assert (await memory_repo.get_by_id("ABC12345")).status == ReservationStatus.CANCELLED


@pytest.mark.asyncio
async def test_non_bank_transfer_reservation_is_skipped(handler, memory_repo, make_reservation):
    """Test pending card reservations are not confirmed by bank updates."""
    await memory_repo.create(
        make_reservation(reservation_id="ABC12345", payment_mode=PaymentMode.CREDIT_CARD)
    )

    outcome = await handler.handle(_payload("E2E-REF ABC12345"))

    assert outcome == ConfirmationOutcome.ALREADY_PROCESSED
    assert (await memory_repo.get_by_id("ABC12345")).status == ReservationStatus.PENDING_PAYMENT


@pytest.mark.asyncio
async def test_malformed_description_raises(handler, memory_repo, make_reservation):
    """Test format errors propagate for the transport to retry."""
    await memory_repo.create(make_reservation(reservation_id="ABC12345"))

    with pytest.raises(MessageFormatError):
        await handler.handle(_payload("ABC12345"))

    assert (await memory_repo.get_by_id("ABC12345")).status == ReservationStatus.PENDING_PAYMENT
