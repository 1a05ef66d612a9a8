"""Bank transfer payment update handling."""

from .payment_update_handler import (
    ConfirmationOutcome,
    PaymentConfirmationHandler,
    decode_payment_update,
    extract_reservation_id,
)
from .payment_update_listener import InboundMessage, PaymentUpdateListener

__all__ = [
    "ConfirmationOutcome",
    "InboundMessage",
    "PaymentConfirmationHandler",
    "PaymentUpdateListener",
    "decode_payment_update",
    "extract_reservation_id",
]
