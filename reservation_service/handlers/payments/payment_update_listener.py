"""Consumer side of the payment update feed.

The message transport owns delivery, redelivery and dead-lettering; this
listener only acknowledges processed messages and re-raises failures so the
transport can retry them.
"""

from typing import Protocol

from reservation_service.handlers.payments.payment_update_handler import (
    ConfirmationOutcome,
    PaymentConfirmationHandler,
)
from reservation_service.logging import get_logger

logger = get_logger(__name__)


class InboundMessage(Protocol):
    """Message handed over by the transport."""

    @property
    def value(self) -> bytes | str: ...

    def ack(self) -> None: ...


class PaymentUpdateListener:
    """Feeds transport messages to the confirmation handler, one at a time."""

    def __init__(self, handler: PaymentConfirmationHandler):
        self.handler = handler

    async def on_message(self, message: InboundMessage) -> ConfirmationOutcome:
        """Handle a message and acknowledge it; failures propagate unacknowledged."""
        try:
            outcome = await self.handler.handle(message.value)
        except Exception as e:
            logger.error(
                "payment_update_processing_failed",
                payload_size=len(message.value),
                error=str(e),
                exc_info=True,
            )
            raise

        message.ack()
        return outcome

