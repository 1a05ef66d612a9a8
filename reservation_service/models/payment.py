"""Payment related models: verification responses and inbound updates."""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PaymentConfirmationStatus(str, Enum):
    """Outcome reported by the payment authority."""

    CONFIRMED = "CONFIRMED"
    REJECTED = "REJECTED"


class PaymentStatusResponse(BaseModel):
    """Payment authority response body; unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore")

    status: PaymentConfirmationStatus


class PaymentUpdateEvent(BaseModel):
    """Bank transfer payment update received from the event feed."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    payment_id: Optional[str] = Field(default=None, alias="paymentId")
    debtor_account_number: Optional[str] = Field(default=None, alias="debtorAccountNumber")
    amount_received: Optional[Decimal] = Field(default=None, alias="amountReceived")
    # Format: "<endToEndRef> <reservationId>"
    transaction_description: Optional[str] = Field(default=None, alias="transactionDescription")
