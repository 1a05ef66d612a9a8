"""Credit card payment verification against the external payment authority.

Every attempt passes through a circuit breaker; transient failures (5xx,
network errors, timeouts) are retried with exponential backoff, client
errors (4xx) are not.
"""

import asyncio
from typing import Awaitable, Callable, Optional

import httpx
from pydantic import ValidationError

from reservation_service.exceptions import (
    CircuitOpenError,
    InvalidPaymentReferenceError,
    PaymentServiceUnavailableError,
)
from reservation_service.logging import get_logger
from reservation_service.models.payment import PaymentConfirmationStatus, PaymentStatusResponse
from reservation_service.services.circuit_breaker import CircuitBreaker

logger = get_logger(__name__)

PAYMENT_STATUS_PATH = "/payment-status"


class TransientPaymentError(Exception):
    """Attempt failed in a way that may succeed when retried."""


class RetryPolicy:
    """Bounded retry with exponential backoff."""

    def __init__(
        self,
        max_attempts: int = 3,
        backoff_seconds: float = 0.5,
        multiplier: float = 2.0,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds
        self.multiplier = multiplier

    def delay_before(self, attempt: int) -> float:
        """Seconds to wait before the given attempt (1-based)."""
        if attempt <= 1:
            return 0.0
        return self.backoff_seconds * self.multiplier ** (attempt - 2)


class PaymentVerifier:
    """Resilient client for the payment authority's status endpoint."""

    def __init__(
        self,
        base_url: str,
        timeout: httpx.Timeout,
        retry_policy: RetryPolicy,
        circuit_breaker: CircuitBreaker,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize payment verifier.

        Args:
            base_url: Payment authority base URL
            timeout: Connect and read timeouts for a single attempt
            retry_policy: Attempt budget and backoff
            circuit_breaker: Breaker owned by this verifier
            transport: Optional httpx transport (tests inject a MockTransport)
            sleep: Backoff sleep function
        """
        self.retry_policy = retry_policy
        self.circuit_breaker = circuit_breaker
        self._sleep = sleep
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def close(self) -> None:
        """Release pooled connections."""
        await self._client.aclose()

    async def verify(self, reference: str) -> PaymentConfirmationStatus:
        """
        Ask the payment authority for the status of a card payment.

        Args:
            reference: Payment reference supplied with the reservation

        Returns:
            CONFIRMED or REJECTED

        Raises:
            InvalidPaymentReferenceError: Authority answered with a 4xx
            PaymentServiceUnavailableError: Retries exhausted, breaker open,
                or the response could not be understood
        """
        last_error: Optional[BaseException] = None

        for attempt in range(1, self.retry_policy.max_attempts + 1):
            delay = self.retry_policy.delay_before(attempt)
            if delay > 0:
                await self._sleep(delay)

            try:
                self.circuit_breaker.before_call()
            except CircuitOpenError as e:
                logger.warning(
                    "payment_verification_short_circuited",
                    reference=reference,
                    attempt=attempt,
                )
                raise PaymentServiceUnavailableError(
                    "Payment service call rejected: circuit open", e
                ) from e

            try:
                status = await self._attempt(reference)
            except TransientPaymentError as e:
                self.circuit_breaker.record_failure()
                last_error = e.__cause__ or e
                logger.warning(
                    "payment_verification_attempt_failed",
                    reference=reference,
                    attempt=attempt,
                    max_attempts=self.retry_policy.max_attempts,
                    error=str(last_error),
                )
                continue
            except InvalidPaymentReferenceError:
                # The authority answered; the request itself is defective
                self.circuit_breaker.record_success()
                raise
            except PaymentServiceUnavailableError:
                self.circuit_breaker.record_failure()
                raise
            except BaseException:
                # Cancelled or unexpected; every admitted call must report back
                self.circuit_breaker.record_failure()
                raise

            self.circuit_breaker.record_success()
            logger.info(
                "payment_verified",
                reference=reference,
                status=status.value,
                attempt=attempt,
            )
            return status

        logger.error(
            "payment_verification_failed",
            reference=reference,
            attempts=self.retry_policy.max_attempts,
            error=str(last_error),
        )
        raise PaymentServiceUnavailableError("Payment service call failed", last_error)

    async def _attempt(self, reference: str) -> PaymentConfirmationStatus:
        """Single transport attempt with error classification."""
        try:
            response = await self._client.post(
                PAYMENT_STATUS_PATH, json={"reference": reference}
            )
        except httpx.TransportError as e:
            # Connect/read timeouts and network failures
            raise TransientPaymentError(f"{type(e).__name__}: {e}") from e

        if response.is_server_error:
            raise TransientPaymentError(
                f"Payment service returned {response.status_code}"
            )

        if response.is_client_error:
            raise InvalidPaymentReferenceError(
                "Payment reference was not found or invalid"
            )

        if not response.is_success:
            raise PaymentServiceUnavailableError(
                f"Unexpected payment service response {response.status_code}"
            )

        try:
            return PaymentStatusResponse.model_validate_json(response.content).status
        except ValidationError as e:
            raise PaymentServiceUnavailableError(
                "Payment service returned an unreadable response", e
            ) from e
