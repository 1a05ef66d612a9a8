"""Application wiring."""

import asyncio
from dataclasses import dataclass, field
from typing import Optional

from reservation_service.config.settings import Settings
from reservation_service.handlers.payments import PaymentConfirmationHandler, PaymentUpdateListener
from reservation_service.services.admission import AdmissionController
from reservation_service.services.circuit_breaker import CircuitBreaker
from reservation_service.services.expiration_job import ReservationExpiryJob
from reservation_service.services.payment_verifier import PaymentVerifier, RetryPolicy
from reservation_service.services.scheduler import SchedulerService
from reservation_service.storage.database import Database
from reservation_service.storage.redis_locks import RedisLockHelper


@dataclass
class ReservationApplication:
    """Wired components shared by the transport adapters."""

    settings: Settings
    db: Database
    redis_locks: RedisLockHelper
    payment_verifier: PaymentVerifier
    admission: AdmissionController
    confirmation_handler: PaymentConfirmationHandler
    payment_update_listener: PaymentUpdateListener
    expiry_job: ReservationExpiryJob
    scheduler: SchedulerService
    _scheduler_task: Optional[asyncio.Task] = field(default=None, init=False, repr=False)

    async def connect(self) -> None:
        await self.db.connect()
        await self.redis_locks.connect()

    def start_scheduler(self) -> asyncio.Task:
        """Run the expiry scheduler in the background until close()."""
        self._scheduler_task = asyncio.create_task(self.scheduler.start())
        return self._scheduler_task

    async def close(self) -> None:
        await self.scheduler.stop()
        if self._scheduler_task is not None:
            # An in-flight sweep still needs the store and Redis
            await self._scheduler_task
            self._scheduler_task = None
        await self.payment_verifier.close()
        await self.redis_locks.disconnect()
        await self.db.disconnect()


def build_application(settings: Settings) -> ReservationApplication:
    """Build every component from settings. Call connect() before use."""
    db = Database(settings)
    redis_locks = RedisLockHelper(settings.redis_url, ttl_seconds=settings.redis_lock_ttl_seconds)

    circuit_breaker = CircuitBreaker(
        "payment-service",
        failure_threshold=settings.payment_breaker_failure_threshold,
        cooldown_seconds=settings.payment_breaker_cooldown_seconds,
        half_open_max_calls=settings.payment_breaker_half_open_max_calls,
    )
    payment_verifier = PaymentVerifier(
        base_url=settings.payment_service_url,
        timeout=settings.payment_timeout,
        retry_policy=RetryPolicy(
            max_attempts=settings.payment_retry_max_attempts,
            backoff_seconds=settings.payment_retry_backoff_seconds,
            multiplier=settings.payment_retry_backoff_multiplier,
        ),
        circuit_breaker=circuit_breaker,
    )

    admission = AdmissionController(
        db.reservation_repository,
        payment_verifier,
        max_stay_days=settings.max_stay_days,
    )

    confirmation_handler = PaymentConfirmationHandler(db.reservation_repository)

    expiry_job = ReservationExpiryJob(
        db.reservation_repository,
        grace_days=settings.bank_transfer_grace_days,
    )
    scheduler = SchedulerService(
        expiry_job,
        interval_seconds=settings.expiry_sweep_interval_seconds,
        lock_helper=redis_locks,
    )

    return ReservationApplication(
        settings=settings,
        db=db,
        redis_locks=redis_locks,
        payment_verifier=payment_verifier,
        admission=admission,
        confirmation_handler=confirmation_handler,
        payment_update_listener=PaymentUpdateListener(confirmation_handler),
        expiry_job=expiry_job,
        scheduler=scheduler,
    )
