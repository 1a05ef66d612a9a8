"""Scheduler for background tasks (reservation expiry)."""

import asyncio
from typing import Optional

from reservation_service.logging import get_logger
from reservation_service.services.expiration_job import ReservationExpiryJob
from reservation_service.storage.redis_locks import RedisLockHelper

logger = get_logger(__name__)

SWEEP_LOCK_NAME = "reservation-expiry-sweep"


class SchedulerService:
    """Periodic single-flight runner for the expiry sweep."""

    def __init__(
        self,
        job: ReservationExpiryJob,
        interval_seconds: int = 3600,
        lock_helper: Optional[RedisLockHelper] = None,
    ):
        """Initialize scheduler service."""
        self.job = job
        self.interval_seconds = interval_seconds
        self.lock_helper = lock_helper
        self._run_lock = asyncio.Lock()
        self._stop_event = asyncio.Event()

    async def start(self) -> None:
        """Run ticks until stop() is called."""
        self._stop_event.clear()
        logger.info("scheduler_started", interval_seconds=self.interval_seconds)

        while not self._stop_event.is_set():
            await self.tick()
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                pass

        logger.info("scheduler_stopped")

    async def stop(self) -> None:
        """Signal the loop to stop after the current tick."""
        self._stop_event.set()

    async def tick(self) -> Optional[dict[str, int]]:
        """
        Run one sweep unless another is still in progress.

        Returns:
            Sweep counts, or None when the tick was skipped
        """
        if self._run_lock.locked():
            logger.warning("expiry_sweep_skipped", reason="previous sweep still running")
            return None

        async with self._run_lock:
            try:
                if self.lock_helper is None:
                    return await self.job.run()

                async with self.lock_helper.acquire_lock(SWEEP_LOCK_NAME) as acquired:
                    if not acquired:
                        logger.info("expiry_sweep_skipped", reason="sweep running on another instance")
                        return None
                    return await self.job.run()
            except Exception as e:
                logger.error("scheduler_error", error=str(e), exc_info=True)
                return None
