"""Circuit breaker guarding calls to the payment authority."""

import time
from enum import Enum
from typing import Callable

from reservation_service.exceptions import CircuitOpenError
from reservation_service.logging import get_logger

logger = get_logger(__name__)


class CircuitState(str, Enum):
    """Breaker states."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """
    Consecutive-failure circuit breaker.

    Opens after failure_threshold consecutive failures. While open, calls are
    rejected without being attempted. After cooldown_seconds the breaker lets
    up to half_open_max_calls probes through; it closes once that many probes
    succeed and reopens on the first probe failure.
    """

    def __init__(
        self,
        name: str,
        failure_threshold: int = 5,
        cooldown_seconds: float = 30.0,
        half_open_max_calls: int = 2,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.failure_threshold = failure_threshold
        self.cooldown_seconds = cooldown_seconds
        self.half_open_max_calls = half_open_max_calls
        self._clock = clock
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._probe_calls = 0
        self._probe_successes = 0
        self._opened_at: float | None = None

    @property
    def state(self) -> CircuitState:
        """Current state, moving open to half-open once the cool-down elapsed."""
        if self._state == CircuitState.OPEN and self._cooldown_elapsed():
            self._transition(CircuitState.HALF_OPEN)
        return self._state

    def _cooldown_elapsed(self) -> bool:
        if self._opened_at is None:
            return True
        return self._clock() - self._opened_at >= self.cooldown_seconds

    def before_call(self) -> None:
        """Admit a call or raise CircuitOpenError."""
        state = self.state
        if state == CircuitState.OPEN:
            raise CircuitOpenError(f"Circuit breaker '{self.name}' is open")
        if state == CircuitState.HALF_OPEN:
            if self._probe_calls >= self.half_open_max_calls:
                raise CircuitOpenError(
                    f"Circuit breaker '{self.name}' is half-open and probe calls are in flight"
                )
            self._probe_calls += 1

    def record_success(self) -> None:
        if self._state == CircuitState.HALF_OPEN:
            self._probe_successes += 1
            if self._probe_successes >= self.half_open_max_calls:
                self._transition(CircuitState.CLOSED)
            return
        self._failure_count = 0

    def record_failure(self) -> None:
        if self._state == CircuitState.HALF_OPEN:
            self._transition(CircuitState.OPEN)
            return
        self._failure_count += 1
        if self._failure_count >= self.failure_threshold:
            self._transition(CircuitState.OPEN)

    def _transition(self, new_state: CircuitState) -> None:
        previous = self._state
        self._state = new_state
        self._probe_calls = 0
        self._probe_successes = 0
        if new_state == CircuitState.OPEN:
            self._opened_at = self._clock()
            logger.warning(
                "circuit_breaker_opened",
                breaker=self.name,
                previous_state=previous.value,
                failures=self._failure_count,
            )
        elif new_state == CircuitState.CLOSED:
            self._failure_count = 0
            self._opened_at = None
            if previous != CircuitState.CLOSED:
                logger.info("circuit_breaker_closed", breaker=self.name)
        else:
            logger.info("circuit_breaker_half_open", breaker=self.name)
