"""
Retry with exponential backoff plus a circuit breaker around any rate source.

The wrapper has the same interface as the client it wraps and reports
exhaustion as "no data", so the resolver only ever sees succeeded / failed.
"""

import logging
import threading
import time
from datetime import date
from decimal import Decimal
from typing import Callable

from apps.exchange.domain.interfaces import BaseRateSourceClient, RateSourceError
from apps.exchange.domain.models import ExchangeRateObservation

logger = logging.getLogger(__name__)


class CircuitOpenError(RateSourceError):
    pass


class CircuitBreaker:
    """
    Consecutive-failure breaker.

    closed -> open after `failure_threshold` failed calls; open rejects calls
    until `reset_seconds` have passed, then lets a single trial call through
    (half-open) whose outcome closes or re-opens the circuit.
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

    def __init__(
        self,
        failure_threshold: int = 5,
        reset_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.failure_threshold = failure_threshold
        self.reset_seconds = reset_seconds
        self.clock = clock
        self.state = self.CLOSED
        self.failures = 0
        self.opened_at: float | None = None
        self._lock = threading.Lock()

    def before_call(self) -> None:
        with self._lock:
            if self.state == self.OPEN:
                if self.clock() - self.opened_at < self.reset_seconds:
                    raise CircuitOpenError("Circuit breaker is open - rate source unavailable")
                self.state = self.HALF_OPEN
                logger.info("Circuit breaker half-open, allowing a trial call")
            elif self.state == self.HALF_OPEN:
                raise CircuitOpenError("Circuit breaker trial call already in flight")

    def record_success(self) -> None:
        with self._lock:
            if self.state != self.CLOSED:
                logger.info("Circuit breaker closed")
            self.state = self.CLOSED
            self.failures = 0
            self.opened_at = None

    def record_failure(self) -> None:
        with self._lock:
            self.failures += 1
            if self.state == self.HALF_OPEN or self.failures >= self.failure_threshold:
                if self.state != self.OPEN:
                    logger.warning("Circuit breaker opened after %d failures", self.failures)
                self.state = self.OPEN
                self.opened_at = self.clock()


class ResilientRateSourceClient(BaseRateSourceClient):

    def __init__(
        self,
        inner: BaseRateSourceClient,
        retry_attempts: int = 3,
        backoff_seconds: float = 2.0,
        breaker: CircuitBreaker | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.inner = inner
        self.retry_attempts = retry_attempts
        self.backoff_seconds = backoff_seconds
        self.breaker = breaker or CircuitBreaker(clock=clock)
        self.sleep = sleep
        self.clock = clock

    def get_rate(self, currency: str, on_date: date, timeout: float | None = None) -> Decimal | None:
        return self._call(self.inner.get_rate, None, timeout, currency, on_date)

    def get_rates_range(
        self,
        currency: str,
        start_date: date,
        timeout: float | None = None
    ) -> list[ExchangeRateObservation]:
        return self._call(self.inner.get_rates_range, [], timeout, currency, start_date)

    def _call(self, func, failed_value, timeout: float | None, *args):
        deadline = self.clock() + timeout if timeout is not None else None
        name = getattr(func, "__name__", "call")

        for attempt in range(1, self.retry_attempts + 2):
            remaining = None
            if deadline is not None:
                remaining = deadline - self.clock()
                if remaining <= 0:
                    logger.error("Deadline exceeded before %s attempt %d", name, attempt)
                    return failed_value

            try:
                self.breaker.before_call()
            except CircuitOpenError as e:
                logger.error("%s", e)
                return failed_value

            try:
                result = func(*args, timeout=remaining)
            except RateSourceError as e:
                self.breaker.record_failure()
                if attempt > self.retry_attempts:
                    logger.error("All %d retry attempts exhausted for %s: %s", self.retry_attempts, name, e)
                    return failed_value

                delay = self.backoff_seconds * (2 ** (attempt - 1))
                if deadline is not None and self.clock() + delay >= deadline:
                    logger.error("Deadline would pass during backoff for %s: %s", name, e)
                    return failed_value

                logger.warning("Retry %d for %s after %.1fs due to %s", attempt, name, delay, e)
                self.sleep(delay)
                continue
            except BaseException:
                # Cancelled or failed unexpectedly: the trial slot must not stay taken.
                self.breaker.record_failure()
                raise

            self.breaker.record_success()
            return result

        return failed_value
