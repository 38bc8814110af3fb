"""Composable retry / circuit breaker / rate limit wrapper for acquisition runs.

Layering, outermost first: the rate limiter caps how often the wrapped
operation may start, the circuit breaker fails fast after repeated failed
runs, and tenacity retries transient fetch failures inside a single run.
One wrapped call records exactly one breaker outcome, however many retries
it took.
"""

from __future__ import annotations

import functools
import time
from collections import deque
from enum import Enum
from threading import Lock
from typing import Any, Callable, TypeVar

import structlog
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_fixed

from ..config import ResilienceConfig
from ..errors import CircuitOpenError, FetchError, RateLimitedError

T = TypeVar("T")


class RateLimiter:
    """Sliding-window limiter: at most ``limit`` acquisitions per ``window`` seconds."""

    def __init__(
        self, limit: int, window: float, clock: Callable[[], float] = time.monotonic
    ) -> None:
        self.limit = limit
        self.window = window
        self._clock = clock
        self._stamps: deque[float] = deque()
        self._lock = Lock()

    def acquire(self) -> bool:
        with self._lock:
            now = self._clock()
            while self._stamps and now - self._stamps[0] >= self.window:
                self._stamps.popleft()
            if len(self._stamps) >= self.limit:
                return False
            self._stamps.append(now)
            return True


class CircuitState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """Failure-ratio breaker over a rolling window of the most recent runs."""

    def __init__(
        self,
        failure_ratio: float,
        volume: int,
        cooldown: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.failure_ratio = failure_ratio
        self.volume = volume
        self.cooldown = cooldown
        self._clock = clock
        self._outcomes: deque[bool] = deque(maxlen=volume)
        self._state = CircuitState.CLOSED
        self._opened_at = 0.0
        self._trial_in_flight = False
        self._lock = Lock()

    @property
    def state(self) -> CircuitState:
        with self._lock:
            return self._state

    def allow(self) -> bool:
        with self._lock:
            if self._state is CircuitState.OPEN:
                if self._clock() - self._opened_at < self.cooldown:
                    return False
                self._state = CircuitState.HALF_OPEN
                self._trial_in_flight = False
            if self._state is CircuitState.HALF_OPEN:
                # Exactly one trial run is admitted after the cooldown.
                if self._trial_in_flight:
                    return False
                self._trial_in_flight = True
            return True

    def record_success(self) -> None:
        with self._lock:
            if self._state is CircuitState.HALF_OPEN:
                self._close()
                return
            self._outcomes.append(False)

    def record_failure(self) -> None:
        with self._lock:
            if self._state is CircuitState.HALF_OPEN:
                self._open()
                return
            self._outcomes.append(True)
            if len(self._outcomes) >= self.volume and self._ratio() >= self.failure_ratio:
                self._open()

    def _ratio(self) -> float:
        return sum(self._outcomes) / len(self._outcomes)

    def _open(self) -> None:
        self._state = CircuitState.OPEN
        self._opened_at = self._clock()
        self._trial_in_flight = False

    def _close(self) -> None:
        self._state = CircuitState.CLOSED
        self._outcomes.clear()
        self._trial_in_flight = False

    def status(self) -> dict[str, Any]:
        with self._lock:
            return {
                "state": self._state.value,
                "window": len(self._outcomes),
                "failures": sum(self._outcomes),
                "volume": self.volume,
                "failure_ratio": self.failure_ratio,
            }


class ResiliencePolicy:
    """Apply rate limiting, circuit breaking and retries around one operation."""

    def __init__(
        self,
        config: ResilienceConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self.config = config or ResilienceConfig()
        self.rate_limiter = RateLimiter(self.config.rate_limit, self.config.rate_window, clock)
        self.breaker = CircuitBreaker(
            self.config.failure_ratio_threshold,
            self.config.request_volume_threshold,
            self.config.cooldown,
            clock,
        )
        self._sleep = sleep
        self.logger = logger or structlog.get_logger("potd_crawler.resilience")

    def call(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        if not self.rate_limiter.acquire():
            self.logger.warning("run_rate_limited", window=self.config.rate_window)
            raise RateLimitedError(
                f"More than {self.config.rate_limit} run(s) within {self.config.rate_window}s"
            )
        if not self.breaker.allow():
            self.logger.warning("run_circuit_open", cooldown=self.config.cooldown)
            raise CircuitOpenError("Circuit breaker is open; skipping run")
        try:
            result = self._retrying()(fn, *args, **kwargs)
        except Exception:
            self.breaker.record_failure()
            if self.breaker.state is CircuitState.OPEN:
                self.logger.error("circuit_opened", **self.breaker.status())
            raise
        self.breaker.record_success()
        return result

    def guard(self, fn: Callable[..., T]) -> Callable[..., T]:
        """Decorator form of :meth:`call`."""

        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            return self.call(fn, *args, **kwargs)

        return wrapper

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self.config.max_retries + 1),
            wait=wait_fixed(self.config.retry_delay),
            retry=retry_if_exception_type(FetchError),
            sleep=self._sleep,
            before_sleep=self._log_retry,
            reraise=True,
        )

    def _log_retry(self, retry_state: Any) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        self.logger.warning(
            "run_retry",
            attempt=retry_state.attempt_number,
            delay=self.config.retry_delay,
            error=str(error),
        )


__all__ = ["CircuitBreaker", "CircuitState", "RateLimiter", "ResiliencePolicy"]
