"""
Async circuit breaker guarding the Zora HTTP services.

A breaker starts CLOSED.  After ``failure_threshold`` consecutive failures
it opens and every call fails fast with ``CircuitOpenError`` (itself an
``UpstreamFetchError``, so callers handle it like any other upstream
failure).  Once ``recovery_timeout`` seconds have passed the breaker lets
trial calls through (HALF_OPEN); ``success_threshold`` successes close it
again, a single failure re-opens it.

Exceptions listed in ``excluded_exceptions`` (by default
``UpstreamClientError``: a 4xx for one resource) pass through without
counting as failures, since the service did answer.

Usage
-----
    profile_cb = CircuitBreaker("zora_profile", failure_threshold=5)
    data = await profile_cb.call(fetch_profile, identifier)
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from .errors import UpstreamClientError, UpstreamFetchError

logger = logging.getLogger(__name__)


class CircuitState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitOpenError(UpstreamFetchError):
    """Raised instead of calling a service whose circuit is open."""

    def __init__(self, name: str) -> None:
        super().__init__(name, "circuit open")
        self.circuit_name = name


@dataclass
class BreakerCounters:
    calls: int = 0
    successes: int = 0
    failures: int = 0
    rejected: int = 0

    @property
    def failure_rate(self) -> float:
        return self.failures / self.calls if self.calls else 0.0


class CircuitBreaker:
    def __init__(
        self,
        name: str,
        *,
        failure_threshold: int = 5,
        recovery_timeout: float = 30.0,
        success_threshold: int = 1,
        excluded_exceptions: tuple[type[BaseException], ...] = (UpstreamClientError,),
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.name = name
        self.excluded_exceptions = excluded_exceptions
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.success_threshold = success_threshold
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._consecutive_failures = 0
        self._trial_successes = 0
        self._opened_at: Optional[float] = None
        self._lock = asyncio.Lock()
        self.counters = BreakerCounters()

    @property
    def state(self) -> CircuitState:
        return self._state

    async def call(
        self,
        func: Callable[..., Awaitable[Any]],
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        """Run ``func(*args, **kwargs)`` unless the circuit is open."""
        async with self._lock:
            if self._state == CircuitState.OPEN and self._recovery_elapsed():
                self._move_to(CircuitState.HALF_OPEN)
            state = self._state

        if state == CircuitState.OPEN:
            self.counters.rejected += 1
            raise CircuitOpenError(self.name)

        self.counters.calls += 1
        try:
            result = await func(*args, **kwargs)
        except self.excluded_exceptions:
            await self._record_success()
            raise
        except Exception:
            await self._record_failure()
            raise
        await self._record_success()
        return result

    def _recovery_elapsed(self) -> bool:
        return self._clock() - (self._opened_at or 0.0) >= self.recovery_timeout

    async def _record_success(self) -> None:
        async with self._lock:
            self.counters.successes += 1
            self._consecutive_failures = 0
            if self._state == CircuitState.HALF_OPEN:
                self._trial_successes += 1
                if self._trial_successes >= self.success_threshold:
                    self._move_to(CircuitState.CLOSED)

    async def _record_failure(self) -> None:
        async with self._lock:
            self.counters.failures += 1
            self._consecutive_failures += 1
            if self._state == CircuitState.HALF_OPEN or (
                self._state == CircuitState.CLOSED
                and self._consecutive_failures >= self.failure_threshold
            ):
                self._opened_at = self._clock()
                self._move_to(CircuitState.OPEN)

    def _move_to(self, new_state: CircuitState) -> None:
        if new_state == self._state:
            return
        logger.warning(
            "Circuit '%s' %s -> %s after %d consecutive failures",
            self.name,
            self._state.value,
            new_state.value,
            self._consecutive_failures,
        )
        self._state = new_state
        self._trial_successes = 0

    def status(self) -> dict[str, Any]:
        """Serialisable snapshot for ``/health``."""
        return {
            "state": self._state.value,
            "consecutive_failures": self._consecutive_failures,
            "calls": self.counters.calls,
            "failures": self.counters.failures,
            "rejected": self.counters.rejected,
            "failure_rate": round(self.counters.failure_rate, 3),
            "recovery_timeout_s": self.recovery_timeout,
        }


_registry: dict[str, CircuitBreaker] = {}


def register(cb: CircuitBreaker) -> CircuitBreaker:
    """Add *cb* to the registry reported by ``/health``."""
    _registry[cb.name] = cb
    return cb


def get_all_statuses() -> dict[str, dict[str, Any]]:
    return {name: cb.status() for name, cb in _registry.items()}
