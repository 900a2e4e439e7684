"""Tests for the async circuit breaker."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from creator_analytics.circuit_breaker import (
    CircuitBreaker,
    CircuitOpenError,
    CircuitState,
    get_all_statuses,
    register,
)
from creator_analytics.errors import UpstreamClientError, UpstreamFetchError


def _failing():
    return AsyncMock(side_effect=UpstreamFetchError("Zora coin", "HTTP 500"))


class TestCircuitBreaker:

    @pytest.mark.asyncio
    async def test_passes_through_when_closed(self):
        cb = CircuitBreaker("test")
        func = AsyncMock(return_value=42)
        assert await cb.call(func, "a", key="b") == 42
        func.assert_awaited_once_with("a", key="b")
        assert cb.state == CircuitState.CLOSED

    @pytest.mark.asyncio
    async def test_opens_after_threshold(self):
        cb = CircuitBreaker("test", failure_threshold=2)
        func = _failing()
        for _ in range(2):
            with pytest.raises(UpstreamFetchError):
                await cb.call(func)
        assert cb.state == CircuitState.OPEN

        with pytest.raises(CircuitOpenError):
            await cb.call(func)
        assert func.await_count == 2
        assert cb.status()["rejected"] == 1

    @pytest.mark.asyncio
    async def test_success_resets_failure_streak(self):
        cb = CircuitBreaker("test", failure_threshold=2)
        with pytest.raises(UpstreamFetchError):
            await cb.call(_failing())
        await cb.call(AsyncMock(return_value=None))
        with pytest.raises(UpstreamFetchError):
            await cb.call(_failing())
        assert cb.state == CircuitState.CLOSED

    @pytest.mark.asyncio
    async def test_half_open_trial_closes(self, clock):
        cb = CircuitBreaker("test", failure_threshold=1, recovery_timeout=30, clock=clock)
        with pytest.raises(UpstreamFetchError):
            await cb.call(_failing())
        assert cb.state == CircuitState.OPEN

        clock.advance(30)
        assert await cb.call(AsyncMock(return_value="ok")) == "ok"
        assert cb.state == CircuitState.CLOSED

    @pytest.mark.asyncio
    async def test_half_open_failure_reopens(self, clock):
        cb = CircuitBreaker("test", failure_threshold=1, recovery_timeout=30, clock=clock)
        with pytest.raises(UpstreamFetchError):
            await cb.call(_failing())
        clock.advance(31)
        with pytest.raises(UpstreamFetchError):
            await cb.call(_failing())
        assert cb.state == CircuitState.OPEN

    @pytest.mark.asyncio
    async def test_client_errors_do_not_open(self):
        cb = CircuitBreaker("test", failure_threshold=2)
        func = AsyncMock(side_effect=UpstreamClientError("Zora coin", "HTTP 400"))
        for _ in range(5):
            with pytest.raises(UpstreamClientError):
                await cb.call(func)
        assert cb.state == CircuitState.CLOSED
        assert cb.status()["failures"] == 0

    @pytest.mark.asyncio
    async def test_client_error_breaks_failure_streak(self):
        cb = CircuitBreaker("test", failure_threshold=2)
        with pytest.raises(UpstreamFetchError):
            await cb.call(_failing())
        with pytest.raises(UpstreamClientError):
            await cb.call(AsyncMock(side_effect=UpstreamClientError("Zora coin", "HTTP 400")))
        with pytest.raises(UpstreamFetchError):
            await cb.call(_failing())
        assert cb.state == CircuitState.CLOSED

    @pytest.mark.asyncio
    async def test_custom_excluded_exceptions(self):
        cb = CircuitBreaker("test", failure_threshold=1, excluded_exceptions=(KeyError,))
        with pytest.raises(KeyError):
            await cb.call(AsyncMock(side_effect=KeyError("edges")))
        assert cb.state == CircuitState.CLOSED

        with pytest.raises(UpstreamClientError):
            await cb.call(AsyncMock(side_effect=UpstreamClientError("Zora coin", "HTTP 400")))
        assert cb.state == CircuitState.OPEN

    def test_open_error_is_upstream_error(self):
        err = CircuitOpenError("zora_profile")
        assert isinstance(err, UpstreamFetchError)
        assert err.status_code == 502
        assert err.circuit_name == "zora_profile"

    def test_registry(self):
        cb = register(CircuitBreaker("registry_test"))
        statuses = get_all_statuses()
        assert statuses["registry_test"]["state"] == "closed"
        assert cb.status()["failure_rate"] == 0.0
