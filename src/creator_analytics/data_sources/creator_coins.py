"""
Creator-coin listing client.

Used only in full-load mode to raise the post count above what the balance
listing shows: a creator may have minted coins they no longer hold.

Reference: ``GET https://api.zora.co/creator-coins?chainIds=8453&creator=<wallet>``
returns ``{"coins": [...]}``.
"""

from __future__ import annotations

import logging

import httpx

from ..circuit_breaker import CircuitBreaker
from ._retry import async_http_get

logger = logging.getLogger(__name__)


class CreatorCoinsClient:
    """Counts the coins minted by a wallet."""

    def __init__(
        self,
        url: str,
        *,
        chain_id: int = 8453,
        timeout: int = 15,
        max_retries: int = 2,
        circuit_breaker: CircuitBreaker | None = None,
    ) -> None:
        self._url = url
        self._chain_id = chain_id
        self._timeout = timeout
        self._max_retries = max_retries
        self._client: httpx.AsyncClient | None = None
        self._cb = circuit_breaker

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers={"Accept": "application/json"},
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def count_coins_by_creator(self, wallet_address: str) -> int:
        """Return how many coins *wallet_address* created (0 when unknown)."""
        client = await self._get_client()
        params = {"chainIds": self._chain_id, "creator": wallet_address}

        async def _do():
            return await async_http_get(
                client, self._url, params=params,
                max_retries=self._max_retries,
                deadline=self._timeout, label="Zora creator-coins",
            )

        data = await (self._cb.call(_do) if self._cb is not None else _do())
        coins = (data or {}).get("coins")
        if not isinstance(coins, list):
            return 0
        return len(coins)
