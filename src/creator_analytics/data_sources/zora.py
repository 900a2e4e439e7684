"""
Zora coins API client for the Creator Analytics engine.

Covers the three REST endpoints the Zora coins SDK wraps:

- ``GET /profile``          – profile lookup by handle or address
- ``GET /profileBalances``  – cursor-paginated coin balances of a profile
- ``GET /coin``             – per-coin market detail (volume, holders)

An API key is optional; when set it is sent as the ``api-key`` header.
Uses ``httpx`` for async HTTP with a deadline + one retry per call.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ..circuit_breaker import CircuitBreaker
from ..models import AssetDetail, BalancePage, CoinInfo, Holding, Profile
from ..utils import format_units, parse_datetime, safe_float, safe_int
from ._retry import async_http_get

logger = logging.getLogger(__name__)

_BACKOFF_BASE = 0.5  # seconds


class ZoraClient:
    """Async wrapper around the Zora coins REST API."""

    def __init__(
        self,
        base_url: str,
        *,
        api_key: str = "",
        chain_id: int = 8453,
        timeout: int = 15,
        max_retries: int = 2,
        profile_breaker: CircuitBreaker | None = None,
        balances_breaker: CircuitBreaker | None = None,
        coin_breaker: CircuitBreaker | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._chain_id = chain_id
        self._timeout = timeout
        self._max_retries = max_retries
        self._client: httpx.AsyncClient | None = None
        self._breakers = {
            "profile": profile_breaker,
            "profileBalances": balances_breaker,
            "coin": coin_breaker,
        }

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            headers = {"Accept": "application/json"}
            if self._api_key:
                headers["api-key"] = self._api_key
            self._client = httpx.AsyncClient(timeout=self._timeout, headers=headers)
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Service methods
    # ------------------------------------------------------------------

    async def get_profile(self, identifier: str) -> Optional[Profile]:
        """Return the profile for a handle or address, ``None`` if unknown."""
        data = await self._get("profile", {"identifier": identifier})
        if not data:
            return None
        return self.parse_profile(data.get("profile"))

    async def list_balances(
        self, identifier: str, count: int, after: Optional[str] = None
    ) -> BalancePage:
        """Return one page of coin balances held by *identifier*."""
        params: dict[str, Any] = {"identifier": identifier, "count": count}
        if after:
            params["after"] = after
        data = await self._get("profileBalances", params)
        return self.parse_balance_page(data)

    async def get_asset_detail(self, address: str) -> Optional[AssetDetail]:
        """Return market detail for the coin at *address*, ``None`` if unknown."""
        data = await self._get("coin", {"address": address, "chain": self._chain_id})
        if not data:
            return None
        return self.parse_asset_detail(address, data.get("zora20Token"))

    # ------------------------------------------------------------------
    # Conversion helpers (sync – pure data transforms)
    # ------------------------------------------------------------------

    @staticmethod
    def parse_profile(raw: Optional[dict[str, Any]]) -> Optional[Profile]:
        if not raw:
            return None
        avatar = raw.get("avatar") or {}
        wallet = raw.get("publicWallet") or {}
        return Profile(
            handle=raw.get("handle") or "",
            display_name=raw.get("displayName"),
            bio=raw.get("bio"),
            avatar=avatar.get("medium"),
            public_wallet=wallet.get("walletAddress") or None,
        )

    @staticmethod
    def parse_holding(node: dict[str, Any]) -> Holding:
        coin = node.get("coin") or {}
        media = coin.get("mediaContent") or {}
        preview = media.get("previewImage") or {}
        raw_balance = str(node.get("balance") or "0")
        return Holding(
            id=str(node.get("id") or ""),
            coin=CoinInfo(
                address=coin.get("address"),
                name=coin.get("name") or "",
                symbol=coin.get("symbol") or "",
                total_supply=(
                    str(coin["totalSupply"]) if coin.get("totalSupply") is not None else None
                ),
                unique_holders=safe_int(coin.get("uniqueHolders")),
                creator_address=coin.get("creatorAddress") or None,
                image=preview.get("medium"),
            ),
            balance=raw_balance,
            formatted_balance=format_units(raw_balance),
        )

    @classmethod
    def parse_balance_page(cls, data: Optional[dict[str, Any]]) -> BalancePage:
        profile = (data or {}).get("profile") or {}
        balances = profile.get("coinBalances") or {}
        edges = balances.get("edges") or []
        page_info = balances.get("pageInfo") or {}
        holdings = [cls.parse_holding(e.get("node") or {}) for e in edges]
        return BalancePage(edges=holdings, next_cursor=page_info.get("endCursor") or None)

    @staticmethod
    def parse_asset_detail(
        address: str, token: Optional[dict[str, Any]]
    ) -> Optional[AssetDetail]:
        if not token:
            return None
        return AssetDetail(
            address=token.get("address") or address,
            name=token.get("name") or "",
            symbol=token.get("symbol") or "",
            total_volume=safe_float(token.get("totalVolume")),
            volume_24h=safe_float(token.get("volume24h")),
            unique_holders=safe_int(token.get("uniqueHolders")),
            created_at=parse_datetime(token.get("createdAt")),
            creator_address=token.get("creatorAddress") or None,
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _get(self, endpoint: str, params: dict[str, Any]) -> Optional[dict[str, Any]]:
        """GET ``/{endpoint}`` with deadline + retry, through its circuit breaker."""
        client = await self._get_client()
        url = f"{self._base_url}/{endpoint}"
        label = f"Zora {endpoint}"

        async def _do() -> Optional[dict[str, Any]]:
            return await async_http_get(
                client, url, params=params,
                max_retries=self._max_retries, backoff_base=_BACKOFF_BASE,
                deadline=self._timeout, label=label,
            )

        breaker = self._breakers.get(endpoint)
        if breaker is not None:
            return await breaker.call(_do)
        return await _do()
