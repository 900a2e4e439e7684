"""
Structural interfaces for the engine's external collaborators.

``ZoraClient`` satisfies the first three; ``CreatorCoinsClient`` the last.
Tests substitute in-memory fakes.
"""

from __future__ import annotations

from typing import Optional, Protocol

from ..models import AssetDetail, BalancePage, Profile


class ProfileService(Protocol):
    async def get_profile(self, identifier: str) -> Optional[Profile]: ...


class BalanceListingService(Protocol):
    async def list_balances(
        self, identifier: str, count: int, after: Optional[str] = None
    ) -> BalancePage: ...


class AssetDetailService(Protocol):
    async def get_asset_detail(self, address: str) -> Optional[AssetDetail]: ...


class CreatorCoinCountService(Protocol):
    async def count_coins_by_creator(self, wallet_address: str) -> int: ...
