"""
Created vs. collected classification of balances.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .models import Balance, Holding
from .utils import normalize_address
from .wallet_discovery import WalletSet


@dataclass(frozen=True)
class Classification:
    created: list[Balance] = field(default_factory=list)
    collected: list[Balance] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.created) + len(self.collected)


def classify_balances(holdings: Iterable[Holding], wallets: WalletSet) -> Classification:
    """Split *holdings* into created and collected, preserving input order.

    A holding is "created" when its coin's creator address (lower-cased)
    belongs to *wallets*.  Holdings without a creator address are always
    collected.
    """
    created: list[Balance] = []
    collected: list[Balance] = []
    for holding in holdings:
        creator = normalize_address(holding.coin.creator_address)
        is_creator = creator is not None and creator in wallets
        balance = Balance(**holding.model_dump(exclude={"is_creator"}), is_creator=is_creator)
        (created if is_creator else collected).append(balance)
    return Classification(created=created, collected=collected)


def sort_by_balance(balances: Iterable[Balance]) -> list[Balance]:
    """Largest formatted balance first; equal balances keep their order."""
    return sorted(balances, key=lambda b: b.formatted_balance, reverse=True)
