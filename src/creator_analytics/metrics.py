"""
Summary metrics over enriched created coins.

Both heuristics here are estimates, not observations:

- earnings assume a flat creator fee (``CREATOR_FEE_RATE``) on total volume;
- the holder split assumes a fixed share of holders (``TRADER_SHARE``) are
  active traders and the rest long-term collectors.
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence

from config import CREATOR_FEE_RATE, TRADER_SHARE
from .enrichment import EnrichedBalance
from .models import (
    AnalyticsMetrics,
    Balance,
    CoinHolderBreakdown,
    CollectedCoin,
    CreatedCoin,
    HolderTraderSplit,
)


def _volume(item: EnrichedBalance) -> float:
    return item.detail.total_volume if item.detail is not None else 0.0


def _holders(item: EnrichedBalance) -> int:
    return item.detail.unique_holders if item.detail is not None else 0


def split_holders(unique_holders: int, trader_share: float = TRADER_SHARE) -> tuple[int, int]:
    """Return ``(collectors, traders)`` for one coin."""
    # round before flooring so float error cannot drop a whole trader
    traders = math.floor(round(unique_holders * trader_share, 9))
    return unique_holders - traders, traders


def resolve_post_count(created_count: int, listed_counts: Iterable[int] = ()) -> int:
    """Created-coin count, raised by any larger count from the creator listing."""
    return max([created_count, *listed_counts])


def compute_metrics(
    items: Sequence[EnrichedBalance],
    posts: int,
    *,
    fee_rate: float = CREATOR_FEE_RATE,
) -> AnalyticsMetrics:
    total_volume = sum(_volume(i) for i in items)
    total_earnings = total_volume * fee_rate
    return AnalyticsMetrics(
        total_earnings=total_earnings,
        total_volume=total_volume,
        posts=posts,
        average_earnings_per_post=total_earnings / posts if posts > 0 else 0.0,
    )


def compute_holder_split(
    items: Sequence[EnrichedBalance],
    *,
    trader_share: float = TRADER_SHARE,
    fee_rate: float = CREATOR_FEE_RATE,
) -> HolderTraderSplit:
    breakdown: list[CoinHolderBreakdown] = []
    for item in items:
        holders = _holders(item)
        collectors, traders = split_holders(holders, trader_share)
        volume = _volume(item)
        coin = item.balance.coin
        breakdown.append(
            CoinHolderBreakdown(
                name=coin.name,
                symbol=coin.symbol,
                address=coin.address,
                unique_holders=holders,
                estimated_collectors=collectors,
                estimated_traders=traders,
                total_volume=volume,
                estimated_earnings=volume * fee_rate,
            )
        )
    return HolderTraderSplit(
        total_holders=sum(b.unique_holders for b in breakdown),
        estimated_collectors=sum(b.estimated_collectors for b in breakdown),
        estimated_traders=sum(b.estimated_traders for b in breakdown),
        coin_breakdown=breakdown,
    )


# ---------------------------------------------------------------------------
# Output rows
# ---------------------------------------------------------------------------

def to_created_coin(item: EnrichedBalance, *, fee_rate: float = CREATOR_FEE_RATE) -> CreatedCoin:
    coin = item.balance.coin
    volume = _volume(item)
    return CreatedCoin(
        name=coin.name,
        symbol=coin.symbol,
        address=coin.address,
        balance=item.balance.formatted_balance,
        image=coin.image,
        unique_holders=_holders(item),
        total_volume=volume,
        estimated_earnings=volume * fee_rate,
        enriched=item.detail is not None,
        detail=item.detail,
    )


def to_collected_coin(balance: Balance) -> CollectedCoin:
    coin = balance.coin
    return CollectedCoin(
        name=coin.name,
        symbol=coin.symbol,
        address=coin.address,
        balance=balance.formatted_balance,
        image=coin.image,
        creator_address=coin.creator_address,
    )
