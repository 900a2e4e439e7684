"""
Pydantic models used throughout the Creator Analytics engine.

Output models are frozen: a cached ``AggregatedResult`` can be handed to any
number of callers without one of them mutating what the next one sees.
Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Model(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ---------------------------------------------------------------------------
# Request mode
# ---------------------------------------------------------------------------
class LoadMode(str, Enum):
    """How much of the balance listing a request is willing to walk."""

    INITIAL = "initial"
    STANDARD = "standard"
    FULL = "full"

    @classmethod
    def from_flags(cls, fetch_all: bool = False, initial_load_only: bool = False) -> "LoadMode":
        """Translate the ``fetchAll`` / ``initialLoadOnly`` query flags."""
        if initial_load_only:
            return cls.INITIAL
        if fetch_all:
            return cls.FULL
        return cls.STANDARD

    @property
    def fetch_all(self) -> bool:
        return self is LoadMode.FULL

    @property
    def initial_load_only(self) -> bool:
        return self is LoadMode.INITIAL


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------
class Profile(_Model):
    """Creator identity record as returned by the profile service."""

    handle: str = Field("", description="Profile handle")
    display_name: Optional[str] = Field(None, description="Human-readable name")
    bio: Optional[str] = None
    avatar: Optional[str] = Field(None, description="URL of the medium avatar")
    public_wallet: Optional[str] = Field(
        None, description="Primary wallet address exposed on the profile"
    )


# ---------------------------------------------------------------------------
# Balances
# ---------------------------------------------------------------------------
class CoinInfo(_Model):
    """The coin side of a balance edge."""

    address: Optional[str] = None
    name: str = ""
    symbol: str = ""
    total_supply: Optional[str] = None
    unique_holders: int = 0
    creator_address: Optional[str] = Field(
        None, description="Address that minted the coin (may differ from the holder)"
    )
    image: Optional[str] = Field(None, description="Medium preview image URL")


class Holding(_Model):
    """One (coin, quantity) pair from the balance listing, not yet classified."""

    id: str = ""
    coin: CoinInfo = Field(default_factory=CoinInfo)
    balance: str = Field("0", description="Raw on-chain quantity (18 decimals)")
    formatted_balance: float = Field(0.0, description="balance / 10**18")


class Balance(Holding):
    """A holding with its creator flag, computed once by the classifier."""

    is_creator: bool = False


class BalancePage(_Model):
    edges: list[Holding] = Field(default_factory=list)
    next_cursor: Optional[str] = None


# ---------------------------------------------------------------------------
# Enrichment
# ---------------------------------------------------------------------------
class AssetDetail(_Model):
    """Per-coin market statistics fetched during enrichment."""

    address: str
    name: str = ""
    symbol: str = ""
    total_volume: float = 0.0
    volume_24h: float = 0.0
    unique_holders: int = 0
    created_at: Optional[datetime] = None
    creator_address: Optional[str] = None


# ---------------------------------------------------------------------------
# Aggregated output
# ---------------------------------------------------------------------------
class CreatedCoin(_Model):
    name: str = ""
    symbol: str = ""
    address: Optional[str] = None
    balance: float = 0.0
    image: Optional[str] = None
    unique_holders: int = 0
    total_volume: float = 0.0
    estimated_earnings: float = 0.0
    enriched: bool = Field(False, description="False when the detail fetch failed")
    detail: Optional[AssetDetail] = None


class CollectedCoin(_Model):
    name: str = ""
    symbol: str = ""
    address: Optional[str] = None
    balance: float = 0.0
    image: Optional[str] = None
    creator_address: Optional[str] = None


class CreatedCoins(_Model):
    count: int = Field(0, description="Created coins found before truncation")
    items: list[CreatedCoin] = Field(default_factory=list)
    has_more: bool = Field(False, description="True when count exceeds the enrichment limit")


class CollectedCoins(_Model):
    count: int = 0
    items: list[CollectedCoin] = Field(default_factory=list)


class AnalyticsMetrics(_Model):
    total_earnings: float = 0.0
    total_volume: float = 0.0
    posts: int = 0
    average_earnings_per_post: float = 0.0


class CoinHolderBreakdown(_Model):
    name: str = ""
    symbol: str = ""
    address: Optional[str] = None
    unique_holders: int = 0
    estimated_collectors: int = 0
    estimated_traders: int = 0
    total_volume: float = 0.0
    estimated_earnings: float = 0.0


class HolderTraderSplit(_Model):
    """Heuristic split of holders into long-term collectors and traders."""

    total_holders: int = 0
    estimated_collectors: int = 0
    estimated_traders: int = 0
    coin_breakdown: list[CoinHolderBreakdown] = Field(default_factory=list)


class AggregatedResult(_Model):
    """Full analytics response returned by ``get_creator_analytics``."""

    identifier: str
    mode: LoadMode = LoadMode.STANDARD
    limit: int = 25
    profile: Profile
    wallets: list[str] = Field(
        default_factory=list, description="Wallet set used for classification"
    )
    secondary_wallet: Optional[str] = Field(
        None, description="Heuristically discovered secondary wallet"
    )
    metrics: AnalyticsMetrics = Field(default_factory=AnalyticsMetrics)
    created: CreatedCoins = Field(default_factory=CreatedCoins)
    collected: CollectedCoins = Field(default_factory=CollectedCoins)
    holder_vs_trader: HolderTraderSplit = Field(default_factory=HolderTraderSplit)
    generated_at: datetime


class Pagination(_Model):
    next_cursor: Optional[str] = Field(
        None, description="Pass as ``after`` to continue; null once the listing is exhausted"
    )


class ProfileBalances(_Model):
    """Classified balances without enrichment (profile-balances view)."""

    identifier: str
    profile: Profile
    wallets: list[str] = Field(default_factory=list)
    total: int = 0
    created: list[Balance] = Field(default_factory=list)
    collected: list[Balance] = Field(default_factory=list)
    pagination: Pagination = Field(default_factory=Pagination)
