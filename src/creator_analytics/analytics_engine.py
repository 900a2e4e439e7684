"""
Core orchestration for creator analytics.

``CreatorAnalyticsEngine.get_creator_analytics`` is the main async entry
point.  It resolves the creator, walks the balance listing, discovers a
secondary wallet from the head of that listing, classifies holdings,
enriches created coins, computes the summary metrics and memoises the
whole result.

The engine owns no global state: services and caches are passed in, and
``get_creator_analytics`` at module level simply delegates to a default
engine wired from ``data_sources._clients``.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Optional

from config import (
    BALANCE_PAGE_SIZE,
    CREATOR_FEE_RATE,
    DISCOVERY_MIN_OCCURRENCES,
    DISCOVERY_SAMPLE_SIZE,
    ENRICH_BATCH_SIZE,
    ENRICH_LIMIT_DEFAULT,
    PROFILE_BALANCES_COUNT,
    TRADER_SHARE,
)
from .balance_fetcher import PAGE_BUDGETS, fetch_balances, walk_balances
from .cache import TTLCache
from .classifier import classify_balances, sort_by_balance
from .data_sources.protocols import (
    AssetDetailService,
    BalanceListingService,
    CreatorCoinCountService,
    ProfileService,
)
from .enrichment import enrich_created
from .identity import resolve_identity
from .metrics import (
    compute_holder_split,
    compute_metrics,
    resolve_post_count,
    to_collected_coin,
    to_created_coin,
)
from .models import (
    AggregatedResult,
    CollectedCoins,
    CreatedCoins,
    Holding,
    LoadMode,
    Pagination,
    Profile,
    ProfileBalances,
)
from .utils import normalize_identifier
from .wallet_discovery import WalletSet, resolve_wallet_set

logger = logging.getLogger(__name__)


class CreatorAnalyticsEngine:
    """Aggregates a creator's coin activity into an ``AggregatedResult``.

    Parameters
    ----------
    profiles, balances, details:
        Profile, balance listing and coin detail services (one
        ``ZoraClient`` usually plays all three roles).
    coin_counts:
        Optional creator-coin listing, consulted in full mode only.
    detail_cache, result_cache:
        Caches for per-coin detail and for whole results.
    wallet_cache:
        Optional cache of discovered secondary wallets per identity.
    """

    def __init__(
        self,
        *,
        profiles: ProfileService,
        balances: BalanceListingService,
        details: AssetDetailService,
        detail_cache: TTLCache,
        result_cache: TTLCache,
        coin_counts: Optional[CreatorCoinCountService] = None,
        wallet_cache: Optional[TTLCache] = None,
        page_size: int = BALANCE_PAGE_SIZE,
        sample_size: int = DISCOVERY_SAMPLE_SIZE,
        min_occurrences: int = DISCOVERY_MIN_OCCURRENCES,
        batch_size: int = ENRICH_BATCH_SIZE,
        fee_rate: float = CREATOR_FEE_RATE,
        trader_share: float = TRADER_SHARE,
        known_wallets: Optional[dict[str, str]] = None,
    ) -> None:
        self.profiles = profiles
        self.balances = balances
        self.details = details
        self.coin_counts = coin_counts
        self.detail_cache = detail_cache
        self.result_cache = result_cache
        self.wallet_cache = wallet_cache
        self.page_size = page_size
        self.sample_size = sample_size
        self.min_occurrences = min_occurrences
        self.batch_size = batch_size
        self.fee_rate = fee_rate
        self.trader_share = trader_share
        self.known_wallets = known_wallets

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @staticmethod
    def result_cache_key(identifier: str, mode: LoadMode, limit: int) -> str:
        ident = normalize_identifier(identifier).lower()
        return f"analytics:{ident}:{mode.fetch_all}:{mode.initial_load_only}:{limit}"

    async def get_creator_analytics(
        self,
        identifier: str,
        mode: LoadMode = LoadMode.STANDARD,
        limit: int = ENRICH_LIMIT_DEFAULT,
        skip_cache: bool = False,
    ) -> AggregatedResult:
        """Return analytics for the creator behind *identifier*.

        Steps
        -----
        1. Return the cached result for (identifier, mode, limit) unless
           *skip_cache* is set.
        2. Resolve the profile and its primary wallet.
        3. Walk the balance listing within the mode's page budget.
        4. Discover a secondary wallet from the head of that listing.
        5. Classify holdings into created / collected.
        6. Enrich the first *limit* created coins in bounded batches.
        7. In full mode, ask the creator-coin listing for a post count.
        8. Compute metrics, cache and return the result.

        A *limit* of 0 skips enrichment.  Raises ``ValueError`` for a
        negative *limit*, ``NotFoundError`` or ``UpstreamFetchError``.
        """
        limit = int(limit)
        if limit < 0:
            raise ValueError(f"limit must be 0 or greater, got {limit}")
        key = self.result_cache_key(identifier, mode, limit)
        if not skip_cache:
            cached = self.result_cache.get(key)
            if cached is not None:
                logger.info("Analytics cache hit for %s", key)
                return cached

        started = time.perf_counter()
        cleaned = normalize_identifier(identifier)

        profile = await resolve_identity(self.profiles, cleaned)
        holdings = await fetch_balances(
            self.balances, cleaned, mode, page_size=self.page_size
        )
        wallets = self._wallet_set(profile, cleaned, holdings)
        logger.info("Wallet set for %s: %s", cleaned, ", ".join(wallets.addresses))

        classification = classify_balances(holdings, wallets)
        logger.info(
            "Classified %d balances for %s: %d created, %d collected",
            classification.total, cleaned,
            len(classification.created), len(classification.collected),
        )

        outcome = await enrich_created(
            classification.created,
            self.details,
            self.detail_cache,
            limit=limit,
            batch_size=self.batch_size,
        )

        listed_counts: list[int] = []
        if mode is LoadMode.FULL:
            listed_counts = await self._listed_coin_counts(wallets)
        posts = resolve_post_count(len(classification.created), listed_counts)

        result = AggregatedResult(
            identifier=cleaned,
            mode=mode,
            limit=limit,
            profile=profile,
            wallets=list(wallets.addresses),
            secondary_wallet=wallets.secondary,
            metrics=compute_metrics(outcome.items, posts, fee_rate=self.fee_rate),
            created=CreatedCoins(
                count=len(classification.created),
                items=[to_created_coin(i, fee_rate=self.fee_rate) for i in outcome.items],
                has_more=outcome.has_more,
            ),
            collected=CollectedCoins(
                count=len(classification.collected),
                items=[to_collected_coin(b) for b in classification.collected],
            ),
            holder_vs_trader=compute_holder_split(
                outcome.items, trader_share=self.trader_share, fee_rate=self.fee_rate
            ),
            generated_at=datetime.now(tz=timezone.utc),
        )

        self.result_cache.set(key, result)
        logger.info(
            "Analytics for %s computed in %.1f ms (%s mode, %d posts)",
            cleaned, (time.perf_counter() - started) * 1000, mode.value, posts,
        )
        return result

    async def get_profile_balances(
        self,
        identifier: str,
        *,
        fetch_all: bool = False,
        count: int = PROFILE_BALANCES_COUNT,
        after: Optional[str] = None,
    ) -> ProfileBalances:
        """Classified balances, largest first, without enrichment or caching.

        Reads one page of *count* edges starting at cursor *after*, or with
        *fetch_all* keeps following cursors up to the full-mode page budget.
        A profile without a public wallet is not an error here: every
        holding is then reported as collected.
        """
        cleaned = normalize_identifier(identifier)
        profile = await resolve_identity(self.profiles, cleaned, require_wallet=False)
        max_pages = PAGE_BUDGETS[LoadMode.FULL] if fetch_all else 1
        holdings, next_cursor = await walk_balances(
            self.balances, cleaned, max_pages=max_pages, page_size=count, after=after
        )
        if profile.public_wallet:
            # Only the start of the listing is a meaningful discovery sample
            wallets = self._wallet_set(profile, cleaned, holdings if after is None else None)
        else:
            logger.info("Profile %s has no public wallet – all balances collected", cleaned)
            wallets = WalletSet("")
        classification = classify_balances(holdings, wallets)
        return ProfileBalances(
            identifier=cleaned,
            profile=profile,
            wallets=list(wallets.addresses),
            total=classification.total,
            created=sort_by_balance(classification.created),
            collected=sort_by_balance(classification.collected),
            pagination=Pagination(next_cursor=next_cursor),
        )

    def cache_stats(self) -> list[dict]:
        caches = [self.detail_cache, self.result_cache, self.wallet_cache]
        return [c.stats() for c in caches if c is not None]

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _wallet_set(
        self, profile: Profile, identifier: str, sample: Optional[list[Holding]]
    ) -> WalletSet:
        return resolve_wallet_set(
            profile,
            identifier,
            sample,
            sample_size=self.sample_size,
            min_occurrences=self.min_occurrences,
            cache=self.wallet_cache,
            known_wallets=self.known_wallets,
        )

    async def _listed_coin_counts(self, wallets: WalletSet) -> list[int]:
        """Ask the creator-coin listing how many coins each wallet minted."""
        if self.coin_counts is None:
            return []
        results = await asyncio.gather(
            *(self.coin_counts.count_coins_by_creator(w) for w in wallets.addresses),
            return_exceptions=True,
        )
        counts: list[int] = []
        for wallet, res in zip(wallets.addresses, results):
            if isinstance(res, BaseException):
                logger.warning("Creator-coin count failed for %s: %s", wallet, res)
                continue
            logger.debug("Creator-coin listing reports %d coins for %s", res, wallet)
            counts.append(res)
        return counts


# ---------------------------------------------------------------------------
# Default engine
# ---------------------------------------------------------------------------

_engine: Optional[CreatorAnalyticsEngine] = None


def get_engine() -> CreatorAnalyticsEngine:
    """Return the process-wide engine wired to the shared clients and caches."""
    global _engine
    if _engine is None:
        from .data_sources import _clients

        zora = _clients.get_zora_client()
        _engine = CreatorAnalyticsEngine(
            profiles=zora,
            balances=zora,
            details=zora,
            coin_counts=_clients.get_creator_coins_client(),
            detail_cache=_clients.detail_cache,
            result_cache=_clients.result_cache,
            wallet_cache=_clients.wallet_cache,
        )
    return _engine


def reset_engine() -> None:
    """Drop the default engine (after ``close_clients`` or in tests)."""
    global _engine
    _engine = None


async def get_creator_analytics(
    identifier: str,
    mode: LoadMode = LoadMode.STANDARD,
    limit: int = ENRICH_LIMIT_DEFAULT,
    skip_cache: bool = False,
) -> AggregatedResult:
    """Module-level shortcut for ``get_engine().get_creator_analytics``."""
    return await get_engine().get_creator_analytics(
        identifier, mode=mode, limit=limit, skip_cache=skip_cache
    )


async def get_profile_balances(
    identifier: str,
    *,
    fetch_all: bool = False,
    count: int = PROFILE_BALANCES_COUNT,
    after: Optional[str] = None,
) -> ProfileBalances:
    return await get_engine().get_profile_balances(
        identifier, fetch_all=fetch_all, count=count, after=after
    )
