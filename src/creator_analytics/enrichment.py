"""
Per-coin detail enrichment for created balances.

Only the first ``limit`` created balances are enriched.  They are processed
in batches of ``batch_size``: members of a batch are fetched concurrently,
and the next batch starts only once every member of the current one has
settled, so at most ``batch_size`` detail requests are in flight.

Each member first consults the detail cache.  A failed fetch yields
``None`` for that member alone; the rest of the batch and the request
carry on.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from config import ENRICH_BATCH_SIZE, ENRICH_LIMIT_DEFAULT
from .cache import TTLCache
from .data_sources.protocols import AssetDetailService
from .models import AssetDetail, Balance
from .utils import normalize_address

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnrichedBalance:
    balance: Balance
    detail: Optional[AssetDetail] = None


@dataclass(frozen=True)
class EnrichmentOutcome:
    items: list[EnrichedBalance] = field(default_factory=list)
    has_more: bool = False

    @property
    def enriched_count(self) -> int:
        return sum(1 for i in self.items if i.detail is not None)

    @property
    def failed_count(self) -> int:
        return len(self.items) - self.enriched_count


def detail_cache_key(address: str) -> str:
    return f"detail:{normalize_address(address)}"


async def fetch_detail_cached(
    service: AssetDetailService,
    cache: TTLCache,
    address: Optional[str],
) -> Optional[AssetDetail]:
    """Return the detail for *address* from cache or the service, else ``None``."""
    if not address:
        return None

    key = detail_cache_key(address)
    cached = cache.get(key)
    if cached is not None:
        return cached

    try:
        detail = await service.get_asset_detail(address)
    except Exception:
        logger.warning("Detail fetch failed for coin %s", address, exc_info=True)
        return None

    if detail is None:
        logger.info("No detail found for coin %s", address)
        return None

    cache.set(key, detail)
    return detail


async def enrich_created(
    created: Sequence[Balance],
    service: AssetDetailService,
    cache: TTLCache,
    *,
    limit: int = ENRICH_LIMIT_DEFAULT,
    batch_size: int = ENRICH_BATCH_SIZE,
) -> EnrichmentOutcome:
    """Attach an ``AssetDetail`` (or ``None``) to the first *limit* balances."""
    selected = list(created[: max(limit, 0)])
    batch_size = max(batch_size, 1)
    items: list[EnrichedBalance] = []

    for start in range(0, len(selected), batch_size):
        batch = selected[start : start + batch_size]
        details = await asyncio.gather(
            *(fetch_detail_cached(service, cache, b.coin.address) for b in batch)
        )
        items.extend(EnrichedBalance(b, d) for b, d in zip(batch, details))
        logger.debug(
            "Enriched batch %d (%d coins)", start // batch_size + 1, len(batch)
        )

    outcome = EnrichmentOutcome(items=items, has_more=len(created) > len(selected))
    if outcome.failed_count:
        logger.warning(
            "Enrichment incomplete: %d of %d coins without detail",
            outcome.failed_count, len(items),
        )
    return outcome
