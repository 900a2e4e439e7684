"""
Secondary wallet discovery.

Platforms may mint a creator's coins from a custodial sub-wallet that is
never shown as the profile's public wallet.  Such a wallet still shows up
as ``creatorAddress`` on many of the coins the creator holds, so we look at
the first balance edges, count creator addresses and keep the most
frequent one that occurs more than twice and is not the primary wallet.

The sample is the head of the balance listing the request fetches anyway,
so discovery makes no upstream call of its own and cannot fail the request.

This is a statistical guess: a creator who collects many coins from one
other minter can produce a false positive.  The result is only ever added
to the ``WalletSet`` used for classification; it never replaces the
profile's primary wallet.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from config import DISCOVERY_MIN_OCCURRENCES, DISCOVERY_SAMPLE_SIZE
from .cache import TTLCache
from .models import Holding, Profile
from .utils import normalize_address, normalize_identifier

logger = logging.getLogger(__name__)

# Handles whose secondary wallet has been identified by hand.
KNOWN_SECONDARY_WALLETS: dict[str, str] = {
    "defidevrelalt": "0xafc833331e494d72bc6568a011f614702ca3c892",
}

# Cached marker for "sampled, nothing found"
_NO_WALLET = ""


@dataclass(frozen=True)
class WalletSet:
    """Addresses treated as owned by the creator (always lower-case)."""

    primary: str
    secondary: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "primary", normalize_address(self.primary) or "")
        object.__setattr__(self, "secondary", normalize_address(self.secondary))

    @property
    def addresses(self) -> tuple[str, ...]:
        wallets = [w for w in (self.primary, self.secondary) if w]
        return tuple(dict.fromkeys(wallets))

    def __contains__(self, address: object) -> bool:
        if not isinstance(address, str):
            return False
        normalized = normalize_address(address)
        return normalized is not None and normalized in self.addresses

    def __len__(self) -> int:
        return len(self.addresses)


def discover_secondary_wallet(
    creator_addresses: Iterable[Optional[str]],
    primary_wallet: Optional[str],
    *,
    min_occurrences: int = DISCOVERY_MIN_OCCURRENCES,
) -> Optional[str]:
    """Return the most frequent non-primary creator address, if any.

    Addresses are compared lower-case.  Candidates need at least
    *min_occurrences* appearances; ties go to the address seen first.
    """
    primary = normalize_address(primary_wallet)
    counts = Counter(
        addr
        for addr in (normalize_address(a) for a in creator_addresses)
        if addr is not None and addr != primary
    )
    candidates = [(addr, n) for addr, n in counts.most_common() if n >= min_occurrences]
    if not candidates:
        return None
    best, occurrences = candidates[0]
    logger.debug("Secondary wallet candidate %s (%d occurrences)", best, occurrences)
    return best


def resolve_wallet_set(
    profile: Profile,
    identifier: str,
    sample: Optional[Sequence[Holding]],
    *,
    sample_size: int = DISCOVERY_SAMPLE_SIZE,
    min_occurrences: int = DISCOVERY_MIN_OCCURRENCES,
    cache: Optional[TTLCache] = None,
    known_wallets: Optional[dict[str, str]] = None,
) -> WalletSet:
    """Build the wallet set for *profile*, discovering a secondary wallet.

    *sample* is the start of the creator's balance listing; only its first
    *sample_size* edges are examined.  ``None`` means no listing head is
    available (e.g. a page fetched from a later cursor), in which case only
    the override table and the cache are consulted.
    """
    primary = profile.public_wallet or ""
    overrides = KNOWN_SECONDARY_WALLETS if known_wallets is None else known_wallets

    handle = (profile.handle or "").lower()
    if handle and handle in overrides:
        logger.info("Using known secondary wallet for %s", handle)
        return WalletSet(primary, overrides[handle])

    cleaned = normalize_identifier(identifier)
    cache_key = f"wallet:{cleaned.lower()}"
    if cache is not None:
        cached = cache.get(cache_key)
        if cached is not None:
            return WalletSet(primary, cached or None)

    if sample is None:
        logger.info("Secondary wallet discovery skipped for %s – no listing head", cleaned)
        return WalletSet(primary)

    edges = list(sample[:sample_size])
    if not edges:
        logger.info("Secondary wallet discovery skipped for %s – empty sample", cleaned)
        secondary = None
    else:
        secondary = discover_secondary_wallet(
            (h.coin.creator_address for h in edges),
            primary,
            min_occurrences=min_occurrences,
        )
        if secondary:
            logger.info("Discovered secondary wallet %s for %s", secondary, cleaned)

    if cache is not None:
        cache.set(cache_key, secondary or _NO_WALLET)
    return WalletSet(primary, secondary)
