"""
Singleton HTTP client and cache management for the Creator Analytics engine.

Provides lazy-initialised clients for the Zora coins API and the
creator-coin listing, plus the three cache instances the default engine
is built with.

``init_clients`` / ``close_clients`` should be called at app startup/shutdown.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..cache import TTLCache
from ..circuit_breaker import CircuitBreaker, register
from .creator_coins import CreatorCoinsClient
from .zora import ZoraClient
from config import (
    CACHE_MAX_ENTRIES,
    CACHE_TTL_SECONDS,
    CB_FAILURE_THRESHOLD,
    CB_RECOVERY_TIMEOUT,
    CREATOR_COINS_URL,
    HTTP_MAX_RETRIES,
    REQUEST_TIMEOUT,
    WALLET_CACHE_TTL_SECONDS,
    ZORA_API_BASE_URL,
    ZORA_API_KEY,
    ZORA_CHAIN_ID,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Module-level singletons (created once, reused)
# ---------------------------------------------------------------------------
_zora_client: Optional[ZoraClient] = None
_creator_coins_client: Optional[CreatorCoinsClient] = None

detail_cache = TTLCache(
    default_ttl=CACHE_TTL_SECONDS, max_entries=CACHE_MAX_ENTRIES, name="asset_detail"
)
result_cache = TTLCache(
    default_ttl=CACHE_TTL_SECONDS, max_entries=CACHE_MAX_ENTRIES, name="analytics_result"
)
wallet_cache = TTLCache(
    default_ttl=WALLET_CACHE_TTL_SECONDS, max_entries=CACHE_MAX_ENTRIES, name="secondary_wallet"
)


def _breaker(name: str) -> CircuitBreaker:
    return register(
        CircuitBreaker(
            name,
            failure_threshold=CB_FAILURE_THRESHOLD,
            recovery_timeout=CB_RECOVERY_TIMEOUT,
        )
    )


# Circuit breakers – one per external endpoint, registered for health reporting
cb_zora_profile = _breaker("zora_profile")
cb_zora_balances = _breaker("zora_balances")
cb_zora_coin = _breaker("zora_coin")
cb_creator_coins = _breaker("creator_coins")


def get_zora_client() -> ZoraClient:
    global _zora_client
    if _zora_client is None:
        _zora_client = ZoraClient(
            ZORA_API_BASE_URL,
            api_key=ZORA_API_KEY,
            chain_id=ZORA_CHAIN_ID,
            timeout=REQUEST_TIMEOUT,
            max_retries=HTTP_MAX_RETRIES,
            profile_breaker=cb_zora_profile,
            balances_breaker=cb_zora_balances,
            coin_breaker=cb_zora_coin,
        )
    return _zora_client


def get_creator_coins_client() -> CreatorCoinsClient:
    global _creator_coins_client
    if _creator_coins_client is None:
        _creator_coins_client = CreatorCoinsClient(
            CREATOR_COINS_URL,
            chain_id=ZORA_CHAIN_ID,
            timeout=REQUEST_TIMEOUT,
            max_retries=HTTP_MAX_RETRIES,
            circuit_breaker=cb_creator_coins,
        )
    return _creator_coins_client


async def init_clients() -> None:
    """Eagerly create the singleton HTTP clients (called at startup)."""
    get_zora_client()
    get_creator_coins_client()


async def close_clients() -> None:
    """Close singleton HTTP clients gracefully (called at shutdown)."""
    global _zora_client, _creator_coins_client
    if _zora_client is not None:
        await _zora_client.close()
        _zora_client = None
    if _creator_coins_client is not None:
        await _creator_coins_client.close()
        _creator_coins_client = None


def cache_stats() -> list[dict]:
    return [c.stats() for c in (detail_cache, result_cache, wallet_cache)]
