"""
Project configuration file for the Creator Analytics engine.

This module centralises all user-modifiable settings such as API endpoints,
cache lifetimes, batching limits and the heuristic constants used by the
metrics.  You can edit these values directly or set environment variables
to override them.
"""

from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def _parse_float(name: str, default: str, *, low: float = 0.0, high: float = 1.0) -> float:
    """Parse an env var as a float and validate it within [low, high]."""
    raw = os.getenv(name, default)
    try:
        value = float(raw)
    except (TypeError, ValueError):
        logger.error("Invalid value for %s: %r – using default %s", name, raw, default)
        value = float(default)
    if not (low <= value <= high):
        logger.warning("%s=%.4f is outside [%.1f, %.1f] – clamped", name, value, low, high)
        value = max(low, min(value, high))
    return value


def _parse_int(name: str, default: str, *, minimum: int = 1) -> int:
    """Parse an env var as an int and enforce a minimum."""
    raw = os.getenv(name, default)
    try:
        value = int(raw)
    except (TypeError, ValueError):
        logger.error("Invalid value for %s: %r – using default %s", name, raw, default)
        value = int(default)
    if value < minimum:
        logger.warning("%s=%d is below minimum %d – clamped", name, value, minimum)
        value = minimum
    return value


# ---------------------------------------------------------------------------
# Zora coins API
# ---------------------------------------------------------------------------
ZORA_API_BASE_URL: str = os.getenv(
    "ZORA_API_BASE_URL",
    "https://api-sdk.zora.engineering",
)
ZORA_API_KEY: str = os.getenv("ZORA_API_KEY", "")
ZORA_CHAIN_ID: int = _parse_int("ZORA_CHAIN_ID", "8453", minimum=1)  # Base mainnet

# Creator-coin listing used for the full-load post count
CREATOR_COINS_URL: str = os.getenv(
    "CREATOR_COINS_URL",
    "https://api.zora.co/creator-coins",
)

# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------
CACHE_TTL_SECONDS: int = _parse_int("CACHE_TTL_SECONDS", "300", minimum=1)
WALLET_CACHE_TTL_SECONDS: int = _parse_int(
    "WALLET_CACHE_TTL_SECONDS", "300", minimum=1
)
CACHE_MAX_ENTRIES: int = _parse_int("CACHE_MAX_ENTRIES", "10000", minimum=1)

# ---------------------------------------------------------------------------
# Balance listing & wallet discovery
# ---------------------------------------------------------------------------
BALANCE_PAGE_SIZE: int = _parse_int("BALANCE_PAGE_SIZE", "50", minimum=1)
DISCOVERY_SAMPLE_SIZE: int = _parse_int("DISCOVERY_SAMPLE_SIZE", "20", minimum=1)
# An address must appear at least this many times (i.e. more than twice)
DISCOVERY_MIN_OCCURRENCES: int = _parse_int("DISCOVERY_MIN_OCCURRENCES", "3", minimum=1)
# Page size of the profile-balances view when the caller gives no count
PROFILE_BALANCES_COUNT: int = _parse_int("PROFILE_BALANCES_COUNT", "20", minimum=1)
PROFILE_BALANCES_COUNT_MAX: int = _parse_int("PROFILE_BALANCES_COUNT_MAX", "100", minimum=1)

# ---------------------------------------------------------------------------
# Enrichment
# ---------------------------------------------------------------------------
ENRICH_LIMIT_DEFAULT: int = _parse_int("ENRICH_LIMIT_DEFAULT", "25", minimum=1)
ENRICH_LIMIT_MAX: int = _parse_int("ENRICH_LIMIT_MAX", "500", minimum=1)
ENRICH_BATCH_SIZE: int = _parse_int("ENRICH_BATCH_SIZE", "5", minimum=1)

# ---------------------------------------------------------------------------
# Metric heuristics  (0.0 – 1.0)
# ---------------------------------------------------------------------------
CREATOR_FEE_RATE: float = _parse_float("CREATOR_FEE_RATE", "0.05")
TRADER_SHARE: float = _parse_float("TRADER_SHARE", "0.2")

# ---------------------------------------------------------------------------
# HTTP limits
# ---------------------------------------------------------------------------
REQUEST_TIMEOUT: int = _parse_int("REQUEST_TIMEOUT", "15", minimum=1)
HTTP_MAX_RETRIES: int = _parse_int("HTTP_MAX_RETRIES", "2", minimum=1)
ANALYSIS_TIMEOUT_SECONDS: int = _parse_int("ANALYSIS_TIMEOUT_SECONDS", "50", minimum=5)

# ---------------------------------------------------------------------------
# Rate limiting (slowapi format, e.g. "10/minute")
# ---------------------------------------------------------------------------
RATE_LIMIT_ANALYTICS: str = os.getenv("RATE_LIMIT_ANALYTICS", "10/minute")
RATE_LIMIT_BALANCES: str = os.getenv("RATE_LIMIT_BALANCES", "30/minute")

# ---------------------------------------------------------------------------
# Sentry (error tracking)
# ---------------------------------------------------------------------------
SENTRY_DSN: str = os.getenv("SENTRY_DSN", "")
SENTRY_ENVIRONMENT: str = os.getenv("SENTRY_ENVIRONMENT", "production")
SENTRY_TRACES_SAMPLE_RATE: float = _parse_float(
    "SENTRY_TRACES_SAMPLE_RATE", "0.1", low=0.0, high=1.0
)

# ---------------------------------------------------------------------------
# Circuit breaker
# ---------------------------------------------------------------------------
CB_FAILURE_THRESHOLD: int = _parse_int("CB_FAILURE_THRESHOLD", "8", minimum=1)
CB_RECOVERY_TIMEOUT: float = float(os.getenv("CB_RECOVERY_TIMEOUT", "60"))

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT: str = os.getenv("LOG_FORMAT", "text")  # "text" or "json"

# ---------------------------------------------------------------------------
# API server
# ---------------------------------------------------------------------------
API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = _parse_int("API_PORT", "8000", minimum=1)
CORS_ORIGINS: list[str] = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
    if o.strip()
]
