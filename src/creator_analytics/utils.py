"""
Shared utilities for the Creator Analytics engine.

- ``parse_datetime`` – tolerant timestamp parsing for API payloads
- ``normalize_address`` / ``normalize_identifier`` – canonical forms used
  for comparisons and cache keys
- ``format_units`` – raw 18-decimal balance → float
- ``safe_float`` / ``safe_int`` – lenient numeric coercion
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

TOKEN_DECIMALS = 18


def parse_datetime(value: object) -> Optional[datetime]:
    """Convert a value to a timezone-aware ``datetime`` (UTC).

    Accepts ``None``, ``datetime`` (naïve values are taken as UTC), ISO
    strings with or without a ``Z`` suffix, and Unix epoch seconds.
    Anything unparseable yields ``None``.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    if isinstance(value, str):
        try:
            cleaned = value.replace("Z", "+00:00") if value.endswith("Z") else value
            dt = datetime.fromisoformat(cleaned)
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=timezone.utc)
            return dt
        except (ValueError, TypeError):
            return None

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(float(value), tz=timezone.utc)
        except (ValueError, OSError, OverflowError):
            return None

    return None


def normalize_address(address: Optional[str]) -> Optional[str]:
    """Lower-case and strip an EVM address; empty values become ``None``."""
    if not address:
        return None
    cleaned = address.strip().lower()
    return cleaned or None


def normalize_identifier(identifier: str) -> str:
    """Strip whitespace and a leading ``@`` from a handle or address."""
    cleaned = identifier.strip()
    if cleaned.startswith("@"):
        cleaned = cleaned[1:]
    return cleaned


def safe_float(val: Any, default: float = 0.0) -> float:
    """Try to cast *val* to float, returning *default* on failure."""
    if val is None:
        return default
    try:
        return float(val)
    except (TypeError, ValueError):
        return default


def safe_int(val: Any, default: int = 0) -> int:
    """Cast *val* (int, float or numeric string) to int."""
    if val is None:
        return default
    try:
        return int(val)
    except (TypeError, ValueError):
        try:
            return int(float(val))
        except (TypeError, ValueError, OverflowError):
            return default


def format_units(raw: Any, decimals: int = TOKEN_DECIMALS) -> float:
    """Convert a raw integer token quantity to a human-scale float."""
    return safe_float(raw) / (10 ** decimals)
