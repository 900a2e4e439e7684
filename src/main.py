"""
Command line interface for the Creator Analytics engine.

Usage::

    python src/main.py --identifier <HANDLE_OR_ADDRESS> [--mode full] [--json]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys

# Ensure ``src/`` is on the import path
sys.path.insert(0, os.path.dirname(__file__))

from config import ENRICH_LIMIT_DEFAULT
from creator_analytics.analytics_engine import get_creator_analytics
from creator_analytics.data_sources._clients import close_clients
from creator_analytics.errors import CreatorAnalyticsError
from creator_analytics.models import LoadMode

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)


async def _run(identifier: str, mode: LoadMode, limit: int, skip_cache: bool, as_json: bool) -> int:
    """Async entry point; returns the process exit code."""
    try:
        result = await get_creator_analytics(
            identifier, mode=mode, limit=limit, skip_cache=skip_cache
        )
    except CreatorAnalyticsError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        await close_clients()

    if as_json:
        print(result.model_dump_json(indent=2, by_alias=True))
        return 0

    profile = result.profile
    metrics = result.metrics
    split = result.holder_vs_trader
    print("=" * 60)
    print("  Creator Analytics – Results")
    print("=" * 60)
    print(f"  Creator      : {profile.display_name or profile.handle} (@{profile.handle})")
    print(f"  Wallets      : {', '.join(result.wallets)}")
    print(f"  Mode         : {result.mode.value}")
    print(f"  Posts        : {metrics.posts}")
    print(f"  Total volume : {metrics.total_volume:,.4f}")
    print(f"  Est. earnings: {metrics.total_earnings:,.4f}"
          f"  (avg {metrics.average_earnings_per_post:,.4f} / post)")
    print(f"  Holders      : {split.total_holders}"
          f"  (~{split.estimated_collectors} collectors, ~{split.estimated_traders} traders)")
    print("-" * 60)

    if result.created.items:
        more = "+" if result.created.has_more else ""
        print(f"  Created coins ({result.created.count}{more}):")
        for i, c in enumerate(result.created.items[:10], 1):
            volume = f"{c.total_volume:,.2f}" if c.enriched else "n/a"
            print(f"    {i:>2}. {c.name[:24]:24s}  volume={volume}  holders={c.unique_holders}")
    else:
        print("  No created coins found.")
    print(f"  Collected coins: {result.collected.count}")
    print("=" * 60)
    return 0


def main() -> None:
    """Entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Aggregate a Zora creator's coin analytics"
    )
    parser.add_argument(
        "--identifier",
        required=True,
        help="Zora handle or wallet address of the creator",
    )
    parser.add_argument(
        "--mode",
        choices=[m.value for m in LoadMode],
        default=LoadMode.STANDARD.value,
        help="How many balance pages to walk (initial=2, standard=5, full=100)",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=ENRICH_LIMIT_DEFAULT,
        help="Maximum number of created coins to enrich (0 skips enrichment)",
    )
    parser.add_argument(
        "--skip-cache",
        action="store_true",
        help="Ignore any cached result",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="as_json",
        help="Output result as raw JSON",
    )
    args = parser.parse_args()
    if args.limit < 0:
        parser.error("--limit must be 0 or greater")
    code = asyncio.run(
        _run(args.identifier, LoadMode(args.mode), args.limit, args.skip_cache, args.as_json)
    )
    sys.exit(code)


if __name__ == "__main__":
    main()
