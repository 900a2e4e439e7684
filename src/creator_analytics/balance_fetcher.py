"""
Cursor-paginated walk over a creator's coin balances.

Pages depend on the previous page's cursor, so they are fetched strictly
one after another.  The walk stops at the first empty page, the first page
without a next cursor, or when the page budget is spent.
"""

from __future__ import annotations

import logging
from typing import Optional

from config import BALANCE_PAGE_SIZE
from .data_sources.protocols import BalanceListingService
from .errors import UpstreamFetchError
from .models import Holding, LoadMode

logger = logging.getLogger(__name__)

PAGE_BUDGETS: dict[LoadMode, int] = {
    LoadMode.INITIAL: 2,
    LoadMode.STANDARD: 5,
    LoadMode.FULL: 100,
}


async def walk_balances(
    service: BalanceListingService,
    identifier: str,
    *,
    max_pages: int,
    page_size: int = BALANCE_PAGE_SIZE,
    after: Optional[str] = None,
) -> tuple[list[Holding], Optional[str]]:
    """Fetch up to *max_pages* pages starting at cursor *after*.

    Returns the holdings in listing order and the cursor of the next
    unread page (``None`` once the listing is exhausted).  Any page failure
    aborts the walk with ``UpstreamFetchError``; no partial listing is
    returned.
    """
    holdings: list[Holding] = []
    cursor = after

    for page_no in range(1, max_pages + 1):
        try:
            page = await service.list_balances(identifier, page_size, cursor)
        except UpstreamFetchError:
            logger.error("Balance page %d failed for %s", page_no, identifier)
            raise
        except Exception as exc:
            logger.exception("Balance page %d failed for %s", page_no, identifier)
            raise UpstreamFetchError("balance listing", str(exc)) from exc

        if not page.edges:
            logger.debug("Empty balance page %d for %s – done", page_no, identifier)
            cursor = None
            break

        holdings.extend(page.edges)
        cursor = page.next_cursor
        logger.debug(
            "Fetched balance page %d with %d edges, next cursor: %s",
            page_no, len(page.edges), cursor,
        )
        if not cursor:
            break
    else:
        if cursor:
            logger.info(
                "Page budget (%d) exhausted for %s – listing truncated",
                max_pages, identifier,
            )

    logger.info("Fetched %d balances for %s", len(holdings), identifier)
    return holdings, cursor


async def fetch_balances(
    service: BalanceListingService,
    identifier: str,
    mode: LoadMode = LoadMode.STANDARD,
    *,
    page_size: int = BALANCE_PAGE_SIZE,
) -> list[Holding]:
    """Return every holding reachable within the page budget of *mode*."""
    holdings, _ = await walk_balances(
        service, identifier, max_pages=PAGE_BUDGETS[mode], page_size=page_size
    )
    return holdings
