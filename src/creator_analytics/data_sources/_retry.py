"""
Shared async GET helper with a per-attempt deadline and bounded retry.

Used by every Zora data-source client so the failure surface is the same
everywhere:

- 2xx → parsed JSON body
- 404 → ``None`` (the resource does not exist; not retried)
- 429 / 5xx / transport error / deadline → retried with exponential
  backoff, then ``UpstreamFetchError``
- any other 4xx → ``UpstreamClientError`` immediately
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import httpx

from ..errors import UpstreamClientError, UpstreamFetchError

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS = {429, 500, 502, 503, 504}


def _parse_retry_after(resp: httpx.Response, default: float) -> float:
    """Extract wait time from a ``Retry-After`` header, or use *default*.

    Only the integer-seconds form is handled.
    """
    raw = resp.headers.get("retry-after")
    if raw is not None:
        try:
            return max(float(raw), 0.5)
        except (ValueError, TypeError):
            pass
    return default


async def async_http_get(
    client: httpx.AsyncClient,
    url: str,
    *,
    params: Optional[dict[str, Any]] = None,
    max_retries: int = 2,
    backoff_base: float = 0.5,
    deadline: Optional[float] = None,
    label: str = "HTTP",
) -> Optional[Any]:
    """GET *url* and return its JSON body, ``None`` on 404.

    *max_retries* counts attempts, so the default of 2 means one retry.
    *deadline* bounds each attempt in seconds on top of the client's own
    timeout.  Raises ``UpstreamFetchError`` once attempts are exhausted.
    """
    last_error = ""
    for attempt in range(max_retries):
        wait = backoff_base * (2 ** attempt)
        try:
            request = client.get(url, params=params)
            if deadline is not None:
                resp = await asyncio.wait_for(request, timeout=deadline)
            else:
                resp = await request

            if resp.status_code == 404:
                logger.debug("%s 404 for %s", label, url)
                return None
            if resp.status_code in _RETRYABLE_STATUS:
                last_error = f"HTTP {resp.status_code}"
                if resp.status_code == 429:
                    wait = _parse_retry_after(resp, wait)
                logger.warning("%s %s for %s (attempt %d/%d)",
                               label, last_error, url, attempt + 1, max_retries)
            else:
                resp.raise_for_status()
                return resp.json()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.warning("%s HTTP %s for %s – not retrying", label, status, url)
            raise UpstreamClientError(label, f"HTTP {status}") from exc
        except (httpx.RequestError, asyncio.TimeoutError) as exc:
            last_error = f"{type(exc).__name__}: {exc}" if str(exc) else type(exc).__name__
            logger.warning("%s request failed: %s – %s (attempt %d/%d)",
                           label, url, last_error, attempt + 1, max_retries)
        except ValueError as exc:
            # Body was not JSON
            raise UpstreamFetchError(label, "invalid JSON body") from exc

        if attempt < max_retries - 1:
            await asyncio.sleep(wait)

    raise UpstreamFetchError(label, last_error or "all retries exhausted")
