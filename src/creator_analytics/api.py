"""
REST API for the Creator Analytics engine using FastAPI.

Endpoints
---------
GET /health                                     - Health check
GET /creator-analytics?identifier=<HANDLE|ADDR> - Aggregated creator analytics
GET /profile-balances?identifier=<HANDLE|ADDR>  - Classified balances only

Security features:
- Rate limiting via slowapi (per-IP)
- Identifier validation
- Internal error details hidden from clients
- Graceful startup/shutdown of HTTP clients
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
from contextlib import asynccontextmanager
from typing import Optional

import sentry_sdk
from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware

from config import (
    ANALYSIS_TIMEOUT_SECONDS,
    API_HOST,
    API_PORT,
    CORS_ORIGINS,
    ENRICH_LIMIT_DEFAULT,
    ENRICH_LIMIT_MAX,
    PROFILE_BALANCES_COUNT,
    PROFILE_BALANCES_COUNT_MAX,
    RATE_LIMIT_ANALYTICS,
    RATE_LIMIT_BALANCES,
    SENTRY_DSN,
    SENTRY_ENVIRONMENT,
    SENTRY_TRACES_SAMPLE_RATE,
    ZORA_API_BASE_URL,
)
from .analytics_engine import get_engine, reset_engine
from .circuit_breaker import get_all_statuses as cb_statuses
from .data_sources._clients import cache_stats, close_clients, init_clients
from .errors import NotFoundError, UpstreamFetchError
from .logging_config import creator_ctx, generate_request_id, request_id_ctx, setup_logging
from .models import AggregatedResult, LoadMode, ProfileBalances
from .utils import normalize_identifier

# Initialise structured logging early
setup_logging()
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Sentry – initialise before anything else so startup errors are captured
# ---------------------------------------------------------------------------
if SENTRY_DSN:
    sentry_sdk.init(
        dsn=SENTRY_DSN,
        environment=SENTRY_ENVIRONMENT,
        traces_sample_rate=SENTRY_TRACES_SAMPLE_RATE,
        send_default_pii=False,
        # Don't capture 4xx client errors as Sentry events
        before_send=lambda event, hint: (
            None
            if (hint.get("exc_info") and
                isinstance(hint["exc_info"][1], HTTPException) and
                (hint["exc_info"][1].status_code or 500) < 500)
            else event
        ),
    )
    logger.info("Sentry initialised (env=%s)", SENTRY_ENVIRONMENT)
else:
    logger.info("SENTRY_DSN not set – error tracking disabled")

_start_time = time.monotonic()

# Zora handles or 0x-prefixed EVM addresses, optionally with a leading "@"
_IDENTIFIER_RE = re.compile(r"^@?(0x[0-9a-fA-F]{40}|[A-Za-z0-9_.\-]{1,64})$")


limiter = Limiter(key_func=get_remote_address)


@asynccontextmanager
async def lifespan(application: FastAPI):
    """Initialise shared HTTP clients on startup, close on shutdown."""
    if not ZORA_API_BASE_URL.startswith("http"):
        logger.error("ZORA_API_BASE_URL is not a valid URL: %s", ZORA_API_BASE_URL)
        raise RuntimeError("Invalid ZORA_API_BASE_URL – must be an HTTP(S) URL")
    logger.info("Starting up – initialising HTTP clients …")
    await init_clients()
    yield
    logger.info("Shutting down – closing HTTP clients …")
    await close_clients()
    reset_engine()


app = FastAPI(
    title="Creator Analytics API",
    description="Created vs. collected coins, volume and estimated earnings for Zora creators.",
    version="1.0.0",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["Content-Type", "Accept"],
)


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Attach a unique request ID to every request for tracing."""

    async def dispatch(self, request: Request, call_next):
        rid = generate_request_id()
        request_id_ctx.set(rid)
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        response.headers["X-Request-ID"] = rid
        logger.info(
            "%s %s -> %s (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response


app.add_middleware(RequestIdMiddleware)


def _validated_identifier(identifier: str) -> str:
    if not identifier or not _IDENTIFIER_RE.match(identifier.strip()):
        raise HTTPException(
            status_code=400,
            detail="Invalid identifier. Expected a Zora handle or a 0x wallet address.",
        )
    cleaned = normalize_identifier(identifier)
    creator_ctx.set(cleaned)
    return cleaned


def _resolve_mode(mode: Optional[LoadMode], fetch_all: bool, initial_load_only: bool) -> LoadMode:
    if mode is not None:
        return mode
    return LoadMode.from_flags(fetch_all=fetch_all, initial_load_only=initial_load_only)


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------


@app.get("/", tags=["system"], include_in_schema=False)
async def root():
    """Redirect to Swagger UI."""
    return RedirectResponse(url="/docs")


@app.get("/health", tags=["system"])
async def health() -> dict:
    """Uptime, cache statistics and circuit breaker states."""
    return {
        "status": "ok",
        "uptime_seconds": round(time.monotonic() - _start_time, 1),
        "caches": cache_stats(),
        "circuit_breakers": cb_statuses(),
    }


@app.get("/creator-analytics", response_model=AggregatedResult, tags=["analytics"])
@limiter.limit(RATE_LIMIT_ANALYTICS)
async def creator_analytics(
    request: Request,
    identifier: str = Query(..., description="Zora handle or wallet address"),
    mode: Optional[LoadMode] = Query(None, description="initial, standard or full"),
    fetch_all: bool = Query(False, alias="fetchAll"),
    initial_load_only: bool = Query(False, alias="initialLoadOnly"),
    limit: int = Query(
        ENRICH_LIMIT_DEFAULT, ge=0, le=ENRICH_LIMIT_MAX,
        description="Created coins to enrich; 0 skips enrichment",
    ),
    skip_cache: bool = Query(False, alias="skipCache"),
) -> AggregatedResult:
    """Return created/collected coins and derived metrics for a creator."""
    cleaned = _validated_identifier(identifier)
    load_mode = _resolve_mode(mode, fetch_all, initial_load_only)
    try:
        return await asyncio.wait_for(
            get_engine().get_creator_analytics(
                cleaned, mode=load_mode, limit=limit, skip_cache=skip_cache
            ),
            timeout=ANALYSIS_TIMEOUT_SECONDS,
        )
    except NotFoundError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    except UpstreamFetchError as exc:
        logger.warning("Upstream failure for %s: %s", cleaned, exc)
        raise HTTPException(
            status_code=exc.status_code, detail="Upstream data service unavailable. Try again."
        ) from exc
    except asyncio.TimeoutError:
        raise HTTPException(
            status_code=504,
            detail=f"Analysis timed out after {ANALYSIS_TIMEOUT_SECONDS}s. "
                   "Try the standard mode or a smaller limit.",
        )
    except Exception as exc:
        logger.exception("Creator analytics failed for %s", cleaned)
        raise HTTPException(status_code=500, detail="Internal server error") from exc


@app.get("/profile-balances", response_model=ProfileBalances, tags=["analytics"])
@limiter.limit(RATE_LIMIT_BALANCES)
async def profile_balances(
    request: Request,
    identifier: str = Query(..., description="Zora handle or wallet address"),
    count: int = Query(PROFILE_BALANCES_COUNT, ge=1, le=PROFILE_BALANCES_COUNT_MAX),
    after: Optional[str] = Query(None, description="Cursor returned as pagination.nextCursor"),
    fetch_all: bool = Query(False, alias="fetchAll"),
) -> ProfileBalances:
    """Return one page of the creator's balances split into created and collected."""
    cleaned = _validated_identifier(identifier)
    try:
        return await asyncio.wait_for(
            get_engine().get_profile_balances(
                cleaned, fetch_all=fetch_all, count=count, after=after or None
            ),
            timeout=ANALYSIS_TIMEOUT_SECONDS,
        )
    except NotFoundError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    except UpstreamFetchError as exc:
        logger.warning("Upstream failure for %s: %s", cleaned, exc)
        raise HTTPException(
            status_code=exc.status_code, detail="Upstream data service unavailable. Try again."
        ) from exc
    except asyncio.TimeoutError:
        raise HTTPException(
            status_code=504,
            detail=f"Balance listing timed out after {ANALYSIS_TIMEOUT_SECONDS}s.",
        )
    except Exception as exc:
        logger.exception("Profile balances failed for %s", cleaned)
        raise HTTPException(status_code=500, detail="Internal server error") from exc


# ------------------------------------------------------------------
# Dev server
# ------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "creator_analytics.api:app",
        host=API_HOST,
        port=API_PORT,
        reload=True,
    )
