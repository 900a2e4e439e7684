"""
Exception taxonomy for the Creator Analytics engine.

Two failure classes reach callers:

- ``NotFoundError`` – the identifier does not resolve to a profile, or the
  profile has no usable wallet.  Never retried.
- ``UpstreamFetchError`` – a required external call (profile lookup or a
  balance page) failed after the transport's retries were exhausted.

Secondary-wallet discovery failures and per-coin enrichment failures are
degraded in place and never raised to the caller.
"""

from __future__ import annotations


class CreatorAnalyticsError(Exception):
    """Base class for every error raised by the engine."""

    status_code: int = 500


class NotFoundError(CreatorAnalyticsError):
    """The requested creator could not be resolved."""

    status_code = 404


class ProfileNotFoundError(NotFoundError):
    def __init__(self, identifier: str) -> None:
        super().__init__(f"Profile not found: {identifier}")
        self.identifier = identifier


class NoWalletAddressError(NotFoundError):
    def __init__(self, identifier: str) -> None:
        super().__init__(f"No wallet address found for profile: {identifier}")
        self.identifier = identifier


class UpstreamFetchError(CreatorAnalyticsError):
    """A required upstream call failed (network, HTTP error or open circuit)."""

    status_code = 502

    def __init__(self, service: str, detail: str = "") -> None:
        message = f"{service} request failed"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.service = service
        self.detail = detail


class UpstreamClientError(UpstreamFetchError):
    """The upstream answered with a non-404 4xx for this one request.

    The service itself is reachable, so circuit breakers do not count it.
    """
