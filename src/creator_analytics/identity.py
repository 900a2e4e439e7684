"""
Identity resolution: handle or address → ``Profile`` with a primary wallet.
"""

from __future__ import annotations

import logging

from .data_sources.protocols import ProfileService
from .errors import NoWalletAddressError, ProfileNotFoundError
from .models import Profile
from .utils import normalize_identifier

logger = logging.getLogger(__name__)


async def resolve_identity(
    service: ProfileService, identifier: str, *, require_wallet: bool = True
) -> Profile:
    """Look up *identifier* and, by default, ensure it has a public wallet.

    Raises ``ProfileNotFoundError`` when the profile service knows nothing
    about the identifier and, with *require_wallet*, ``NoWalletAddressError``
    when the profile exists without a wallet.  ``UpstreamFetchError``
    propagates untouched.
    """
    cleaned = normalize_identifier(identifier)
    if not cleaned:
        raise ProfileNotFoundError(identifier)

    logger.info("Resolving profile for %s ...", cleaned)
    profile = await service.get_profile(cleaned)
    if profile is None:
        raise ProfileNotFoundError(cleaned)
    if require_wallet and not profile.public_wallet:
        raise NoWalletAddressError(cleaned)

    logger.info(
        "Found profile %s (wallet %s)",
        profile.display_name or profile.handle or cleaned,
        profile.public_wallet,
    )
    return profile
