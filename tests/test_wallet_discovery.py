"""Tests for secondary wallet discovery."""

from __future__ import annotations

from creator_analytics.cache import TTLCache
from creator_analytics.models import Profile
from creator_analytics.wallet_discovery import (
    WalletSet,
    discover_secondary_wallet,
    resolve_wallet_set,
)

from fakes import OTHER, PRIMARY, SECONDARY, make_holding

WALLET_A = "0xaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa"
WALLET_B = "0xbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbb"


class TestDiscoverSecondaryWallet:

    def test_most_frequent_candidate_wins(self):
        creators = [WALLET_A] * 5 + [WALLET_B] * 2 + [PRIMARY] * 10
        assert discover_secondary_wallet(creators, PRIMARY) == WALLET_A

    def test_two_occurrences_are_not_enough(self):
        creators = [WALLET_A, WALLET_A, PRIMARY]
        assert discover_secondary_wallet(creators, PRIMARY) is None

    def test_case_insensitive_counting(self):
        creators = [WALLET_A.upper().replace("0X", "0x"), WALLET_A, WALLET_A]
        assert discover_secondary_wallet(creators, PRIMARY) == WALLET_A

    def test_primary_never_returned(self):
        creators = [PRIMARY.upper().replace("0X", "0x")] * 20
        assert discover_secondary_wallet(creators, PRIMARY) is None

    def test_tie_goes_to_first_seen(self):
        creators = [WALLET_B, WALLET_A] * 3
        assert discover_secondary_wallet(creators, PRIMARY) == WALLET_B

    def test_missing_creator_addresses_ignored(self):
        assert discover_secondary_wallet([None, "", None], PRIMARY) is None


class TestWalletSet:

    def test_normalises_and_dedupes(self):
        wallets = WalletSet(PRIMARY, PRIMARY.upper().replace("0X", "0x"))
        assert wallets.addresses == (PRIMARY,)
        assert len(wallets) == 1

    def test_membership_is_case_insensitive(self):
        wallets = WalletSet(PRIMARY, WALLET_A)
        assert WALLET_A.upper().replace("0X", "0x") in wallets
        assert WALLET_B not in wallets
        assert None not in wallets


class TestResolveWalletSet:

    def test_discovers_from_sample(self):
        sample = (
            [make_holding(f"0xc{i:039x}", SECONDARY) for i in range(4)]
            + [make_holding(f"0xd{i:039x}", OTHER) for i in range(2)]
        )
        profile = Profile(handle="alice", public_wallet=PRIMARY)

        wallets = resolve_wallet_set(profile, "alice", sample, sample_size=20)

        assert wallets.addresses == (PRIMARY, SECONDARY)

    def test_only_first_sample_edges_count(self):
        sample = (
            [make_holding(f"0xd{i:039x}", OTHER) for i in range(3)]
            + [make_holding(f"0xc{i:039x}", SECONDARY) for i in range(5)]
        )
        profile = Profile(handle="alice", public_wallet=PRIMARY)

        wallets = resolve_wallet_set(profile, "alice", sample, sample_size=4)
        assert wallets.secondary == OTHER

    def test_known_override_ignores_sample(self):
        sample = [make_holding(f"0xc{i:039x}", SECONDARY) for i in range(5)]
        profile = Profile(handle="DefiDevRelAlt", public_wallet=PRIMARY)

        wallets = resolve_wallet_set(profile, "defidevrelalt", sample)

        assert wallets.secondary == "0xafc833331e494d72bc6568a011f614702ca3c892"

    def test_custom_override_table(self):
        profile = Profile(handle="alice", public_wallet=PRIMARY)
        wallets = resolve_wallet_set(
            profile, "alice", [], known_wallets={"alice": WALLET_A}
        )
        assert wallets.secondary == WALLET_A

    def test_no_listing_head_is_not_cached(self):
        profile = Profile(handle="alice", public_wallet=PRIMARY)
        cache = TTLCache(default_ttl=300)

        wallets = resolve_wallet_set(profile, "alice", None, cache=cache)

        assert wallets.addresses == (PRIMARY,)
        assert "wallet:alice" not in cache

    def test_no_listing_head_uses_cached_wallet(self):
        profile = Profile(handle="alice", public_wallet=PRIMARY)
        cache = TTLCache(default_ttl=300)
        sample = [make_holding(f"0xc{i:039x}", SECONDARY) for i in range(3)]

        resolve_wallet_set(profile, "alice", sample, cache=cache)
        wallets = resolve_wallet_set(profile, "alice", None, cache=cache)

        assert wallets.secondary == SECONDARY

    def test_empty_sample(self):
        cache = TTLCache(default_ttl=300)
        wallets = resolve_wallet_set(
            Profile(handle="alice", public_wallet=PRIMARY), "alice", [], cache=cache
        )
        assert wallets.secondary is None
        assert cache.get("wallet:alice") == ""

    def test_result_cached_per_identity(self):
        profile = Profile(handle="alice", public_wallet=PRIMARY)
        cache = TTLCache(default_ttl=300)
        sample = [make_holding(f"0xc{i:039x}", SECONDARY) for i in range(3)]

        first = resolve_wallet_set(profile, "Alice", sample, cache=cache)
        # a later sample without the secondary does not override the cached guess
        second = resolve_wallet_set(profile, "@alice", [], cache=cache)

        assert first == second
        assert second.secondary == SECONDARY

    def test_nothing_found_is_cached(self, clock):
        profile = Profile(handle="alice", public_wallet=PRIMARY)
        cache = TTLCache(default_ttl=300, clock=clock)
        with_secondary = [make_holding(f"0xc{i:039x}", SECONDARY) for i in range(3)]

        resolve_wallet_set(profile, "alice", [make_holding("0xc1", OTHER)], cache=cache)
        wallets = resolve_wallet_set(profile, "alice", with_secondary, cache=cache)
        assert wallets.secondary is None

        clock.advance(300)
        wallets = resolve_wallet_set(profile, "alice", with_secondary, cache=cache)
        assert wallets.secondary == SECONDARY
