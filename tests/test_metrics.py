"""Tests for the summary metrics and the holder/trader heuristic."""

from __future__ import annotations

import pytest

from creator_analytics.classifier import classify_balances
from creator_analytics.enrichment import EnrichedBalance
from creator_analytics.metrics import (
    compute_holder_split,
    compute_metrics,
    resolve_post_count,
    split_holders,
    to_collected_coin,
    to_created_coin,
)
from creator_analytics.wallet_discovery import WalletSet

from fakes import OTHER, PRIMARY, make_detail, make_holding


def _items(volumes, holders=None):
    holders = holders or [0] * len(volumes)
    holdings = [
        make_holding(f"0xc{i:039x}", PRIMARY, name=f"coin{i}")
        for i in range(len(volumes))
    ]
    created = classify_balances(holdings, WalletSet(PRIMARY)).created
    return [
        EnrichedBalance(b, make_detail(b.coin.address, volume=v, holders=h))
        for b, v, h in zip(created, volumes, holders)
    ]


class TestComputeMetrics:

    def test_volume_earnings_average(self):
        metrics = compute_metrics(_items([100, 200, 0]), posts=3)
        assert metrics.total_volume == 300
        assert metrics.total_earnings == pytest.approx(15)
        assert metrics.posts == 3
        assert metrics.average_earnings_per_post == pytest.approx(5)

    def test_zero_posts(self):
        metrics = compute_metrics([], posts=0)
        assert metrics.total_earnings == 0
        assert metrics.average_earnings_per_post == 0

    def test_failed_enrichment_contributes_zero(self):
        items = _items([100, 50])
        items[1] = EnrichedBalance(items[1].balance, None)
        metrics = compute_metrics(items, posts=2)
        assert metrics.total_volume == 100

    def test_custom_fee_rate(self):
        metrics = compute_metrics(_items([100]), posts=1, fee_rate=0.1)
        assert metrics.total_earnings == pytest.approx(10)


class TestPostCount:

    def test_created_count_only(self):
        assert resolve_post_count(4) == 4

    def test_listing_count_can_raise(self):
        assert resolve_post_count(4, [2, 9]) == 9

    def test_listing_count_never_lowers(self):
        assert resolve_post_count(4, [1]) == 4


class TestHolderSplit:

    @pytest.mark.parametrize("holders,collectors,traders", [
        (10, 8, 2),
        (7, 6, 1),
        (15, 12, 3),
        (4, 4, 0),
        (0, 0, 0),
    ])
    def test_split_holders(self, holders, collectors, traders):
        assert split_holders(holders) == (collectors, traders)

    def test_totals_are_sums(self):
        split = compute_holder_split(_items([100, 40], holders=[10, 7]))
        assert split.total_holders == 17
        assert split.estimated_traders == 3
        assert split.estimated_collectors == 14
        assert len(split.coin_breakdown) == 2
        assert split.coin_breakdown[0].estimated_earnings == pytest.approx(5)


class TestOutputRows:

    def test_created_coin_row(self):
        item = _items([200], holders=[12])[0]
        row = to_created_coin(item)
        assert row.enriched is True
        assert row.total_volume == 200
        assert row.estimated_earnings == pytest.approx(10)
        assert row.unique_holders == 12
        assert row.balance == 1.0

    def test_unenriched_row(self):
        item = _items([200])[0]
        row = to_created_coin(EnrichedBalance(item.balance, None))
        assert row.enriched is False
        assert row.detail is None
        assert row.total_volume == 0

    def test_collected_coin_row(self):
        balance = classify_balances(
            [make_holding("0xc1", OTHER, name="Other")], WalletSet(PRIMARY)
        ).collected[0]
        row = to_collected_coin(balance)
        assert row.creator_address == OTHER
        assert row.name == "Other"
