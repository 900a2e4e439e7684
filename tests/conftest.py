"""Shared test fixtures for the Creator Analytics test suite."""

from __future__ import annotations

import os
import sys

# Ensure src/ (and this directory, for ``fakes``) are importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))
sys.path.insert(0, os.path.dirname(__file__))

import pytest

from fakes import OTHER, PRIMARY, FakeClock, FakeZora, make_holding


# ---------------------------------------------------------------------------
# Raw Zora payloads
# ---------------------------------------------------------------------------

@pytest.fixture
def profile_payload():
    """Minimal ``GET /profile`` response."""
    return {
        "profile": {
            "handle": "alice",
            "displayName": "Alice",
            "bio": "Photographer on Zora",
            "avatar": {"small": "https://img.example.com/a-s.png",
                       "medium": "https://img.example.com/a-m.png"},
            "publicWallet": {"walletAddress": "0x1111111111111111111111111111111111111111"},
        }
    }


@pytest.fixture
def balances_payload():
    """One ``GET /profileBalances`` page with a created and a collected coin."""
    return {
        "profile": {
            "coinBalances": {
                "edges": [
                    {
                        "node": {
                            "id": "bal-1",
                            "balance": "2500000000000000000",
                            "coin": {
                                "address": "0xAAAA000000000000000000000000000000000001",
                                "name": "Sunrise",
                                "symbol": "SUN",
                                "totalSupply": "1000000000",
                                "uniqueHolders": 17,
                                "creatorAddress": "0x1111111111111111111111111111111111111111",
                                "mediaContent": {
                                    "previewImage": {"medium": "https://img.example.com/sun.png"}
                                },
                            },
                        }
                    },
                    {
                        "node": {
                            "id": "bal-2",
                            "balance": "1000000000000000000",
                            "coin": {
                                "address": "0xBBBB000000000000000000000000000000000002",
                                "name": "Sushi",
                                "symbol": "SUSHI",
                                "uniqueHolders": "14",
                                "creatorAddress": "0x3333333333333333333333333333333333333333",
                            },
                        }
                    },
                ],
                "pageInfo": {"endCursor": "cursor-abc", "hasNextPage": True},
            }
        }
    }


@pytest.fixture
def coin_payload():
    """Minimal ``GET /coin`` response."""
    return {
        "zora20Token": {
            "address": "0xaaaa000000000000000000000000000000000001",
            "name": "Sunrise",
            "symbol": "SUN",
            "totalVolume": "3112.940877",
            "volume24h": "0.0",
            "uniqueHolders": "17",
            "createdAt": "2025-04-01T12:00:00Z",
            "creatorAddress": "0x1111111111111111111111111111111111111111",
        }
    }


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def creator_holdings():
    """Three created coins (two primary, one secondary-minted) and two collected."""
    return [
        make_holding("0xc0000000000000000000000000000000000000a1", PRIMARY, name="A1"),
        make_holding("0xc0000000000000000000000000000000000000c1", OTHER, name="C1"),
        make_holding("0xc0000000000000000000000000000000000000a2", PRIMARY, name="A2"),
        make_holding("0xc0000000000000000000000000000000000000c2", None, name="C2"),
        make_holding("0xc0000000000000000000000000000000000000a3", PRIMARY, name="A3"),
    ]


@pytest.fixture
def fake_zora(creator_holdings):
    return FakeZora(pages=[creator_holdings])
