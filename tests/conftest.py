"""Shared fixtures.

``synthetic_trades`` is the only place randomized trade data is produced.
It is seeded, so every test run sees the same records.
"""

import random
from decimal import Decimal

import pytest


def _build_synthetic_trades(
    count: int,
    start: int,
    end: int,
    seed: int = 7,
    markets: tuple[str, ...] = ("0xmarket-a", "0xmarket-b", "0xmarket-c"),
    max_amount: int = 50_000,
) -> list[dict]:
    rng = random.Random(seed)
    return [
        {
            "timestamp": rng.randrange(start, end),
            "side": rng.choice(["Buy", "Sell"]),
            "notionalAmount": str(Decimal(rng.randrange(1, max_amount * 100)) / 100),
            "marketId": rng.choice(markets),
            "trader": f"0x{rng.getrandbits(160):040x}",
        }
        for _ in range(count)
    ]


@pytest.fixture
def synthetic_trades():
    """Factory for seeded synthetic trade records in the canonical shape."""
    return _build_synthetic_trades
