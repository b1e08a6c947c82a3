"""Per-market flow and whale activity.

Both views reuse the aggregator's record validation, so a malformed
record is excluded here exactly as it is from the bucket series.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from decimal import Decimal

from pydantic import BaseModel

from polyflow.flow.aggregator import (
    DEFAULT_LARGE_ORDER_THRESHOLD,
    TradeRecord,
    to_threshold,
    validate_trades,
)
from polyflow.flow.base import ZERO, Sentiment, buy_sell_ratio, classify_sentiment
from polyflow.ingestion.models import Trade

logger = logging.getLogger(__name__)

UNKNOWN_MARKET = "unknown"


class MarketFlow(BaseModel):
    """Buy/sell pressure for one market."""

    market_id: str
    buy_volume: Decimal = ZERO
    sell_volume: Decimal = ZERO
    trade_count: int = 0
    large_order_count: int = 0
    buy_sell_ratio: float = 0.0
    sentiment: Sentiment = Sentiment.NEUTRAL

    model_config = {"frozen": True}

    @property
    def net_flow(self) -> Decimal:
        return self.buy_volume - self.sell_volume

    @property
    def total_volume(self) -> Decimal:
        return self.buy_volume + self.sell_volume


def market_flows(
    trades: Iterable[TradeRecord],
    large_order_threshold: Decimal | float | int | str = DEFAULT_LARGE_ORDER_THRESHOLD,
) -> list[MarketFlow]:
    """Group trades by market and summarize each group.

    Records without a market id are grouped under 'unknown'. Results are
    ordered by total volume, largest first; ties keep first-seen order.
    """
    threshold = to_threshold(large_order_threshold)
    valid, skipped = validate_trades(trades)
    if skipped:
        logger.warning("%d trade record(s) excluded due to incomplete data", skipped)

    groups: dict[str, list[Trade]] = {}
    for trade in valid:
        groups.setdefault(trade.market_id or UNKNOWN_MARKET, []).append(trade)

    flows: list[MarketFlow] = []
    for market_id, group in groups.items():
        buy = sum((t.notional_amount for t in group if t.is_buy), ZERO)
        sell = sum((t.notional_amount for t in group if not t.is_buy), ZERO)
        flows.append(
            MarketFlow(
                market_id=market_id,
                buy_volume=buy,
                sell_volume=sell,
                trade_count=len(group),
                large_order_count=sum(1 for t in group if t.is_large(threshold)),
                buy_sell_ratio=buy_sell_ratio(buy, sell),
                sentiment=classify_sentiment(buy, sell),
            )
        )
    return sorted(flows, key=lambda f: f.total_volume, reverse=True)


def whale_trades(
    trades: Iterable[TradeRecord],
    threshold: Decimal | float | int | str = DEFAULT_LARGE_ORDER_THRESHOLD,
    limit: int = 10,
) -> list[Trade]:
    """Most recent trades strictly above ``threshold``, newest first."""
    if limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")
    cutoff = to_threshold(threshold)
    valid, _ = validate_trades(trades)
    large = [t for t in valid if t.is_large(cutoff)]
    large.sort(key=lambda t: t.timestamp, reverse=True)
    return large[:limit]
