"""Bucket model, flow summary models, and the per-bucket accumulator.

Every aggregation run produces the same output shape: an ordered series of
time buckets plus one FlowMetrics summary. This module provides those
building blocks; the bucketing itself lives in ``polyflow.flow.aggregator``.
"""

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field

from polyflow.ingestion.models import Trade

ZERO = Decimal("0")


class Sentiment(str, Enum):
    """Coarse market direction derived from the buy/sell ratio."""

    BULLISH = "Bullish"
    BEARISH = "Bearish"
    NEUTRAL = "Neutral"


class TimeBucket(BaseModel):
    """One fixed sub-interval ``[bucket_start, bucket_end)`` of the window."""

    bucket_label: str = Field(description="Display label, e.g. '04:00' or 'Day 3'")
    bucket_start: int = Field(description="Inclusive start, seconds since epoch")
    bucket_end: int = Field(description="Exclusive end, seconds since epoch")
    buy_volume: Decimal = Field(default=ZERO, description="Sum of Buy notional")
    sell_volume: Decimal = Field(default=ZERO, description="Sum of Sell notional")
    net_flow: Decimal = Field(default=ZERO, description="buy_volume - sell_volume")
    trade_count: int = Field(default=0, description="Trades assigned to this bucket")

    model_config = {"frozen": True}


class FlowMetrics(BaseModel):
    """Summary of one aggregation run over all in-window trades."""

    total_buy_volume: Decimal = ZERO
    total_sell_volume: Decimal = ZERO
    buy_sell_ratio: float = Field(
        default=0.0, description="Buy/sell volume ratio; 0.0 when there is no sell volume"
    )
    large_order_percentage: float = Field(
        default=0.0, description="Share of trades above the large-order threshold, 0-100"
    )
    large_order_count: int = 0
    trade_count: int = 0
    sentiment: Sentiment = Sentiment.NEUTRAL

    model_config = {"frozen": True}

    @property
    def net_flow(self) -> Decimal:
        return self.total_buy_volume - self.total_sell_volume


class AggregationResult(BaseModel):
    """Bucket series plus summary and data-quality diagnostics."""

    window_start: int
    window_end: int
    buckets: tuple[TimeBucket, ...]
    metrics: FlowMetrics
    skipped_count: int = Field(default=0, description="Malformed records excluded")
    out_of_window_count: int = Field(
        default=0, description="Valid records outside [window_start, window_end)"
    )

    model_config = {"frozen": True}


def buy_sell_ratio(buy: Decimal, sell: Decimal) -> float:
    """Buy/sell ratio, reported as 0.0 when there is no sell volume."""
    if sell == 0:
        return 0.0
    return float(buy / sell)


def classify_sentiment(buy: Decimal, sell: Decimal) -> Sentiment:
    """Bullish above a 1:1 ratio, Bearish below, Neutral at parity or undefined.

    Reads the same float ratio that buy_sell_ratio reports, so the label
    never disagrees with the displayed number.
    """
    if sell == 0:
        return Sentiment.NEUTRAL
    ratio = buy_sell_ratio(buy, sell)
    if ratio > 1.0:
        return Sentiment.BULLISH
    if ratio < 1.0:
        return Sentiment.BEARISH
    return Sentiment.NEUTRAL


class BucketAccumulator:
    """Tracks running buy/sell totals for a single bucket.

    Feed trades in via add(). When all trades are assigned, call
    to_bucket() to produce the immutable TimeBucket.
    """

    __slots__ = ("start", "end", "_buy", "_sell", "trade_count")

    def __init__(self, start: int, end: int) -> None:
        self.start = start
        self.end = end
        self._buy: Decimal = ZERO
        self._sell: Decimal = ZERO
        self.trade_count: int = 0

    def add(self, trade: Trade) -> None:
        """Incorporate a trade into the running totals."""
        if trade.is_buy:
            self._buy += trade.notional_amount
        else:
            self._sell += trade.notional_amount
        self.trade_count += 1

    def to_bucket(self, label: str) -> TimeBucket:
        return TimeBucket(
            bucket_label=label,
            bucket_start=self.start,
            bucket_end=self.end,
            buy_volume=self._buy,
            sell_volume=self._sell,
            net_flow=self._buy - self._sell,
            trade_count=self.trade_count,
        )
