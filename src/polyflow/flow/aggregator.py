"""Trade aggregation: fixed-width time buckets and flow metrics.

Divides a half-open reporting window ``[window_start, window_end)`` into
``bucket_count`` equal-width buckets, assigns each in-window trade to
exactly one of them, and summarizes buy/sell pressure across the window.

Bucket indices are computed in integer arithmetic,
``((ts - window_start) * bucket_count) // span``, so there is no
floating-point drift at bucket edges. The index is still clamped to the
last bucket so a trade can never overflow the series.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import ValidationError

from polyflow.flow.base import (
    AggregationResult,
    BucketAccumulator,
    FlowMetrics,
    buy_sell_ratio,
    classify_sentiment,
)
from polyflow.flow.errors import InvalidBucketCount, InvalidThreshold, InvalidWindow
from polyflow.ingestion.models import Trade
from polyflow.timeframes import resolve_window

logger = logging.getLogger(__name__)

DEFAULT_LARGE_ORDER_THRESHOLD = Decimal("10000")
SECONDS_PER_DAY = 86400

TradeRecord = Trade | Mapping[str, Any]


def validate_trades(records: Iterable[TradeRecord]) -> tuple[list[Trade], int]:
    """Validate raw records into Trades, skipping the malformed ones.

    Returns:
        (valid trades in input order, number of records skipped)
    """
    trades: list[Trade] = []
    skipped = 0
    for record in records:
        if isinstance(record, Trade):
            trades.append(record)
            continue
        try:
            trades.append(Trade.model_validate(record))
        except ValidationError as exc:
            skipped += 1
            logger.debug(
                "Skipping malformed trade record (%d error(s)): %s",
                exc.error_count(),
                record,
            )
    return trades, skipped


def to_threshold(value: Decimal | float | int | str) -> Decimal:
    """Coerce a large-order threshold to Decimal, rejecting bad values."""
    try:
        threshold = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise InvalidThreshold(f"Invalid large-order threshold: {value!r}") from exc
    if not threshold.is_finite() or threshold < 0:
        raise InvalidThreshold(
            f"Large-order threshold must be finite and >= 0, got {value!r}"
        )
    return threshold


def bucket_label(index: int, bucket_start: int, span: int) -> str:
    """Display label for a bucket.

    Windows of at most one day are labelled by UTC clock time of the
    bucket start ('00:00', '04:00'); longer windows by day ('Day 1').
    """
    if span <= SECONDS_PER_DAY:
        return datetime.fromtimestamp(bucket_start, tz=UTC).strftime("%H:%M")
    return f"Day {index + 1}"


def _bucket_boundary(window_start: int, span: int, bucket_count: int, i: int) -> int:
    # ceil(i * span / n): the first second whose bucket index is i
    return window_start - ((-i * span) // bucket_count)


def _validate_window(window_start: int, window_end: int) -> None:
    for bound in (window_start, window_end):
        if isinstance(bound, bool) or not isinstance(bound, int):
            raise InvalidWindow(
                f"Window bounds must be integer timestamps, got {bound!r}"
            )
    if window_start >= window_end:
        raise InvalidWindow(
            f"window_start ({window_start}) must be before window_end ({window_end})"
        )


def _validate_bucket_count(bucket_count: int) -> None:
    if isinstance(bucket_count, bool) or not isinstance(bucket_count, int):
        raise InvalidBucketCount(f"bucket_count must be an int, got {bucket_count!r}")
    if bucket_count <= 0:
        raise InvalidBucketCount(f"bucket_count must be >= 1, got {bucket_count}")


def aggregate(
    trades: Iterable[TradeRecord],
    window_start: int,
    window_end: int,
    bucket_count: int,
    large_order_threshold: Decimal | float | int | str = DEFAULT_LARGE_ORDER_THRESHOLD,
) -> AggregationResult:
    """Bucket trades over a window and compute flow metrics.

    Args:
        trades: Trade instances or mappings in the trade-record shape.
            Malformed entries are skipped and counted, never raised.
        window_start: Inclusive window start, seconds since epoch.
        window_end: Exclusive window end, seconds since epoch.
        bucket_count: Number of equal-width buckets.
        large_order_threshold: Trades strictly above this notional
            amount count as large orders.

    Returns:
        AggregationResult with exactly ``bucket_count`` buckets in
        chronological order (empty buckets included).

    Raises:
        InvalidWindow: window_start >= window_end.
        InvalidBucketCount: bucket_count <= 0.
        InvalidThreshold: negative or non-finite threshold.
    """
    _validate_window(window_start, window_end)
    _validate_bucket_count(bucket_count)
    threshold = to_threshold(large_order_threshold)

    span = window_end - window_start
    accumulators = [
        BucketAccumulator(
            _bucket_boundary(window_start, span, bucket_count, i),
            _bucket_boundary(window_start, span, bucket_count, i + 1),
        )
        for i in range(bucket_count)
    ]

    valid, skipped = validate_trades(trades)
    out_of_window = 0
    large = 0
    for trade in valid:
        if not window_start <= trade.timestamp < window_end:
            out_of_window += 1
            continue
        index = ((trade.timestamp - window_start) * bucket_count) // span
        index = min(max(index, 0), bucket_count - 1)
        accumulators[index].add(trade)
        if trade.is_large(threshold):
            large += 1

    buckets = tuple(
        acc.to_bucket(bucket_label(i, acc.start, span))
        for i, acc in enumerate(accumulators)
    )
    total_buy = sum((b.buy_volume for b in buckets), Decimal("0"))
    total_sell = sum((b.sell_volume for b in buckets), Decimal("0"))
    counted = sum(b.trade_count for b in buckets)

    metrics = FlowMetrics(
        total_buy_volume=total_buy,
        total_sell_volume=total_sell,
        buy_sell_ratio=buy_sell_ratio(total_buy, total_sell),
        large_order_percentage=(large / counted * 100.0) if counted else 0.0,
        large_order_count=large,
        trade_count=counted,
        sentiment=classify_sentiment(total_buy, total_sell),
    )

    if skipped:
        logger.warning("%d trade record(s) excluded due to incomplete data", skipped)
    logger.debug(
        "Aggregated %d trades into %d buckets [%d, %d) (%d outside window)",
        counted,
        bucket_count,
        window_start,
        window_end,
        out_of_window,
    )

    return AggregationResult(
        window_start=window_start,
        window_end=window_end,
        buckets=buckets,
        metrics=metrics,
        skipped_count=skipped,
        out_of_window_count=out_of_window,
    )


def aggregate_timeframe(
    trades: Iterable[TradeRecord],
    timeframe: str,
    end: int,
    large_order_threshold: Decimal | float | int | str = DEFAULT_LARGE_ORDER_THRESHOLD,
) -> AggregationResult:
    """Aggregate over a named timeframe (e.g. '24h') ending at ``end``."""
    window_start, window_end, bucket_count = resolve_window(timeframe, end)
    return aggregate(trades, window_start, window_end, bucket_count, large_order_threshold)
