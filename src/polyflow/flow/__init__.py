"""Order-flow analytics layer: turns trade records into bucketed flow series."""

from polyflow.flow.aggregator import (
    DEFAULT_LARGE_ORDER_THRESHOLD,
    aggregate,
    aggregate_timeframe,
    validate_trades,
)
from polyflow.flow.base import (
    AggregationResult,
    BucketAccumulator,
    FlowMetrics,
    Sentiment,
    TimeBucket,
)
from polyflow.flow.errors import (
    AggregationError,
    InvalidBucketCount,
    InvalidThreshold,
    InvalidWindow,
)
from polyflow.flow.markets import MarketFlow, market_flows, whale_trades
from polyflow.flow.traders import TraderSummary, rank_traders

__all__ = [
    # Core
    "DEFAULT_LARGE_ORDER_THRESHOLD",
    "aggregate",
    "aggregate_timeframe",
    "validate_trades",
    # Models
    "AggregationResult",
    "BucketAccumulator",
    "FlowMetrics",
    "Sentiment",
    "TimeBucket",
    # Errors
    "AggregationError",
    "InvalidBucketCount",
    "InvalidThreshold",
    "InvalidWindow",
    # Secondary views
    "MarketFlow",
    "market_flows",
    "whale_trades",
    "TraderSummary",
    "rank_traders",
]
