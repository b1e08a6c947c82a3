"""polyflow — order-flow analytics for Polymarket trade data."""

from polyflow.flow import AggregationResult, aggregate, aggregate_timeframe

__version__ = "0.1.0"

__all__ = ["AggregationResult", "aggregate", "aggregate_timeframe", "__version__"]
