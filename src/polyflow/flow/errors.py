"""Structural errors raised by the aggregator.

Data-quality problems in individual records are never raised; they are
counted in ``AggregationResult.skipped_count`` instead.
"""


class AggregationError(ValueError):
    """Base class for arguments that make aggregation meaningless."""


class InvalidWindow(AggregationError):
    """The reporting window is empty, reversed, or not integer seconds."""


class InvalidBucketCount(AggregationError):
    """The requested bucket count is not a positive integer."""


class InvalidThreshold(AggregationError):
    """The large-order threshold is negative or not a finite number."""
