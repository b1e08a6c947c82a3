"""Abstract base class for trade data sources."""

from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
from typing import Any

# A trade record in the canonical shape: timestamp, side, notionalAmount,
# and optionally marketId and trader. Keys the adapter could not resolve
# are left out so the aggregator counts the record as skipped.
RawRecord = dict[str, Any]

USDC_DECIMALS = 6


def unscale(value: object, decimals: int = USDC_DECIMALS) -> Decimal | None:
    """Convert a fixed-point integer amount (e.g. '1500000') to Decimal (1.5).

    Returns None when the value is missing or not a number.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        return Decimal(str(value)).scaleb(-decimals)
    except InvalidOperation:
        return None


def compact(record: dict[str, Any]) -> RawRecord:
    """Drop keys whose value could not be resolved."""
    return {k: v for k, v in record.items() if v is not None}


class DataSource(ABC):
    """Interface that all trade data sources must implement."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier for this source, e.g. 'subgraph'."""
        ...

    @abstractmethod
    def fetch_trades(
        self,
        start: int | None = None,
        end: int | None = None,
        limit: int = 1000,
    ) -> list[RawRecord]:
        """Fetch normalized trade records within an optional time window.

        This is a single-request method; it may not return all records
        if the source has a per-request limit.

        Args:
            start: Inclusive start, seconds since epoch. None means no lower bound.
            end: Exclusive end, seconds since epoch. None means no upper bound.
            limit: Maximum number of records to return per call.

        Returns:
            Records in the canonical trade-record shape.
        """
        ...

    def fetch_all_trades(self, start: int, end: int) -> list[RawRecord]:
        """Fetch ALL records in a time window, handling pagination.

        Subclasses should override this if the source has per-request
        limits that require multiple calls to retrieve complete data.
        """
        return self.fetch_trades(start=start, end=end)

    def close(self) -> None:
        """Release any held resources (HTTP clients, file handles)."""

    def __enter__(self) -> "DataSource":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
