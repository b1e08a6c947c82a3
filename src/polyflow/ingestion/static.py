"""Static JSON fixture source.

Reads trade records from a JSON file, either a bare list or an object
with a ``trades`` list. Records are expected in the canonical shape
already; they are passed through untouched for validation downstream.
"""

import json
import logging
from pathlib import Path

from polyflow.ingestion.base import DataSource, RawRecord

logger = logging.getLogger(__name__)


class StaticSource(DataSource):
    """Serves trade records from a JSON file loaded once at construction."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        data = json.loads(self._path.read_text())
        if isinstance(data, dict):
            data = data.get("trades", [])
        if not isinstance(data, list):
            raise ValueError(f"{self._path}: expected a list of trade records")
        self._records: list[RawRecord] = data
        logger.info("Loaded %d records from %s", len(self._records), self._path)

    @property
    def name(self) -> str:
        return "static"

    def fetch_trades(
        self,
        start: int | None = None,
        end: int | None = None,
        limit: int = 1000,
    ) -> list[RawRecord]:
        records = [r for r in self._records if _in_window(r, start, end)]
        return records[:limit]

    def fetch_all_trades(self, start: int, end: int) -> list[RawRecord]:
        return [r for r in self._records if _in_window(r, start, end)]


def _in_window(record: object, start: int | None, end: int | None) -> bool:
    """Window filter; records without a usable timestamp are kept."""
    if not isinstance(record, dict):
        return True
    try:
        ts = int(record["timestamp"])
    except (KeyError, TypeError, ValueError):
        return True
    if start is not None and ts < start:
        return False
    if end is not None and ts >= end:
        return False
    return True
