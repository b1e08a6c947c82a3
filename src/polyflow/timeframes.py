"""Named reporting windows for the timeframe selector ('1h', '24h', '7d', '30d')."""

from __future__ import annotations

from typing import NamedTuple


class Timeframe(NamedTuple):
    name: str
    span_seconds: int
    bucket_count: int


TIMEFRAMES: dict[str, Timeframe] = {
    "1h": Timeframe("1h", 3600, 12),  # 5-minute buckets
    "24h": Timeframe("24h", 86400, 6),  # 4-hour buckets
    "7d": Timeframe("7d", 7 * 86400, 7),
    "30d": Timeframe("30d", 30 * 86400, 30),
}


def get_timeframe(name: str) -> Timeframe:
    try:
        return TIMEFRAMES[name]
    except KeyError:
        raise ValueError(
            f"Unknown timeframe '{name}'. Expected one of: {', '.join(TIMEFRAMES)}"
        ) from None


def resolve_window(
    name: str, end: int, bucket_count: int | None = None
) -> tuple[int, int, int]:
    """Resolve a timeframe name into ``(window_start, window_end, bucket_count)``.

    The window ends (exclusive) at ``end``. ``bucket_count`` overrides the
    preset's default when given.
    """
    tf = get_timeframe(name)
    return end - tf.span_seconds, end, bucket_count or tf.bucket_count
