"""Tests for named reporting windows."""

import pytest

from polyflow.timeframes import TIMEFRAMES, get_timeframe, resolve_window

END = 1_706_227_200


class TestTimeframes:
    @pytest.mark.parametrize(
        ("name", "span", "buckets"),
        [("1h", 3600, 12), ("24h", 86400, 6), ("7d", 604800, 7), ("30d", 2592000, 30)],
    )
    def test_presets(self, name, span, buckets):
        assert resolve_window(name, END) == (END - span, END, buckets)

    def test_bucket_override(self):
        assert resolve_window("24h", END, bucket_count=24) == (END - 86400, END, 24)

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown timeframe"):
            get_timeframe("90d")

    def test_selector_order(self):
        assert list(TIMEFRAMES) == ["1h", "24h", "7d", "30d"]
