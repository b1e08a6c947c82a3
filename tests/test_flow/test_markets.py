"""Tests for per-market flow and whale activity."""

from decimal import Decimal

import pytest

from polyflow.flow.base import Sentiment
from polyflow.flow.markets import UNKNOWN_MARKET, market_flows, whale_trades


def _rec(ts: int, side: str, amount: str, market: str | None = None, trader: str | None = None):
    record = {"timestamp": ts, "side": side, "notionalAmount": amount}
    if market is not None:
        record["marketId"] = market
    if trader is not None:
        record["trader"] = trader
    return record


class TestMarketFlows:
    def test_groups_by_market(self):
        trades = [
            _rec(0, "Buy", "45000", "election"),
            _rec(1, "Sell", "5000", "election"),
            _rec(2, "Sell", "23000", "fed"),
            _rec(3, "Buy", "3000", "fed"),
        ]
        flows = {f.market_id: f for f in market_flows(trades)}

        election = flows["election"]
        assert election.buy_volume == Decimal("45000")
        assert election.sell_volume == Decimal("5000")
        assert election.net_flow == Decimal("40000")
        assert election.trade_count == 2
        assert election.sentiment is Sentiment.BULLISH
        assert election.large_order_count == 1

        fed = flows["fed"]
        assert fed.sentiment is Sentiment.BEARISH
        assert fed.buy_sell_ratio == pytest.approx(3000 / 23000)

    def test_ordered_by_total_volume(self):
        trades = [
            _rec(0, "Buy", "10", "small"),
            _rec(1, "Buy", "1000", "big"),
            _rec(2, "Sell", "100", "medium"),
        ]
        assert [f.market_id for f in market_flows(trades)] == ["big", "medium", "small"]

    def test_missing_market_grouped_as_unknown(self):
        flows = market_flows([_rec(0, "Buy", "10"), _rec(1, "Sell", "5")])
        assert len(flows) == 1
        assert flows[0].market_id == UNKNOWN_MARKET
        assert flows[0].trade_count == 2

    def test_malformed_records_skipped(self):
        flows = market_flows([{"timestamp": 0, "marketId": "m"}, _rec(0, "Buy", "10", "m")])
        assert flows[0].trade_count == 1

    def test_empty(self):
        assert market_flows([]) == []


class TestWhaleTrades:
    def test_newest_first_above_threshold(self):
        trades = [
            _rec(100, "Buy", "1200000", "election", "0x4bfb"),
            _rec(300, "Sell", "800000", "fed", "0xc5d5"),
            _rec(200, "Buy", "500", "btc", "0x9d84"),
            _rec(400, "Buy", "10000", "ai", "0xd218"),  # at threshold: excluded
        ]
        whales = whale_trades(trades, threshold=10000)
        assert [w.timestamp for w in whales] == [300, 100]
        assert whales[0].trader == "0xc5d5"

    def test_limit(self):
        trades = [_rec(i, "Buy", "50000") for i in range(20)]
        whales = whale_trades(trades, threshold=10000, limit=4)
        assert [w.timestamp for w in whales] == [19, 18, 17, 16]

    def test_negative_limit(self):
        with pytest.raises(ValueError):
            whale_trades([], limit=-1)

    def test_malformed_records_skipped(self):
        whales = whale_trades([{"notionalAmount": "999999"}, _rec(1, "Sell", "20000")])
        assert len(whales) == 1
