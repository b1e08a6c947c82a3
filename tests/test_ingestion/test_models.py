"""Tests for trade data models."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from polyflow.ingestion.models import GlobalStats, Side, Trade


def _make_trade(**overrides) -> Trade:
    defaults = {
        "timestamp": 1706191920,
        "side": "Buy",
        "notional_amount": Decimal("1200000"),
        "market_id": "0xcondition",
        "trader": "0x4bfb41d5b3570defd03c39a9a4d8de6bd8b8982e",
    }
    defaults.update(overrides)
    return Trade(**defaults)


class TestTrade:
    def test_fields_stored_correctly(self):
        t = _make_trade()
        assert t.timestamp == 1706191920
        assert t.side is Side.BUY
        assert t.notional_amount == Decimal("1200000")
        assert t.market_id == "0xcondition"

    def test_camel_case_keys(self):
        t = Trade.model_validate(
            {"timestamp": 100, "side": "Sell", "notionalAmount": "3000", "marketId": "m1"}
        )
        assert t.side is Side.SELL
        assert t.notional_amount == Decimal("3000")
        assert t.market_id == "m1"

    def test_optional_fields_default_to_none(self):
        t = Trade.model_validate({"timestamp": 1, "side": "Buy", "notionalAmount": 1})
        assert t.market_id is None
        assert t.trader is None

    def test_side_case_insensitive(self):
        assert _make_trade(side="BUY").side is Side.BUY
        assert _make_trade(side="sell").side is Side.SELL

    def test_numeric_string_timestamp(self):
        # Subgraph BigInt fields arrive as strings
        assert _make_trade(timestamp="1706191920").timestamp == 1706191920

    def test_is_buy(self):
        assert _make_trade(side="Buy").is_buy is True
        assert _make_trade(side="Sell").is_buy is False

    def test_is_large_is_strict(self):
        t = _make_trade(notional_amount=Decimal("10000"))
        assert t.is_large(Decimal("10000")) is False
        assert t.is_large(Decimal("9999.99")) is True

    def test_frozen(self):
        t = _make_trade()
        with pytest.raises(ValidationError):
            t.notional_amount = Decimal("1")  # type: ignore[misc]


class TestTradeValidation:
    def test_missing_side(self):
        with pytest.raises(ValidationError):
            Trade.model_validate({"timestamp": 1, "notionalAmount": "5"})

    def test_missing_timestamp(self):
        with pytest.raises(ValidationError):
            Trade.model_validate({"side": "Buy", "notionalAmount": "5"})

    def test_missing_amount(self):
        with pytest.raises(ValidationError):
            Trade.model_validate({"timestamp": 1, "side": "Buy"})

    def test_unknown_side(self):
        with pytest.raises(ValidationError):
            _make_trade(side="Hold")

    def test_negative_amount(self):
        with pytest.raises(ValidationError):
            _make_trade(notional_amount=Decimal("-1"))

    @pytest.mark.parametrize("amount", ["NaN", "Infinity", float("inf"), float("nan")])
    def test_non_finite_amount(self, amount):
        with pytest.raises(ValidationError):
            _make_trade(notional_amount=amount)

    def test_pre_epoch_timestamp_accepted(self):
        assert _make_trade(timestamp=-50).timestamp == -50

    def test_fractional_timestamp_rejected(self):
        with pytest.raises(ValidationError):
            _make_trade(timestamp=1.5)


class TestGlobalStats:
    def test_from_camel_keys(self):
        stats = GlobalStats.model_validate(
            {
                "openMarkets": "9805",
                "closedMarkets": "48624",
                "traderCount": "1140000",
                "collateralVolume": Decimal("124500000"),
            }
        )
        assert stats.open_markets == 9805
        assert stats.total_markets == 58429
        assert stats.collateral_volume == Decimal("124500000")

    def test_missing_field(self):
        with pytest.raises(ValidationError):
            GlobalStats.model_validate({"openMarkets": 1})
