"""Trade data models."""

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Side(str, Enum):
    """Taker side of a trade."""

    BUY = "Buy"
    SELL = "Sell"


class Trade(BaseModel):
    """A single normalized trade record.

    Amounts are stored as Decimal so that bucket sums are exact. Both
    snake_case and camelCase keys are accepted, so records coming out of
    an adapter as ``{"notionalAmount": ...}`` validate directly.
    """

    timestamp: int = Field(description="Execution time, seconds since epoch")
    side: Side = Field(description="Taker side: Buy or Sell")
    notional_amount: Decimal = Field(
        ge=0, description="Trade value in the reporting currency"
    )
    market_id: str | None = Field(default=None, description="Market/condition identifier")
    trader: str | None = Field(default=None, description="Taker account address")

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    @field_validator("side", mode="before")
    @classmethod
    def _normalize_side(cls, value: object) -> object:
        # Providers disagree on casing: "BUY", "buy", "Buy"
        if isinstance(value, str):
            return value.strip().capitalize()
        return value

    @field_validator("notional_amount")
    @classmethod
    def _finite_amount(cls, value: Decimal) -> Decimal:
        if not value.is_finite():
            raise ValueError("notional amount must be finite")
        return value

    @property
    def is_buy(self) -> bool:
        return self.side is Side.BUY

    def is_large(self, threshold: Decimal) -> bool:
        """True when the notional amount is strictly above ``threshold``."""
        return self.notional_amount > threshold


class GlobalStats(BaseModel):
    """Protocol-wide totals reported by the subgraph's global entity."""

    open_markets: int = Field(ge=0)
    closed_markets: int = Field(ge=0)
    trader_count: int = Field(ge=0)
    collateral_volume: Decimal = Field(ge=0, description="All-time collateral traded")

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    @property
    def total_markets(self) -> int:
        return self.open_markets + self.closed_markets
