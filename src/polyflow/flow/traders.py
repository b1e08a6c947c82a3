"""Trader leaderboard ("smart money") from account-level statistics.

Only realized account totals are used. There is no win rate: the data
sources expose profit and volume per account, not per-position outcomes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

RankBy = Literal["profit", "volume"]


class TraderSummary(BaseModel):
    """Normalized per-account statistics."""

    address: str
    volume: Decimal = Field(ge=0, description="Collateral volume traded")
    profit: Decimal = Field(description="Net realized profit; negative for losses")
    trade_count: int = Field(ge=0)

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    @property
    def is_profitable(self) -> bool:
        return self.profit > 0

    @property
    def profit_per_trade(self) -> Decimal:
        if self.trade_count == 0:
            return Decimal("0")
        return self.profit / self.trade_count


def rank_traders(
    accounts: Iterable[TraderSummary | Mapping[str, Any]],
    limit: int = 10,
    by: RankBy = "profit",
) -> list[TraderSummary]:
    """Top ``limit`` accounts ordered by profit or volume, descending.

    Accounts that fail validation are skipped.
    """
    if by not in ("profit", "volume"):
        raise ValueError(f"Cannot rank traders by '{by}'")

    traders: list[TraderSummary] = []
    for account in accounts:
        if isinstance(account, TraderSummary):
            traders.append(account)
            continue
        try:
            traders.append(TraderSummary.model_validate(account))
        except ValidationError:
            logger.debug("Skipping malformed account record: %s", account)

    traders.sort(key=lambda t: getattr(t, by), reverse=True)
    return traders[:limit]
