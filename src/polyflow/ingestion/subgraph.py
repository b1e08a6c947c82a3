"""Polymarket subgraph client for fetching raw trade records over GraphQL.

Queries a The Graph deployment with POST {query, variables}:
  - orderFilleds: CLOB fill events (fixed-point USDC amounts, 6 decimals)
  - transactions: legacy AMM trades (type "Buy"/"Sell", tradeAmount)
  - accounts:     per-account volume/profit for the trader leaderboard
  - globals:      protocol-wide market, trader and volume totals

Every entity is normalized into the canonical trade-record shape here, so
nothing downstream depends on provider field names or units.
"""

import logging
import time as time_mod
from typing import Any

import httpx

from polyflow.config import SubgraphConfig
from polyflow.ingestion.base import DataSource, RawRecord, compact, unscale
from polyflow.ingestion.queries import (
    GLOBAL_STATS_QUERY,
    QUERIES_BY_ENTITY,
    TOP_TRADERS_QUERY,
)

logger = logging.getLogger(__name__)

MAX_RETRIES = 4
RETRY_BACKOFF = [2, 4, 8, 16]
RATE_LIMIT_DELAY = 0.12
MAX_SKIP = 5000  # The Graph rejects larger skip values
OPEN_END = 2**63 - 1
USDC_ASSET_ID = "0"


class SubgraphError(RuntimeError):
    """The subgraph answered with GraphQL errors instead of data."""


class SubgraphSource(DataSource):
    """Fetches Polymarket trades from a subgraph deployment.

    Configuration is explicit: the endpoint, entity and page size all come
    from the SubgraphConfig given at construction time.
    """

    def __init__(self, config: SubgraphConfig | None = None) -> None:
        self._config = config or SubgraphConfig()
        self._client = httpx.Client(
            headers={"Content-Type": "application/json"},
            timeout=self._config.timeout,
        )

    @property
    def name(self) -> str:
        return "subgraph"

    @property
    def entity(self) -> str:
        return self._config.entity

    # --- normalization ---

    def _parse_order_filled(self, raw: dict) -> RawRecord:
        """Normalize an orderFilled event.

        The USDC leg is the side whose asset id is "0"; a taker paying USDC
        is buying outcome tokens. When asset ids are absent, ``isBuy``
        decides the side and the taker amount is used for buys.
        """
        maker_asset = raw.get("makerAssetId")
        taker_asset = raw.get("takerAssetId")
        is_buy = raw.get("isBuy")

        if taker_asset == USDC_ASSET_ID:
            amount = raw.get("takerAmountFilled")
            is_buy = True if is_buy is None else is_buy
        elif maker_asset == USDC_ASSET_ID:
            amount = raw.get("makerAmountFilled")
            is_buy = False if is_buy is None else is_buy
        elif is_buy is not None:
            amount = raw.get("takerAmountFilled" if is_buy else "makerAmountFilled")
        else:
            amount = None

        condition = raw.get("condition") or {}
        return compact(
            {
                "timestamp": raw.get("timestamp"),
                "side": _side_from_flag(is_buy),
                "notionalAmount": unscale(amount),
                "marketId": condition.get("id"),
                "trader": raw.get("taker"),
            }
        )

    def _parse_transaction(self, raw: dict) -> RawRecord:
        """Normalize a legacy AMM transaction (type 'Buy'/'Sell')."""
        user = raw.get("user") or {}
        market = raw.get("market") or {}
        return compact(
            {
                "timestamp": raw.get("timestamp"),
                "side": raw.get("type"),
                "notionalAmount": unscale(raw.get("tradeAmount")),
                "marketId": market.get("id"),
                "trader": user.get("id"),
            }
        )

    def _parse_account(self, raw: dict) -> RawRecord:
        return compact(
            {
                "address": raw.get("id"),
                "volume": unscale(raw.get("collateralVolume")),
                "profit": unscale(raw.get("profit")),
                "tradeCount": raw.get("numTrades"),
            }
        )

    def _parse_global(self, raw: dict) -> RawRecord:
        return compact(
            {
                "openMarkets": raw.get("numOpenConditions"),
                "closedMarkets": raw.get("numClosedConditions"),
                "traderCount": raw.get("numTraders"),
                "collateralVolume": unscale(raw.get("collateralVolume")),
            }
        )

    def _parse_trade(self, raw: dict) -> RawRecord:
        if self.entity == "transactions":
            return self._parse_transaction(raw)
        return self._parse_order_filled(raw)

    # --- transport ---

    def _post_with_retry(self, query: str, variables: dict[str, Any]) -> dict:
        """POST a GraphQL document with exponential backoff, returning ``data``."""
        payload = {"query": query, "variables": variables}
        for attempt in range(MAX_RETRIES + 1):
            try:
                response = self._client.post(self._config.endpoint, json=payload)
                response.raise_for_status()
                break
            except (httpx.HTTPStatusError, httpx.TransportError) as exc:
                if attempt == MAX_RETRIES:
                    raise
                wait = RETRY_BACKOFF[attempt]
                logger.warning(
                    "Subgraph request failed (attempt %d/%d): %s. Retrying in %ds...",
                    attempt + 1,
                    MAX_RETRIES,
                    exc,
                    wait,
                )
                time_mod.sleep(wait)

        body = response.json()
        if body.get("errors"):
            messages = "; ".join(e.get("message", str(e)) for e in body["errors"])
            raise SubgraphError(f"Subgraph query failed: {messages}")
        return body.get("data") or {}

    def fetch_trades(
        self,
        start: int | None = None,
        end: int | None = None,
        limit: int = 1000,
        skip: int = 0,
    ) -> list[RawRecord]:
        """Fetch one page of trades in ``[start, end)`` (single request)."""
        variables = {
            "first": limit,
            "skip": skip,
            "startTime": str(start if start is not None else 0),
            "endTime": str(end if end is not None else OPEN_END),
        }
        data = self._post_with_retry(QUERIES_BY_ENTITY[self.entity], variables)
        return [self._parse_trade(raw) for raw in data.get(self.entity, [])]

    def fetch_all_trades(self, start: int, end: int) -> list[RawRecord]:
        """Fetch all trades in ``[start, end)``, paging with ``skip``.

        Stops at a short page or at the subgraph's skip ceiling; the latter
        is logged since records past it are not retrievable this way.
        """
        page_size = self._config.page_size
        records: list[RawRecord] = []
        skip = 0
        while True:
            page = self.fetch_trades(start=start, end=end, limit=page_size, skip=skip)
            records.extend(page)
            logger.debug(
                "Fetched %d %s at skip=%d (total: %d)",
                len(page),
                self.entity,
                skip,
                len(records),
            )
            if len(page) < page_size:
                break
            skip += page_size
            if skip > MAX_SKIP:
                logger.warning(
                    "Skip ceiling reached for %s [%d, %d): %d records fetched, "
                    "some may be missing",
                    self.entity,
                    start,
                    end,
                    len(records),
                )
                break
            time_mod.sleep(RATE_LIMIT_DELAY)

        logger.info(
            "Fetched %d %s records for window [%d, %d)", len(records), self.entity, start, end
        )
        return records

    def fetch_accounts(self, first: int = 10, order_by: str = "profit") -> list[RawRecord]:
        """Fetch top accounts ordered by ``order_by`` (e.g. 'profit', 'collateralVolume')."""
        data = self._post_with_retry(TOP_TRADERS_QUERY, {"first": first, "orderBy": order_by})
        return [self._parse_account(raw) for raw in data.get("accounts", [])]

    def fetch_global_stats(self) -> RawRecord:
        """Fetch protocol-wide market, trader and volume totals."""
        data = self._post_with_retry(GLOBAL_STATS_QUERY, {})
        rows = data.get("globals") or []
        if not rows:
            raise SubgraphError("Subgraph returned no global stats")
        return self._parse_global(rows[0])

    def close(self) -> None:
        self._client.close()


def _side_from_flag(is_buy: object) -> str | None:
    if is_buy is True:
        return "Buy"
    if is_buy is False:
        return "Sell"
    return None
