"""polyflow CLI — order-flow analytics for Polymarket trade data."""

from __future__ import annotations

import logging
import os
import sys
import time
from datetime import UTC, datetime
from decimal import Decimal

import click
import httpx
from pydantic import ValidationError

from polyflow.config import FlowConfig, PolyflowConfig, SubgraphConfig
from polyflow.flow.aggregator import aggregate
from polyflow.flow.base import FlowMetrics
from polyflow.flow.errors import AggregationError
from polyflow.flow.markets import market_flows, whale_trades
from polyflow.flow.traders import rank_traders
from polyflow.formatting import format_address, format_currency, format_percentage
from polyflow.ingestion.base import DataSource, RawRecord
from polyflow.ingestion.models import GlobalStats
from polyflow.ingestion.static import StaticSource
from polyflow.ingestion.subgraph import SubgraphError, SubgraphSource
from polyflow.timeframes import TIMEFRAMES, resolve_window

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _setup_logging(log_level: str) -> None:
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def _get_config(ctx: click.Context) -> PolyflowConfig:
    return ctx.obj.get("config") or PolyflowConfig()


def _subgraph_config(config: PolyflowConfig) -> SubgraphConfig:
    """Subgraph settings from config, with the API key overridable by env var."""
    api_key = os.environ.get("POLYFLOW_GRAPH_API_KEY", config.subgraph.api_key)
    return config.subgraph.model_copy(update={"api_key": api_key})


def _open_source(file: str | None, config: PolyflowConfig) -> DataSource:
    if file:
        return StaticSource(file)
    return SubgraphSource(_subgraph_config(config))


def _fetch_records(
    file: str | None, config: PolyflowConfig, start: int, end: int
) -> list[RawRecord]:
    """Fetch window records from a JSON file or the subgraph, exiting on failure."""
    try:
        source = _open_source(file, config)
    except ValueError as exc:
        click.echo(f"Failed to read {file}: {exc}", err=True)
        raise SystemExit(1)

    with source:
        try:
            return source.fetch_all_trades(start, end)
        except (httpx.HTTPError, SubgraphError) as exc:
            click.echo(f"Failed to fetch trades: {exc}", err=True)
            raise SystemExit(1)


def _signed_currency(value: Decimal) -> str:
    return ("+" if value > 0 else "") + format_currency(value)


def _net_share(metrics: FlowMetrics) -> float:
    """Net flow as a percentage of total traded volume."""
    total = metrics.total_buy_volume + metrics.total_sell_volume
    if total == 0:
        return 0.0
    return float(metrics.net_flow / total * 100)


def _iso(ts: int) -> str:
    return datetime.fromtimestamp(ts, tz=UTC).strftime("%Y-%m-%d %H:%M")


# Shared options
_file_option = click.option(
    "--file",
    "file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Read trade records from a JSON file instead of the subgraph.",
)
_timeframe_option = click.option(
    "--timeframe",
    type=click.Choice(list(TIMEFRAMES)),
    default=None,
    help="Reporting window (default from config, else 24h).",
)
_end_option = click.option(
    "--end",
    type=int,
    default=None,
    help="Window end as a UNIX timestamp (default: now).",
)
_threshold_option = click.option(
    "--threshold",
    type=click.FloatRange(min=0),
    default=None,
    help="Large-order threshold in USD (default from config, else 10000).",
)


def _window(
    flow_cfg: FlowConfig, timeframe: str | None, end: int | None, buckets: int | None = None
) -> tuple[int, int, int]:
    try:
        return resolve_window(
            timeframe or flow_cfg.timeframe,
            end if end is not None else int(time.time()),
            buckets,
        )
    except ValueError as exc:
        raise click.UsageError(str(exc)) from exc


def _threshold(flow_cfg: FlowConfig, threshold: float | None) -> Decimal:
    if threshold is None:
        return flow_cfg.large_order_threshold
    return Decimal(str(threshold))


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    help="Set logging verbosity.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True),
    default=None,
    help="Path to polyflow.toml config file.",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str, config_path: str | None) -> None:
    """polyflow - Order-flow analytics for Polymarket trades.

    \b
    Quick start:
      polyflow flow --timeframe 24h               Bucketed buy/sell flow
      polyflow flow --file trades.json --end TS   Same, from a JSON fixture
      polyflow whales --threshold 50000           Recent large trades
      polyflow markets                            Flow per market
      polyflow traders --by volume                Top accounts

    \b
    Subgraph access:
      Set POLYFLOW_GRAPH_API_KEY to query the decentralized gateway,
      or configure [subgraph] in polyflow.toml.
    """
    _setup_logging(log_level)
    ctx.ensure_object(dict)
    ctx.obj["config"] = PolyflowConfig.find_and_load(config_path)


@cli.command()
@_file_option
@_timeframe_option
@_end_option
@click.option("--buckets", type=click.IntRange(min=1), default=None, help="Override bucket count.")
@_threshold_option
@click.pass_context
def flow(
    ctx: click.Context,
    file: str | None,
    timeframe: str | None,
    end: int | None,
    buckets: int | None,
    threshold: float | None,
) -> None:
    """Show bucketed buy/sell volume, net flow, and flow metrics.

    \b
    Examples:
      polyflow flow
      polyflow flow --timeframe 7d
      polyflow flow --file trades.json --end 1706227200 --buckets 4
    """
    config = _get_config(ctx)
    start, stop, count = _window(config.flow, timeframe, end, buckets)
    records = _fetch_records(file, config, start, stop)

    try:
        result = aggregate(records, start, stop, count, _threshold(config.flow, threshold))
    except AggregationError as exc:
        click.echo(f"Unable to compute order flow: {exc}", err=True)
        raise SystemExit(1)

    click.echo(f"Order flow {_iso(start)} → {_iso(stop)} UTC ({count} buckets)")
    for bucket in result.buckets:
        click.echo(
            f"  {bucket.bucket_label:>7}  "
            f"buys {format_currency(bucket.buy_volume):>8}  "
            f"sells {format_currency(bucket.sell_volume):>8}  "
            f"net {_signed_currency(bucket.net_flow):>9}  "
            f"({bucket.trade_count} trades)"
        )

    m = result.metrics
    click.echo("")
    click.echo(f"Buy volume:     {format_currency(m.total_buy_volume)}")
    click.echo(f"Sell volume:    {format_currency(m.total_sell_volume)}")
    click.echo(f"Net flow:       {_signed_currency(m.net_flow)} ({format_percentage(_net_share(m))})")
    click.echo(f"Buy/Sell ratio: {m.buy_sell_ratio:.2f} ({m.sentiment.value} sentiment)")
    click.echo(f"Large order %:  {m.large_order_percentage:.1f}%")
    if result.skipped_count:
        click.echo(f"{result.skipped_count} records excluded due to incomplete data")


@cli.command()
@_file_option
@_timeframe_option
@_end_option
@_threshold_option
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Number of trades to show.")
@click.pass_context
def whales(
    ctx: click.Context,
    file: str | None,
    timeframe: str | None,
    end: int | None,
    threshold: float | None,
    limit: int | None,
) -> None:
    """Show the most recent trades above the large-order threshold."""
    config = _get_config(ctx)
    start, stop, _ = _window(config.flow, timeframe, end)
    records = _fetch_records(file, config, start, stop)

    trades = whale_trades(
        records, _threshold(config.flow, threshold), limit or config.flow.whale_limit
    )
    if not trades:
        click.echo("No whale activity in this window.")
        return
    for trade in trades:
        click.echo(
            f"  {_iso(trade.timestamp)}  {trade.side.value.upper():<4}  "
            f"{format_currency(trade.notional_amount):>8}  "
            f"{format_address(trade.trader) or '-':<13}  {trade.market_id or '-'}"
        )


@cli.command()
@_file_option
@_timeframe_option
@_end_option
@_threshold_option
@click.pass_context
def markets(
    ctx: click.Context,
    file: str | None,
    timeframe: str | None,
    end: int | None,
    threshold: float | None,
) -> None:
    """Show buy/sell flow and sentiment per market."""
    config = _get_config(ctx)
    start, stop, _ = _window(config.flow, timeframe, end)
    records = _fetch_records(file, config, start, stop)

    flows = market_flows(records, _threshold(config.flow, threshold))
    if not flows:
        click.echo("No market activity in this window.")
        return
    for mf in flows:
        click.echo(
            f"  {format_address(mf.market_id):<13}  "
            f"volume {format_currency(mf.total_volume):>8}  "
            f"net {_signed_currency(mf.net_flow):>9}  "
            f"{mf.sentiment.value.lower():<8}  ({mf.trade_count} trades)"
        )


@cli.command()
@click.option("--limit", type=click.IntRange(min=1), default=10, help="Number of accounts.")
@click.option(
    "--by",
    type=click.Choice(["profit", "volume"]),
    default="profit",
    help="Ranking key.",
)
@click.pass_context
def traders(ctx: click.Context, limit: int, by: str) -> None:
    """Show the top accounts by realized profit or volume (subgraph only)."""
    config = _get_config(ctx)
    order_by = "collateralVolume" if by == "volume" else "profit"
    try:
        with SubgraphSource(_subgraph_config(config)) as source:
            accounts = source.fetch_accounts(first=limit, order_by=order_by)
    except (httpx.HTTPError, SubgraphError) as exc:
        click.echo(f"Failed to fetch accounts: {exc}", err=True)
        raise SystemExit(1)

    ranked = rank_traders(accounts, limit=limit, by=by)  # type: ignore[arg-type]
    if not ranked:
        click.echo("No accounts returned.")
        return
    for i, trader in enumerate(ranked, start=1):
        click.echo(
            f"  {i:>2}. {format_address(trader.address):<13}  "
            f"P&L {_signed_currency(trader.profit):>9}  "
            f"volume {format_currency(trader.volume):>8}  "
            f"{trader.trade_count} trades"
        )


@cli.command()
@click.pass_context
def stats(ctx: click.Context) -> None:
    """Show protocol-wide market, trader and volume totals (subgraph only)."""
    config = _get_config(ctx)
    try:
        with SubgraphSource(_subgraph_config(config)) as source:
            raw = source.fetch_global_stats()
        totals = GlobalStats.model_validate(raw)
    except (httpx.HTTPError, SubgraphError, ValidationError) as exc:
        click.echo(f"Failed to fetch global stats: {exc}", err=True)
        raise SystemExit(1)

    click.echo(f"Open markets:      {totals.open_markets:,}")
    click.echo(f"Closed markets:    {totals.closed_markets:,}")
    click.echo(f"Traders:           {totals.trader_count:,}")
    click.echo(f"Collateral volume: {format_currency(totals.collateral_volume)}")
