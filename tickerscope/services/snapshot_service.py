"""Snapshot assembly – the engine's single public entry point."""

from __future__ import annotations

import logging
from datetime import datetime

from tickerscope.schemas.series import FetchedSeries, SymbolMatch, WindowedSeries
from tickerscope.schemas.snapshot import ChartSeries, StatisticsBundle, StockSnapshot, TrendColor
from tickerscope.schemas.timeframe import TimeframeLabel, TimeframePolicy
from tickerscope.services.chart import build_chart, trend_color
from tickerscope.services.metrics import compute_stats
from tickerscope.services.series_service import fetch_series
from tickerscope.services.symbol_service import normalize_query, resolve_symbol
from tickerscope.services.timeframes import resolve_policy
from tickerscope.services.upstream import AlphaVantageClient, open_client
from tickerscope.services.window import apply_window

logger = logging.getLogger("tickerscope.snapshot")


def assemble_snapshot(
    match: SymbolMatch,
    policy: TimeframePolicy,
    fetched: FetchedSeries,
    windowed: WindowedSeries,
    stats: StatisticsBundle,
    chart: ChartSeries,
    trend: TrendColor,
) -> StockSnapshot:
    """Merge the pipeline outputs into one ``StockSnapshot``."""
    latest = windowed.points[-1] if windowed.points else None
    overview = fetched.overview
    return StockSnapshot(
        symbol=match.symbol,
        name=match.name,
        timeframe=policy.label,
        latest_date=latest.key if latest else None,
        price=latest.close if latest else None,
        percent_change=stats.percent_change,
        series=windowed.points,
        used_fallback=windowed.used_fallback,
        chart=chart,
        chart_time_unit=policy.chart_time_unit,
        chart_tick_count=policy.chart_tick_count,
        volume_key=fetched.raw.volume_key,
        trend=trend,
        previous_close=stats.previous_close,
        open_price=stats.open_price,
        day_low=stats.day_low,
        day_high=stats.day_high,
        week_low=stats.week_low,
        week_high=stats.week_high,
        volume=stats.volume,
        avg_volume=stats.avg_volume,
        adjusted_close=stats.adjusted_close,
        dividend_amount=stats.dividend_amount,
        split_coefficient=stats.split_coefficient,
        pe_ratio=overview.pe_ratio,
        market_cap=overview.market_cap,
        beta=overview.beta,
        eps=overview.eps,
        target_est=overview.analyst_target_price,
        earnings_date=overview.earnings_date,
    )


async def _build_snapshot(
    client: AlphaVantageClient,
    query: str,
    policy: TimeframePolicy,
    now: datetime | None,
) -> StockSnapshot:
    match = await resolve_symbol(client, query)
    fetched = await fetch_series(client, match.symbol, policy)
    # YTD ticks follow the exchange clock reported with the series.
    policy = resolve_policy(policy.label, now, fetched.raw.time_zone)
    windowed = apply_window(fetched.raw, policy, now)
    stats = compute_stats(windowed, fetched.raw)
    chart = build_chart(match.symbol, windowed)
    return assemble_snapshot(
        match, policy, fetched, windowed, stats, chart, trend_color(stats.percent_change)
    )


async def get_snapshot(
    query: str,
    timeframe: TimeframeLabel | str,
    *,
    client: AlphaVantageClient | None = None,
    now: datetime | None = None,
) -> StockSnapshot:
    """Resolve *query*, fetch its series for *timeframe* and build a snapshot.

    The query and timeframe are validated before any network call.  When
    *client* is omitted one is opened from settings and closed afterwards.

    Raises:
        SnapshotError: any typed failure from the pipeline; nothing is
            partially returned.
    """
    normalize_query(query)
    policy = resolve_policy(timeframe, now)

    if client is not None:
        snapshot = await _build_snapshot(client, query, policy, now)
    else:
        async with open_client() as owned:
            snapshot = await _build_snapshot(owned, query, policy, now)

    logger.info(
        "get_snapshot query=%s symbol=%s timeframe=%s points=%d fallback=%s",
        query,
        snapshot.symbol,
        policy.label.value,
        len(snapshot.series),
        snapshot.used_fallback,
    )
    return snapshot
