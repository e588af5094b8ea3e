"""Window filter: raw newest-first series → chronological displayed slice."""

from __future__ import annotations

import calendar
import logging
from datetime import datetime, timedelta

import pytz

from tickerscope.errors import EmptyWindow
from tickerscope.schemas.series import RawSeries, RawSeriesPoint, WindowedSeries
from tickerscope.schemas.timeframe import SeriesEndpoint, TimeframePolicy, WindowKind, WindowRule

logger = logging.getLogger("tickerscope.window")

DEFAULT_TIME_ZONE = "US/Eastern"


def _shift_months(moment: datetime, months: int) -> datetime:
    """Move *moment* by whole calendar months, clamping the day to the month end."""
    index = moment.year * 12 + (moment.month - 1) + months
    year, month = divmod(index, 12)
    day = min(moment.day, calendar.monthrange(year, month + 1)[1])
    return moment.replace(year=year, month=month + 1, day=day)


def exchange_now(time_zone: str, now: datetime | None = None) -> datetime:
    """Naive wall-clock time at the exchange.

    Series timestamps are naive exchange-local times, so the cutoff is
    computed on the same clock.  A naive *now* is taken to be UTC.
    """
    tz = pytz.timezone(time_zone)
    if now is None:
        return datetime.now(tz).replace(tzinfo=None)
    if now.tzinfo is None:
        now = pytz.UTC.localize(now)
    return now.astimezone(tz).replace(tzinfo=None)


def window_cutoff(rule: WindowRule, local_now: datetime) -> datetime:
    """Earliest timestamp kept by a date-cutoff *rule*."""
    if rule.year_to_date:
        return datetime(local_now.year, 1, 1)
    start = _shift_months(local_now, -(rule.months + 12 * rule.years))
    return start - timedelta(days=rule.days, hours=rule.hours)


def _take(points: tuple[RawSeriesPoint, ...], count: int | None) -> tuple[RawSeriesPoint, ...]:
    return points if count is None else points[:count]


def apply_window(
    raw: RawSeries, policy: TimeframePolicy, now: datetime | None = None
) -> WindowedSeries:
    """Slice *raw* according to the policy's window rule, oldest point first.

    Date-cutoff rules that leave nothing (a 1D window over a long weekend)
    fall back to the most recent ``fallback_count`` points instead of
    producing an empty chart.

    Raises:
        EmptyWindow: only when *raw* itself has no points.
    """
    if not raw.points:
        raise EmptyWindow(
            f"No price points returned for {raw.symbol} ({policy.label.value})",
            symbol=raw.symbol,
        )

    rule = policy.window
    used_fallback = False

    if rule.kind is WindowKind.COUNT:
        kept = _take(raw.points, rule.count)
    else:
        cutoff = window_cutoff(rule, exchange_now(raw.time_zone, now))
        if raw.endpoint is not SeriesEndpoint.INTRADAY:
            # Daily and coarser bars carry a date only.
            cutoff = cutoff.replace(hour=0, minute=0, second=0, microsecond=0)
        kept = tuple(p for p in raw.points if p.timestamp >= cutoff)
        if not kept:
            kept = _take(raw.points, rule.fallback_count)
            used_fallback = True
            logger.info(
                "%s %s: no points since %s, falling back to last %d",
                raw.symbol,
                policy.label.value,
                cutoff.isoformat(),
                len(kept),
            )

    return WindowedSeries(points=tuple(reversed(kept)), used_fallback=used_fallback)
