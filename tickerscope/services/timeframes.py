"""Timeframe policy table.

Each label maps to one upstream endpoint and one window rule:

    label  endpoint                      window rule                     fallback
    1D     INTRADAY 15min (compact)      date cutoff, now - 24 hours     26 bars
    5D     INTRADAY 60min (compact)      date cutoff, now - 5 days       35 bars
    1M     DAILY_ADJUSTED (compact)      date cutoff, now - 1 month      22 bars
    6M     DAILY_ADJUSTED (full)         date cutoff, now - 6 months     126 bars
    YTD    DAILY_ADJUSTED (full)         date cutoff, January 1st        22 bars
    1Y     DAILY_ADJUSTED (full)         date cutoff, now - 1 year       252 bars
    5Y     WEEKLY_ADJUSTED (full)        date cutoff, now - 5 years      260 bars
    ALL    MONTHLY_ADJUSTED (full)       count, every point              -

The fallback counts approximate one span of trading: 26 quarter-hour bars is a
regular session, 35 hourly bars is five sessions, 22/126/252 trading days are
one/six/twelve months. Intraday requests ask for regular-session bars only.
"""

from __future__ import annotations

from datetime import datetime

from tickerscope.errors import InvalidTimeframe
from tickerscope.schemas.timeframe import (
    ChartTimeUnit,
    SeriesEndpoint,
    TimeframeLabel,
    TimeframePolicy,
    WindowKind,
    WindowRule,
)
from tickerscope.services.window import DEFAULT_TIME_ZONE, exchange_now

_POLICIES: dict[TimeframeLabel, TimeframePolicy] = {
    TimeframeLabel.ONE_DAY: TimeframePolicy(
        label=TimeframeLabel.ONE_DAY,
        endpoint=SeriesEndpoint.INTRADAY,
        interval="15min",
        output_size="compact",
        chart_time_unit=ChartTimeUnit.HOUR,
        chart_tick_count=8,
        window=WindowRule(kind=WindowKind.DATE_CUTOFF, hours=24, fallback_count=26),
    ),
    TimeframeLabel.FIVE_DAYS: TimeframePolicy(
        label=TimeframeLabel.FIVE_DAYS,
        endpoint=SeriesEndpoint.INTRADAY,
        interval="60min",
        output_size="compact",
        chart_time_unit=ChartTimeUnit.DAY,
        chart_tick_count=5,
        window=WindowRule(kind=WindowKind.DATE_CUTOFF, days=5, fallback_count=35),
    ),
    TimeframeLabel.ONE_MONTH: TimeframePolicy(
        label=TimeframeLabel.ONE_MONTH,
        endpoint=SeriesEndpoint.DAILY_ADJUSTED,
        output_size="compact",
        chart_time_unit=ChartTimeUnit.DAY,
        chart_tick_count=22,
        window=WindowRule(kind=WindowKind.DATE_CUTOFF, months=1, fallback_count=22),
    ),
    TimeframeLabel.SIX_MONTHS: TimeframePolicy(
        label=TimeframeLabel.SIX_MONTHS,
        endpoint=SeriesEndpoint.DAILY_ADJUSTED,
        output_size="full",
        chart_time_unit=ChartTimeUnit.MONTH,
        chart_tick_count=6,
        window=WindowRule(kind=WindowKind.DATE_CUTOFF, months=6, fallback_count=126),
    ),
    TimeframeLabel.YEAR_TO_DATE: TimeframePolicy(
        label=TimeframeLabel.YEAR_TO_DATE,
        endpoint=SeriesEndpoint.DAILY_ADJUSTED,
        output_size="full",
        chart_time_unit=ChartTimeUnit.MONTH,
        chart_tick_count=12,
        window=WindowRule(kind=WindowKind.DATE_CUTOFF, year_to_date=True, fallback_count=22),
    ),
    TimeframeLabel.ONE_YEAR: TimeframePolicy(
        label=TimeframeLabel.ONE_YEAR,
        endpoint=SeriesEndpoint.DAILY_ADJUSTED,
        output_size="full",
        chart_time_unit=ChartTimeUnit.MONTH,
        chart_tick_count=12,
        window=WindowRule(kind=WindowKind.DATE_CUTOFF, years=1, fallback_count=252),
    ),
    TimeframeLabel.FIVE_YEARS: TimeframePolicy(
        label=TimeframeLabel.FIVE_YEARS,
        endpoint=SeriesEndpoint.WEEKLY_ADJUSTED,
        output_size="full",
        chart_time_unit=ChartTimeUnit.YEAR,
        chart_tick_count=5,
        window=WindowRule(kind=WindowKind.DATE_CUTOFF, years=5, fallback_count=260),
    ),
    TimeframeLabel.ALL: TimeframePolicy(
        label=TimeframeLabel.ALL,
        endpoint=SeriesEndpoint.MONTHLY_ADJUSTED,
        output_size="full",
        chart_time_unit=ChartTimeUnit.YEAR,
        chart_tick_count=20,
        window=WindowRule(kind=WindowKind.COUNT),
    ),
}


def parse_label(label: TimeframeLabel | str) -> TimeframeLabel:
    """Normalise a label (enum or case-insensitive string) or raise ``InvalidTimeframe``."""
    if isinstance(label, TimeframeLabel):
        return label
    if isinstance(label, str):
        try:
            return TimeframeLabel(label.strip().upper())
        except ValueError:
            pass
    raise InvalidTimeframe(f"Invalid time frame: {label!r}")


def resolve_policy(
    label: TimeframeLabel | str,
    now: datetime | None = None,
    time_zone: str = DEFAULT_TIME_ZONE,
) -> TimeframePolicy:
    """Return the policy for *label*.

    The YTD tick count follows the calendar: one tick per elapsed month,
    read from *now* on the exchange clock of *time_zone*, the same clock the
    window cutoff uses. A naive *now* is taken to be UTC.

    Raises:
        InvalidTimeframe: for any label outside the table.
    """
    policy = _POLICIES[parse_label(label)]
    if policy.label is TimeframeLabel.YEAR_TO_DATE:
        month = exchange_now(time_zone, now).month
        policy = policy.model_copy(update={"chart_tick_count": month})
    return policy


def list_policies(now: datetime | None = None) -> list[TimeframePolicy]:
    """Every policy, in display order."""
    return [resolve_policy(label, now) for label in TimeframeLabel]
