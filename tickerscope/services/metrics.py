"""Pure statistics helpers (no network access)."""

from __future__ import annotations

from tickerscope.schemas.series import RawSeries, RawSeriesPoint, WindowedSeries
from tickerscope.schemas.snapshot import StatisticsBundle

# ~52 weeks of trading days.
WEEK_RANGE_POINTS = 260


def percent_change(points: tuple[RawSeriesPoint, ...]) -> float:
    """Close-to-close change from the first to the last point, in percent.

    Returns 0.0 (not None) when fewer than 2 points exist or the first close
    is zero, so callers can always colour a trend.
    """
    if len(points) < 2:
        return 0.0
    first, last = points[0].close, points[-1].close
    if first == 0:
        return 0.0
    return (last - first) / first * 100


def week_range(raw: RawSeries) -> tuple[float | None, float | None]:
    """(low, high) over the most recent ``WEEK_RANGE_POINTS`` raw points."""
    recent = raw.points[:WEEK_RANGE_POINTS]
    if not recent:
        return None, None
    return min(p.low for p in recent), max(p.high for p in recent)


def average_volume(points: tuple[RawSeriesPoint, ...]) -> float | None:
    """Mean volume over *points*.

    A bar without a volume adds 0 to the sum but still counts in the
    denominator, which biases the mean downward on sparse data.
    """
    if not points:
        return None
    return sum(p.volume or 0 for p in points) / len(points)


def compute_stats(windowed: WindowedSeries, raw: RawSeries) -> StatisticsBundle:
    """Derive the statistics panel from the displayed window.

    Everything reads the windowed series except the 52-week range, which
    always comes from the raw series so it does not change with the
    timeframe.  With fewer than 2 windowed points every field is unknown
    and ``percent_change`` is 0.0.
    """
    points = windowed.points
    if len(points) < 2:
        return StatisticsBundle()

    latest = points[-1]
    week_low, week_high = week_range(raw)
    return StatisticsBundle(
        previous_close=points[-2].close,
        open_price=latest.open,
        day_low=latest.low,
        day_high=latest.high,
        week_low=week_low,
        week_high=week_high,
        volume=latest.volume,
        avg_volume=average_volume(points),
        adjusted_close=latest.adjusted_close,
        dividend_amount=latest.dividend_amount,
        split_coefficient=latest.split_coefficient,
        percent_change=percent_change(points),
    )
