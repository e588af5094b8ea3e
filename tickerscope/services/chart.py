"""Chart-ready projection of a windowed series."""

from __future__ import annotations

from tickerscope.schemas.series import WindowedSeries
from tickerscope.schemas.snapshot import ChartPoint, ChartSeries, TrendColor

UP = TrendColor(border="green", background="rgba(0, 255, 0, 0.1)")
DOWN = TrendColor(border="red", background="rgba(255, 0, 0, 0.1)")
FLAT = TrendColor(border="blue", background="rgba(0, 0, 255, 0.1)")


def build_chart(symbol: str, windowed: WindowedSeries) -> ChartSeries:
    """One chart point per windowed bar.

    The plotted price is the raw close, the same value ``percent_change`` and
    the trend colour are computed from. Adjusted close rides along for the
    tooltip.
    """
    points = tuple(
        ChartPoint(
            date=p.key,
            price=p.close,
            open=p.open,
            high=p.high,
            low=p.low,
            close=p.close,
            adjusted_close=p.adjusted_close,
            volume=p.volume,
        )
        for p in windowed.points
    )
    return ChartSeries(label=f"{symbol} Price", points=points)


def trend_color(change: float) -> TrendColor:
    if change < 0:
        return DOWN
    if change > 0:
        return UP
    return FLAT
