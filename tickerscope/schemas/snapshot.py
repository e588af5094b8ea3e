"""Statistics, chart and snapshot schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from tickerscope.schemas.series import RawSeriesPoint
from tickerscope.schemas.timeframe import ChartTimeUnit, TimeframeLabel


class StatisticsBundle(BaseModel):
    """Trading statistics derived from a windowed series.

    ``None`` means unknown.  ``percent_change`` is the one exception: it falls
    back to ``0.0`` when it cannot be computed.
    """

    model_config = ConfigDict(frozen=True)

    previous_close: float | None = None
    open_price: float | None = None
    day_low: float | None = None
    day_high: float | None = None
    week_low: float | None = None
    week_high: float | None = None
    volume: int | None = None
    avg_volume: float | None = None
    adjusted_close: float | None = None
    dividend_amount: float | None = None
    split_coefficient: float | None = None
    percent_change: float = 0.0


class ChartPoint(BaseModel):
    """Plotted value plus tooltip stats for one bar."""

    model_config = ConfigDict(frozen=True)

    date: str
    price: float
    open: float
    high: float
    low: float
    close: float
    adjusted_close: float | None = None
    volume: int | None = None


class ChartSeries(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    points: tuple[ChartPoint, ...] = ()


class TrendColor(BaseModel):
    model_config = ConfigDict(frozen=True)

    border: str
    background: str


class StockSnapshot(BaseModel):
    """Fully assembled, render-ready result for one symbol and timeframe."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    name: str
    timeframe: TimeframeLabel
    latest_date: str | None
    price: float | None
    percent_change: float

    series: tuple[RawSeriesPoint, ...]
    used_fallback: bool
    chart: ChartSeries
    chart_time_unit: ChartTimeUnit
    chart_tick_count: int
    volume_key: str
    trend: TrendColor

    previous_close: float | None
    open_price: float | None
    day_low: float | None
    day_high: float | None
    week_low: float | None
    week_high: float | None
    volume: int | None
    avg_volume: float | None
    adjusted_close: float | None
    dividend_amount: float | None
    split_coefficient: float | None

    pe_ratio: float | None
    market_cap: float | None
    beta: float | None
    eps: float | None
    target_est: float | None
    earnings_date: str | None
