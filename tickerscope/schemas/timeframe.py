"""Timeframe and policy schemas."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TimeframeLabel(str, Enum):
    """User-selectable chart timeframe."""

    ONE_DAY = "1D"
    FIVE_DAYS = "5D"
    ONE_MONTH = "1M"
    SIX_MONTHS = "6M"
    YEAR_TO_DATE = "YTD"
    ONE_YEAR = "1Y"
    FIVE_YEARS = "5Y"
    ALL = "ALL"


class SeriesEndpoint(str, Enum):
    """Upstream time-series function names."""

    INTRADAY = "TIME_SERIES_INTRADAY"
    DAILY = "TIME_SERIES_DAILY"
    DAILY_ADJUSTED = "TIME_SERIES_DAILY_ADJUSTED"
    WEEKLY = "TIME_SERIES_WEEKLY"
    WEEKLY_ADJUSTED = "TIME_SERIES_WEEKLY_ADJUSTED"
    MONTHLY = "TIME_SERIES_MONTHLY"
    MONTHLY_ADJUSTED = "TIME_SERIES_MONTHLY_ADJUSTED"

    @property
    def is_adjusted(self) -> bool:
        return self.value.endswith("_ADJUSTED")


class ChartTimeUnit(str, Enum):
    """Time-axis units understood by the chart renderer."""

    MINUTE = "minute"
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


class WindowKind(str, Enum):
    DATE_CUTOFF = "date_cutoff"
    COUNT = "count"


class WindowRule(BaseModel):
    """How much of the raw series a timeframe keeps.

    ``date_cutoff`` keeps every point at or after ``now`` minus the duration
    (or January 1st when ``year_to_date`` is set) and falls back to the most
    recent ``fallback_count`` points when nothing survives.  ``count`` keeps
    the first ``count`` raw points as delivered (newest-first); ``count=None``
    keeps them all.
    """

    model_config = ConfigDict(frozen=True)

    kind: WindowKind
    hours: int = 0
    days: int = 0
    months: int = 0
    years: int = 0
    year_to_date: bool = False
    count: int | None = Field(None, gt=0)
    fallback_count: int | None = Field(None, gt=0)


class TimeframePolicy(BaseModel):
    """Concrete upstream query and chart parameters for one timeframe."""

    model_config = ConfigDict(frozen=True)

    label: TimeframeLabel
    endpoint: SeriesEndpoint
    interval: str | None = None
    output_size: str = "compact"
    chart_time_unit: ChartTimeUnit
    chart_tick_count: int = Field(..., gt=0)
    window: WindowRule
