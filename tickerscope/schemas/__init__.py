"""Pydantic schemas."""

from tickerscope.schemas.common import ToolResponse
from tickerscope.schemas.series import (
    FetchedSeries,
    OverviewRecord,
    RawSeries,
    RawSeriesPoint,
    SymbolMatch,
    WindowedSeries,
)
from tickerscope.schemas.snapshot import (
    ChartPoint,
    ChartSeries,
    StatisticsBundle,
    StockSnapshot,
    TrendColor,
)
from tickerscope.schemas.timeframe import (
    ChartTimeUnit,
    SeriesEndpoint,
    TimeframeLabel,
    TimeframePolicy,
    WindowKind,
    WindowRule,
)

__all__ = [
    "ToolResponse",
    "FetchedSeries",
    "OverviewRecord",
    "RawSeries",
    "RawSeriesPoint",
    "SymbolMatch",
    "WindowedSeries",
    "ChartPoint",
    "ChartSeries",
    "StatisticsBundle",
    "StockSnapshot",
    "TrendColor",
    "ChartTimeUnit",
    "SeriesEndpoint",
    "TimeframeLabel",
    "TimeframePolicy",
    "WindowKind",
    "WindowRule",
]
