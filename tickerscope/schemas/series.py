"""Price-series and company-overview schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from tickerscope.schemas.timeframe import SeriesEndpoint


class SymbolMatch(BaseModel):
    """Top-ranked search result for a user query."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    name: str
    region: str | None = None
    currency: str | None = None


class RawSeriesPoint(BaseModel):
    """One OHLCV bar, parsed from the upstream's text fields."""

    model_config = ConfigDict(frozen=True)

    key: str
    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: int | None = None
    adjusted_close: float | None = None
    dividend_amount: float | None = None
    split_coefficient: float | None = None


class RawSeries(BaseModel):
    """Ingested upstream series, newest point first."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    endpoint: SeriesEndpoint
    time_zone: str
    volume_key: str
    points: tuple[RawSeriesPoint, ...] = ()


class WindowedSeries(BaseModel):
    """The displayed slice of a raw series, oldest point first."""

    model_config = ConfigDict(frozen=True)

    points: tuple[RawSeriesPoint, ...] = ()
    used_fallback: bool = False

    def __len__(self) -> int:
        return len(self.points)


class OverviewRecord(BaseModel):
    """Sparse company fundamentals; every field may be unknown."""

    model_config = ConfigDict(frozen=True)

    pe_ratio: float | None = None
    market_cap: float | None = None
    beta: float | None = None
    eps: float | None = None
    analyst_target_price: float | None = None
    earnings_date: str | None = None
    exchange: str | None = None
    currency: str | None = None
    sector: str | None = None


class FetchedSeries(BaseModel):
    """Result of one series fetch: the raw bars plus the overview."""

    model_config = ConfigDict(frozen=True)

    raw: RawSeries
    overview: OverviewRecord = OverviewRecord()
