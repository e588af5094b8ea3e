"""Shared pytest fixtures – upstream payload builders and a fake Alpha Vantage."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import httpx
import pytest
import pytest_asyncio

from tickerscope.schemas.series import RawSeries, RawSeriesPoint
from tickerscope.schemas.timeframe import SeriesEndpoint
from tickerscope.services.upstream import AlphaVantageClient

# Sunday 2024-03-10 14:00 US/Eastern: the market has been closed since Friday.
WEEKEND_NOW = datetime(2024, 3, 10, 18, 0, tzinfo=timezone.utc)
# Friday 2024-03-08 15:00 US/Eastern, during the session.
SESSION_NOW = datetime(2024, 3, 8, 20, 0, tzinfo=timezone.utc)

AAPL_SEARCH = {
    "bestMatches": [
        {
            "1. symbol": "AAPL",
            "2. name": "Apple Inc.",
            "3. type": "Equity",
            "4. region": "United States",
            "8. currency": "USD",
            "9. matchScore": "1.0000",
        },
        {
            "1. symbol": "AAPL34.SAO",
            "2. name": "Apple Inc.",
            "3. type": "Equity",
            "4. region": "Brazil/Sao Paolo",
            "8. currency": "BRL",
            "9. matchScore": "0.6667",
        },
    ]
}

AAPL_OVERVIEW = {
    "Symbol": "AAPL",
    "Name": "Apple Inc",
    "Exchange": "NASDAQ",
    "Currency": "USD",
    "Sector": "TECHNOLOGY",
    "MarketCapitalization": "2950000000000",
    "PERatio": "29.5",
    "Beta": "1.29",
    "EPS": "6.42",
    "AnalystTargetPrice": "198.5",
    "DividendYield": "None",
}

RATE_LIMIT_NOTE = {
    "Note": (
        "Thank you for using Alpha Vantage! Our standard API call frequency is "
        "5 calls per minute and 500 calls per day."
    )
}


def bar(
    close: float,
    *,
    high: float | None = None,
    low: float | None = None,
    open_: float | None = None,
    volume: int | None = 1_000_000,
    adjusted: bool = False,
    adjusted_close: float | None = None,
) -> dict[str, str]:
    """One upstream point in the provider's text format."""
    high = close + 1 if high is None else high
    low = close - 1 if low is None else low
    open_ = close if open_ is None else open_
    fields = {
        "1. open": f"{open_:.4f}",
        "2. high": f"{high:.4f}",
        "3. low": f"{low:.4f}",
        "4. close": f"{close:.4f}",
    }
    if adjusted:
        adjusted_close = close if adjusted_close is None else adjusted_close
        fields["5. adjusted close"] = f"{adjusted_close:.4f}"
        if volume is not None:
            fields["6. volume"] = str(volume)
        fields["7. dividend amount"] = "0.0000"
        fields["8. split coefficient"] = "1.0"
    elif volume is not None:
        fields["5. volume"] = str(volume)
    return fields


def business_days(end: date, count: int) -> list[date]:
    """The *count* weekdays ending at *end*, oldest first."""
    days: list[date] = []
    day = end
    while len(days) < count:
        if day.weekday() < 5:
            days.append(day)
        day -= timedelta(days=1)
    return list(reversed(days))


def daily_adjusted_payload(symbol: str, closes: list[float], end: date = date(2024, 3, 8)) -> dict:
    """TIME_SERIES_DAILY_ADJUSTED payload, newest first like the provider."""
    days = business_days(end, len(closes))
    series = {
        d.isoformat(): bar(c, adjusted=True, volume=1_000_000 + i * 1000)
        for i, (d, c) in enumerate(zip(days, closes))
    }
    return {
        "Meta Data": {
            "1. Information": "Daily Time Series with Splits and Dividend Events",
            "2. Symbol": symbol,
            "3. Last Refreshed": days[-1].isoformat(),
            "4. Output Size": "Full size",
            "5. Time Zone": "US/Eastern",
        },
        "Time Series (Daily)": dict(reversed(list(series.items()))),
    }


def intraday_payload(
    symbol: str, start: datetime, count: int, interval_minutes: int = 15, base: float = 170.0
) -> dict:
    """TIME_SERIES_INTRADAY payload of *count* bars starting at naive *start*."""
    series = {}
    for i in range(count):
        ts = start + timedelta(minutes=interval_minutes * i)
        series[ts.strftime("%Y-%m-%d %H:%M:%S")] = bar(base + i * 0.1, volume=50_000 + i)
    return {
        "Meta Data": {
            "1. Information": f"Intraday ({interval_minutes}min) open, high, low, close prices and volume",
            "2. Symbol": symbol,
            "3. Last Refreshed": max(series),
            "4. Interval": f"{interval_minutes}min",
            "5. Output Size": "Compact",
            "6. Time Zone": "US/Eastern",
        },
        f"Time Series ({interval_minutes}min)": dict(reversed(list(series.items()))),
    }


def raw_series(
    closes: list[float],
    *,
    highs: list[float] | None = None,
    lows: list[float] | None = None,
    start: datetime = datetime(2024, 1, 2),
    step: timedelta = timedelta(days=1),
    endpoint: SeriesEndpoint = SeriesEndpoint.DAILY_ADJUSTED,
) -> RawSeries:
    """Build an ingested RawSeries from chronological closes (stored newest first)."""
    points = []
    for i, close in enumerate(closes):
        ts = start + step * i
        points.append(
            RawSeriesPoint(
                key=ts.strftime("%Y-%m-%d") if step >= timedelta(days=1) else ts.isoformat(" "),
                timestamp=ts,
                open=close,
                high=highs[i] if highs else close + 1,
                low=lows[i] if lows else close - 1,
                close=close,
                volume=1000 * (i + 1),
            )
        )
    return RawSeries(
        symbol="TEST",
        endpoint=endpoint,
        time_zone="US/Eastern",
        volume_key="6. volume" if endpoint.is_adjusted else "5. volume",
        points=tuple(reversed(points)),
    )


class FakeAlphaVantage:
    """In-memory stand-in for the provider, served through ``httpx.MockTransport``.

    ``routes`` maps a ``function`` name to a JSON payload, an ``httpx.Response``,
    an exception instance to raise, or a callable taking the request and
    returning one of those.
    """

    def __init__(self) -> None:
        self.routes: dict[str, object] = {}
        self.requests: list[httpx.Request] = []

    @property
    def functions(self) -> list[str]:
        return [r.url.params["function"] for r in self.requests]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        function = request.url.params["function"]
        route = self.routes.get(function)
        if callable(route) and not isinstance(route, (Exception, httpx.Response)):
            route = route(request)
        if route is None:
            return httpx.Response(200, json={})
        if isinstance(route, Exception):
            raise route
        if isinstance(route, httpx.Response):
            return route
        return httpx.Response(200, json=route)


@pytest.fixture
def fake_upstream() -> FakeAlphaVantage:
    return FakeAlphaVantage()


@pytest_asyncio.fixture
async def client(fake_upstream):
    """AlphaVantageClient wired to the fake upstream."""
    av = AlphaVantageClient(
        api_key="test-key",
        base_url="https://av.test/query",
        transport=httpx.MockTransport(fake_upstream.handle),
    )
    yield av
    await av.aclose()


@pytest.fixture
def aapl_upstream(fake_upstream) -> FakeAlphaVantage:
    """Fake upstream answering search, 1Y-style daily series and overview for AAPL."""
    closes = [150.0 + (i % 17) - (i % 5) * 0.5 for i in range(300)]
    fake_upstream.routes["SYMBOL_SEARCH"] = AAPL_SEARCH
    fake_upstream.routes["TIME_SERIES_DAILY_ADJUSTED"] = daily_adjusted_payload("AAPL", closes)
    fake_upstream.routes["OVERVIEW"] = AAPL_OVERVIEW
    return fake_upstream
