"""Series fetcher: upstream request building, response reconciliation and ingestion.

Every text field of the upstream payload is parsed here exactly once.  The
rest of the engine only ever sees typed ``RawSeriesPoint`` values.
"""

from __future__ import annotations

import asyncio
import logging
import math
from datetime import datetime

import pytz

from tickerscope.errors import MalformedSeries, RateLimited, SeriesUnavailable, SnapshotError
from tickerscope.schemas.series import FetchedSeries, OverviewRecord, RawSeries, RawSeriesPoint
from tickerscope.schemas.timeframe import SeriesEndpoint, TimeframePolicy
from tickerscope.services.upstream import ERROR_KEY, AlphaVantageClient, rate_limit_notice
from tickerscope.services.window import DEFAULT_TIME_ZONE

logger = logging.getLogger("tickerscope.series")

# Top-level container key per endpoint.  The daily adjusted series shares the
# unadjusted key; weekly and monthly do not.
SERIES_KEYS: dict[SeriesEndpoint, str] = {
    SeriesEndpoint.INTRADAY: "Time Series ({interval})",
    SeriesEndpoint.DAILY: "Time Series (Daily)",
    SeriesEndpoint.DAILY_ADJUSTED: "Time Series (Daily)",
    SeriesEndpoint.WEEKLY: "Weekly Time Series",
    SeriesEndpoint.WEEKLY_ADJUSTED: "Weekly Adjusted Time Series",
    SeriesEndpoint.MONTHLY: "Monthly Time Series",
    SeriesEndpoint.MONTHLY_ADJUSTED: "Monthly Adjusted Time Series",
}

OPEN_FIELD = "1. open"
HIGH_FIELD = "2. high"
LOW_FIELD = "3. low"
CLOSE_FIELD = "4. close"
ADJUSTED_CLOSE_FIELD = "5. adjusted close"
DIVIDEND_FIELD = "7. dividend amount"
SPLIT_FIELD = "8. split coefficient"

# Adjusted series insert "5. adjusted close", pushing volume to position 6.
VOLUME_FIELD = "5. volume"
ADJUSTED_VOLUME_FIELD = "6. volume"

_TIMESTAMP_FORMATS = ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M", "%Y-%m-%d")
_UNKNOWN_MARKERS = {"", "none", "-", "n/a"}

# OVERVIEW field name → OverviewRecord attribute
_OVERVIEW_NUMBERS = {
    "PERatio": "pe_ratio",
    "MarketCapitalization": "market_cap",
    "Beta": "beta",
    "EPS": "eps",
    "AnalystTargetPrice": "analyst_target_price",
}
_OVERVIEW_TEXT = {
    "EarningsDate": "earnings_date",
    "Exchange": "exchange",
    "Currency": "currency",
    "Sector": "sector",
}


def volume_key_for(endpoint: SeriesEndpoint) -> str:
    """Volume field name for *endpoint*'s point layout."""
    return ADJUSTED_VOLUME_FIELD if endpoint.is_adjusted else VOLUME_FIELD


def series_key_for(endpoint: SeriesEndpoint, interval: str | None = None) -> str:
    """Top-level response key holding the series for *endpoint*."""
    key = SERIES_KEYS[endpoint]
    if endpoint is SeriesEndpoint.INTRADAY:
        if not interval:
            raise ValueError("intraday endpoint requires an interval")
        key = key.format(interval=interval)
    return key


def build_params(symbol: str, policy: TimeframePolicy) -> dict[str, str]:
    """Query parameters (minus function/apikey) for a series request."""
    params = {"symbol": symbol, "outputsize": policy.output_size}
    if policy.endpoint is SeriesEndpoint.INTRADAY:
        params["interval"] = policy.interval or ""
        # Regular session only; the provider includes pre and post market by default.
        params["extended_hours"] = "false"
    return params


# ---------------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------------


def _is_unknown(text) -> bool:
    return text is None or (isinstance(text, str) and text.strip().lower() in _UNKNOWN_MARKERS)


def _to_float(text) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"non-finite value {text!r}")
    return value


def _field(fields: dict, name: str, key: str, symbol: str, required: bool) -> float | None:
    text = fields.get(name)
    if _is_unknown(text):
        if required:
            raise MalformedSeries(f"{symbol} {key}: missing {name!r}", symbol=symbol)
        return None
    try:
        return _to_float(text)
    except (TypeError, ValueError) as exc:
        raise MalformedSeries(
            f"{symbol} {key}: {name!r} is not a number ({text!r})", symbol=symbol
        ) from exc


def _parse_timestamp(key: str, symbol: str) -> datetime:
    for fmt in _TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(key.strip(), fmt)
        except ValueError:
            continue
    raise MalformedSeries(f"{symbol}: unrecognised timestamp {key!r}", symbol=symbol)


def _time_zone(payload: dict) -> str:
    meta = payload.get("Meta Data") or {}
    for name, value in meta.items():
        if name.endswith("Time Zone") and value:
            try:
                pytz.timezone(value)
            except pytz.UnknownTimeZoneError:
                logger.warning("unknown upstream time zone %r, using %s", value, DEFAULT_TIME_ZONE)
                return DEFAULT_TIME_ZONE
            return value
    return DEFAULT_TIME_ZONE


def parse_point(key: str, fields: dict, symbol: str, volume_key: str) -> RawSeriesPoint:
    """Parse one upstream bar.

    Raises:
        MalformedSeries: a required field is missing or any present field is
            not numeric.
    """
    if not isinstance(fields, dict):
        raise MalformedSeries(f"{symbol} {key}: expected an object, got {fields!r}", symbol=symbol)
    volume = _field(fields, volume_key, key, symbol, required=False)
    return RawSeriesPoint(
        key=key,
        timestamp=_parse_timestamp(key, symbol),
        open=_field(fields, OPEN_FIELD, key, symbol, required=True),
        high=_field(fields, HIGH_FIELD, key, symbol, required=True),
        low=_field(fields, LOW_FIELD, key, symbol, required=True),
        close=_field(fields, CLOSE_FIELD, key, symbol, required=True),
        volume=int(volume) if volume is not None else None,
        adjusted_close=_field(fields, ADJUSTED_CLOSE_FIELD, key, symbol, required=False),
        dividend_amount=_field(fields, DIVIDEND_FIELD, key, symbol, required=False),
        split_coefficient=_field(fields, SPLIT_FIELD, key, symbol, required=False),
    )


def parse_series(payload: dict, symbol: str, policy: TimeframePolicy) -> RawSeries:
    """Turn a time-series payload into a ``RawSeries`` (newest first).

    Raises:
        RateLimited: the payload is a throttling notice.
        SeriesUnavailable: the provider refused the call, or the expected
            series key is absent.
        MalformedSeries: see ``parse_point``.
    """
    notice = rate_limit_notice(payload)
    if notice:
        raise RateLimited(notice, symbol=symbol)
    if ERROR_KEY in payload:
        raise SeriesUnavailable(
            f"Time series data unavailable for {policy.label.value}: {payload[ERROR_KEY]}",
            symbol=symbol,
            reason="rejected",
        )

    series_key = series_key_for(policy.endpoint, policy.interval)
    container = payload.get(series_key)
    if container is None:
        raise SeriesUnavailable(
            f"Time series data unavailable for {policy.label.value} (no {series_key!r} in response)",
            symbol=symbol,
            reason="missing_key",
        )
    if not isinstance(container, dict):
        raise MalformedSeries(f"{symbol}: {series_key!r} is not an object", symbol=symbol)

    volume_key = volume_key_for(policy.endpoint)
    points = [parse_point(key, fields, symbol, volume_key) for key, fields in container.items()]

    # Newest first, one point per timestamp.
    points.sort(key=lambda p: p.timestamp, reverse=True)
    unique: list[RawSeriesPoint] = []
    for point in points:
        if unique and unique[-1].timestamp == point.timestamp:
            logger.warning("%s: duplicate bar %s dropped", symbol, point.key)
            continue
        unique.append(point)

    return RawSeries(
        symbol=symbol,
        endpoint=policy.endpoint,
        time_zone=_time_zone(payload),
        volume_key=volume_key,
        points=tuple(unique),
    )


def parse_overview(payload: dict) -> OverviewRecord:
    """Build an ``OverviewRecord``; anything missing or unparsable is unknown."""
    values: dict[str, float | str | None] = {}
    for field, attr in _OVERVIEW_NUMBERS.items():
        text = payload.get(field)
        if _is_unknown(text):
            continue
        try:
            values[attr] = _to_float(text)
        except (TypeError, ValueError):
            logger.debug("overview field %s=%r is not numeric", field, text)
    for field, attr in _OVERVIEW_TEXT.items():
        text = payload.get(field)
        if not _is_unknown(text):
            values[attr] = str(text)
    return OverviewRecord(**values)


# ---------------------------------------------------------------------------
# Fetching
# ---------------------------------------------------------------------------


async def fetch_overview(client: AlphaVantageClient, symbol: str) -> OverviewRecord:
    """Fetch company fundamentals; failures degrade to an empty record."""
    try:
        payload = await client.query("OVERVIEW", symbol=symbol)
    except SnapshotError as exc:
        logger.warning("Overview data is not available for %s: %s", symbol, exc)
        return OverviewRecord()

    notice = rate_limit_notice(payload)
    if notice or not payload or ERROR_KEY in payload:
        logger.warning(
            "Overview data is not available for %s: %s", symbol, notice or "empty response"
        )
        return OverviewRecord()
    return parse_overview(payload)


async def fetch_raw_series(
    client: AlphaVantageClient, symbol: str, policy: TimeframePolicy
) -> RawSeries:
    payload = await client.query(policy.endpoint.value, **build_params(symbol, policy))
    return parse_series(payload, symbol, policy)


async def fetch_series(
    client: AlphaVantageClient, symbol: str, policy: TimeframePolicy
) -> FetchedSeries:
    """Fetch the raw series and the overview for *symbol* concurrently.

    Series failures propagate (and cancel the overview request); overview
    failures never do.
    """
    overview_task = asyncio.ensure_future(fetch_overview(client, symbol))
    try:
        raw = await fetch_raw_series(client, symbol, policy)
    except BaseException:
        overview_task.cancel()
        raise
    overview = await overview_task
    logger.info(
        "fetch_series symbol=%s endpoint=%s points=%d",
        symbol,
        policy.endpoint.value,
        len(raw.points),
    )
    return FetchedSeries(raw=raw, overview=overview)
