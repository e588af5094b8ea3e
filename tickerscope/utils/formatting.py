"""Display formatting for the snapshot statistics panel.

Unknown values (``None``) always render as ``"N/A"``; they are never shown as
zero.
"""

from __future__ import annotations

from typing import Union

from tickerscope.schemas.snapshot import StockSnapshot
from tickerscope.schemas.timeframe import TimeframeLabel
from tickerscope.services.metrics import WEEK_RANGE_POINTS

Number = Union[int, float]

NOT_AVAILABLE = "N/A"

_INTRADAY_LABELS = {TimeframeLabel.ONE_DAY, TimeframeLabel.FIVE_DAYS}


def format_price(price: Number | None) -> str:
    """2-decimal price, e.g. 189.5 → "189.50"."""
    if price is None:
        return NOT_AVAILABLE
    return f"{price:.2f}"


def format_change_percent(change: Number | None) -> str:
    """Percent change without a sign suffix; unknown change reads as no change."""
    if change is None:
        return "0.00"
    return f"{change:.2f}"


def price_change_class(change: Number | None) -> str:
    """CSS-style class for a change value: "positive", "negative" or ""."""
    if change is None:
        return ""
    if change > 0:
        return "positive"
    if change < 0:
        return "negative"
    return ""


def format_range(low: Number | None, high: Number | None) -> str:
    if low is None or high is None:
        return NOT_AVAILABLE
    return f"{format_price(low)} - {format_price(high)}"


def format_number(value: Number | None, decimals: int = 0) -> str:
    """Thousands-separated number, e.g. 1234567 → "1,234,567"."""
    if value is None:
        return NOT_AVAILABLE
    return f"{value:,.{decimals}f}"


def format_market_cap(value: Number | None) -> str:
    """Scale to T/B/M/K, e.g. 2.95e12 → "2.95T"."""
    if value is None:
        return NOT_AVAILABLE
    for threshold, suffix in ((1e12, "T"), (1e9, "B"), (1e6, "M"), (1e3, "K")):
        if value >= threshold:
            return f"{value / threshold:.2f}{suffix}"
    return str(value)


def stat_rows(snapshot: StockSnapshot) -> list[dict[str, str]]:
    """The statistics panel as ordered label/value rows.

    The range row spans the last 260 raw bars. That is about 52 weeks of daily
    bars, but only a few sessions for 1D and 5D, whose label says so.
    """
    range_label = "52 Week Range"
    if snapshot.timeframe in _INTRADAY_LABELS:
        range_label = f"Range (last {WEEK_RANGE_POINTS} bars)"
    rows = [
        ("Previous Close", format_price(snapshot.previous_close)),
        ("Open", format_price(snapshot.open_price)),
        ("Day's Range", format_range(snapshot.day_low, snapshot.day_high)),
        (range_label, format_range(snapshot.week_low, snapshot.week_high)),
        ("Volume", format_number(snapshot.volume)),
        ("Avg. Volume", format_number(snapshot.avg_volume)),
        ("Market Cap (intraday)", format_market_cap(snapshot.market_cap)),
        ("Beta (5Y Monthly)", format_number(snapshot.beta, 2)),
        ("PE Ratio (TTM)", format_number(snapshot.pe_ratio, 2)),
        ("EPS (TTM)", format_price(snapshot.eps)),
        ("1y Target Est.", format_price(snapshot.target_est)),
        ("Dividend Amount", format_price(snapshot.dividend_amount)),
    ]
    return [{"label": label, "value": value} for label, value in rows]
