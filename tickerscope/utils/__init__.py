"""Utility modules for the ticker snapshot server."""

from tickerscope.utils.formatting import (
    format_change_percent,
    format_market_cap,
    format_number,
    format_price,
    format_range,
    price_change_class,
    stat_rows,
)

__all__ = [
    "format_change_percent",
    "format_market_cap",
    "format_number",
    "format_price",
    "format_range",
    "price_change_class",
    "stat_rows",
]
