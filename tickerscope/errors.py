"""Typed failures raised by the snapshot engine.

Every failure carries an ``error_code`` that the tool layer copies verbatim
into the ``ToolResponse`` error envelope, so clients can tell a rate-limited
upstream apart from a symbol that simply has no data.
"""

from __future__ import annotations


class SnapshotError(Exception):
    """Base class for every engine failure."""

    error_code = "SNAPSHOT_ERROR"
    default_hint: str | None = None

    def __init__(
        self,
        message: str,
        *,
        symbol: str | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.symbol = symbol
        self.hint = hint if hint is not None else self.default_hint


class InvalidQuery(SnapshotError):
    error_code = "INVALID_QUERY"
    default_hint = "Enter a short ticker symbol or company name."


class NoMatchFound(SnapshotError):
    error_code = "NO_MATCH_FOUND"
    default_hint = "Check spelling or try the company name instead of the ticker."


class InvalidTimeframe(SnapshotError):
    error_code = "INVALID_TIMEFRAME"
    default_hint = "Use one of 1D, 5D, 1M, 6M, YTD, 1Y, 5Y, ALL."


class SeriesUnavailable(SnapshotError):
    """The upstream answered, but not with the series we asked for."""

    error_code = "SERIES_UNAVAILABLE"

    def __init__(
        self,
        message: str,
        *,
        symbol: str | None = None,
        hint: str | None = None,
        reason: str = "missing_key",
    ) -> None:
        super().__init__(message, symbol=symbol, hint=hint)
        self.reason = reason


class RateLimited(SeriesUnavailable):
    """The upstream returned a notice payload (call frequency / plan limit)."""

    error_code = "RATE_LIMITED"
    default_hint = "The data provider is throttling requests. Wait a minute and retry."

    def __init__(self, message: str, *, symbol: str | None = None, hint: str | None = None) -> None:
        super().__init__(message, symbol=symbol, hint=hint, reason="rate_limited")


class MalformedSeries(SeriesUnavailable):
    """A series field was present but could not be parsed as a number."""

    error_code = "MALFORMED_SERIES"

    def __init__(self, message: str, *, symbol: str | None = None, hint: str | None = None) -> None:
        super().__init__(message, symbol=symbol, hint=hint, reason="malformed")


class EmptyWindow(SnapshotError):
    error_code = "EMPTY_WINDOW"
    default_hint = "The provider returned no price points for this symbol."


class TransportFailure(SnapshotError):
    error_code = "TRANSPORT_FAILURE"
    default_hint = "The data provider could not be reached. Try again later."
