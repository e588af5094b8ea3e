"""Tests for the window filter."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from conftest import SESSION_NOW, WEEKEND_NOW, raw_series
from tickerscope.errors import EmptyWindow
from tickerscope.schemas.timeframe import SeriesEndpoint, WindowKind, WindowRule
from tickerscope.services.timeframes import resolve_policy
from tickerscope.services.window import apply_window, exchange_now, window_cutoff


def _keys(windowed):
    return [p.key for p in windowed.points]


def _assert_chronological(windowed):
    stamps = [p.timestamp for p in windowed.points]
    assert all(a < b for a, b in zip(stamps, stamps[1:]))


def _friday_intraday(count: int = 40):
    """15-minute bars on Friday 2024-03-08 from 09:30 ET."""
    return raw_series(
        [170.0 + i * 0.1 for i in range(count)],
        start=datetime(2024, 3, 8, 9, 30),
        step=timedelta(minutes=15),
        endpoint=SeriesEndpoint.INTRADAY,
    )


# ---------------------------------------------------------------------------
# Date-cutoff rules
# ---------------------------------------------------------------------------


def test_one_month_keeps_points_since_cutoff():
    """1M at Friday 15:00 ET keeps daily bars from 2024-02-08 on."""
    raw = raw_series([100.0 + i for i in range(68)], start=datetime(2024, 1, 1))
    windowed = apply_window(raw, resolve_policy("1M"), now=SESSION_NOW)

    assert windowed.used_fallback is False
    assert _keys(windowed)[0] == "2024-02-08"
    assert _keys(windowed)[-1] == "2024-03-08"
    assert len(windowed.points) == 30
    _assert_chronological(windowed)


def test_bar_dated_exactly_one_period_back_is_kept():
    weekly = raw_series(
        [100.0 + i for i in range(60)],
        start=datetime(2023, 1, 4),
        step=timedelta(weeks=1),
        endpoint=SeriesEndpoint.WEEKLY_ADJUSTED,
    )
    windowed = apply_window(weekly, resolve_policy("1Y"), now=SESSION_NOW)

    assert _keys(windowed)[0] == "2023-03-08"
    assert windowed.used_fallback is False


def test_ytd_starts_on_january_first():
    raw = raw_series([100.0 + i for i in range(90)], start=datetime(2023, 12, 10))
    windowed = apply_window(raw, resolve_policy("YTD", SESSION_NOW), now=SESSION_NOW)

    assert _keys(windowed)[0] == "2024-01-01"
    assert all(p.timestamp.year == 2024 for p in windowed.points)


def test_one_day_during_session_uses_last_24_hours():
    """Thursday bars before 15:00 fall outside a 24h window ending Friday 15:00."""
    raw = raw_series(
        [170.0 + i * 0.1 for i in range(79)],
        start=datetime(2024, 3, 7, 0, 0),
        step=timedelta(minutes=30),
        endpoint=SeriesEndpoint.INTRADAY,
    )
    windowed = apply_window(raw, resolve_policy("1D"), now=SESSION_NOW)

    assert windowed.used_fallback is False
    assert windowed.points[0].timestamp == datetime(2024, 3, 7, 15, 0)
    assert windowed.points[-1].timestamp == datetime(2024, 3, 8, 15, 0)
    _assert_chronological(windowed)


def test_one_day_over_weekend_falls_back_to_lookback():
    """No bar in the last 24h → the most recent fallback_count bars, not an empty chart."""
    raw = _friday_intraday(40)
    policy = resolve_policy("1D")
    windowed = apply_window(raw, policy, now=WEEKEND_NOW)

    assert windowed.used_fallback is True
    assert len(windowed.points) == policy.window.fallback_count == 26
    assert windowed.points[-1] == raw.points[0]
    assert windowed.points[0] == raw.points[25]
    _assert_chronological(windowed)


def test_fallback_shorter_than_lookback_keeps_everything():
    raw = _friday_intraday(10)
    windowed = apply_window(raw, resolve_policy("1D"), now=WEEKEND_NOW)
    assert len(windowed.points) == 10
    assert windowed.used_fallback is True


def test_naive_now_is_treated_as_utc():
    raw = raw_series([100.0 + i for i in range(68)], start=datetime(2024, 1, 1))
    aware = apply_window(raw, resolve_policy("1M"), now=SESSION_NOW)
    naive = apply_window(raw, resolve_policy("1M"), now=SESSION_NOW.replace(tzinfo=None))
    assert aware == naive


# ---------------------------------------------------------------------------
# Count rules
# ---------------------------------------------------------------------------


def test_all_keeps_every_point_reversed():
    raw = raw_series([10.0, 11.0, 12.0, 13.0], endpoint=SeriesEndpoint.MONTHLY_ADJUSTED)
    windowed = apply_window(raw, resolve_policy("ALL"), now=SESSION_NOW)

    assert [p.close for p in windowed.points] == [10.0, 11.0, 12.0, 13.0]
    assert windowed.used_fallback is False


def test_count_rule_takes_most_recent_points():
    raw = raw_series([float(i) for i in range(10)])
    policy = resolve_policy("1M").model_copy(
        update={"window": WindowRule(kind=WindowKind.COUNT, count=3)}
    )
    windowed = apply_window(raw, policy, now=SESSION_NOW)
    assert [p.close for p in windowed.points] == [7.0, 8.0, 9.0]


# ---------------------------------------------------------------------------
# Properties and edge cases
# ---------------------------------------------------------------------------


def test_empty_raw_series_raises():
    raw = raw_series([])
    with pytest.raises(EmptyWindow):
        apply_window(raw, resolve_policy("1M"), now=SESSION_NOW)


@pytest.mark.parametrize("label", ["1D", "5D", "1M", "6M", "YTD", "1Y", "5Y", "ALL"])
def test_window_is_chronological_and_idempotent(label):
    raw = raw_series([100.0 + (i % 7) for i in range(400)], start=datetime(2023, 2, 1))
    policy = resolve_policy(label, SESSION_NOW)

    first = apply_window(raw, policy, now=SESSION_NOW)
    second = apply_window(raw, policy, now=SESSION_NOW)

    assert first == second
    assert first.points
    _assert_chronological(first)


def test_window_cutoff_clamps_month_end():
    rule = WindowRule(kind=WindowKind.DATE_CUTOFF, months=1)
    assert window_cutoff(rule, datetime(2024, 3, 31, 10, 0)) == datetime(2024, 2, 29, 10, 0)


def test_window_cutoff_crosses_year_boundary():
    rule = WindowRule(kind=WindowKind.DATE_CUTOFF, months=6)
    assert window_cutoff(rule, datetime(2024, 3, 8)) == datetime(2023, 9, 8)


def test_exchange_now_converts_to_exchange_clock():
    assert exchange_now("US/Eastern", datetime(2024, 3, 8, 20, 0, tzinfo=timezone.utc)) == datetime(
        2024, 3, 8, 15, 0
    )
