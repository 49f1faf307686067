"""Unit tests for utils.timeframes."""

import pytest
from leverage_dca.utils.timeframes import timeframe_minutes, bars_per_day, hours_to_bars, days_to_bars


def test_timeframe_minutes():
    assert timeframe_minutes("5m") == 5
    assert timeframe_minutes("1h") == 60
    assert timeframe_minutes("1d") == 1440


def test_timeframe_invalid():
    with pytest.raises(ValueError):
        timeframe_minutes("1x")


def test_bars_per_day():
    assert bars_per_day("1h") == 24
    assert bars_per_day("15m") == 96
    assert bars_per_day("1d") == 1
    with pytest.raises(ValueError):
        bars_per_day("7h")


def test_days_and_hours_to_bars():
    assert days_to_bars(4, "1h") == 96
    assert hours_to_bars(24, "1h") == 24
    assert hours_to_bars(24, "4h") == 6
    with pytest.raises(ValueError):
        hours_to_bars(5, "4h")
