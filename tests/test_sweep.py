"""Unit tests for backtesting.sweep (grid orchestrator)."""

import math

import pytest
from leverage_dca.core.types import Candle, CandleSeries, Direction, StrategyConfig
from leverage_dca.backtesting.baseline import accumulate
from leverage_dca.backtesting.engine import simulate
from leverage_dca.backtesting.sweep import (
    ParameterRange,
    _init_worker,
    _run_chunk,
    _run_worker_chunk,
    build_grid,
    delta_percent,
    sweep,
)


def wave_series(n=300):
    candles = []
    for k in range(n):
        mid = 100 + 15 * math.sin(k / 9) + 5 * math.sin(k / 2.3)
        candles.append(Candle(
            timestamp=k * 3_600_000,
            open=mid,
            high=mid * 1.02,
            low=mid * 0.98,
            close=mid * (1.004 if k % 3 else 0.996),
        ))
    return CandleSeries.from_candles(candles)


SHAPE = StrategyConfig(buy_frequency_bars=6, buy_amount=100.0, trade_duration_bars=4)


def test_parameter_range_inclusive():
    assert ParameterRange(50, 1000, 50).values()[-1] == 1000
    assert len(ParameterRange(50, 1000, 50)) == 20
    assert len(ParameterRange(5, 100, 1)) == 96
    assert ParameterRange(0.1, 0.3, 0.1).values() == [0.1, 0.2, 0.3]
    assert ParameterRange(5, 5, 1).values() == [5]


def test_parameter_range_validation():
    with pytest.raises(ValueError):
        ParameterRange(1, 10, 0).values()
    with pytest.raises(ValueError):
        ParameterRange(10, 1, 1).values()


def test_build_grid_leverage_outer():
    grid = build_grid(ParameterRange(5, 6, 1), ParameterRange(50, 100, 50))
    assert grid == [(5, 50), (5, 100), (6, 50), (6, 100)]
    assert len(build_grid(ParameterRange(5, 100, 1), ParameterRange(50, 1000, 50))) == 1920


def test_sweep_sorted_by_delta_descending():
    series = wave_series()
    baseline = accumulate(series, SHAPE.buy_frequency_bars, SHAPE.buy_amount)
    result = sweep(series, baseline, SHAPE, ParameterRange(2, 30, 4), ParameterRange(20, 200, 60))
    deltas = [r.delta_pct for r in result.rows]
    assert deltas == sorted(deltas, reverse=True)
    assert result.cell_count == 8 * 4
    assert not result.failures


def test_sweep_rows_match_direct_simulation():
    series = wave_series()
    baseline = accumulate(series, SHAPE.buy_frequency_bars, SHAPE.buy_amount)
    result = sweep(series, baseline, SHAPE, ParameterRange(3, 9, 3), ParameterRange(100, 100, 1))
    for row in result.rows:
        direct = simulate(series, SHAPE.with_params(row.leverage, row.profit_target_pct))
        assert row.result == direct
        assert row.delta_pct == delta_percent(direct.final_units, baseline)


def test_single_cell_equal_to_baseline_has_zero_delta():
    series = wave_series()
    cell = SHAPE.with_params(10, 150)
    final = simulate(series, cell).final_units
    result = sweep(series, final, SHAPE, ParameterRange(10, 10, 1), ParameterRange(150, 150, 1))
    assert len(result.rows) == 1
    assert result.rows[0].delta_pct == 0


def test_outcome_counts_exhaustive_for_every_cell():
    series = wave_series()
    baseline = accumulate(series, SHAPE.buy_frequency_bars, SHAPE.buy_amount)
    n = len(series)
    step, dur = SHAPE.buy_frequency_bars, SHAPE.trade_duration_bars
    resolvable = sum(1 for i in range(0, n, step) if i + step < n and i + dur < n)
    result = sweep(series, baseline, SHAPE, ParameterRange(5, 50, 15), ParameterRange(50, 500, 150))
    for row in result.rows:
        assert row.result.resolved_count == resolvable


def test_short_direction_sweep():
    series = wave_series()
    shape = StrategyConfig(buy_frequency_bars=6, buy_amount=100.0, trade_duration_bars=4, direction=Direction.SHORT)
    baseline = accumulate(series, shape.buy_frequency_bars, shape.buy_amount)
    result = sweep(series, baseline, shape, ParameterRange(5, 10, 5), ParameterRange(50, 100, 50))
    assert len(result.rows) == 4


def test_failing_cell_is_isolated():
    # leverage 5 liquidates on bar 1 (low 80); leverage 2 survives to a zero close
    series = CandleSeries.from_candles([
        Candle(0, 100, 100, 100, 100),
        Candle(1, 100, 100, 80, 0.0),
        Candle(2, 100, 100, 100, 100),
    ])
    shape = StrategyConfig(buy_frequency_bars=2, buy_amount=100.0, trade_duration_bars=1)
    result = sweep(series, 1.0, shape, ParameterRange(2, 5, 3), ParameterRange(50, 50, 1))
    assert [r.leverage for r in result.rows] == [5]
    assert result.rows[0].result.liquidated_count == 1
    assert len(result.failures) == 1
    assert result.failures[0].leverage == 2
    assert "SimulationError" in result.failures[0].error


def test_degenerate_parameters_rejected_before_running():
    series = wave_series(50)
    with pytest.raises(ValueError):
        sweep(series, 1.0, SHAPE, ParameterRange(0, 10, 5), ParameterRange(50, 100, 50))
    with pytest.raises(ValueError):
        sweep(series, 1.0, SHAPE, ParameterRange(5, 10, 5), ParameterRange(0, 100, 50))
    with pytest.raises(ValueError):
        sweep(series, 1.0, StrategyConfig(0, 100.0, 4), ParameterRange(5, 10, 5), ParameterRange(50, 100, 50))
    # bar counts must be integers
    for shape in (StrategyConfig(2.0, 100.0, 1), StrategyConfig(2, 100.0, 2.5)):
        with pytest.raises(ValueError, match="integer"):
            sweep(series, 1.0, shape, ParameterRange(5, 5, 1), ParameterRange(50, 50, 1))
    with pytest.raises(ValueError):
        sweep(series, 0.0, SHAPE, ParameterRange(5, 10, 5), ParameterRange(50, 100, 50))
    with pytest.raises(ValueError):
        sweep(series, float("nan"), SHAPE, ParameterRange(5, 10, 5), ParameterRange(50, 100, 50))


def test_parallel_matches_serial():
    series = wave_series()
    baseline = accumulate(series, SHAPE.buy_frequency_bars, SHAPE.buy_amount)
    lev, pt = ParameterRange(2, 40, 2), ParameterRange(25, 300, 25)
    serial = sweep(series, baseline, SHAPE, lev, pt, workers=1)
    parallel = sweep(series, baseline, SHAPE, lev, pt, workers=2)
    assert parallel.rows == serial.rows
    assert parallel.failures == serial.failures


def test_worker_chunk_reads_initialized_context():
    series = wave_series(60)
    baseline = accumulate(series, SHAPE.buy_frequency_bars, SHAPE.buy_amount)
    cells = build_grid(ParameterRange(5, 10, 5), ParameterRange(50, 100, 50))
    _init_worker(series, SHAPE, baseline)
    assert _run_worker_chunk(cells) == _run_chunk(series, SHAPE, baseline, cells)
