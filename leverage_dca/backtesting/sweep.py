"""
Grid sweep: run the position simulator over every (leverage, profit target) pair
and rank cells by their result relative to classic DCA.
"""

from __future__ import annotations
import logging
import math
from concurrent.futures import ProcessPoolExecutor
from typing import List, Sequence, Tuple, Union

from leverage_dca.core.types import (
    CandleSeries,
    GridFailure,
    GridResultRow,
    ParameterRange,
    StrategyConfig,
    SweepResult,
)
from leverage_dca.backtesting.engine import simulate

logger = logging.getLogger("leverage_dca.backtest.sweep")

Cell = Tuple[float, float]
CellOutcome = Union[GridResultRow, GridFailure]

# Per-process sweep context, set once by the pool initializer
_worker_context: Tuple = ()


def build_grid(leverage_range: ParameterRange, profit_range: ParameterRange) -> List[Cell]:
    """Cartesian product, leverage outer, profit target inner."""
    return [(lev, pt) for lev in leverage_range.values() for pt in profit_range.values()]


def delta_percent(final_units: float, baseline_units: float) -> float:
    """Percent difference of final_units vs the classic DCA result."""
    return (final_units / baseline_units) * 100 - 100


def _validate_inputs(
    baseline_units: float,
    shape: StrategyConfig,
    leverage_range: ParameterRange,
    profit_range: ParameterRange,
) -> None:
    if not math.isfinite(baseline_units) or baseline_units <= 0:
        raise ValueError(f"baseline_units must be a finite number > 0, got {baseline_units}")
    leverage_range.validate("leverage")
    profit_range.validate("profit_target")
    if leverage_range.start <= 0:
        raise ValueError(f"leverage must be > 0, range starts at {leverage_range.start}")
    if profit_range.start <= 0:
        raise ValueError(f"profit target must be > 0, range starts at {profit_range.start}")
    # Checks cadence, duration, amount and direction using the first cell's params
    shape.with_params(leverage_range.start, profit_range.start).validate()


def run_cell(
    series: CandleSeries,
    shape: StrategyConfig,
    baseline_units: float,
    cell: Cell,
) -> CellOutcome:
    """Simulate one grid cell. Computation faults come back as a GridFailure."""
    leverage, profit_target = cell
    try:
        result = simulate(series, shape.with_params(leverage, profit_target))
        delta = delta_percent(result.final_units, baseline_units)
    except (ArithmeticError, ValueError) as e:
        return GridFailure(leverage=leverage, profit_target_pct=profit_target, error=f"{type(e).__name__}: {e}")
    return GridResultRow(leverage=leverage, profit_target_pct=profit_target, result=result, delta_pct=delta)


def _run_chunk(
    series: CandleSeries,
    shape: StrategyConfig,
    baseline_units: float,
    cells: Sequence[Cell],
) -> List[CellOutcome]:
    return [run_cell(series, shape, baseline_units, c) for c in cells]


def _init_worker(series: CandleSeries, shape: StrategyConfig, baseline_units: float) -> None:
    global _worker_context
    _worker_context = (series, shape, baseline_units)


def _run_worker_chunk(cells: Sequence[Cell]) -> List[CellOutcome]:
    series, shape, baseline_units = _worker_context
    return _run_chunk(series, shape, baseline_units, cells)


def _chunks(cells: List[Cell], n: int) -> List[List[Cell]]:
    size = max(1, math.ceil(len(cells) / n))
    return [cells[k:k + size] for k in range(0, len(cells), size)]


def sweep(
    series: CandleSeries,
    baseline_units: float,
    shape: StrategyConfig,
    leverage_range: ParameterRange,
    profit_range: ParameterRange,
    workers: int = 1,
) -> SweepResult:
    """
    Simulate every grid cell and rank by delta vs baseline (descending).
    shape carries cadence, amount, duration and direction; leverage and
    profit target come from the ranges. workers > 1 spreads cells over a
    process pool; output is identical to the serial run.
    """
    _validate_inputs(baseline_units, shape, leverage_range, profit_range)
    cells = build_grid(leverage_range, profit_range)
    logger.info(
        "Sweeping %d cells (leverage %s..%s step %s, profit target %s..%s step %s, workers=%d)",
        len(cells), leverage_range.start, leverage_range.stop, leverage_range.step,
        profit_range.start, profit_range.stop, profit_range.step, workers,
    )

    if workers > 1 and len(cells) > 1:
        # ~4 chunks per worker, submitted and collected in grid order
        chunks = _chunks(cells, workers * 4)
        outcomes: List[CellOutcome] = []
        # series is shipped once per worker, chunks carry only cells
        with ProcessPoolExecutor(
            max_workers=workers,
            initializer=_init_worker,
            initargs=(series, shape, baseline_units),
        ) as executor:
            futures = [executor.submit(_run_worker_chunk, chunk) for chunk in chunks]
            for future in futures:
                outcomes.extend(future.result())
    else:
        outcomes = _run_chunk(series, shape, baseline_units, cells)

    rows = [o for o in outcomes if isinstance(o, GridResultRow)]
    failures = [o for o in outcomes if isinstance(o, GridFailure)]
    for f in failures:
        logger.warning("Cell leverage=%s tp=%s%% failed: %s", f.leverage, f.profit_target_pct, f.error)
    # Stable sort: ties keep grid order
    rows.sort(key=lambda r: r.delta_pct, reverse=True)

    result = SweepResult(baseline_units=baseline_units, rows=rows, failures=failures)
    best = result.best
    if best is not None:
        logger.info(
            "Sweep done: %d ok, %d failed. Best: leverage=%s tp=%s%% delta=%.2f%%",
            len(rows), len(failures), best.leverage, best.profit_target_pct, best.delta_pct,
        )
    else:
        logger.info("Sweep done: %d ok, %d failed", len(rows), len(failures))
    return result
