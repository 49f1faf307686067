"""Backtesting: leveraged DCA position simulator, classic DCA baseline, grid sweep."""

from leverage_dca.backtesting.baseline import accumulate
from leverage_dca.backtesting.engine import PositionSimulator, simulate
from leverage_dca.backtesting.sweep import ParameterRange, build_grid, sweep

__all__ = [
    "accumulate",
    "PositionSimulator",
    "simulate",
    "ParameterRange",
    "build_grid",
    "sweep",
]
