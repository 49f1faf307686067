"""Core: config, types, logging."""

from leverage_dca.core.config import load_config, Config
from leverage_dca.core.types import (
    Candle,
    CandleSeries,
    Direction,
    ExitReason,
    GridFailure,
    GridResultRow,
    ParameterRange,
    SimulationError,
    SimulationResult,
    StrategyConfig,
    SweepResult,
    TradeRecord,
)
from leverage_dca.core.logger import setup_logging

__all__ = [
    "load_config",
    "Config",
    "Candle",
    "CandleSeries",
    "Direction",
    "ExitReason",
    "GridFailure",
    "GridResultRow",
    "ParameterRange",
    "SimulationError",
    "SimulationResult",
    "StrategyConfig",
    "SweepResult",
    "TradeRecord",
    "setup_logging",
]
