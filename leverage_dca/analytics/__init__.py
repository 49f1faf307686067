"""Analytics: per-trade statistics (win rate, profit factor, expectancy, drawdown)."""

from leverage_dca.analytics.metrics import (
    TradeStats,
    compute_trade_stats,
    win_rate,
    profit_factor,
    expectancy,
    max_drawdown,
)

__all__ = [
    "TradeStats",
    "compute_trade_stats",
    "win_rate",
    "profit_factor",
    "expectancy",
    "max_drawdown",
]
