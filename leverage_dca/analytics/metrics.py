"""
Trade statistics for one simulated configuration: win rate, profit factor,
expectancy, drawdown of cumulative PnL. PnL is in capital currency per entry;
a liquidation counts as a loss of the committed buy amount.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from leverage_dca.core.types import ExitReason, TradeRecord


@dataclass
class TradeStats:
    """Aggregate trade statistics."""
    total_trades: int
    liquidations: int
    take_profits: int
    time_expired: int
    winning_trades: int
    losing_trades: int
    total_pnl: float
    win_rate: float
    profit_factor: float
    expectancy: float
    avg_win: float
    avg_loss: float
    max_drawdown: float


def win_rate(pnls: List[float]) -> float:
    """Fraction of trades with positive PnL."""
    if not pnls:
        return 0.0
    return sum(1 for p in pnls if p > 0) / len(pnls)


def profit_factor(pnls: List[float]) -> float:
    """Gross profit / gross loss. inf if there are wins and no losses, 0 if neither."""
    wins = sum(p for p in pnls if p > 0)
    losses = sum(-p for p in pnls if p < 0)
    if losses <= 0:
        return float("inf") if wins > 0 else 0.0
    return wins / losses


def expectancy(pnls: List[float]) -> float:
    """Average PnL per trade."""
    if not pnls:
        return 0.0
    return sum(pnls) / len(pnls)


def max_drawdown(pnls: List[float]) -> float:
    """Largest peak-to-trough fall of cumulative PnL (<= 0, in capital currency)."""
    if not pnls:
        return 0.0
    cum = np.concatenate([[0.0], np.cumsum(pnls)])
    peak = np.maximum.accumulate(cum)
    return float(np.min(cum - peak))


def compute_trade_stats(trades: Sequence[TradeRecord]) -> TradeStats:
    pnls = [t.profit_or_loss for t in trades]
    wins = [p for p in pnls if p > 0]
    losses = [p for p in pnls if p < 0]
    return TradeStats(
        total_trades=len(trades),
        liquidations=sum(1 for t in trades if t.outcome == ExitReason.LIQUIDATED),
        take_profits=sum(1 for t in trades if t.outcome == ExitReason.PROFIT_TAKEN),
        time_expired=sum(1 for t in trades if t.outcome == ExitReason.TIME_EXPIRED),
        winning_trades=len(wins),
        losing_trades=len(losses),
        total_pnl=float(sum(pnls)),
        win_rate=win_rate(pnls),
        profit_factor=profit_factor(pnls),
        expectancy=expectancy(pnls),
        avg_win=sum(wins) / len(wins) if wins else 0.0,
        avg_loss=sum(losses) / len(losses) if losses else 0.0,
        max_drawdown=max_drawdown(pnls),
    )
