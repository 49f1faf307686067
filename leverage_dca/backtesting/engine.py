"""
Position simulator: one leveraged entry per DCA period, tracked bar-by-bar
until liquidation, take-profit, or the end of the holding window.
"""

from __future__ import annotations
import logging
import math
from typing import List

from leverage_dca.core.types import (
    CandleSeries,
    ExitReason,
    SimulationError,
    SimulationResult,
    StrategyConfig,
    TradeRecord,
)
from leverage_dca.backtesting.levels import (
    is_liquidated,
    is_profit_taken,
    liquidation_price,
    profit_limit_price,
    profit_or_loss,
    remaining_capital,
)

logger = logging.getLogger("leverage_dca.backtest")


def _checked_price(value: float, index: int, label: str) -> float:
    if not math.isfinite(value) or value <= 0:
        raise SimulationError(f"invalid {label} price {value!r} at bar {index}")
    return value


class PositionSimulator:
    """
    Runs one StrategyConfig over a CandleSeries.
    Entries at every buy_frequency_bars-th bar while a full next period exists.
    Per bar, liquidation is checked before take-profit. Surviving margin is
    rebought as units at the close of the window's exit bar.
    """

    def __init__(self, config: StrategyConfig):
        config.validate()
        self.config = config

    def run(self, series: CandleSeries, record_trades: bool = False) -> SimulationResult:
        cfg = self.config
        opens, highs, lows, closes = series.opens, series.highs, series.lows, series.closes
        n = len(series)
        step = cfg.buy_frequency_bars
        duration = cfg.trade_duration_bars
        direction = cfg.direction

        final_units = 0.0
        liquidated = profit_taken = expired = skipped = 0
        trades: List[TradeRecord] = []

        i = 0
        while i + step < n:
            exit_index = i + duration
            if exit_index >= n:
                # Not enough future bars to evaluate the window
                skipped += 1
                i += step
                continue

            entry_price = _checked_price(opens[i], i, "entry")
            units = (cfg.buy_amount * cfg.leverage) / entry_price
            liq_price = liquidation_price(entry_price, cfg.leverage, direction)
            limit_price = profit_limit_price(entry_price, cfg.profit_target_pct, cfg.leverage, direction)

            outcome = ExitReason.TIME_EXPIRED
            for j in range(i + 1, exit_index + 1):
                if is_liquidated(lows[j], highs[j], liq_price, direction):
                    outcome = ExitReason.LIQUIDATED
                    break
                if is_profit_taken(lows[j], highs[j], limit_price, direction):
                    outcome = ExitReason.PROFIT_TAKEN
                    break

            if outcome == ExitReason.LIQUIDATED:
                liquidated += 1
                if record_trades:
                    trades.append(TradeRecord(
                        entry_index=i,
                        exit_index=j,
                        entry_price=entry_price,
                        liquidation_price=liq_price,
                        profit_limit_price=limit_price,
                        units=units,
                        outcome=outcome,
                        exit_price=liq_price,
                        profit_or_loss=-cfg.buy_amount,
                    ))
                i += step
                continue

            exit_close = _checked_price(closes[exit_index], exit_index, "exit close")
            exit_price = limit_price if outcome == ExitReason.PROFIT_TAKEN else exit_close
            pnl = profit_or_loss(units * exit_price, units, entry_price, direction)
            remaining = remaining_capital(pnl, cfg.buy_amount)
            rebought = remaining / exit_close
            final_units += rebought
            if outcome == ExitReason.PROFIT_TAKEN:
                profit_taken += 1
            else:
                expired += 1
            if record_trades:
                trades.append(TradeRecord(
                    entry_index=i,
                    exit_index=exit_index,
                    entry_price=entry_price,
                    liquidation_price=liq_price,
                    profit_limit_price=limit_price,
                    units=units,
                    outcome=outcome,
                    exit_price=exit_price,
                    profit_or_loss=pnl,
                    remaining_capital=remaining,
                    units_reinvested=rebought,
                ))
            i += step

        if not math.isfinite(final_units):
            raise SimulationError(f"non-finite result {final_units!r}")
        logger.debug(
            "leverage=%s tp=%s%% %s: units=%.8f liq=%d tp=%d expired=%d skipped=%d",
            cfg.leverage, cfg.profit_target_pct, direction.value, final_units,
            liquidated, profit_taken, expired, skipped,
        )
        return SimulationResult(
            final_units=final_units,
            liquidated_count=liquidated,
            profit_taken_count=profit_taken,
            time_expired_count=expired,
            skipped_count=skipped,
            trades=tuple(trades),
        )


def simulate(series: CandleSeries, config: StrategyConfig, record_trades: bool = False) -> SimulationResult:
    """Run the position simulator for one configuration."""
    return PositionSimulator(config).run(series, record_trades=record_trades)
