"""
Price levels for a leveraged position: liquidation, profit limit, and exit settlement.
Fees and funding are not modeled.
"""

from __future__ import annotations

from leverage_dca.core.types import Direction


def liquidation_price(entry_price: float, leverage: float, direction: Direction = Direction.LONG) -> float:
    """
    Price at which the position loses its whole margin.
    Distance in percent of entry is 100 / leverage, e.g. entry 10000 at 25x:

        long:  10000 - ((100 / 25) / 100) * 10000 = 9600
        short: 10000 + ((100 / 25) / 100) * 10000 = 10400
    """
    distance_pct = 100 / leverage
    distance = (distance_pct / 100) * entry_price
    if direction == Direction.LONG:
        return entry_price - distance
    return entry_price + distance


def profit_limit_price(
    entry_price: float,
    profit_target_pct: float,
    leverage: float,
    direction: Direction = Direction.LONG,
) -> float:
    """
    Price at which the leveraged return on margin reaches profit_target_pct, e.g.
    entry 10000, 200% at 20x: 10000 + ((10000 * 200) / 100) / 20 = 11000.
    """
    move = entry_price * profit_target_pct / 100 / leverage
    if direction == Direction.LONG:
        return entry_price + move
    return entry_price - move


def is_liquidated(low: float, high: float, liq_price: float, direction: Direction = Direction.LONG) -> bool:
    """Inclusive: touching the level liquidates."""
    if direction == Direction.LONG:
        return low <= liq_price
    return high >= liq_price


def is_profit_taken(low: float, high: float, limit_price: float, direction: Direction = Direction.LONG) -> bool:
    """Inclusive: touching the level fills the take-profit."""
    if direction == Direction.LONG:
        return high >= limit_price
    return low <= limit_price


def profit_or_loss(exit_value: float, units: float, entry_price: float, direction: Direction = Direction.LONG) -> float:
    """Leveraged PnL in capital currency given the exit value of all units."""
    if direction == Direction.LONG:
        return exit_value - units * entry_price
    return units * entry_price - exit_value


def remaining_capital(pnl: float, buy_amount: float) -> float:
    """Margin returned after closing: committed capital plus/minus PnL. May be negative."""
    return pnl + buy_amount
