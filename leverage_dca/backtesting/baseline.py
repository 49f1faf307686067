"""Classic (unleveraged) DCA: the denominator every leveraged result is compared to."""

from __future__ import annotations
import logging

from leverage_dca.core.types import CandleSeries

logger = logging.getLogger("leverage_dca.backtest.baseline")


def accumulate(series: CandleSeries, buy_frequency_bars: int, buy_amount: float) -> float:
    """
    Units bought by spending buy_amount at the close of every buy_frequency_bars-th bar,
    starting at bar 0. Depends only on closes at those bars.
    """
    if not isinstance(buy_frequency_bars, int) or isinstance(buy_frequency_bars, bool) or buy_frequency_bars <= 0:
        raise ValueError(f"buy_frequency_bars must be an integer > 0, got {buy_frequency_bars!r}")
    if buy_amount <= 0:
        raise ValueError(f"buy_amount must be > 0, got {buy_amount}")
    closes = series.closes
    units = 0.0
    buys = 0
    for i in range(0, len(closes), buy_frequency_bars):
        units += buy_amount / closes[i]
        buys += 1
    logger.debug("Baseline DCA: %d buys of %.2f -> %.8f units", buys, buy_amount, units)
    return units
