"""Data: CSV price history loading and Binance kline download."""

from leverage_dca.data.loader import (
    load_candles_csv,
    filter_from,
    truncate_days,
    load_series,
    to_series,
)

__all__ = [
    "load_candles_csv",
    "filter_from",
    "truncate_days",
    "load_series",
    "to_series",
]
