"""
Historical klines from Binance spot, saved in the CSV format the loader reads.
Public market data: API keys are optional.
"""

from __future__ import annotations
import functools
import logging
import time
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from binance.client import Client
from binance.exceptions import BinanceAPIException

logger = logging.getLogger("leverage_dca.data.binance")

KLINE_COLUMNS = [
    "open_time", "open", "high", "low", "close", "volume",
    "close_time", "quote_av", "num_trades", "tb_base_av", "tb_quote_av", "ignore",
]
RATE_LIMIT_STATUSES = (429, 418)


def retry_on_rate_limit(max_retries: int = 3, base_delay: float = 1.0):
    """Retry a kline request with exponential backoff while Binance answers 429/418."""
    def decorator(f):
        @functools.wraps(f)
        def wrapped(*args, **kwargs):
            for attempt in range(1, max_retries + 1):
                try:
                    return f(*args, **kwargs)
                except BinanceAPIException as e:
                    if e.status_code not in RATE_LIMIT_STATUSES or attempt == max_retries:
                        raise
                    delay = base_delay * 2 ** (attempt - 1)
                    logger.warning(
                        "Binance rate limit (%s) on %s, attempt %d/%d, sleeping %.1fs",
                        e.status_code, f.__name__, attempt, max_retries, delay,
                    )
                    time.sleep(delay)
        return wrapped
    return decorator


def klines_to_frame(raw: list) -> pd.DataFrame:
    """Binance kline rows -> DataFrame with columns timestamp, open, high, low, close."""
    df = pd.DataFrame(raw, columns=KLINE_COLUMNS)
    df[["open", "high", "low", "close"]] = df[["open", "high", "low", "close"]].astype(float)
    df["timestamp"] = df["open_time"].astype("int64")
    return df[["timestamp", "open", "high", "low", "close"]]


class BinanceKlineSource:
    """Thin wrapper over python-binance for historical OHLC."""

    def __init__(self, api_key: str = "", api_secret: str = "", client: Optional[Client] = None):
        self._client = client or Client(api_key or None, api_secret or None)

    @retry_on_rate_limit(max_retries=3, base_delay=1.0)
    def get_historical_klines(
        self,
        symbol: str,
        interval: str,
        start: str,
        end: Optional[str] = None,
    ) -> pd.DataFrame:
        raw = self._client.get_historical_klines(symbol, interval, start, end)
        logger.info("Fetched %d %s klines for %s from %s", len(raw), interval, symbol, start)
        return klines_to_frame(raw)


def download_csv(
    source: BinanceKlineSource,
    symbol: str,
    interval: str,
    start: str,
    path: Union[str, Path],
    end: Optional[str] = None,
) -> int:
    """Fetch klines and write Timestamp,Open,High,Low,Close CSV. Returns row count."""
    df = source.get_historical_klines(symbol, interval, start, end)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    out = df.rename(columns={
        "timestamp": "Timestamp", "open": "Open", "high": "High", "low": "Low", "close": "Close",
    })
    out.to_csv(path, index=False)
    logger.info("Wrote %d rows to %s", len(out), path)
    return len(out)
