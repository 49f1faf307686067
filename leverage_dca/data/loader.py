"""
Load OHLC history from CSV (Timestamp,Open,High,Low,Close; timestamp in ms)
and cut it down to the backtest window.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional, Set, Union

import pandas as pd

from leverage_dca.core.types import CandleSeries
from leverage_dca.utils.timeframes import bars_per_day

logger = logging.getLogger("leverage_dca.data")

COLUMNS = ["timestamp", "open", "high", "low", "close"]


def load_candles_csv(path: Union[str, Path]) -> pd.DataFrame:
    """
    Read a price CSV into a DataFrame with columns: timestamp, open, high, low, close.
    Malformed rows (missing/non-numeric values, non-positive prices) are dropped.
    Raises ValueError on missing columns or duplicated timestamps.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Price file not found: {path}")
    raw = pd.read_csv(path, skip_blank_lines=True)
    raw.columns = [str(c).strip().lower() for c in raw.columns]
    missing = [c for c in COLUMNS if c not in raw.columns]
    if missing:
        raise ValueError(f"{path.name}: missing columns {missing}")

    df = raw[COLUMNS].apply(pd.to_numeric, errors="coerce")
    bad = df.isna().any(axis=1) | (df[["open", "high", "low", "close"]] <= 0).any(axis=1)
    if bad.any():
        logger.warning("%s: dropping %d malformed rows", path.name, int(bad.sum()))
        df = df[~bad]
    df = df.astype({"timestamp": "int64"}).sort_values("timestamp", kind="stable").reset_index(drop=True)
    if df["timestamp"].duplicated().any():
        dupes = df.loc[df["timestamp"].duplicated(), "timestamp"].head(5).tolist()
        raise ValueError(f"{path.name}: duplicated timestamps {dupes}")

    gaps = check_uniform_step(df)
    if len(gaps) > 1:
        logger.warning("%s: non-uniform bar step, saw steps (ms) %s", path.name, sorted(gaps)[:5])
    logger.info("Loaded %d candles from %s", len(df), path)
    return df


def check_uniform_step(df: pd.DataFrame) -> Set[int]:
    """Distinct timestamp steps between consecutive rows. One element means uniform."""
    if len(df) < 2:
        return set()
    return set(int(s) for s in df["timestamp"].diff().dropna().unique())


def filter_from(df: pd.DataFrame, start_date: Optional[str], start_hour: str = "00:00") -> pd.DataFrame:
    """Keep rows at or after start_date start_hour (UTC, 'YYYY-MM-DD' and 'HH:MM')."""
    if not start_date:
        return df
    start = pd.to_datetime(f"{start_date} {start_hour}", format="%Y-%m-%d %H:%M", utc=True)
    start_ms = int(start.value // 1_000_000)
    return df[df["timestamp"] >= start_ms].reset_index(drop=True)


def truncate_days(df: pd.DataFrame, days: Optional[float], timeframe: str = "1h") -> pd.DataFrame:
    """Keep the first `days` worth of bars. None or 0 keeps everything."""
    if not days:
        return df
    return df.iloc[: int(days * bars_per_day(timeframe))].reset_index(drop=True)


def to_series(df: pd.DataFrame) -> CandleSeries:
    return CandleSeries.from_frame(df)


def load_series(
    path: Union[str, Path],
    start_date: Optional[str] = None,
    start_hour: str = "00:00",
    duration_days: Optional[float] = None,
    timeframe: str = "1h",
) -> CandleSeries:
    """Load, filter by start, truncate to duration, and convert to a CandleSeries."""
    df = load_candles_csv(path)
    df = filter_from(df, start_date, start_hour)
    df = truncate_days(df, duration_days, timeframe)
    if df.empty:
        raise ValueError(f"No candles left after filtering from {start_date} {start_hour}")
    logger.info(
        "Backtest window: %d bars from %s",
        len(df), pd.to_datetime(int(df["timestamp"].iloc[0]), unit="ms", utc=True),
    )
    return to_series(df)
