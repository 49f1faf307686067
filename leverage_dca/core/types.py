"""
Core data types: candles, strategy configuration, simulation and grid results.
"""

from __future__ import annotations
import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Tuple

import pandas as pd


class Direction(str, Enum):
    LONG = "long"
    SHORT = "short"


class ExitReason(str, Enum):
    LIQUIDATED = "liquidated"
    PROFIT_TAKEN = "profit_taken"
    TIME_EXPIRED = "time_expired"


class SimulationError(ArithmeticError):
    """Price data made a simulation cell non-computable (zero/negative/NaN price)."""


@dataclass(frozen=True)
class Candle:
    """OHLC candle. timestamp in ms since epoch."""
    timestamp: int
    open: float
    high: float
    low: float
    close: float


@dataclass(frozen=True)
class CandleSeries:
    """
    Ordered OHLC series stored as parallel tuples.
    Index-addressable; the simulator advances by bar count, not by timestamp.
    """
    timestamps: Tuple[int, ...]
    opens: Tuple[float, ...]
    highs: Tuple[float, ...]
    lows: Tuple[float, ...]
    closes: Tuple[float, ...]

    def __post_init__(self) -> None:
        n = len(self.timestamps)
        if not (len(self.opens) == len(self.highs) == len(self.lows) == len(self.closes) == n):
            raise ValueError("CandleSeries columns must have equal length")

    def __len__(self) -> int:
        return len(self.timestamps)

    def __getitem__(self, i: int) -> Candle:
        return Candle(
            timestamp=self.timestamps[i],
            open=self.opens[i],
            high=self.highs[i],
            low=self.lows[i],
            close=self.closes[i],
        )

    def __iter__(self) -> Iterator[Candle]:
        for i in range(len(self)):
            yield self[i]

    @classmethod
    def from_candles(cls, candles: Iterable[Candle]) -> "CandleSeries":
        candles = list(candles)
        return cls(
            timestamps=tuple(int(c.timestamp) for c in candles),
            opens=tuple(float(c.open) for c in candles),
            highs=tuple(float(c.high) for c in candles),
            lows=tuple(float(c.low) for c in candles),
            closes=tuple(float(c.close) for c in candles),
        )

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "CandleSeries":
        """Build from a DataFrame with columns: timestamp, open, high, low, close."""
        return cls(
            timestamps=tuple(int(t) for t in df["timestamp"].tolist()),
            opens=tuple(float(x) for x in df["open"].tolist()),
            highs=tuple(float(x) for x in df["high"].tolist()),
            lows=tuple(float(x) for x in df["low"].tolist()),
            closes=tuple(float(x) for x in df["close"].tolist()),
        )

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({
            "timestamp": list(self.timestamps),
            "open": list(self.opens),
            "high": list(self.highs),
            "low": list(self.lows),
            "close": list(self.closes),
        })


@dataclass(frozen=True)
class StrategyConfig:
    """One DCA configuration: cadence and holding window in bars, leverage and TP in percent."""
    buy_frequency_bars: int
    buy_amount: float
    trade_duration_bars: int
    leverage: float = 1.0
    profit_target_pct: float = 100.0
    direction: Direction = Direction.LONG

    def validate(self) -> None:
        """Raise ValueError for parameters that would make the simulation meaningless."""
        for name in ("buy_frequency_bars", "trade_duration_bars"):
            value = getattr(self, name)
            # Bar counts index the series directly
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ValueError(f"{name} must be an integer > 0, got {value!r}")
        for name in ("buy_amount", "leverage", "profit_target_pct"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"{name} must be a finite number > 0, got {value}")
        if not isinstance(self.direction, Direction):
            raise ValueError(f"direction must be a Direction, got {self.direction!r}")

    def with_params(self, leverage: float, profit_target_pct: float) -> "StrategyConfig":
        return replace(self, leverage=leverage, profit_target_pct=profit_target_pct)


@dataclass(frozen=True)
class ParameterRange:
    """Inclusive range start..stop with a fixed step."""
    start: float
    stop: float
    step: float

    def validate(self, name: str = "range") -> None:
        for attr in ("start", "stop", "step"):
            if not math.isfinite(getattr(self, attr)):
                raise ValueError(f"{name}.{attr} must be finite")
        if self.step <= 0:
            raise ValueError(f"{name}.step must be > 0, got {self.step}")
        if self.start > self.stop:
            raise ValueError(f"{name}.start {self.start} > stop {self.stop}")

    def values(self) -> List[float]:
        self.validate()
        count = int(math.floor((self.stop - self.start) / self.step + 1e-9)) + 1
        out = []
        for k in range(count):
            v = self.start + k * self.step
            # Keep integers as integers and drop float noise like 0.30000000000000004
            v = round(v, 10)
            out.append(int(v) if float(v).is_integer() else v)
        return out

    def __len__(self) -> int:
        return len(self.values())


@dataclass(frozen=True)
class TradeRecord:
    """One resolved entry, kept only when a simulation is asked to record trades."""
    entry_index: int
    exit_index: int
    entry_price: float
    liquidation_price: float
    profit_limit_price: float
    units: float
    outcome: ExitReason
    exit_price: Optional[float] = None
    profit_or_loss: float = 0.0
    remaining_capital: float = 0.0
    units_reinvested: float = 0.0


@dataclass(frozen=True)
class SimulationResult:
    """Aggregate of one pass over the series under one StrategyConfig."""
    final_units: float
    liquidated_count: int = 0
    profit_taken_count: int = 0
    time_expired_count: int = 0
    skipped_count: int = 0  # exit index past the end of the series
    trades: Tuple[TradeRecord, ...] = ()

    @property
    def resolved_count(self) -> int:
        return self.liquidated_count + self.profit_taken_count + self.time_expired_count

    @property
    def entry_count(self) -> int:
        return self.resolved_count + self.skipped_count


@dataclass(frozen=True)
class GridResultRow:
    leverage: float
    profit_target_pct: float
    result: SimulationResult
    delta_pct: float


@dataclass(frozen=True)
class GridFailure:
    leverage: float
    profit_target_pct: float
    error: str


@dataclass
class SweepResult:
    """Grid sweep output: rows sorted by delta_pct descending, failures in grid order."""
    baseline_units: float
    rows: List[GridResultRow] = field(default_factory=list)
    failures: List[GridFailure] = field(default_factory=list)

    @property
    def best(self) -> Optional[GridResultRow]:
        return self.rows[0] if self.rows else None

    @property
    def cell_count(self) -> int:
        return len(self.rows) + len(self.failures)
