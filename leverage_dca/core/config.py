"""
Load configuration from config.yaml and .env. Secrets (Binance, Telegram) from env.
"""

from __future__ import annotations
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

from leverage_dca.core.types import Direction, ParameterRange, StrategyConfig
from leverage_dca.utils.timeframes import days_to_bars, hours_to_bars


def _env_path(project_root: Optional[Path] = None) -> Path:
    root = project_root or Path(__file__).resolve().parents[2]
    return root / ".env"


def load_dotenv_if_exists(project_root: Optional[Path] = None) -> None:
    """Load .env from project root if present."""
    path = _env_path(project_root)
    if path.exists():
        load_dotenv(path)


def parse_direction(value: Any) -> Direction:
    if isinstance(value, Direction):
        return value
    text = str(value).strip().lower()
    try:
        return Direction(text)
    except ValueError:
        raise ValueError(f"direction must be 'long' or 'short', got {value!r}") from None


def load_config(config_path: Optional[Path] = None, project_root: Optional[Path] = None) -> "Config":
    """Load config.yaml and overlay with env. Returns Config."""
    load_dotenv_if_exists(project_root)
    root = project_root or Path(__file__).resolve().parents[2]
    path = config_path or root / "config.yaml"
    data: dict[str, Any] = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    # Env overrides; unparsable numbers fall back to the file value
    def env(key: str, default: Any = "") -> str:
        value = os.getenv(key)
        if value is None:
            return "" if default is None else str(default)
        return value.strip()

    def env_int(key: str, default: int = 0) -> int:
        try:
            return int(os.getenv(key, str(default)))
        except ValueError:
            return default

    def env_float(key: str, default: float = 0.0) -> float:
        try:
            return float(os.getenv(key, str(default)))
        except ValueError:
            return default

    source = data.get("data", {}) or {}
    strategy = data.get("strategy", {}) or {}
    grid = data.get("sweep", {}) or {}
    output = data.get("output", {}) or {}
    logging_cfg = data.get("logging", {}) or {}
    telegram = data.get("telegram", {}) or {}

    return Config(
        # Data
        csv_path=Path(env("CSV_PATH", source.get("csv_path", "data/btc_usdt.csv"))),
        symbol=env("SYMBOL", source.get("symbol", "BTCUSDT")).upper(),
        timeframe=env("TIMEFRAME", source.get("timeframe", "1h")),
        start_date=env("START_DATE", source.get("start_date")) or None,
        start_hour=env("START_HOUR", source.get("start_hour", "00:00")),
        duration_days=env_float("DURATION_DAYS", source.get("duration_days", 0.0)),
        # Strategy
        buy_amount=env_float("BUY_AMOUNT", strategy.get("buy_amount", 100.0)),
        buy_frequency_days=env_float("BUY_FREQUENCY_DAYS", strategy.get("buy_frequency_days", 4)),
        trade_duration_hours=env_float("TRADE_DURATION_HOURS", strategy.get("trade_duration_hours", 24)),
        direction=parse_direction(env("DIRECTION", strategy.get("direction", "long"))),
        # Sweep
        leverage_min=env_float("LEVERAGE_MIN", grid.get("leverage_min", 5)),
        leverage_max=env_float("LEVERAGE_MAX", grid.get("leverage_max", 100)),
        leverage_step=env_float("LEVERAGE_STEP", grid.get("leverage_step", 1)),
        profit_target_min=env_float("PROFIT_TARGET_MIN", grid.get("profit_target_min", 50)),
        profit_target_max=env_float("PROFIT_TARGET_MAX", grid.get("profit_target_max", 1000)),
        profit_target_step=env_float("PROFIT_TARGET_STEP", grid.get("profit_target_step", 50)),
        workers=env_int("WORKERS", grid.get("workers", 1)),
        # Output
        output_csv=env("OUTPUT_CSV", output.get("csv_path")) or None,
        top=env_int("TOP", output.get("top", 20)),
        # Secrets (env only)
        binance_api_key=env("BINANCE_API_KEY"),
        binance_api_secret=env("BINANCE_API_SECRET"),
        telegram_bot_token=env("TELEGRAM_BOT_TOKEN", telegram.get("bot_token", "")),
        telegram_chat_id=env("TELEGRAM_CHAT_ID", telegram.get("chat_id", "")),
        # Logging
        log_level=logging_cfg.get("level", "INFO"),
        log_dir=Path(logging_cfg.get("log_dir", "logs")),
        log_file=logging_cfg.get("log_file", "leverage_dca.log"),
    )


class Config:
    """Unified configuration. Immutable after load."""

    __slots__ = (
        "csv_path", "symbol", "timeframe", "start_date", "start_hour", "duration_days",
        "buy_amount", "buy_frequency_days", "trade_duration_hours", "direction",
        "leverage_min", "leverage_max", "leverage_step",
        "profit_target_min", "profit_target_max", "profit_target_step", "workers",
        "output_csv", "top",
        "binance_api_key", "binance_api_secret",
        "telegram_bot_token", "telegram_chat_id",
        "log_level", "log_dir", "log_file",
    )

    def __init__(
        self,
        csv_path: Path = Path("data/btc_usdt.csv"),
        symbol: str = "BTCUSDT",
        timeframe: str = "1h",
        start_date: Optional[str] = None,
        start_hour: str = "00:00",
        duration_days: float = 0.0,
        buy_amount: float = 100.0,
        buy_frequency_days: float = 4,
        trade_duration_hours: float = 24,
        direction: Direction = Direction.LONG,
        leverage_min: float = 5,
        leverage_max: float = 100,
        leverage_step: float = 1,
        profit_target_min: float = 50,
        profit_target_max: float = 1000,
        profit_target_step: float = 50,
        workers: int = 1,
        output_csv: Optional[str] = None,
        top: int = 20,
        binance_api_key: str = "",
        binance_api_secret: str = "",
        telegram_bot_token: str = "",
        telegram_chat_id: str = "",
        log_level: str = "INFO",
        log_dir: Path = None,
        log_file: str = "leverage_dca.log",
    ):
        self.csv_path = Path(csv_path)
        self.symbol = symbol
        self.timeframe = timeframe
        self.start_date = start_date
        self.start_hour = start_hour
        self.duration_days = duration_days
        self.buy_amount = buy_amount
        self.buy_frequency_days = buy_frequency_days
        self.trade_duration_hours = trade_duration_hours
        self.direction = direction
        self.leverage_min = leverage_min
        self.leverage_max = leverage_max
        self.leverage_step = leverage_step
        self.profit_target_min = profit_target_min
        self.profit_target_max = profit_target_max
        self.profit_target_step = profit_target_step
        self.workers = workers
        self.output_csv = output_csv
        self.top = top
        self.binance_api_key = binance_api_key
        self.binance_api_secret = binance_api_secret
        self.telegram_bot_token = telegram_bot_token
        self.telegram_chat_id = telegram_chat_id
        self.log_level = log_level
        self.log_dir = Path(log_dir) if log_dir else Path("logs")
        self.log_file = log_file

    def strategy_shape(self, leverage: float = 1.0, profit_target_pct: float = 100.0) -> StrategyConfig:
        """StrategyConfig with cadence and holding window converted to bars of self.timeframe."""
        return StrategyConfig(
            buy_frequency_bars=days_to_bars(self.buy_frequency_days, self.timeframe),
            buy_amount=self.buy_amount,
            trade_duration_bars=hours_to_bars(self.trade_duration_hours, self.timeframe),
            leverage=leverage,
            profit_target_pct=profit_target_pct,
            direction=self.direction,
        )

    def leverage_range(self) -> ParameterRange:
        return ParameterRange(self.leverage_min, self.leverage_max, self.leverage_step)

    def profit_range(self) -> ParameterRange:
        return ParameterRange(self.profit_target_min, self.profit_target_max, self.profit_target_step)
