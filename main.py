#!/usr/bin/env python3
"""
Leveraged DCA backtester CLI: sweep | simulate | download
Usage:
  python main.py sweep [--config config.yaml] [--workers N]
  python main.py simulate --leverage 10 --profit-target 200 [--config config.yaml]
  python main.py download --start 2022-01-01 [--end 2023-01-01] [--config config.yaml]
"""

from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path

# Project root
ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from leverage_dca.core.config import Config, load_config
from leverage_dca.core.logger import setup_logging
from leverage_dca.core.types import CandleSeries
from leverage_dca.backtesting.baseline import accumulate
from leverage_dca.backtesting.engine import simulate
from leverage_dca.backtesting.sweep import delta_percent, sweep
from leverage_dca.analytics.metrics import compute_trade_stats
from leverage_dca.data.loader import load_series
from leverage_dca.reporting.table import (
    export_csv,
    failures_to_frame,
    format_summary,
    render_table,
    rows_to_frame,
)
from leverage_dca.utils.telegram import send_telegram

logger = logging.getLogger("leverage_dca")


def _load(config: Config) -> CandleSeries:
    return load_series(
        config.csv_path,
        start_date=config.start_date,
        start_hour=config.start_hour,
        duration_days=config.duration_days,
        timeframe=config.timeframe,
    )


def _print_header(config: Config, series: CandleSeries, baseline: float) -> None:
    print(f"\n--- Leveraged DCA | {config.symbol} {config.timeframe} | {config.direction.value} ---")
    print(f"DCA amount: {config.buy_amount}")
    print(f"DCA frequency (days): {config.buy_frequency_days}")
    print(f"DCA duration (days): {config.duration_days or 'all'} ({len(series)} bars)")
    print(f"Position duration (hours): {config.trade_duration_hours}")
    print(f"Starting: {config.start_date or 'first bar'} {config.start_hour}")
    print(f"Units accumulated with classic DCA: {baseline:.4f}")


def run_sweep(config_path: Path | None, workers: int | None = None) -> int:
    """Sweep leverage x take-profit grid and print the ranked table."""
    config = load_config(config_path, ROOT)
    setup_logging(config.log_level, config.log_dir, config.log_file)
    try:
        series = _load(config)
        shape = config.strategy_shape()
        baseline = accumulate(series, shape.buy_frequency_bars, shape.buy_amount)
        result = sweep(
            series,
            baseline,
            shape,
            config.leverage_range(),
            config.profit_range(),
            workers=workers or config.workers,
        )
    except (OSError, ValueError) as e:
        logger.error("Sweep aborted: %s", e)
        return 1

    _print_header(config, series, baseline)
    table = rows_to_frame(result)
    print(f"\n--- Top {config.top} of {len(table)} configurations ---")
    print(render_table(table, top=config.top))
    if result.failures:
        print(f"\n--- {len(result.failures)} failed configurations ---")
        print(render_table(failures_to_frame(result)))
    if config.output_csv:
        path = export_csv(table, config.output_csv)
        logger.info("Full table written to %s", path)
    send_telegram(format_summary(result, config.symbol), config.telegram_bot_token, config.telegram_chat_id)
    return 0


def run_simulate(config_path: Path | None, leverage: float, profit_target: float) -> int:
    """Run one configuration and print outcome counts and trade statistics."""
    config = load_config(config_path, ROOT)
    setup_logging(config.log_level, config.log_dir, config.log_file)
    try:
        series = _load(config)
        cfg = config.strategy_shape(leverage, profit_target)
        cfg.validate()
        baseline = accumulate(series, cfg.buy_frequency_bars, cfg.buy_amount)
        result = simulate(series, cfg, record_trades=True)
    except (OSError, ArithmeticError, ValueError) as e:
        logger.error("Simulation failed: %s", e)
        return 1

    _print_header(config, series, baseline)
    stats = compute_trade_stats(result.trades)
    print(f"\n--- {leverage}x, take profit {profit_target}% ---")
    print(f"Units accumulated: {result.final_units:.4f} ({delta_percent(result.final_units, baseline):+.2f}% vs classic DCA)")
    print(f"Entries: {result.entry_count} (skipped, window past data end: {result.skipped_count})")
    print(f"Liquidations: {result.liquidated_count}")
    print(f"Take profits: {result.profit_taken_count}")
    print(f"Closed at window end: {result.time_expired_count}")
    print(f"Win rate: {stats.win_rate*100:.1f}%")
    print(f"Profit factor: {stats.profit_factor:.2f}")
    print(f"Expectancy: {stats.expectancy:.2f} per entry")
    print(f"Max drawdown of cumulative PnL: {stats.max_drawdown:.2f}")
    return 0


def run_download(config_path: Path | None, start: str, end: str | None) -> int:
    """Fetch klines from Binance into the configured CSV path."""
    from leverage_dca.data.binance import BinanceKlineSource, download_csv

    config = load_config(config_path, ROOT)
    setup_logging(config.log_level, config.log_dir, config.log_file)
    source = BinanceKlineSource(config.binance_api_key, config.binance_api_secret)
    try:
        rows = download_csv(source, config.symbol, config.timeframe, start, config.csv_path, end)
    except Exception as e:
        logger.exception("Download failed: %s", e)
        return 1
    print(f"Saved {rows} {config.timeframe} candles for {config.symbol} to {config.csv_path}")
    return 0


def main() -> int:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    parser = argparse.ArgumentParser(description="Leveraged DCA backtester")
    sub = parser.add_subparsers(dest="mode", required=True)

    p_sweep = sub.add_parser("sweep", parents=[common], help="Sweep leverage x take-profit grid")
    p_sweep.add_argument("--workers", type=int, default=None, help="Worker processes (overrides config)")

    p_sim = sub.add_parser("simulate", parents=[common], help="Run a single configuration")
    p_sim.add_argument("--leverage", type=float, required=True)
    p_sim.add_argument("--profit-target", type=float, required=True, help="Take profit in %% of margin")

    p_dl = sub.add_parser("download", parents=[common], help="Download klines from Binance to the configured CSV")
    p_dl.add_argument("--start", required=True, help="Start date, e.g. 2022-01-01")
    p_dl.add_argument("--end", default=None, help="End date (optional)")

    args = parser.parse_args()
    try:
        if args.mode == "sweep":
            return run_sweep(args.config, args.workers)
        if args.mode == "simulate":
            return run_simulate(args.config, args.leverage, args.profit_target)
        return run_download(args.config, args.start, args.end)
    except ValueError as e:
        # Bad config.yaml or env values, before logging is set up
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
