"""Sweep result tables: DataFrame conversion, text rendering, CSV export."""

from __future__ import annotations
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from leverage_dca.core.types import SweepResult

ROW_COLUMNS = [
    "Leverage",
    "Auto take profit in %",
    "Units accumulated",
    "Units accumulated in % vs classic DCA",
    "Closed positions",
    "Liquidations",
    "Take profits",
    "Skipped",
]


def rows_to_frame(result: SweepResult) -> pd.DataFrame:
    """One line per successful cell, in the sweep's ranking order."""
    records = [
        {
            "Leverage": r.leverage,
            "Auto take profit in %": r.profit_target_pct,
            "Units accumulated": round(r.result.final_units, 4),
            "Units accumulated in % vs classic DCA": round(r.delta_pct, 2),
            "Closed positions": r.result.time_expired_count,
            "Liquidations": r.result.liquidated_count,
            "Take profits": r.result.profit_taken_count,
            "Skipped": r.result.skipped_count,
        }
        for r in result.rows
    ]
    return pd.DataFrame(records, columns=ROW_COLUMNS)


def failures_to_frame(result: SweepResult) -> pd.DataFrame:
    return pd.DataFrame(
        [{"Leverage": f.leverage, "Auto take profit in %": f.profit_target_pct, "Error": f.error}
         for f in result.failures],
        columns=["Leverage", "Auto take profit in %", "Error"],
    )


def render_table(df: pd.DataFrame, top: Optional[int] = None) -> str:
    if top:
        df = df.head(top)
    if df.empty:
        return "(no rows)"
    return df.to_string(index=False)


def export_csv(df: pd.DataFrame, path: Union[str, Path]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    return path


def format_summary(result: SweepResult, symbol: str = "") -> str:
    """Short text summary of a sweep (for logs and notifications)."""
    best = result.best
    prefix = f"{symbol} | " if symbol else ""
    head = f"{prefix}Sweep {result.cell_count} cells | baseline {result.baseline_units:.4f} units"
    if best is None:
        return f"{head} | no successful cells ({len(result.failures)} failed)"
    return (
        f"{head} | best {best.leverage}x TP {best.profit_target_pct}% -> "
        f"{best.result.final_units:.4f} units ({best.delta_pct:+.2f}%) | failed {len(result.failures)}"
    )
