"""Reporting: sweep result tables and summaries."""

from leverage_dca.reporting.table import (
    rows_to_frame,
    failures_to_frame,
    render_table,
    export_csv,
    format_summary,
)

__all__ = ["rows_to_frame", "failures_to_frame", "render_table", "export_csv", "format_summary"]
