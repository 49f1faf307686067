"""Leveraged DCA backtester."""

__version__ = "0.1.0"
