"""Utils: Telegram notifications, timeframe conversions."""

from leverage_dca.utils.telegram import send_telegram
from leverage_dca.utils.timeframes import timeframe_minutes, bars_per_day, hours_to_bars, days_to_bars

__all__ = ["send_telegram", "timeframe_minutes", "bars_per_day", "hours_to_bars", "days_to_bars"]
