"""Timeframe string to minutes / bars conversion."""

def timeframe_minutes(tf: str) -> int:
    """Convert Binance-style timeframe (e.g. '5m', '1h', '1d') to minutes."""
    tf = tf.strip().lower()
    if tf.endswith("m"):
        return int(tf[:-1])
    if tf.endswith("h"):
        return int(tf[:-1]) * 60
    if tf.endswith("d"):
        return int(tf[:-1]) * 60 * 24
    raise ValueError(f"Unsupported timeframe: {tf}")


def bars_per_day(tf: str) -> int:
    """Number of bars in one day, e.g. 24 for '1h'. Timeframe must divide a day evenly."""
    minutes = timeframe_minutes(tf)
    if minutes <= 0 or (24 * 60) % minutes != 0:
        raise ValueError(f"Timeframe {tf} does not divide a day evenly")
    return (24 * 60) // minutes


def hours_to_bars(hours: float, tf: str) -> int:
    """Convert a duration in hours to a whole number of bars."""
    minutes = timeframe_minutes(tf)
    bars = hours * 60 / minutes
    if bars != int(bars):
        raise ValueError(f"{hours}h is not a whole number of {tf} bars")
    return int(bars)


def days_to_bars(days: float, tf: str) -> int:
    return hours_to_bars(days * 24, tf)
