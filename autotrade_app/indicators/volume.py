"""Average and relative volume over a trailing window"""

from collections.abc import Sequence

from autotrade_app.data.models import Candle


def average_volume(candles: Sequence[Candle], lookback: int = 10) -> float:
    """Mean volume of the last ``lookback`` candles (fewer if unavailable)."""
    window = candles[-lookback:]
    if not window:
        return 0.0
    return sum(c.volume for c in window) / len(window)


def calculate_rvol(candles: Sequence[Candle], lookback: int = 10) -> float:
    """
    Calculate Relative Volume (RVOL)

    RVOL = last volume / average volume of the last ``lookback`` candles,
    current candle included.

    Returns:
        RVOL value, 0.0 with no candles or a non-positive average
    """
    volume_average = average_volume(candles, lookback)
    if volume_average <= 0:
        return 0.0
    return candles[-1].volume / volume_average
