"""Simple and exponential moving averages over close prices."""

from collections.abc import Sequence


def moving_average(closes: Sequence[float], period: int) -> float:
    """
    Simple moving average of the last ``period`` closes.

    When fewer than ``period`` closes are available the most recent close is
    returned, so short history never raises.

    Args:
        closes: Close prices in chronological order
        period: Window length

    Returns:
        SMA value (0.0 for an empty sequence)
    """
    if not closes:
        return 0.0
    if len(closes) < period:
        return float(closes[-1])

    window = closes[-period:]
    return sum(window) / period


def ema_series(closes: Sequence[float], period: int) -> list[float]:
    """
    Running EMA for every prefix of ``closes``.

    Seeded with the first close; multiplier ``2 / (period + 1)``. Element
    ``i`` equals ``exponential_moving_average(closes[:i + 1], period)``.
    """
    if not closes:
        return []

    multiplier = 2.0 / (period + 1)
    ema = float(closes[0])
    series = [ema]
    for price in closes[1:]:
        ema = (price - ema) * multiplier + ema
        series.append(ema)
    return series


def exponential_moving_average(closes: Sequence[float], period: int) -> float:
    """EMA of ``closes`` seeded with the first element (0.0 when empty)."""
    series = ema_series(closes, period)
    return series[-1] if series else 0.0
