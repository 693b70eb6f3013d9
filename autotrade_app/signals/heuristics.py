"""Price-action heuristics used as extra consensus votes."""

from collections.abc import Sequence

from ..data.models import Candle
from ..indicators.volume import calculate_rvol
from ..models.signals import Signal


def detect_volume_confirmation(
    candles: Sequence[Candle],
    lookback: int = 10,
    multiplier: float = 1.5,
) -> Signal:
    """
    Direction of the last candle when its volume is unusually high.

    The last candle's volume must exceed ``multiplier`` times the average
    volume of the last ``lookback`` candles (current one included).
    """
    if len(candles) < 2:
        return Signal.NONE

    last = candles[-1]
    if calculate_rvol(candles, lookback) <= multiplier:
        return Signal.NONE

    if last.is_bullish:
        return Signal.BUY
    if last.is_bearish:
        return Signal.SELL
    return Signal.NONE


def detect_trend_strength(
    candles: Sequence[Candle],
    lookback: int = 5,
    min_count: int = 3,
) -> Signal:
    """Consistent higher highs and higher lows (or the mirror) over ``lookback`` candles."""
    if len(candles) < lookback:
        return Signal.NONE

    window = candles[-lookback:]
    higher_highs = higher_lows = lower_highs = lower_lows = 0
    for prev, curr in zip(window, window[1:]):
        if curr.high > prev.high:
            higher_highs += 1
        elif curr.high < prev.high:
            lower_highs += 1
        if curr.low > prev.low:
            higher_lows += 1
        elif curr.low < prev.low:
            lower_lows += 1

    if higher_highs >= min_count and higher_lows >= min_count:
        return Signal.BUY
    if lower_highs >= min_count and lower_lows >= min_count:
        return Signal.SELL
    return Signal.NONE


def detect_support_resistance(
    candles: Sequence[Candle],
    lookback: int = 20,
    proximity_pct: float = 0.05,
) -> Signal:
    """
    Bounce off the edges of the recent close range.

    BUY when the last close sits within ``proximity_pct`` of the range above
    the lowest close, SELL when within it below the highest close.
    """
    if len(candles) < lookback:
        return Signal.NONE

    closes = [c.close for c in candles[-lookback:]]
    support = min(closes)
    resistance = max(closes)
    band = (resistance - support) * proximity_pct
    price = closes[-1]

    if abs(price - support) < band:
        return Signal.BUY
    if abs(price - resistance) < band:
        return Signal.SELL
    return Signal.NONE
