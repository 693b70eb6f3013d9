"""
Indicator signal detection.

Each detector maps a candle series to BUY, SELL or NONE. Crossovers compare
the current window with the preceding window (same computation without the
most recent candle). Short history yields NONE rather than an error.
"""

from collections.abc import Sequence

from ..data.models import Candle
from ..indicators import bollinger_bands, macd_series, moving_average, rsi
from ..indicators.moving_average import ema_series
from ..models.signals import Signal


def closes_of(candles: Sequence[Candle]) -> list[float]:
    return [c.close for c in candles]


def crossover(prev_fast: float, prev_slow: float, fast: float, slow: float) -> Signal:
    """BUY when fast crosses above slow, SELL when it crosses below."""
    if prev_fast <= prev_slow and fast > slow:
        return Signal.BUY
    if prev_fast >= prev_slow and fast < slow:
        return Signal.SELL
    return Signal.NONE


def detect_ma_crossover(candles: Sequence[Candle], short_period: int, long_period: int) -> Signal:
    """Short SMA crossing the long SMA; needs ``long_period + 1`` candles."""
    if len(candles) < long_period + 1:
        return Signal.NONE

    closes = closes_of(candles)
    previous = closes[:-1]
    return crossover(
        moving_average(previous, short_period),
        moving_average(previous, long_period),
        moving_average(closes, short_period),
        moving_average(closes, long_period),
    )


def detect_rsi(
    candles: Sequence[Candle],
    period: int = 14,
    oversold: float = 30.0,
    overbought: float = 70.0,
) -> Signal:
    """Oversold RSI is BUY, overbought is SELL."""
    if len(candles) < period + 1:
        return Signal.NONE

    value = rsi(closes_of(candles), period)
    if value < oversold:
        return Signal.BUY
    if value > overbought:
        return Signal.SELL
    return Signal.NONE


def detect_macd(
    candles: Sequence[Candle],
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> Signal:
    """MACD line crossing its signal line; needs ``slow_period`` candles."""
    if len(candles) < max(slow_period, 2):
        return Signal.NONE

    line = macd_series(closes_of(candles), fast_period, slow_period)
    signal = ema_series(line, signal_period)
    return crossover(line[-2], signal[-2], line[-1], signal[-1])


def detect_bollinger(candles: Sequence[Candle], period: int = 20, k: float = 2.0) -> Signal:
    """Close at or below the lower band is BUY, at or above the upper band SELL."""
    if len(candles) < period:
        return Signal.NONE

    closes = closes_of(candles)
    bands = bollinger_bands(closes, period, k)
    price = closes[-1]
    if price <= bands.lower:
        return Signal.BUY
    if price >= bands.upper:
        return Signal.SELL
    return Signal.NONE
