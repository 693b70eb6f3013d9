"""RSI, MACD and rate-of-change calculations"""

from collections.abc import Sequence
from dataclasses import dataclass

from .moving_average import ema_series

RSI_NEUTRAL = 50.0


def rsi(closes: Sequence[float], period: int = 14) -> float:
    """
    Relative Strength Index over the last ``period`` price changes

    RS = mean(gains) / mean(|losses|), RSI = 100 - 100 / (1 + RS)

    Args:
        closes: Close prices in chronological order
        period: Number of deltas averaged (default 14)

    Returns:
        RSI in [0, 100]; 50 when fewer than period + 1 closes
    """
    if len(closes) < period + 1:
        return RSI_NEUTRAL

    window = closes[-(period + 1):]
    gains = 0.0
    losses = 0.0
    for prev, curr in zip(window, window[1:]):
        change = curr - prev
        if change > 0:
            gains += change
        elif change < 0:
            losses -= change

    avg_gain = gains / period
    avg_loss = losses / period

    if avg_loss == 0:
        # Flat window has no direction
        return 100.0 if avg_gain > 0 else RSI_NEUTRAL

    rs = avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)


@dataclass(frozen=True)
class MACDResult:
    """MACD line, signal line and histogram at the last close."""
    macd: float
    signal: float
    histogram: float


def macd_series(
    closes: Sequence[float],
    fast_period: int = 12,
    slow_period: int = 26,
) -> list[float]:
    """MACD line (fast EMA - slow EMA) for every prefix of ``closes``."""
    fast = ema_series(closes, fast_period)
    slow = ema_series(closes, slow_period)
    return [f - s for f, s in zip(fast, slow)]


def macd_line(closes: Sequence[float], fast_period: int = 12, slow_period: int = 26) -> float:
    """MACD line at the last close (0.0 when empty)."""
    series = macd_series(closes, fast_period, slow_period)
    return series[-1] if series else 0.0


def macd_signal(series: Sequence[float], signal_period: int = 9) -> float:
    """Signal line: EMA of the MACD history."""
    signals = ema_series(series, signal_period)
    return signals[-1] if signals else 0.0


def calculate_macd(
    closes: Sequence[float],
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> MACDResult:
    """Full MACD at the last close."""
    series = macd_series(closes, fast_period, slow_period)
    if not series:
        return MACDResult(0.0, 0.0, 0.0)
    line = series[-1]
    signal = macd_signal(series, signal_period)
    return MACDResult(macd=line, signal=signal, histogram=line - signal)


def rate_of_change(closes: Sequence[float], lookback: int = 10) -> float:
    """Percent change from ``lookback`` closes ago to the last close."""
    if len(closes) <= lookback or closes[-lookback - 1] == 0:
        return 0.0
    base = closes[-lookback - 1]
    return (closes[-1] - base) / base * 100.0


def momentum(closes: Sequence[float], lookback: int = 10) -> float:
    """Absolute price change over ``lookback`` closes."""
    if len(closes) <= lookback:
        return 0.0
    return closes[-1] - closes[-lookback - 1]
