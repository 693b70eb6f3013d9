"""ATR (Average True Range) and NATR (Normalized ATR) calculations"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

from autotrade_app.data.models import Candle


@dataclass(frozen=True)
class ATRResult:
    """ATR value plus whether enough candles were available."""
    value: float
    sufficient_data: bool


def calculate_true_range(current: Candle, previous: Optional[Candle] = None) -> float:
    """
    Calculate True Range for a single candle

    TR = max(high - low, abs(high - prev_close), abs(low - prev_close))

    Args:
        current: Current candle
        previous: Previous candle (None for first candle)

    Returns:
        True Range value
    """
    if previous is None:
        return current.high - current.low

    range_hl = current.high - current.low
    range_hc = abs(current.high - previous.close)
    range_lc = abs(current.low - previous.close)

    return max(range_hl, range_hc, range_lc)


def compute_atr(candles: Sequence[Candle], period: int = 14) -> ATRResult:
    """
    Average of the last ``period`` true ranges

    Every true range needs a previous close, so ``period + 1`` candles are
    required.

    Args:
        candles: Candles in chronological order
        period: ATR period (default 14)

    Returns:
        ATRResult; value 0.0 with sufficient_data False on short history
    """
    if period <= 0 or len(candles) < period + 1:
        return ATRResult(value=0.0, sufficient_data=False)

    window = candles[-(period + 1):]
    true_ranges = [
        calculate_true_range(curr, prev)
        for prev, curr in zip(window, window[1:])
    ]
    return ATRResult(value=sum(true_ranges) / period, sufficient_data=True)


def calculate_atr(candles: Sequence[Candle], period: int = 14) -> float:
    """ATR value, 0.0 when history is insufficient."""
    return compute_atr(candles, period).value


def calculate_natr(atr: float, current_price: float) -> float:
    """
    Calculate Normalized Average True Range

    NATR = 100 * ATR / current_price

    Args:
        atr: ATR value
        current_price: Current close price

    Returns:
        NATR percentage value
    """
    if current_price <= 0:
        return 0.0

    return 100.0 * atr / current_price
