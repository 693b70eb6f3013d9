"""Bollinger Bands and return volatility"""

import math
from collections.abc import Sequence
from dataclasses import dataclass

from ..data.models import Candle


@dataclass(frozen=True)
class BollingerBands:
    upper: float
    middle: float
    lower: float

    @property
    def width(self) -> float:
        return self.upper - self.lower


def population_std(values: Sequence[float]) -> float:
    """Population standard deviation (divide by N)."""
    if not values:
        return 0.0
    mean = sum(values) / len(values)
    return math.sqrt(sum((v - mean) ** 2 for v in values) / len(values))


def bollinger_bands(closes: Sequence[float], period: int = 20, k: float = 2.0) -> BollingerBands:
    """
    Bollinger Bands: SMA(period) +/- k * population std over the same window

    Args:
        closes: Close prices in chronological order
        period: SMA window (default 20)
        k: Band width in standard deviations (default 2)

    Returns:
        Bands; all three equal the last close when history is shorter than period
    """
    if len(closes) < period:
        last = float(closes[-1]) if closes else 0.0
        return BollingerBands(upper=last, middle=last, lower=last)

    window = closes[-period:]
    middle = sum(window) / period
    std = population_std(window)
    return BollingerBands(upper=middle + k * std, middle=middle, lower=middle - k * std)


def simple_returns(closes: Sequence[float]) -> list[float]:
    return [
        (curr - prev) / prev
        for prev, curr in zip(closes, closes[1:])
        if prev != 0
    ]


def return_volatility(candles: Sequence[Candle]) -> float:
    """Standard deviation of simple close-to-close returns, in percent."""
    returns = simple_returns([c.close for c in candles])
    return population_std(returns) * 100.0
