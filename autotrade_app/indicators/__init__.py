"""Technical indicator library: pure functions over close prices and candles"""

from .atr import ATRResult, calculate_atr, calculate_natr, calculate_true_range, compute_atr
from .momentum import MACDResult, calculate_macd, macd_line, macd_series, macd_signal, rsi
from .moving_average import ema_series, exponential_moving_average, moving_average
from .volatility import BollingerBands, bollinger_bands, return_volatility
from .volume import average_volume, calculate_rvol

__all__ = [
    "ATRResult",
    "BollingerBands",
    "MACDResult",
    "average_volume",
    "bollinger_bands",
    "calculate_atr",
    "calculate_macd",
    "calculate_natr",
    "calculate_rvol",
    "calculate_true_range",
    "compute_atr",
    "ema_series",
    "exponential_moving_average",
    "macd_line",
    "macd_series",
    "macd_signal",
    "moving_average",
    "return_volatility",
    "rsi",
]
