"""
Single-strategy signal generation.

Runs one named detector over a candle series and, when it fires, attaches
ATR-based levels and a risk-budget position size.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional

import structlog

from ..data.models import Candle
from ..errors import InvalidInputError
from ..indicators.atr import calculate_atr
from ..models.signals import Signal
from ..strategy.risk import calculate_levels, risk_reward_ratio, size_position
from ..utils.time import now_utc
from .detector import detect_bollinger, detect_ma_crossover, detect_macd, detect_rsi

logger = structlog.get_logger(__name__)


class StrategyName(str, Enum):
    MA_CROSSOVER = "MA_CROSSOVER"
    RSI = "RSI"
    MACD = "MACD"
    BOLLINGER = "BOLLINGER"


STRATEGY_CONFIDENCE = {
    StrategyName.MA_CROSSOVER: 75.0,
    StrategyName.RSI: 65.0,
    StrategyName.MACD: 70.0,
    StrategyName.BOLLINGER: 60.0,
}


@dataclass(frozen=True)
class StrategySignal:
    """Actionable signal from a single strategy."""
    symbol: str
    strategy: StrategyName
    action: Signal
    entry: float
    target: float
    stoploss: float
    quantity: int
    confidence: float
    risk_reward_ratio: float
    reason: str
    timestamp: datetime


def parse_strategy(name: str) -> StrategyName:
    """Resolve a strategy name, raising InvalidInputError when unknown."""
    try:
        return StrategyName(str(name).upper())
    except ValueError as e:
        raise InvalidInputError(
            f"Unknown strategy: {name}",
            field="strategy",
            value=name,
            context={"known": [s.value for s in StrategyName]},
        ) from e


def _detect(strategy: StrategyName, candles: Sequence[Candle], params: Mapping[str, Any]) -> Signal:
    if strategy is StrategyName.MA_CROSSOVER:
        return detect_ma_crossover(candles, int(params.get("short_ma", 9)), int(params.get("long_ma", 21)))
    if strategy is StrategyName.RSI:
        return detect_rsi(candles, int(params.get("period", 14)))
    if strategy is StrategyName.MACD:
        return detect_macd(candles)
    return detect_bollinger(candles, int(params.get("period", 20)), float(params.get("deviation", 2.0)))


def generate_strategy_signal(
    candles: Sequence[Candle],
    strategy: str,
    symbol: str,
    parameters: Optional[Mapping[str, Any]] = None,
    risk_budget: float = 10000.0,
    atr_period: int = 14,
) -> Optional[StrategySignal]:
    """
    Evaluate one strategy on ``candles``.

    Args:
        candles: Candles in chronological order
        strategy: MA_CROSSOVER, RSI, MACD or BOLLINGER
        symbol: Trading symbol for the resulting signal
        parameters: Optional overrides (short_ma, long_ma, period, deviation)
        risk_budget: Capital at risk used to size the position
        atr_period: ATR period for target/stoploss

    Returns:
        StrategySignal, or None when the strategy does not fire

    Raises:
        InvalidInputError: Unknown strategy name
    """
    name = parse_strategy(strategy)
    if not candles:
        return None

    action = _detect(name, candles, parameters or {})
    if action is Signal.NONE:
        logger.debug("No strategy signal", strategy=name.value, symbol=symbol)
        return None

    entry = candles[-1].close
    atr = calculate_atr(candles, atr_period)
    levels = calculate_levels(entry, action, atr)
    quantity = size_position(risk_budget, entry, levels.stoploss)

    signal = StrategySignal(
        symbol=symbol,
        strategy=name,
        action=action,
        entry=entry,
        target=levels.target,
        stoploss=levels.stoploss,
        quantity=quantity,
        confidence=STRATEGY_CONFIDENCE[name],
        risk_reward_ratio=risk_reward_ratio(entry, levels.target, levels.stoploss),
        reason=f"{name.value} signal detected on {symbol}",
        timestamp=now_utc(),
    )
    logger.info("Strategy signal generated", strategy=name.value, symbol=symbol,
                action=action.value, entry=entry, quantity=quantity)
    return signal
