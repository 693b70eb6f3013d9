"""ATR-based target/stoploss placement, risk/reward and position sizing"""

import math
from dataclasses import dataclass

from ..models.signals import Signal


@dataclass(frozen=True)
class RiskLevels:
    target: float
    stoploss: float


def calculate_levels(
    price: float,
    direction: Signal,
    atr: float,
    target_mult: float = 2.0,
    stoploss_mult: float = 1.0,
) -> RiskLevels:
    """
    Target and stoploss around ``price``

    BUY: target = price + target_mult * atr, stoploss = price - stoploss_mult * atr
    SELL: mirrored. NONE places both levels at price.

    Args:
        price: Entry price
        direction: Trade direction
        atr: Average true range on the higher timeframe
        target_mult: ATR multiple for the target (default 2)
        stoploss_mult: ATR multiple for the stoploss (default 1)

    Returns:
        RiskLevels
    """
    if direction is Signal.BUY:
        return RiskLevels(target=price + target_mult * atr, stoploss=price - stoploss_mult * atr)
    if direction is Signal.SELL:
        return RiskLevels(target=price - target_mult * atr, stoploss=price + stoploss_mult * atr)
    return RiskLevels(target=price, stoploss=price)


def risk_reward_ratio(price: float, target: float, stoploss: float) -> float:
    """|target - price| / |price - stoploss|, 0 when there is no risk leg."""
    risk = abs(price - stoploss)
    if risk == 0:
        return 0.0
    return abs(target - price) / risk


def size_position(risk_budget: float, entry: float, stoploss: float) -> int:
    """Units affordable when losing ``risk_budget`` at the stoploss."""
    risk = abs(entry - stoploss)
    if risk == 0 or risk_budget <= 0:
        return 0
    return math.floor(risk_budget / risk)
