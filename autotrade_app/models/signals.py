"""
Signal models shared by the indicator, consensus and lifecycle layers.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class Signal(str, Enum):
    """Directional output of an indicator or of the consensus."""
    BUY = "BUY"
    SELL = "SELL"
    NONE = "NONE"

    @property
    def is_directional(self) -> bool:
        return self is not Signal.NONE


@dataclass(frozen=True)
class ConsensusSignal:
    """Confidence-scored decision with ATR-based levels.

    Created fresh on every analysis and never mutated.
    """

    symbol: str
    instrument_id: str
    direction: Signal
    confidence: float                                # 0..100
    matched_indicators: tuple[str, ...]
    price: float
    target: float
    stoploss: float
    risk_reward_ratio: float
    timestamp: datetime
    atr: float = 0.0
    quantity: int = 1
    indicator_signals: dict[str, Signal] = field(default_factory=dict)

    @property
    def risk_per_unit(self) -> float:
        return abs(self.price - self.stoploss)

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "instrument_id": self.instrument_id,
            "direction": self.direction.value,
            "confidence": round(self.confidence, 2),
            "matched_indicators": list(self.matched_indicators),
            "price": self.price,
            "target": round(self.target, 2),
            "stoploss": round(self.stoploss, 2),
            "risk_reward_ratio": round(self.risk_reward_ratio, 2),
            "atr": round(self.atr, 4),
            "quantity": self.quantity,
            "timestamp": self.timestamp.isoformat(),
            "indicators": {name: sig.value for name, sig in self.indicator_signals.items()},
        }
