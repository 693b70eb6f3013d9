"""
Canonical data models for market data and broker interactions.

These immutable structures are what the market gateway hands to the engine
and what the engine hands back when it places orders.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..models.signals import Signal


@dataclass(frozen=True)
class Candle:
    """OHLCV bar with a UTC timestamp."""
    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float

    @property
    def is_bullish(self) -> bool:
        return self.close > self.open

    @property
    def is_bearish(self) -> bool:
        return self.close < self.open

    @property
    def body(self) -> float:
        return abs(self.close - self.open)


@dataclass(frozen=True)
class Quote:
    """Latest traded price for an instrument."""
    instrument_id: str
    last_price: float
    timestamp: Optional[datetime] = None
    volume: Optional[float] = None


@dataclass(frozen=True)
class Position:
    """Open position as reported by the broker."""
    instrument_id: str
    symbol: str
    quantity: int                   # Signed; 0 means flat
    average_price: float
    last_price: float
    pnl: float = 0.0

    @property
    def is_open(self) -> bool:
        return self.quantity != 0


@dataclass(frozen=True)
class BracketOrderRequest:
    """Entry order with attached target and stoploss legs."""
    symbol: str
    instrument_id: str
    side: Signal
    quantity: int
    price: float
    target: float
    stoploss: float


@dataclass(frozen=True)
class OrderResponse:
    """Broker acknowledgement of a placed order."""
    order_id: str
    status: str = "PLACED"
