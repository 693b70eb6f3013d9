"""
Trade lifecycle data models.

Trades are immutable snapshots; every lifecycle transition produces a new
``ExecutedTrade`` that replaces the previous one in the lifecycle store.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from ..models.signals import Signal


class TradeStatus(str, Enum):
    """Trade lifecycle states."""
    PENDING = "PENDING"
    EXECUTED = "EXECUTED"
    FILLED = "FILLED"
    CLOSED = "CLOSED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in (TradeStatus.CLOSED, TradeStatus.CANCELLED)


@dataclass(frozen=True)
class ExecutedTrade:
    """A trade opened from a consensus signal."""

    id: str
    symbol: str
    instrument_id: str
    direction: Signal
    entry_price: float
    quantity: int
    target: float
    stoploss: float
    order_ref: str
    status: TradeStatus
    confidence: float
    created_at: datetime

    closed_at: Optional[datetime] = None
    exit_price: Optional[float] = None
    pnl: Optional[float] = None

    def realized_pnl(self, exit_price: float) -> float:
        """PnL if the trade were closed at ``exit_price``."""
        if self.direction is Signal.SELL:
            return (self.entry_price - exit_price) * self.quantity
        return (exit_price - self.entry_price) * self.quantity

    def with_status(self, status: TradeStatus) -> "ExecutedTrade":
        """Copy with a new non-closing status."""
        return replace(self, status=status)

    def with_closed(self, exit_price: float, closed_at: datetime) -> "ExecutedTrade":
        """Copy marked CLOSED with exit price, pnl and close time."""
        return replace(
            self,
            status=TradeStatus.CLOSED,
            exit_price=exit_price,
            pnl=self.realized_pnl(exit_price),
            closed_at=closed_at,
        )

    def with_cancelled(self, cancelled_at: datetime) -> "ExecutedTrade":
        return replace(self, status=TradeStatus.CANCELLED, closed_at=cancelled_at)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "symbol": self.symbol,
            "instrument_id": self.instrument_id,
            "type": self.direction.value,
            "entry_price": self.entry_price,
            "quantity": self.quantity,
            "target": self.target,
            "stoploss": self.stoploss,
            "order_ref": self.order_ref,
            "status": self.status.value,
            "confidence": self.confidence,
            "created_at": self.created_at.isoformat(),
            "closed_at": self.closed_at.isoformat() if self.closed_at else None,
            "exit_price": self.exit_price,
            "pnl": self.pnl,
        }


@dataclass(frozen=True)
class TradeStatistics:
    """Aggregate performance over tracked trades."""
    active_trades_count: int
    closed_trades_count: int
    profitable_trades_count: int
    win_rate: float                     # Percent of closed trades with pnl > 0
    total_pnl: float
    avg_confidence: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "active_trades_count": self.active_trades_count,
            "closed_trades_count": self.closed_trades_count,
            "profitable_trades_count": self.profitable_trades_count,
            "win_rate": round(self.win_rate, 2),
            "total_pnl": round(self.total_pnl, 2),
            "avg_confidence": round(self.avg_confidence, 2),
        }
