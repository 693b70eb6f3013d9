"""
In-memory paper trading gateway.

Serves seeded candles and quotes and simulates bracket orders: placing an
order opens a position, cancelling it flattens the position, and
``close_position`` simulates a target or stoploss fill.
"""

import itertools
from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any, Optional

import structlog

from ..data.models import BracketOrderRequest, Candle, OrderResponse, Position, Quote
from ..data.normalizer import normalize_candles
from ..errors import GatewayError
from ..models.signals import Signal
from ..utils.time import ensure_utc, now_utc
from .base import MarketGateway

logger = structlog.get_logger(__name__)


class PaperGateway(MarketGateway):
    """Deterministic gateway backed by dictionaries."""

    def __init__(self) -> None:
        self._candles: dict[tuple[str, str], list[Candle]] = {}
        self._quotes: dict[str, Quote] = {}
        self._positions: dict[str, Position] = {}
        self._orders: dict[str, dict[str, Any]] = {}
        self._order_seq = itertools.count(1)

    # Seeding

    def load_candles(self, instrument_id: str, interval: str, rows: Iterable[Any]) -> None:
        """Seed history for an instrument and interval from raw rows or candles."""
        self._candles[(instrument_id, interval)] = normalize_candles(rows)

    def set_price(self, instrument_id: str, price: float, timestamp: Optional[datetime] = None) -> None:
        """Set the last traded price and mark any open position to it."""
        self._quotes[instrument_id] = Quote(
            instrument_id=instrument_id,
            last_price=price,
            timestamp=timestamp or now_utc(),
        )
        position = self._positions.get(instrument_id)
        if position is not None:
            self._positions[instrument_id] = self._mark(position, price)

    def close_position(self, instrument_id: str, exit_price: Optional[float] = None) -> None:
        """Simulate the bracket exiting (target or stoploss hit)."""
        if instrument_id not in self._positions:
            raise GatewayError(
                f"No open position for {instrument_id}",
                operation="close_position",
                instrument_id=instrument_id,
            )
        if exit_price is not None:
            self.set_price(instrument_id, exit_price)
        del self._positions[instrument_id]

    @property
    def orders(self) -> dict[str, dict[str, Any]]:
        return dict(self._orders)

    # MarketGateway

    def get_quote(self, instrument_ids: Sequence[str]) -> dict[str, Quote]:
        return {iid: self._quotes[iid] for iid in instrument_ids if iid in self._quotes}

    def get_historical_candles(
        self,
        instrument_id: str,
        interval: str,
        from_date: datetime,
        to_date: datetime,
    ) -> list[Candle]:
        candles = self._candles.get((instrument_id, interval), [])
        start, end = ensure_utc(from_date), ensure_utc(to_date)
        return [c for c in candles if start <= c.timestamp <= end]

    def place_bracket_order(self, order: BracketOrderRequest) -> OrderResponse:
        if order.quantity <= 0:
            raise GatewayError("Order quantity must be positive", operation="place_bracket_order",
                               instrument_id=order.instrument_id)
        if order.side is Signal.NONE:
            raise GatewayError("Order side must be BUY or SELL", operation="place_bracket_order",
                               instrument_id=order.instrument_id)

        order_id = f"PAPER-{next(self._order_seq):06d}"
        self._orders[order_id] = {"request": order, "status": "OPEN"}

        signed_qty = order.quantity if order.side is Signal.BUY else -order.quantity
        self._positions[order.instrument_id] = Position(
            instrument_id=order.instrument_id,
            symbol=order.symbol,
            quantity=signed_qty,
            average_price=order.price,
            last_price=order.price,
        )
        logger.info("Paper bracket order placed", order_id=order_id, symbol=order.symbol,
                    side=order.side.value, quantity=order.quantity, price=order.price)
        return OrderResponse(order_id=order_id, status="PLACED")

    def cancel_order(self, order_id: str) -> bool:
        record = self._orders.get(order_id)
        if record is None:
            raise GatewayError(f"Unknown order {order_id}", operation="cancel_order")

        record["status"] = "CANCELLED"
        self._positions.pop(record["request"].instrument_id, None)
        logger.info("Paper order cancelled", order_id=order_id)
        return True

    def get_positions(self) -> list[Position]:
        return list(self._positions.values())

    @staticmethod
    def _mark(position: Position, price: float) -> Position:
        return Position(
            instrument_id=position.instrument_id,
            symbol=position.symbol,
            quantity=position.quantity,
            average_price=position.average_price,
            last_price=price,
            pnl=(price - position.average_price) * position.quantity,
        )
