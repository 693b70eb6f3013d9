"""Base class for market gateways (broker adapters)."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime

from ..data.models import BracketOrderRequest, Candle, OrderResponse, Position, Quote


class MarketGateway(ABC):
    """
    Capability the engine needs from a broker.

    Implementations own authentication and transport. Failures are raised
    as ``GatewayError`` (or left as the transport's own exception); the
    engine propagates them unchanged.
    """

    @abstractmethod
    def get_quote(self, instrument_ids: Sequence[str]) -> dict[str, Quote]:
        """Latest quote per requested instrument id."""

    @abstractmethod
    def get_historical_candles(
        self,
        instrument_id: str,
        interval: str,
        from_date: datetime,
        to_date: datetime,
    ) -> list[Candle]:
        """Chronologically ordered candles for ``interval`` between the dates."""

    @abstractmethod
    def place_bracket_order(self, order: BracketOrderRequest) -> OrderResponse:
        """Place an entry order with target and stoploss legs."""

    @abstractmethod
    def cancel_order(self, order_id: str) -> bool:
        """Cancel an order (and its bracket legs)."""

    @abstractmethod
    def get_positions(self) -> list[Position]:
        """Current broker positions."""
