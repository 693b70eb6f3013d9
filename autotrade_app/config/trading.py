"""Per-run configuration for automatic trade execution."""

from dataclasses import dataclass
from typing import Optional

from ..errors import InvalidInputError, require_positive
from .defaults import ExecutionParams, RiskParams


@dataclass(frozen=True)
class AutoTradeConfig:
    """What to trade and the limits the open gate enforces."""

    symbol: str
    instrument_id: str
    quantity: int
    min_confidence: float = 80.0
    max_open_trades: int = 1
    max_risk_per_trade: Optional[float] = None      # Currency at risk, entry to stoploss
    min_risk_reward: float = 1.5

    @classmethod
    def from_params(
        cls,
        symbol: str,
        instrument_id: str,
        quantity: int,
        execution: ExecutionParams,
        risk: RiskParams,
        max_risk_per_trade: Optional[float] = None,
    ) -> "AutoTradeConfig":
        """Build a run config from the loaded execution and risk sections."""
        return cls(
            symbol=symbol,
            instrument_id=instrument_id,
            quantity=quantity,
            min_confidence=execution.min_confidence,
            max_open_trades=execution.max_open_trades,
            max_risk_per_trade=max_risk_per_trade,
            min_risk_reward=risk.min_risk_reward,
        )

    def validate(self) -> None:
        """Raise InvalidInputError for unusable values."""
        if not self.symbol:
            raise InvalidInputError("symbol must not be empty", field="symbol", value=self.symbol)
        if not self.instrument_id:
            raise InvalidInputError(
                "instrument_id must not be empty", field="instrument_id", value=self.instrument_id
            )
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int) or self.quantity <= 0:
            raise InvalidInputError(
                "quantity must be a positive integer", field="quantity", value=self.quantity
            )
        if not 0 <= self.min_confidence <= 100:
            raise InvalidInputError(
                "min_confidence must be between 0 and 100",
                field="min_confidence",
                value=self.min_confidence,
            )
        if isinstance(self.max_open_trades, bool) or not isinstance(self.max_open_trades, int) \
                or self.max_open_trades <= 0:
            raise InvalidInputError(
                "max_open_trades must be a positive integer",
                field="max_open_trades",
                value=self.max_open_trades,
            )
        if self.max_risk_per_trade is not None:
            require_positive("max_risk_per_trade", self.max_risk_per_trade)
        if self.min_risk_reward < 0:
            raise InvalidInputError(
                "min_risk_reward must be non-negative",
                field="min_risk_reward",
                value=self.min_risk_reward,
            )
