"""Option contract and strategy models."""

from dataclasses import dataclass
from datetime import date
from enum import Enum

from ..errors import InvalidInputError
from ..models.signals import Signal


class OptionType(str, Enum):
    CE = "CE"           # Call
    PE = "PE"           # Put

    @classmethod
    def parse(cls, value: "str | OptionType") -> "OptionType":
        try:
            return cls(str(getattr(value, "value", value)).upper())
        except ValueError as e:
            raise InvalidInputError(f"Unknown option type: {value}",
                                    field="option_type", value=value) from e


class ExpiryType(str, Enum):
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"

    @classmethod
    def parse(cls, value: "str | ExpiryType") -> "ExpiryType":
        try:
            return cls(str(getattr(value, "value", value)).upper())
        except ValueError as e:
            raise InvalidInputError(f"Unknown expiry type: {value}",
                                    field="expiry_type", value=value) from e


class MarketTrend(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    NEUTRAL = "NEUTRAL"

    @classmethod
    def parse(cls, value: "str | MarketTrend") -> "MarketTrend":
        try:
            return cls(str(getattr(value, "value", value)).upper())
        except ValueError as e:
            raise InvalidInputError(f"Unknown market trend: {value}",
                                    field="trend", value=value) from e


class StrategyType(str, Enum):
    BULL_CALL = "BULL_CALL"
    BEAR_CALL = "BEAR_CALL"
    BULL_PUT = "BULL_PUT"
    BEAR_PUT = "BEAR_PUT"
    IRON_CONDOR = "IRON_CONDOR"
    STRADDLE = "STRADDLE"
    STRANGLE = "STRANGLE"


@dataclass(frozen=True)
class Greeks:
    """Sensitivities: theta per calendar day, vega per vol point, rho per 1% rate."""
    delta: float
    gamma: float
    theta: float
    vega: float
    rho: float


@dataclass(frozen=True)
class OptionQuote:
    """Theoretical price with Greeks."""
    price: float
    greeks: Greeks


@dataclass(frozen=True)
class OptionContract:
    symbol: str
    base_symbol: str
    option_type: OptionType
    strike_price: float
    expiry_type: ExpiryType
    expiry_date: date
    spot_price: float
    implied_volatility: float                       # Percent
    greeks: Greeks
    premium: float                                  # Theoretical price
    bid: float
    ask: float


@dataclass(frozen=True)
class OptionLeg:
    contract: OptionContract
    side: Signal
    quantity: int = 1


@dataclass(frozen=True)
class OptionsStrategyPlan:
    """Multi-leg position with its payoff summary."""
    name: str
    strategy_type: StrategyType
    description: str
    legs: tuple[OptionLeg, ...]
    net_debit: float
    net_credit: float
    max_profit: float
    max_loss: float
    break_even_low: float
    break_even_high: float
