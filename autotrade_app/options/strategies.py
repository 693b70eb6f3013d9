"""Multi-leg option strategy builders and the strategy suggestion table."""

import math

from ..errors import InvalidInputError, require_non_negative, require_positive
from ..models.signals import Signal
from .models import (
    MarketTrend,
    OptionContract,
    OptionLeg,
    OptionsStrategyPlan,
    OptionType,
    StrategyType,
)


def _require_type(contract: OptionContract, expected: OptionType, role: str) -> None:
    if contract.option_type is not expected:
        raise InvalidInputError(
            f"{role} must be a {expected.value} contract",
            field=role,
            value=contract.symbol,
        )


def _strike(value: float) -> str:
    return f"{value:g}"


def bull_call_spread(long_call: OptionContract, short_call: OptionContract) -> OptionsStrategyPlan:
    """
    Buy a call and sell a higher-strike call.

    Max profit is the strike width less the net debit; max loss is the debit.
    """
    _require_type(long_call, OptionType.CE, "long_call")
    _require_type(short_call, OptionType.CE, "short_call")
    if short_call.strike_price <= long_call.strike_price:
        raise InvalidInputError("short_call strike must be above long_call strike",
                                field="short_call", value=short_call.strike_price)

    net_debit = long_call.premium - short_call.premium
    width = short_call.strike_price - long_call.strike_price
    break_even = long_call.strike_price + net_debit

    return OptionsStrategyPlan(
        name="Bull Call Spread",
        strategy_type=StrategyType.BULL_CALL,
        description=f"Buy {_strike(long_call.strike_price)} CE, Sell {_strike(short_call.strike_price)} CE",
        legs=(OptionLeg(long_call, Signal.BUY), OptionLeg(short_call, Signal.SELL)),
        net_debit=net_debit,
        net_credit=0.0,
        max_profit=width - net_debit,
        max_loss=net_debit,
        break_even_low=break_even,
        break_even_high=break_even,
    )


def iron_condor(
    long_call: OptionContract,
    short_call: OptionContract,
    long_put: OptionContract,
    short_put: OptionContract,
) -> OptionsStrategyPlan:
    """
    Short put spread plus short call spread.

    Strikes must satisfy long put < short put <= short call < long call. Max
    profit is the net credit; max loss is the wider wing less the credit.
    """
    _require_type(long_call, OptionType.CE, "long_call")
    _require_type(short_call, OptionType.CE, "short_call")
    _require_type(long_put, OptionType.PE, "long_put")
    _require_type(short_put, OptionType.PE, "short_put")

    if not (long_put.strike_price < short_put.strike_price
            <= short_call.strike_price < long_call.strike_price):
        raise InvalidInputError(
            "Iron condor strikes must satisfy long put < short put <= short call < long call",
            field="strikes",
            value=(long_put.strike_price, short_put.strike_price,
                   short_call.strike_price, long_call.strike_price),
        )

    credit = short_call.premium + short_put.premium - long_call.premium - long_put.premium
    call_width = long_call.strike_price - short_call.strike_price
    put_width = short_put.strike_price - long_put.strike_price

    return OptionsStrategyPlan(
        name="Iron Condor",
        strategy_type=StrategyType.IRON_CONDOR,
        description=(
            f"Sell {_strike(short_call.strike_price)} CE, Buy {_strike(long_call.strike_price)} CE, "
            f"Sell {_strike(short_put.strike_price)} PE, Buy {_strike(long_put.strike_price)} PE"
        ),
        legs=(
            OptionLeg(long_call, Signal.BUY),
            OptionLeg(short_call, Signal.SELL),
            OptionLeg(long_put, Signal.BUY),
            OptionLeg(short_put, Signal.SELL),
        ),
        net_debit=0.0,
        net_credit=credit,
        max_profit=credit,
        max_loss=max(call_width, put_width) - credit,
        break_even_low=short_put.strike_price - credit,
        break_even_high=short_call.strike_price + credit,
    )


def straddle(call: OptionContract, put: OptionContract) -> OptionsStrategyPlan:
    """Long call and long put at the same strike; unlimited upside."""
    _require_type(call, OptionType.CE, "call")
    _require_type(put, OptionType.PE, "put")
    if call.strike_price != put.strike_price:
        raise InvalidInputError("Straddle legs must share a strike",
                                field="put", value=put.strike_price)

    cost = call.premium + put.premium

    return OptionsStrategyPlan(
        name="Long Straddle",
        strategy_type=StrategyType.STRADDLE,
        description=f"Buy {_strike(call.strike_price)} CE, Buy {_strike(put.strike_price)} PE",
        legs=(OptionLeg(call, Signal.BUY), OptionLeg(put, Signal.BUY)),
        net_debit=cost,
        net_credit=0.0,
        max_profit=math.inf,
        max_loss=cost,
        break_even_low=call.strike_price - cost,
        break_even_high=put.strike_price + cost,
    )


def suggest_strategy(trend: MarketTrend, volatility: float, base_price: float) -> list[str]:
    """
    Ranked strategy suggestions for a market view and implied volatility.

    ``base_price`` is accepted for callers that size strikes from it; the
    rule table itself depends only on trend and volatility.
    """
    trend = MarketTrend.parse(trend)
    require_non_negative("volatility", volatility)
    require_positive("base_price", base_price)
    suggestions: list[str] = []

    if trend is MarketTrend.BUY:
        suggestions.append("BULL_CALL - Good risk/reward in bullish market")
        if volatility > 30:
            suggestions.append("BULL_CALL_SPREAD - Reduce cost in high IV environment")
    elif trend is MarketTrend.SELL:
        suggestions.append("BEAR_CALL - Good risk/reward in bearish market")
        if volatility > 30:
            suggestions.append("BEAR_CALL_SPREAD - Reduce cost in high IV environment")
    else:
        suggestions.append("IRON_CONDOR - Best for range-bound markets")
        if volatility > 35:
            suggestions.append("SHORT_STRADDLE - High IV great for selling premium")
        if volatility < 15:
            suggestions.append("LONG_STRADDLE - Low IV good for high-risk traders")

    return suggestions
