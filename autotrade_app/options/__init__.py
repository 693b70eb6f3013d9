"""
Options pricing engine.

Closed-form Black-Scholes prices and Greeks, NSE strike ladders and expiry
calendar, and payoff summaries for common multi-leg strategies.
"""

from .chain import build_contract, build_option_chain, days_to_expiry, next_expiry, strike_ladder
from .models import ExpiryType, Greeks, MarketTrend, OptionContract, OptionQuote, OptionType
from .pricing import black_scholes_price, calculate_greeks, normal_cdf, price_option
from .strategies import bull_call_spread, iron_condor, straddle, suggest_strategy

__all__ = [
    "ExpiryType",
    "Greeks",
    "MarketTrend",
    "OptionContract",
    "OptionQuote",
    "OptionType",
    "black_scholes_price",
    "build_contract",
    "build_option_chain",
    "bull_call_spread",
    "calculate_greeks",
    "days_to_expiry",
    "iron_condor",
    "next_expiry",
    "normal_cdf",
    "price_option",
    "straddle",
    "strike_ladder",
    "suggest_strategy",
]
