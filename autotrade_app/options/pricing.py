"""
Black-Scholes-Merton pricing and Greeks.

Time is in calendar days (T = days / 365) and volatility in percent. The
cumulative normal uses the Abramowitz-Stegun polynomial (error below 7.5e-8)
so results match the broker-side calculator exactly.
"""

import math

from ..errors import require_non_negative, require_positive
from .models import Greeks, OptionQuote, OptionType

DAYS_IN_YEAR = 365.0

_P = 0.2316419
_B1 = 0.319381530
_B2 = -0.356563782
_B3 = 1.781477937
_B4 = -1.821255978
_B5 = 1.330274429
_INV_SQRT_2PI = 0.3989423


def normal_cdf(x: float) -> float:
    """Standard normal CDF, Abramowitz-Stegun 26.2.17."""
    t = 1.0 / (1.0 + _P * abs(x))
    d = _INV_SQRT_2PI * math.exp(-x * x / 2.0)
    prob = d * t * (_B1 + t * (_B2 + t * (_B3 + t * (_B4 + t * _B5))))
    return 1.0 - prob if x >= 0 else prob


def normal_pdf(x: float) -> float:
    return math.exp(-x * x / 2.0) / math.sqrt(2.0 * math.pi)


def _validate(spot: float, strike: float, days_to_expiry: float, volatility: float) -> None:
    require_positive("spot", spot)
    require_positive("strike", strike)
    require_non_negative("days_to_expiry", days_to_expiry)
    require_non_negative("volatility", volatility)


def _d1_d2(spot: float, strike: float, t: float, sigma: float, r: float, q: float) -> tuple[float, float]:
    vol_sqrt_t = sigma * math.sqrt(t)
    d1 = (math.log(spot / strike) + (r - q + sigma * sigma / 2.0) * t) / vol_sqrt_t
    return d1, d1 - vol_sqrt_t


def black_scholes_price(
    spot: float,
    strike: float,
    days_to_expiry: float,
    volatility: float,
    risk_free_rate: float = 0.05,
    dividend_yield: float = 0.0,
    option_type: OptionType = OptionType.CE,
) -> float:
    """
    European option price, floored at zero

    Args:
        spot: Underlying price
        strike: Strike price
        days_to_expiry: Calendar days to expiry
        volatility: Annualized volatility in percent (30 = 30%)
        risk_free_rate: Annual rate as a fraction (default 0.05)
        dividend_yield: Continuous dividend yield as a fraction
        option_type: CE (call) or PE (put)

    Returns:
        Theoretical price; discounted intrinsic value when T or sigma is 0
    """
    _validate(spot, strike, days_to_expiry, volatility)
    option_type = OptionType.parse(option_type)

    t = days_to_expiry / DAYS_IN_YEAR
    sigma = volatility / 100.0
    r, q = risk_free_rate, dividend_yield

    forward_spot = spot * math.exp(-q * t)
    discounted_strike = strike * math.exp(-r * t)

    if t == 0 or sigma == 0:
        if option_type is OptionType.CE:
            return max(0.0, forward_spot - discounted_strike)
        return max(0.0, discounted_strike - forward_spot)

    d1, d2 = _d1_d2(spot, strike, t, sigma, r, q)
    if option_type is OptionType.CE:
        price = forward_spot * normal_cdf(d1) - discounted_strike * normal_cdf(d2)
    else:
        price = discounted_strike * (1.0 - normal_cdf(d2)) - forward_spot * (1.0 - normal_cdf(d1))

    return max(0.0, price)


def calculate_greeks(
    spot: float,
    strike: float,
    days_to_expiry: float,
    volatility: float,
    risk_free_rate: float = 0.05,
    dividend_yield: float = 0.0,
    option_type: OptionType = OptionType.CE,
) -> Greeks:
    """
    Delta, gamma, theta (per day), vega (per vol point) and rho (per 1%)

    At expiry or zero volatility delta is the intrinsic step and the other
    sensitivities are zero.
    """
    _validate(spot, strike, days_to_expiry, volatility)
    option_type = OptionType.parse(option_type)

    t = days_to_expiry / DAYS_IN_YEAR
    sigma = volatility / 100.0
    r, q = risk_free_rate, dividend_yield

    if t == 0 or sigma == 0:
        in_the_money = spot * math.exp(-q * t) > strike * math.exp(-r * t)
        if option_type is OptionType.CE:
            delta = 1.0 if in_the_money else 0.0
        else:
            delta = 0.0 if in_the_money else -1.0
        return Greeks(delta=delta, gamma=0.0, theta=0.0, vega=0.0, rho=0.0)

    d1, d2 = _d1_d2(spot, strike, t, sigma, r, q)
    sqrt_t = math.sqrt(t)
    div_discount = math.exp(-q * t)
    rate_discount = math.exp(-r * t)
    pdf_d1 = normal_pdf(d1)
    n_d1 = normal_cdf(d1)
    n_d2 = normal_cdf(d2)

    gamma = div_discount * pdf_d1 / (spot * sigma * sqrt_t)
    vega = spot * div_discount * pdf_d1 * sqrt_t / 100.0
    decay = -(spot * div_discount * pdf_d1 * sigma) / (2.0 * sqrt_t)

    if option_type is OptionType.CE:
        delta = div_discount * n_d1
        theta = decay - r * strike * rate_discount * n_d2 + q * spot * div_discount * n_d1
        rho = strike * t * rate_discount * n_d2 / 100.0
    else:
        delta = div_discount * (n_d1 - 1.0)
        theta = decay + r * strike * rate_discount * (1.0 - n_d2) - q * spot * div_discount * (1.0 - n_d1)
        rho = -strike * t * rate_discount * (1.0 - n_d2) / 100.0

    return Greeks(delta=delta, gamma=gamma, theta=theta / DAYS_IN_YEAR, vega=vega, rho=rho)


def price_option(
    spot: float,
    strike: float,
    days_to_expiry: float,
    volatility: float,
    risk_free_rate: float = 0.05,
    dividend_yield: float = 0.0,
    option_type: OptionType = OptionType.CE,
) -> OptionQuote:
    """Price and Greeks in one call."""
    args = (spot, strike, days_to_expiry, volatility, risk_free_rate, dividend_yield, option_type)
    return OptionQuote(price=black_scholes_price(*args), greeks=calculate_greeks(*args))
