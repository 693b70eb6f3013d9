"""
Strike ladders, NSE expiry calendar and option chain construction.

Weekly contracts expire on Thursday, monthly contracts on the last Thursday
of the month.
"""

import calendar
import math
from datetime import date, timedelta
from typing import Optional

import structlog

from ..errors import require_non_negative, require_positive
from .models import ExpiryType, OptionContract, OptionType
from .pricing import price_option

logger = structlog.get_logger(__name__)

THURSDAY = 3


def strike_ladder(base_price: float, interval: float = 100.0, width: float = 500.0) -> list[float]:
    """
    Strikes around ``base_price``

    From floor(base / interval) * interval - width up to
    ceil(base / interval) * interval + width in ``interval`` steps; only
    positive strikes are kept.
    """
    require_positive("base_price", base_price)
    require_positive("interval", interval)
    require_non_negative("width", width)

    low = math.floor(base_price / interval) * interval - width
    high = math.ceil(base_price / interval) * interval + width
    steps = int(round((high - low) / interval))

    strikes = []
    for i in range(steps + 1):
        strike = low + i * interval
        if strike > 0:
            strikes.append(float(strike))
    return strikes


def nearest_strike(price: float, interval: float = 100.0) -> float:
    """At-the-money strike for ``price``."""
    require_positive("interval", interval)
    return float(round(price / interval) * interval)


def _last_thursday(year: int, month: int) -> date:
    last_day = date(year, month, calendar.monthrange(year, month)[1])
    return last_day - timedelta(days=(last_day.weekday() - THURSDAY) % 7)


def next_expiry(expiry_type: ExpiryType, today: Optional[date] = None) -> date:
    """
    Next expiry date from ``today``

    WEEKLY: the next Thursday strictly after today. MONTHLY: the last
    Thursday of this month, or of next month once that day has come.
    """
    expiry_type = ExpiryType.parse(expiry_type)
    today = today or date.today()

    if expiry_type is ExpiryType.WEEKLY:
        days_ahead = (THURSDAY - today.weekday()) % 7 or 7
        return today + timedelta(days=days_ahead)

    expiry = _last_thursday(today.year, today.month)
    if expiry <= today:
        year, month = (today.year + 1, 1) if today.month == 12 else (today.year, today.month + 1)
        expiry = _last_thursday(year, month)
    return expiry


def days_to_expiry(expiry: date, today: Optional[date] = None) -> int:
    """Absolute whole days between today and expiry."""
    today = today or date.today()
    return abs((expiry - today).days)


def contract_symbol(base_symbol: str, expiry: date, strike: float, option_type: OptionType) -> str:
    """Exchange trading symbol, e.g. NIFTY24OCT25000CE."""
    strike_text = f"{strike:g}" if strike != int(strike) else str(int(strike))
    return f"{base_symbol}{expiry:%y}{expiry:%b}{strike_text}{option_type.value}".upper()


def build_contract(
    base_symbol: str,
    option_type: OptionType,
    strike: float,
    spot: float,
    volatility: float,
    expiry_type: ExpiryType = ExpiryType.WEEKLY,
    today: Optional[date] = None,
    risk_free_rate: float = 0.05,
    dividend_yield: float = 0.0,
    spread_pct: float = 0.01,
) -> OptionContract:
    """Theoretically priced contract with a symmetric bid/ask around the premium."""
    option_type = OptionType.parse(option_type)
    expiry_type = ExpiryType.parse(expiry_type)
    today = today or date.today()

    expiry = next_expiry(expiry_type, today)
    quote = price_option(spot, strike, days_to_expiry(expiry, today), volatility,
                         risk_free_rate, dividend_yield, option_type)
    half_spread = quote.price * spread_pct / 2.0

    return OptionContract(
        symbol=contract_symbol(base_symbol, expiry, strike, option_type),
        base_symbol=base_symbol.upper(),
        option_type=option_type,
        strike_price=float(strike),
        expiry_type=expiry_type,
        expiry_date=expiry,
        spot_price=spot,
        implied_volatility=volatility,
        greeks=quote.greeks,
        premium=quote.price,
        bid=max(0.0, quote.price - half_spread),
        ask=quote.price + half_spread,
    )


def build_option_chain(
    base_symbol: str,
    spot: float,
    volatility: float,
    expiry_type: ExpiryType = ExpiryType.WEEKLY,
    interval: float = 100.0,
    width: float = 500.0,
    today: Optional[date] = None,
    risk_free_rate: float = 0.05,
    dividend_yield: float = 0.0,
    spread_pct: float = 0.01,
) -> list[OptionContract]:
    """CE and PE contracts for every strike on the ladder around ``spot``."""
    chain = [
        build_contract(base_symbol, option_type, strike, spot, volatility, expiry_type, today,
                       risk_free_rate, dividend_yield, spread_pct)
        for strike in strike_ladder(spot, interval, width)
        for option_type in (OptionType.CE, OptionType.PE)
    ]
    logger.debug("Option chain built", base_symbol=base_symbol, spot=spot,
                 contracts=len(chain), expiry_type=ExpiryType.parse(expiry_type).value)
    return chain
