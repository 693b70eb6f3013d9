"""
Time helpers for exchange-local dates and UTC timestamps.

Candles and trades carry timezone-aware UTC datetimes. Expiry calendars and
lookback windows are computed in the exchange timezone.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

DEFAULT_EXCHANGE_TZ = "Asia/Kolkata"


def now_utc() -> datetime:
    """Current wall-clock time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(ts: datetime) -> datetime:
    """
    Normalize a datetime to UTC.

    Naive datetimes are assumed to already be UTC.
    """
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def from_epoch(value: float) -> datetime:
    """Convert an epoch timestamp in seconds or milliseconds to UTC."""
    # Millisecond epochs are above 1e11 for any date after 1973
    seconds = value / 1000.0 if value > 1e11 else value
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def epoch_ms(ts: datetime) -> int:
    """UTC datetime to integer epoch milliseconds."""
    return int(ensure_utc(ts).timestamp() * 1000)


def exchange_today(tz_name: str = DEFAULT_EXCHANGE_TZ, now: Optional[datetime] = None) -> date:
    """Calendar date at the exchange."""
    current = ensure_utc(now) if now is not None else now_utc()
    return current.astimezone(ZoneInfo(tz_name)).date()


def lookback_window(days: int, now: Optional[datetime] = None) -> tuple[datetime, datetime]:
    """Return (from, to) covering the last ``days`` days up to ``now``."""
    end = ensure_utc(now) if now is not None else now_utc()
    return end - timedelta(days=days), end


def seconds_between(earlier: datetime, later: datetime) -> float:
    """Signed number of seconds from ``earlier`` to ``later``."""
    return (ensure_utc(later) - ensure_utc(earlier)).total_seconds()
