"""
Historical candle access with a short-lived cache.

Wraps the gateway's history endpoint, caching each (symbol, interval,
lookback) series for a configurable TTL, and reports basic data quality
(gaps, missing values, price and volume ranges).
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

import structlog

from ..config.defaults import HistoryParams
from ..gateway.base import MarketGateway
from ..utils.time import lookback_window, now_utc, seconds_between
from .models import Candle
from .normalizer import normalize_candles

logger = structlog.get_logger(__name__)

INTERVAL_SECONDS = {
    "minute": 60,
    "3minute": 180,
    "5minute": 300,
    "10minute": 600,
    "15minute": 900,
    "30minute": 1800,
    "60minute": 3600,
    "hour": 3600,
    "day": 86400,
}

# interval -> days of history
MULTI_TIMEFRAMES = {
    "minute": 1,
    "5minute": 1,
    "15minute": 1,
    "hour": 5,
    "day": 30,
}


@dataclass(frozen=True)
class CacheEntry:
    symbol: str
    instrument_id: str
    interval: str
    candles: tuple[Candle, ...]
    fetched_at: datetime


@dataclass(frozen=True)
class DataQualityReport:
    total_candles: int
    missing_data: bool
    data_gaps: int
    price_min: float
    price_max: float
    volume_min: float
    volume_max: float
    volume_avg: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_candles": self.total_candles,
            "missing_data": self.missing_data,
            "data_gaps": self.data_gaps,
            "price_range": {"min": self.price_min, "max": self.price_max},
            "volume_stats": {"min": self.volume_min, "max": self.volume_max, "avg": self.volume_avg},
        }


def analyze_data_quality(
    candles: Sequence[Candle],
    interval: str = "minute",
    tolerance_seconds: int = 1,
) -> DataQualityReport:
    """
    Summarize a candle series.

    A gap is counted whenever consecutive timestamps are further apart than
    the interval length plus ``tolerance_seconds``. Missing data means a
    zero close or zero volume.
    """
    if not candles:
        return DataQualityReport(0, True, 0, 0.0, 0.0, 0.0, 0.0, 0.0)

    expected = INTERVAL_SECONDS.get(interval, 60) + tolerance_seconds
    gaps = sum(
        1 for prev, curr in zip(candles, candles[1:])
        if seconds_between(prev.timestamp, curr.timestamp) > expected
    )
    closes = [c.close for c in candles]
    volumes = [c.volume for c in candles]

    return DataQualityReport(
        total_candles=len(candles),
        missing_data=any(c.close == 0 or c.volume == 0 for c in candles),
        data_gaps=gaps,
        price_min=min(closes),
        price_max=max(closes),
        volume_min=min(volumes),
        volume_max=max(volumes),
        volume_avg=sum(volumes) / len(volumes),
    )


class HistoricalDataService:
    """Cached history fetches for one gateway."""

    def __init__(
        self,
        gateway: MarketGateway,
        params: Optional[HistoryParams] = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.gateway = gateway
        self.params = params or HistoryParams()
        self.clock = clock
        self._cache: dict[tuple[str, str, int], CacheEntry] = {}

    def get_candles(
        self,
        instrument_id: str,
        symbol: str,
        interval: str = "minute",
        days_back: int = 1,
    ) -> list[Candle]:
        """Candles for the last ``days_back`` days, served from cache while fresh."""
        key = (instrument_id, interval, days_back)
        now = self.clock()
        self._prune_expired(now)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("Using cached candles", symbol=symbol, interval=interval)
            return list(cached.candles)

        start, end = lookback_window(days_back, now)
        candles = normalize_candles(
            self.gateway.get_historical_candles(instrument_id, interval, start, end)
        )
        self._cache[key] = CacheEntry(
            symbol=symbol,
            instrument_id=instrument_id,
            interval=interval,
            candles=tuple(candles),
            fetched_at=now,
        )
        logger.info("Fetched historical candles", symbol=symbol, interval=interval,
                    days_back=days_back, count=len(candles))
        return candles

    def get_multi_timeframe(self, instrument_id: str, symbol: str) -> dict[str, list[Candle]]:
        """Minute, 5/15 minute, hourly and daily series keyed by interval."""
        return {
            interval: self.get_candles(instrument_id, symbol, interval, days)
            for interval, days in MULTI_TIMEFRAMES.items()
        }

    def clear_cache(self, symbol: Optional[str] = None, interval: Optional[str] = None) -> int:
        """Drop cached series matching the filters; returns how many were removed."""
        doomed = [
            key for key, entry in self._cache.items()
            if (symbol is None or entry.symbol == symbol) and (interval is None or entry.interval == interval)
        ]
        for key in doomed:
            del self._cache[key]
        logger.info("Cleared candle cache", symbol=symbol, interval=interval, removed=len(doomed))
        return len(doomed)

    def _prune_expired(self, now: datetime) -> None:
        expired = [
            key for key, entry in self._cache.items()
            if seconds_between(entry.fetched_at, now) >= self.params.cache_ttl_seconds
        ]
        for key in expired:
            del self._cache[key]
        if expired:
            logger.debug("Pruned expired candle cache entries", removed=len(expired))

    def cache_stats(self) -> dict[str, Any]:
        entries = list(self._cache.values())
        return {
            "total_cached": len(entries),
            "cached_symbols": sorted({e.symbol for e in entries}),
            "cached_candles": sum(len(e.candles) for e in entries),
        }

    def analyze_data_quality(self, candles: Sequence[Candle], interval: str = "minute") -> DataQualityReport:
        return analyze_data_quality(candles, interval, self.params.gap_tolerance_seconds)
