"""
Multi-timeframe consensus ("ultimate strategy").

Ten indicator votes from the higher (1h) and lower (15m) timeframes are
combined into a single direction with a confidence equal to the share of
votes agreeing with the majority. A direction is emitted only at or above
the confidence threshold; levels come from ATR on the higher timeframe.
"""

from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Optional

import structlog

from ..config.defaults import DefaultConfig, get_default_config
from ..data.models import Candle
from ..data.normalizer import normalize_candles
from ..errors import InvalidInputError, MalformedDataError, MissingDataError
from ..gateway.base import MarketGateway
from ..indicators.atr import compute_atr
from ..models.signals import ConsensusSignal, Signal
from ..signals.detector import detect_bollinger, detect_ma_crossover, detect_macd, detect_rsi
from ..signals.heuristics import (
    detect_support_resistance,
    detect_trend_strength,
    detect_volume_confirmation,
)
from ..utils.time import lookback_window, now_utc
from .risk import calculate_levels, risk_reward_ratio

logger = structlog.get_logger(__name__)

INDICATOR_NAMES = (
    "ma_crossover_1h",
    "rsi_1h",
    "macd_1h",
    "bollinger_bands_1h",
    "ma_crossover_15m",
    "rsi_15m",
    "macd_15m",
    "volume_confirmation",
    "trend_strength",
    "sr_bounce",
)


def tally_votes(votes: dict[str, Signal]) -> tuple[Signal, float, tuple[str, ...]]:
    """
    Majority direction, confidence and the names of directional votes.

    Confidence is majority count / total votes * 100; a tie (including no
    directional votes at all) is NONE with confidence 0.
    """
    buys = sum(1 for v in votes.values() if v is Signal.BUY)
    sells = sum(1 for v in votes.values() if v is Signal.SELL)
    matched = tuple(name for name, v in votes.items() if v.is_directional)
    total = len(votes)

    if total == 0 or buys == sells:
        return Signal.NONE, 0.0, matched
    if buys > sells:
        return Signal.BUY, buys / total * 100.0, matched
    return Signal.SELL, sells / total * 100.0, matched


class ConsensusEngine:
    """Combines indicator votes into a confidence-scored ConsensusSignal."""

    def __init__(
        self,
        gateway: MarketGateway,
        config: Optional[DefaultConfig] = None,
        clock: Callable[[], datetime] = now_utc,
        config_resolver: Optional[Callable[[str], DefaultConfig]] = None,
    ):
        self.gateway = gateway
        self.config = config or get_default_config()
        self.clock = clock
        self.config_resolver = config_resolver

    @property
    def min_confidence_threshold(self) -> float:
        return self.config.consensus.min_confidence_threshold

    def config_for(self, instrument_id: str) -> DefaultConfig:
        if self.config_resolver is None:
            return self.config
        return self.config_resolver(instrument_id)

    def indicator_votes(
        self,
        higher: Sequence[Candle],
        lower: Sequence[Candle],
        config: Optional[DefaultConfig] = None,
    ) -> dict[str, Signal]:
        """Run the ten indicators in their fixed order."""
        cfg = config or self.config
        ind = cfg.indicators
        cons = cfg.consensus
        macd_args = (ind.macd_fast, ind.macd_slow, ind.macd_signal)
        rsi_args = (ind.rsi_period, ind.rsi_oversold, ind.rsi_overbought)

        votes = [
            detect_ma_crossover(higher, cons.higher_ma_short, cons.higher_ma_long),
            detect_rsi(higher, *rsi_args),
            detect_macd(higher, *macd_args),
            detect_bollinger(higher, ind.bollinger_period, ind.bollinger_k),
            detect_ma_crossover(lower, cons.lower_ma_short, cons.lower_ma_long),
            detect_rsi(lower, *rsi_args),
            detect_macd(lower, *macd_args),
            detect_volume_confirmation(higher, cons.volume_lookback, cons.volume_multiplier),
            detect_trend_strength(higher, cons.trend_lookback, cons.trend_min_count),
            detect_support_resistance(higher, cons.sr_lookback, cons.sr_proximity_pct),
        ]
        return dict(zip(INDICATOR_NAMES, votes))

    def evaluate(
        self,
        higher: Sequence[Candle],
        lower: Sequence[Candle],
        price: float,
        symbol: str,
        instrument_id: str,
        quantity: int = 1,
        config: Optional[DefaultConfig] = None,
    ) -> ConsensusSignal:
        """Build a ConsensusSignal from already-fetched candles and price."""
        cfg = config or self.config
        threshold = cfg.consensus.min_confidence_threshold
        votes = self.indicator_votes(higher, lower, cfg)
        majority, confidence, matched = tally_votes(votes)

        direction = majority if confidence >= threshold else Signal.NONE

        atr_result = compute_atr(higher, cfg.indicators.atr_period)
        if direction.is_directional and not atr_result.sufficient_data:
            logger.warning("ATR unavailable, levels placed at price",
                           symbol=symbol, candles=len(higher))

        risk = cfg.risk
        levels = calculate_levels(price, direction, atr_result.value,
                                  risk.target_atr_mult, risk.stoploss_atr_mult)

        signal = ConsensusSignal(
            symbol=symbol,
            instrument_id=instrument_id,
            direction=direction,
            confidence=confidence,
            matched_indicators=matched,
            price=price,
            target=levels.target,
            stoploss=levels.stoploss,
            risk_reward_ratio=risk_reward_ratio(price, levels.target, levels.stoploss),
            timestamp=self.clock(),
            atr=atr_result.value,
            quantity=quantity,
            indicator_signals=votes,
        )

        logger.info(
            "Consensus analysis complete",
            symbol=symbol,
            direction=direction.value,
            majority=majority.value,
            confidence=round(confidence, 2),
            matched=len(matched),
            threshold=threshold,
        )
        return signal

    def analyze(self, instrument_id: str, symbol: str, quantity: int = 1) -> ConsensusSignal:
        """
        Fetch both timeframes and the quote, then evaluate.

        Raises:
            InvalidInputError: empty symbol/instrument or non-positive quantity
            MissingDataError: gateway returned no quote for the instrument
            MalformedDataError: non-positive quoted price or inconsistent candles
        """
        if not symbol or not instrument_id:
            raise InvalidInputError("symbol and instrument_id are required",
                                    field="symbol", value=symbol)
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise InvalidInputError("quantity must be a positive integer",
                                    field="quantity", value=quantity)

        cfg = self.config_for(instrument_id)
        cons = cfg.consensus
        now = self.clock()
        higher = self._fetch(instrument_id, cons.higher_timeframe, cons.higher_lookback_days, now)
        lower = self._fetch(instrument_id, cons.lower_timeframe, cons.lower_lookback_days, now)

        quotes = self.gateway.get_quote([instrument_id])
        quote = quotes.get(instrument_id)
        if quote is None:
            raise MissingDataError(f"No quote returned for {instrument_id}", data_type="quote",
                                   context={"symbol": symbol})
        if quote.last_price <= 0:
            raise MalformedDataError(f"Non-positive last price for {instrument_id}",
                                     raw_data=repr(quote))

        return self.evaluate(higher, lower, quote.last_price, symbol, instrument_id, quantity, cfg)

    def _fetch(self, instrument_id: str, interval: str, days: int, now: datetime) -> list[Candle]:
        start, end = lookback_window(days, now)
        rows = self.gateway.get_historical_candles(instrument_id, interval, start, end)
        candles = normalize_candles(rows)
        logger.debug("Fetched candles", instrument_id=instrument_id, interval=interval,
                     count=len(candles))
        return candles
