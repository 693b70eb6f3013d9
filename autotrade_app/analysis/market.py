"""
Heuristic market analysis report.

Blends a technical score (indicator alignment), an "AI" score (price-action
heuristics) and a sentiment score (share of up closes) into an outlook with
confidence, detected patterns and textual recommendations. All scores are
deterministic weighted rules; nothing here is learned from data.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

import structlog

from ..data.models import Candle
from ..errors import InsufficientDataError
from ..indicators.atr import calculate_atr, calculate_natr
from ..indicators.momentum import macd_line, momentum, rate_of_change, rsi
from ..indicators.moving_average import moving_average
from ..indicators.volatility import bollinger_bands, return_volatility
from ..indicators.volume import calculate_rvol

logger = structlog.get_logger(__name__)

MIN_CANDLES = 50


class MarketOutlook(str, Enum):
    STRONG_BUY = "STRONG_BUY"
    BUY = "BUY"
    NEUTRAL = "NEUTRAL"
    SELL = "SELL"
    STRONG_SELL = "STRONG_SELL"


class Pattern(str, Enum):
    DOUBLE_BOTTOM = "DOUBLE_BOTTOM"
    DOUBLE_TOP = "DOUBLE_TOP"
    HIGHER_HIGHS = "HIGHER_HIGHS"
    LOWER_HIGHS = "LOWER_HIGHS"
    BULLISH_ENGULFING = "BULLISH_ENGULFING"
    BEARISH_ENGULFING = "BEARISH_ENGULFING"


@dataclass(frozen=True)
class IndicatorSnapshot:
    price: float
    ma20: float
    ma50: float
    ma200: float
    rsi: float
    macd: float
    bollinger_upper: float
    bollinger_lower: float
    atr: float
    natr: float                     # ATR as percent of price


@dataclass(frozen=True)
class MarketAnalysis:
    symbol: str
    timeframe: str
    trend: MarketOutlook
    confidence: float
    ai_score: float                 # 0..100
    technical_score: float          # 0..100
    sentiment_score: float          # -100..100
    volatility: float               # Std-dev of returns, percent
    momentum: float
    patterns: tuple[Pattern, ...]
    indicators: IndicatorSnapshot
    predicted_direction: str        # UP or DOWN
    predicted_probability: float    # Percent
    recommendations: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "timeframe": self.timeframe,
            "trend": self.trend.value,
            "confidence": round(self.confidence, 2),
            "ai_score": self.ai_score,
            "technical_score": self.technical_score,
            "sentiment_score": round(self.sentiment_score, 2),
            "volatility": round(self.volatility, 4),
            "momentum": round(self.momentum, 4),
            "patterns": [p.value for p in self.patterns],
            "signals": {k: round(v, 4) for k, v in vars(self.indicators).items()},
            "predicted_direction": self.predicted_direction,
            "predicted_probability": round(self.predicted_probability, 2),
            "recommendations": list(self.recommendations),
        }


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def indicator_snapshot(candles: Sequence[Candle]) -> IndicatorSnapshot:
    closes = [c.close for c in candles]
    bands = bollinger_bands(closes, 20, 2.0)
    atr = calculate_atr(candles, 14)
    return IndicatorSnapshot(
        price=closes[-1],
        ma20=moving_average(closes, 20),
        ma50=moving_average(closes, 50),
        ma200=moving_average(closes, 200),
        rsi=rsi(closes, 14),
        macd=macd_line(closes) if len(closes) >= 26 else 0.0,
        bollinger_upper=bands.upper,
        bollinger_lower=bands.lower,
        atr=atr,
        natr=calculate_natr(atr, closes[-1]),
    )


def technical_score(ind: IndicatorSnapshot, candles: Sequence[Candle]) -> float:
    """Indicator alignment score around a neutral 50, clamped to 0..100."""
    score = 50.0

    if ind.price > ind.ma20 > ind.ma50 > ind.ma200:
        score += 20
    elif ind.price < ind.ma20 < ind.ma50 < ind.ma200:
        score -= 20

    if ind.rsi < 30:
        score += 15
    elif ind.rsi > 70:
        score -= 15
    elif 45 < ind.rsi < 55:
        score += 5

    score += 10 if ind.macd > 0 else -10

    if ind.price > ind.bollinger_upper:
        score -= 10
    elif ind.price < ind.bollinger_lower:
        score += 10

    if calculate_rvol(candles, 10) > 1.5:
        score += 5

    return _clamp(score)


def ai_score(candles: Sequence[Candle]) -> float:
    """Price-action heuristic score around a neutral 50, clamped to 0..100."""
    score = 50.0
    closes = [c.close for c in candles]

    up_candles = sum(1 for c in candles[-10:] if c.is_bullish)
    if up_candles > 7:
        score += 15
    elif up_candles < 3:
        score -= 15

    # Volatility contraction
    if return_volatility(candles[-20:]) < return_volatility(candles[-50:]) * 0.7:
        score += 10

    recent = closes[-20:]
    low, high = min(recent), max(recent)
    band = (high - low) * 0.05
    if abs(closes[-1] - low) < band:
        score += 12
    elif abs(closes[-1] - high) < band:
        score -= 12

    if abs(rate_of_change(closes, 9)) > 5:
        score += 8

    return _clamp(score)


def sentiment_score(candles: Sequence[Candle]) -> float:
    """(share of up closes - 50) * 2, in -100..100; 0 when nothing moved."""
    ups = downs = 0
    for prev, curr in zip(candles, candles[1:]):
        if curr.close > prev.close:
            ups += 1
        elif curr.close < prev.close:
            downs += 1
    if ups + downs == 0:
        return 0.0
    return (ups / (ups + downs) * 100.0 - 50.0) * 2.0


def detect_patterns(candles: Sequence[Candle]) -> tuple[Pattern, ...]:
    closes = [c.close for c in candles]
    found = []

    if closes[-1] > closes[-2] and closes[-2] < closes[-3]:
        found.append(Pattern.DOUBLE_BOTTOM)
    if closes[-1] < closes[-2] and closes[-2] > closes[-3]:
        found.append(Pattern.DOUBLE_TOP)

    r = closes[-5:]
    if r[4] > r[3] > r[2] > r[1]:
        found.append(Pattern.HIGHER_HIGHS)
    if r[4] < r[3] < r[2] < r[1]:
        found.append(Pattern.LOWER_HIGHS)

    last, prev = candles[-1], candles[-2]
    if last.is_bullish and prev.is_bearish and last.open < prev.close:
        found.append(Pattern.BULLISH_ENGULFING)
    if last.is_bearish and prev.is_bullish and last.open > prev.close:
        found.append(Pattern.BEARISH_ENGULFING)

    return tuple(found)


def predict_direction(
    candles: Sequence[Candle],
    ind: IndicatorSnapshot,
    ai: float,
    technical: float,
) -> tuple[str, float]:
    """Direction and probability (percent, 50..99)."""
    combined = (ai * 0.5 + technical * 0.5 + ind.rsi) / 3.0
    probability = abs(combined - 50.0) / 50.0

    closes = [c.close for c in candles]
    base = closes[max(0, len(closes) - 5)]
    recent_trend = (closes[-1] - base) / base if base else 0.0
    # Ten percentage points toward the recent trend, before clamping
    probability += 0.10 if recent_trend > 0 else -0.10

    probability = max(0.5, min(0.99, probability))
    return ("UP" if combined > 50 else "DOWN"), probability * 100.0


def determine_outlook(ai: float, technical: float, sentiment: float) -> MarketOutlook:
    """Symmetric buy/sell thresholds; everything in between is NEUTRAL."""
    combined = (ai + technical) / 2.0

    if combined > 75 and sentiment > 40:
        return MarketOutlook.STRONG_BUY
    if combined > 60 and sentiment > 20:
        return MarketOutlook.BUY
    if combined < 25 and sentiment < -40:
        return MarketOutlook.STRONG_SELL
    if combined < 40 and sentiment < -20:
        return MarketOutlook.SELL
    return MarketOutlook.NEUTRAL


def recommendations_for(
    outlook: MarketOutlook,
    ind: IndicatorSnapshot,
    patterns: Sequence[Pattern],
    volatility: float,
    price_momentum: float,
) -> tuple[str, ...]:
    recs = []

    if outlook in (MarketOutlook.BUY, MarketOutlook.STRONG_BUY):
        recs.append("Consider BUY position")
        if volatility < 2:
            recs.append("Low volatility - good entry opportunity")
        if price_momentum > 0:
            recs.append("Positive momentum confirmation")
        if ind.rsi < 40:
            recs.append("RSI showing room for upside")
    elif outlook in (MarketOutlook.SELL, MarketOutlook.STRONG_SELL):
        recs.append("Consider SELL position")
        if volatility > 4:
            recs.append("High volatility - use wider stops")
        if price_momentum < 0:
            recs.append("Negative momentum confirmation")
        if ind.rsi > 60:
            recs.append("RSI showing weakness")
    else:
        recs.append("Market in consolidation - wait for breakout")
        recs.append("Use range trading strategy")

    if Pattern.BULLISH_ENGULFING in patterns:
        recs.append("Bullish engulfing pattern detected - strong BUY signal")
    if Pattern.BEARISH_ENGULFING in patterns:
        recs.append("Bearish engulfing pattern detected - strong SELL signal")
    if Pattern.DOUBLE_BOTTOM in patterns:
        recs.append("Double bottom pattern - potential reversal UP")
    if Pattern.DOUBLE_TOP in patterns:
        recs.append("Double top pattern - potential reversal DOWN")

    return tuple(recs)


def analyze_market(
    candles: Sequence[Candle],
    symbol: str = "UNKNOWN",
    timeframe: str = "1H",
    min_candles: int = MIN_CANDLES,
) -> MarketAnalysis:
    """
    Full analysis report for a candle series.

    Raises:
        InsufficientDataError: fewer than ``min_candles`` candles
    """
    if len(candles) < min_candles:
        raise InsufficientDataError(
            f"Insufficient data for analysis. Need at least {min_candles} candles.",
            required_count=min_candles,
            available_count=len(candles),
            context={"symbol": symbol},
        )

    ind = indicator_snapshot(candles)
    technical = technical_score(ind, candles)
    ai = ai_score(candles)
    sentiment = sentiment_score(candles)
    patterns = detect_patterns(candles)
    volatility = return_volatility(candles)
    price_momentum = momentum([c.close for c in candles], 9)

    direction, probability = predict_direction(candles, ind, ai, technical)
    outlook = determine_outlook(ai, technical, sentiment)
    confidence = min(100.0, (ai + technical) / 2.0 + len(patterns) * 5)

    logger.info("Market analysis complete", symbol=symbol, timeframe=timeframe,
                outlook=outlook.value, ai_score=ai, technical_score=technical,
                patterns=len(patterns))

    return MarketAnalysis(
        symbol=symbol,
        timeframe=timeframe,
        trend=outlook,
        confidence=confidence,
        ai_score=ai,
        technical_score=technical,
        sentiment_score=sentiment,
        volatility=volatility,
        momentum=price_momentum,
        patterns=patterns,
        indicators=ind,
        predicted_direction=direction,
        predicted_probability=probability,
        recommendations=recommendations_for(outlook, ind, patterns, volatility, price_momentum),
    )
