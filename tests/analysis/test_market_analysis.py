"""Tests for the heuristic market analysis report"""

from datetime import timedelta

import pytest

from autotrade_app.analysis.market import (
    IndicatorSnapshot,
    MarketOutlook,
    Pattern,
    analyze_market,
    detect_patterns,
    indicator_snapshot,
    determine_outlook,
    predict_direction,
    recommendations_for,
    sentiment_score,
    technical_score,
)
from autotrade_app.data.models import Candle
from autotrade_app.errors import InsufficientDataError


def _snapshot(**kwargs):
    values = {
        "price": 100.0, "ma20": 100.0, "ma50": 100.0, "ma200": 100.0, "rsi": 60.0,
        "macd": 0.0, "bollinger_upper": 110.0, "bollinger_lower": 90.0, "atr": 1.0,
        "natr": 1.0,
    }
    values.update(kwargs)
    return IndicatorSnapshot(**values)


class TestTechnicalScore:
    """Test indicator alignment scoring"""

    def test_bullish_alignment(self, candles_from_closes):
        ind = _snapshot(price=110, ma20=105, ma50=100, ma200=95, rsi=25, macd=1.0, bollinger_upper=120)
        assert technical_score(ind, candles_from_closes([100.0] * 20)) == 95.0

    def test_clamped_high(self, candles_from_closes):
        ind = _snapshot(price=110, ma20=105, ma50=100, ma200=95, rsi=25, macd=1.0,
                        bollinger_upper=130, bollinger_lower=115)
        assert technical_score(ind, candles_from_closes([100.0] * 20)) == 100.0

    def test_clamped_low(self, candles_from_closes):
        ind = _snapshot(price=90, ma20=95, ma50=100, ma200=105, rsi=75, macd=-1.0,
                        bollinger_upper=85, bollinger_lower=80)
        assert technical_score(ind, candles_from_closes([100.0] * 20)) == 0.0

    def test_neutral_rsi_and_volume_bonus(self, candles_from_closes):
        ind = _snapshot(rsi=50, macd=1.0)
        candles = candles_from_closes([100.0] * 10, volumes=[100] * 9 + [1000])
        # 50 + 5 (rsi) + 10 (macd) + 5 (volume)
        assert technical_score(ind, candles) == 70.0


class TestSentimentScore:
    """Test share-of-up-closes sentiment"""

    def test_all_up(self, candles_from_closes):
        assert sentiment_score(candles_from_closes([float(p) for p in range(100, 110)])) == 100.0

    def test_all_down(self, falling_candles):
        assert sentiment_score(falling_candles(10)) == -100.0

    def test_flat(self, candles_from_closes):
        assert sentiment_score(candles_from_closes([100.0] * 10)) == 0.0

    def test_mixed(self, candles_from_closes):
        assert sentiment_score(candles_from_closes([100.0, 101.0, 100.0, 101.0])) == pytest.approx(100.0 / 3.0)


class TestPatterns:
    """Test candle pattern detection"""

    def test_higher_highs(self, candles_from_closes):
        assert detect_patterns(candles_from_closes([100.0, 101.0, 102.0, 103.0, 104.0])) == (
            Pattern.HIGHER_HIGHS,
        )

    def test_lower_highs(self, falling_candles):
        assert Pattern.LOWER_HIGHS in detect_patterns(falling_candles(5))

    def test_double_bottom(self, candles_from_closes):
        assert detect_patterns(candles_from_closes([105.0, 104.0, 103.0, 101.0, 102.0])) == (
            Pattern.DOUBLE_BOTTOM,
        )

    def test_bullish_engulfing(self, candles_from_closes, fixed_now):
        candles = candles_from_closes([100.0] * 3, end=fixed_now - timedelta(hours=2))
        candles.append(Candle(fixed_now - timedelta(hours=1), 105.0, 105.5, 99.5, 100.0, 1000.0))
        candles.append(Candle(fixed_now, 99.0, 106.5, 98.5, 106.0, 1000.0))

        assert detect_patterns(candles) == (Pattern.BULLISH_ENGULFING,)


class TestOutlook:
    """Test the outlook table"""

    @pytest.mark.parametrize("ai,technical,sentiment,expected", [
        (80, 80, 50, MarketOutlook.STRONG_BUY),
        (65, 65, 30, MarketOutlook.BUY),
        (80, 80, 10, MarketOutlook.NEUTRAL),
        (50, 50, 0, MarketOutlook.NEUTRAL),
        (35, 35, -30, MarketOutlook.SELL),
        (20, 20, -50, MarketOutlook.STRONG_SELL),
        (20, 20, -30, MarketOutlook.SELL),
        (20, 20, 0, MarketOutlook.NEUTRAL),
    ])
    def test_outlook(self, ai, technical, sentiment, expected):
        assert determine_outlook(ai, technical, sentiment) is expected

    @pytest.mark.parametrize("ai,technical", [(80, 80), (70, 70), (20, 20), (5, 5)])
    def test_weak_sentiment_is_neutral(self, ai, technical):
        """Scores alone never produce a label without agreeing sentiment"""
        assert determine_outlook(ai, technical, 0) is MarketOutlook.NEUTRAL


class TestPrediction:
    """Test direction and probability"""

    def test_up_probability_floored(self, candles_from_closes):
        candles = candles_from_closes([float(p) for p in range(100, 110)])
        direction, probability = predict_direction(candles, _snapshot(rsi=100.0), 100.0, 100.0)

        assert direction == "UP"
        assert probability == pytest.approx(50.0)

    def test_strong_down(self, falling_candles):
        direction, probability = predict_direction(falling_candles(10), _snapshot(rsi=0.0), 0.0, 0.0)

        assert direction == "DOWN"
        assert probability == pytest.approx(90.0)

    def test_trend_adjusts_by_ten_points(self, candles_from_closes, falling_candles):
        """Combined score 20 gives a base probability of 0.6"""
        rising = candles_from_closes([float(p) for p in range(100, 110)])

        assert predict_direction(rising, _snapshot(rsi=40.0), 20.0, 20.0) == ("DOWN", pytest.approx(70.0))
        assert predict_direction(falling_candles(10), _snapshot(rsi=40.0), 20.0, 20.0) == (
            "DOWN", pytest.approx(50.0)
        )

    def test_floor_at_fifty(self, falling_candles):
        _, probability = predict_direction(falling_candles(10), _snapshot(rsi=50.0), 50.0, 50.0)
        assert probability == pytest.approx(50.0)


class TestRecommendations:
    """Test textual recommendations"""

    def test_buy_recommendations(self):
        recs = recommendations_for(MarketOutlook.BUY, _snapshot(rsi=35.0), (), 1.0, 2.0)
        assert recs == (
            "Consider BUY position",
            "Low volatility - good entry opportunity",
            "Positive momentum confirmation",
            "RSI showing room for upside",
        )

    def test_neutral_with_pattern(self):
        recs = recommendations_for(MarketOutlook.NEUTRAL, _snapshot(), (Pattern.DOUBLE_TOP,), 3.0, 0.0)
        assert recs[0] == "Market in consolidation - wait for breakout"
        assert recs[-1] == "Double top pattern - potential reversal DOWN"


class TestAnalyzeMarket:
    """Test the full report"""

    def test_requires_minimum_candles(self, candles_from_closes):
        with pytest.raises(InsufficientDataError) as exc_info:
            analyze_market(candles_from_closes([100.0] * 49), "RELIANCE")

        assert exc_info.value.required_count == 50
        assert exc_info.value.available_count == 49

    def test_custom_minimum(self, candles_from_closes):
        report = analyze_market(candles_from_closes([100.0 + (i % 3) for i in range(30)]),
                                "RELIANCE", min_candles=30)
        assert report.symbol == "RELIANCE"

    def test_rising_market_report(self, candles_from_closes):
        report = analyze_market(candles_from_closes([float(p) for p in range(100, 160)]), "RELIANCE", "hour")

        assert report.timeframe == "hour"
        assert report.sentiment_score == 100.0
        assert report.predicted_direction == "UP"
        assert 50.0 <= report.predicted_probability <= 99.0
        assert Pattern.HIGHER_HIGHS in report.patterns
        assert 0.0 <= report.ai_score <= 100.0
        assert 0.0 <= report.technical_score <= 100.0
        assert report.confidence <= 100.0
        assert report.indicators.price == 159.0
        assert report.recommendations

    def test_to_dict(self, candles_from_closes):
        data = analyze_market(candles_from_closes([float(p) for p in range(100, 160)]), "RELIANCE").to_dict()

        assert data["trend"] in {o.value for o in MarketOutlook}
        assert "HIGHER_HIGHS" in data["patterns"]
        assert set(data["signals"]) == {
            "price", "ma20", "ma50", "ma200", "rsi", "macd",
            "bollinger_upper", "bollinger_lower", "atr", "natr",
        }


class TestIndicatorSnapshot:
    """Test the indicator snapshot used by the report"""

    def test_natr_from_atr(self, falling_candles):
        """True range is 2 on every falling candle; last close 161"""
        ind = indicator_snapshot(falling_candles(40))

        assert ind.atr == pytest.approx(2.0)
        assert ind.natr == pytest.approx(200.0 / 161.0)
        assert ind.price == 161.0
