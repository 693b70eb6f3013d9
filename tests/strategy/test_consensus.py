"""Tests for the multi-timeframe consensus engine"""

from dataclasses import replace
from unittest.mock import Mock

import pytest

from autotrade_app.config.defaults import get_default_config
from autotrade_app.data.models import Quote
from autotrade_app.errors import InvalidInputError, MalformedDataError, MissingDataError
from autotrade_app.gateway.base import MarketGateway
from autotrade_app.models.signals import Signal
from autotrade_app.strategy.consensus import INDICATOR_NAMES, ConsensusEngine, tally_votes

RELIANCE_ID = "738561"


def _low_threshold_config(threshold=25.0):
    config = get_default_config()
    return replace(config, consensus=replace(config.consensus, min_confidence_threshold=threshold))


class TestTallyVotes:
    """Test majority and confidence computation"""

    def test_buy_majority(self):
        votes = {f"ind_{i}": Signal.BUY for i in range(8)}
        votes.update({"ind_8": Signal.SELL, "ind_9": Signal.NONE})

        direction, confidence, matched = tally_votes(votes)

        assert direction is Signal.BUY
        assert confidence == pytest.approx(80.0)
        assert len(matched) == 9

    def test_sell_majority(self):
        votes = {"a": Signal.SELL, "b": Signal.SELL, "c": Signal.BUY, "d": Signal.NONE}
        direction, confidence, matched = tally_votes(votes)

        assert direction is Signal.SELL
        assert confidence == pytest.approx(50.0)
        assert matched == ("a", "b", "c")

    def test_tie_has_no_direction(self):
        votes = {"a": Signal.BUY, "b": Signal.SELL, "c": Signal.NONE}
        assert tally_votes(votes) == (Signal.NONE, 0.0, ("a", "b"))

    def test_no_directional_votes(self):
        votes = {name: Signal.NONE for name in INDICATOR_NAMES}
        assert tally_votes(votes) == (Signal.NONE, 0.0, ())

    def test_empty(self):
        assert tally_votes({}) == (Signal.NONE, 0.0, ())


class TestEvaluate:
    """Test evaluation over already-fetched candles"""

    def test_votes_in_fixed_order(self, falling_candles, clock):
        engine = ConsensusEngine(Mock(spec=MarketGateway), clock=clock)
        votes = engine.indicator_votes(falling_candles(40), falling_candles(80, interval_seconds=900))

        assert tuple(votes) == INDICATOR_NAMES

    def test_oversold_selloff_votes(self, falling_candles, clock):
        """RSI on both timeframes and the support bounce vote BUY; the trend votes SELL"""
        engine = ConsensusEngine(Mock(spec=MarketGateway), clock=clock)
        votes = engine.indicator_votes(falling_candles(40), falling_candles(80, interval_seconds=900))

        assert votes["rsi_1h"] is Signal.BUY
        assert votes["rsi_15m"] is Signal.BUY
        assert votes["sr_bounce"] is Signal.BUY
        assert votes["trend_strength"] is Signal.SELL
        assert sum(1 for v in votes.values() if v.is_directional) == 4

    def test_below_threshold_emits_none(self, falling_candles, clock, fixed_now):
        engine = ConsensusEngine(Mock(spec=MarketGateway), clock=clock)
        signal = engine.evaluate(falling_candles(40), falling_candles(80, interval_seconds=900),
                                 161.0, "RELIANCE", RELIANCE_ID)

        assert signal.direction is Signal.NONE
        assert signal.confidence == pytest.approx(30.0)
        assert signal.target == signal.stoploss == 161.0
        assert signal.risk_reward_ratio == 0.0
        assert signal.timestamp == fixed_now

    def test_above_threshold_attaches_atr_levels(self, falling_candles, clock):
        engine = ConsensusEngine(Mock(spec=MarketGateway), _low_threshold_config(), clock)
        signal = engine.evaluate(falling_candles(40), falling_candles(80, interval_seconds=900),
                                 161.0, "RELIANCE", RELIANCE_ID, quantity=10)

        assert signal.direction is Signal.BUY
        assert signal.atr == pytest.approx(2.0)
        assert signal.target == pytest.approx(165.0)
        assert signal.stoploss == pytest.approx(159.0)
        assert signal.risk_reward_ratio == pytest.approx(2.0)
        assert signal.quantity == 10
        assert set(signal.matched_indicators) == {"rsi_1h", "rsi_15m", "sr_bounce", "trend_strength"}

    def test_short_history_levels_at_price(self, falling_candles, clock):
        """Without enough candles for ATR a direction still gets levels at price"""
        config = _low_threshold_config(10.0)
        engine = ConsensusEngine(Mock(spec=MarketGateway), config, clock)
        signal = engine.evaluate(falling_candles(5), falling_candles(5), 196.0, "RELIANCE", RELIANCE_ID)

        assert signal.direction is Signal.SELL
        assert signal.atr == 0.0
        assert signal.target == signal.stoploss == 196.0

    def test_to_dict(self, falling_candles, clock):
        engine = ConsensusEngine(Mock(spec=MarketGateway), _low_threshold_config(), clock)
        data = engine.evaluate(falling_candles(40), falling_candles(80, interval_seconds=900),
                               161.0, "RELIANCE", RELIANCE_ID).to_dict()

        assert data["direction"] == "BUY"
        assert data["confidence"] == 30.0
        assert data["indicators"]["rsi_1h"] == "BUY"


class TestAnalyze:
    """Test gateway-backed analysis"""

    def test_analyze_from_gateway(self, seeded_gateway, clock):
        engine = ConsensusEngine(seeded_gateway, _low_threshold_config(), clock)
        signal = engine.analyze(RELIANCE_ID, "RELIANCE", 5)

        assert signal.direction is Signal.BUY
        assert signal.price == 161.0
        assert signal.quantity == 5

    def test_config_resolver_per_instrument(self, seeded_gateway, clock):
        resolver = Mock(return_value=_low_threshold_config())
        engine = ConsensusEngine(seeded_gateway, get_default_config(), clock, config_resolver=resolver)

        signal = engine.analyze(RELIANCE_ID, "RELIANCE")

        resolver.assert_called_once_with(RELIANCE_ID)
        assert signal.direction is Signal.BUY

    def test_missing_quote(self, seeded_gateway, clock):
        engine = ConsensusEngine(seeded_gateway, clock=clock)
        seeded_gateway.load_candles("408065", "hour", [])

        with pytest.raises(MissingDataError):
            engine.analyze("408065", "INFY")

    def test_non_positive_price(self, clock):
        gateway = Mock(spec=MarketGateway)
        gateway.get_historical_candles.return_value = []
        gateway.get_quote.return_value = {RELIANCE_ID: Quote(RELIANCE_ID, 0.0)}
        engine = ConsensusEngine(gateway, clock=clock)

        with pytest.raises(MalformedDataError):
            engine.analyze(RELIANCE_ID, "RELIANCE")

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, True])
    def test_invalid_quantity_before_gateway_call(self, quantity, clock):
        gateway = Mock(spec=MarketGateway)
        engine = ConsensusEngine(gateway, clock=clock)

        with pytest.raises(InvalidInputError):
            engine.analyze(RELIANCE_ID, "RELIANCE", quantity)

        gateway.get_historical_candles.assert_not_called()
        gateway.get_quote.assert_not_called()

    def test_empty_symbol(self, clock):
        gateway = Mock(spec=MarketGateway)
        with pytest.raises(InvalidInputError):
            ConsensusEngine(gateway, clock=clock).analyze(RELIANCE_ID, "")
        gateway.get_quote.assert_not_called()
