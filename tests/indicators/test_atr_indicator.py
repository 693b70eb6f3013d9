"""Tests for ATR and NATR calculations"""

from datetime import datetime, timedelta, timezone

import pytest

from autotrade_app.data.models import Candle
from autotrade_app.indicators.atr import (
    calculate_atr,
    calculate_natr,
    calculate_true_range,
    compute_atr,
)

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _candle(minute, open_, high, low, close):
    return Candle(timestamp=T0 + timedelta(minutes=minute), open=open_, high=high,
                  low=low, close=close, volume=1000.0)


class TestTrueRange:
    """Test True Range calculation"""

    def test_first_candle_uses_high_low(self):
        assert calculate_true_range(_candle(0, 100, 105, 95, 102)) == 10.0

    def test_with_previous_close(self):
        prev = _candle(0, 100, 105, 95, 102)
        curr = _candle(1, 103, 108, 101, 107)
        # max(108-101, |108-102|, |101-102|) = 7
        assert calculate_true_range(curr, prev) == 7.0

    def test_gap_up(self):
        prev = _candle(0, 100, 105, 95, 102)
        curr = _candle(1, 110, 115, 108, 112)
        # max(7, 13, 6) = 13
        assert calculate_true_range(curr, prev) == 13.0

    def test_gap_down(self):
        prev = _candle(0, 100, 105, 95, 102)
        curr = _candle(1, 90, 93, 88, 91)
        # max(5, 9, 14) = 14
        assert calculate_true_range(curr, prev) == 14.0


class TestATR:
    """Test ATR over a window of true ranges"""

    def test_period_one(self):
        """Single true range: max(12 - 9, |12 - 10|, |9 - 10|) = 3"""
        candles = [_candle(0, 10, 10.5, 9.5, 10), _candle(1, 10, 12, 9, 11)]
        assert calculate_atr(candles, 1) == 3.0

    def test_constant_true_range(self, falling_candles):
        result = compute_atr(falling_candles(30), 14)
        assert result.sufficient_data is True
        assert result.value == pytest.approx(2.0)

    def test_needs_period_plus_one_candles(self, falling_candles):
        """Every true range needs a previous close"""
        result = compute_atr(falling_candles(14), 14)
        assert result.sufficient_data is False
        assert result.value == 0.0

    def test_uses_last_period_ranges(self):
        """Only the most recent ranges are averaged"""
        candles = [
            _candle(0, 100, 150, 50, 100),      # Outside the window
            _candle(1, 100, 101, 99, 100),
            _candle(2, 100, 101, 99, 100),
            _candle(3, 100, 101, 99, 100),
        ]
        assert calculate_atr(candles, 2) == pytest.approx(2.0)

    def test_non_positive_period(self, falling_candles):
        assert compute_atr(falling_candles(5), 0).sufficient_data is False


class TestNATR:
    """Test Normalized ATR"""

    def test_natr(self):
        assert calculate_natr(2.0, 100.0) == pytest.approx(2.0)

    def test_natr_zero_price(self):
        assert calculate_natr(2.0, 0.0) == 0.0
