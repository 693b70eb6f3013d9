"""Tests for simple and exponential moving averages"""

import pytest

from autotrade_app.indicators.moving_average import (
    ema_series,
    exponential_moving_average,
    moving_average,
)


class TestMovingAverage:
    """Test simple moving average"""

    def test_average_of_full_window(self):
        """SMA of exactly ``period`` closes is their mean"""
        assert moving_average([10, 20, 30], 3) == 20.0

    def test_uses_last_period_closes(self):
        """Older closes fall out of the window"""
        assert moving_average([1000, 10, 20, 30], 3) == 20.0

    def test_short_history_returns_last_close(self):
        """Fewer closes than the period never raises"""
        assert moving_average([5.0, 7.0], 20) == 7.0

    def test_empty_sequence(self):
        assert moving_average([], 5) == 0.0


class TestExponentialMovingAverage:
    """Test EMA seeding and the running series"""

    def test_seeded_with_first_close(self):
        """First element equals the first close"""
        assert ema_series([42.0, 50.0], 9)[0] == 42.0

    def test_multiplier(self):
        """Multiplier is 2 / (period + 1)"""
        # period 3 -> 0.5: 10, (20 - 10) * 0.5 + 10 = 15, (30 - 15) * 0.5 + 15 = 22.5
        assert ema_series([10, 20, 30], 3) == [10.0, 15.0, 22.5]

    def test_constant_series(self):
        assert exponential_moving_average([7.0] * 30, 12) == pytest.approx(7.0)

    def test_series_matches_prefix_evaluation(self):
        """Element i is the EMA of the first i + 1 closes"""
        closes = [100, 102, 101, 105, 107, 104, 110]
        series = ema_series(closes, 4)

        for i in range(len(closes)):
            assert series[i] == pytest.approx(exponential_moving_average(closes[:i + 1], 4))

    def test_empty_sequence(self):
        assert ema_series([], 5) == []
        assert exponential_moving_average([], 5) == 0.0
