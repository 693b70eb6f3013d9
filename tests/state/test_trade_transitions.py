"""Tests for trade lifecycle transition rules."""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from autotrade_app.errors import StateTransitionError
from autotrade_app.models.signals import Signal
from autotrade_app.state.models import ExecutedTrade, TradeStatus
from autotrade_app.state.transitions import (
    ALLOWED_TRANSITIONS,
    apply_transition,
    can_transition,
    validate_transition,
)

OPENED = datetime(2024, 10, 14, 9, 0, tzinfo=timezone.utc)


def _trade(status=TradeStatus.EXECUTED):
    return ExecutedTrade(
        id="RELIANCE_1728896400000",
        symbol="RELIANCE",
        instrument_id="738561",
        direction=Signal.BUY,
        entry_price=161.0,
        quantity=10,
        target=165.0,
        stoploss=159.0,
        order_ref="PAPER-000001",
        status=status,
        confidence=90.0,
        created_at=OPENED,
    )


class TestTransitionTable:
    """Test the allowed transition table."""

    @pytest.mark.parametrize("current,target", [
        (TradeStatus.PENDING, TradeStatus.EXECUTED),
        (TradeStatus.EXECUTED, TradeStatus.FILLED),
        (TradeStatus.EXECUTED, TradeStatus.CLOSED),
        (TradeStatus.FILLED, TradeStatus.CLOSED),
        (TradeStatus.PENDING, TradeStatus.CANCELLED),
        (TradeStatus.EXECUTED, TradeStatus.CANCELLED),
        (TradeStatus.FILLED, TradeStatus.CANCELLED),
    ])
    def test_allowed(self, current, target):
        assert can_transition(current, target)

    @pytest.mark.parametrize("current,target", [
        (TradeStatus.FILLED, TradeStatus.EXECUTED),
        (TradeStatus.PENDING, TradeStatus.FILLED),
        (TradeStatus.CLOSED, TradeStatus.FILLED),
        (TradeStatus.CLOSED, TradeStatus.CANCELLED),
        (TradeStatus.CANCELLED, TradeStatus.CLOSED),
    ])
    def test_rejected(self, current, target):
        assert not can_transition(current, target)

    def test_terminal_states_have_no_exits(self):
        for status in TradeStatus:
            if status.is_terminal:
                assert ALLOWED_TRANSITIONS[status] == frozenset()


class TestValidateTransition:
    """Test transition validation errors."""

    def test_invalid_transition_raises(self):
        with pytest.raises(StateTransitionError) as exc_info:
            validate_transition(_trade(TradeStatus.CLOSED), TradeStatus.FILLED)

        error = exc_info.value
        assert error.current_state == "CLOSED"
        assert error.attempted_transition == "FILLED"
        assert error.context["trade_id"] == "RELIANCE_1728896400000"
        assert error.recoverable is False


class TestApplyTransition:
    """Test validated, logged transitions."""

    def test_returns_updated_trade(self):
        trade = _trade()
        filled = apply_transition(trade, trade.with_status(TradeStatus.FILLED), "position_open")
        assert filled.status is TradeStatus.FILLED

    def test_logs_transition(self):
        trade = _trade(TradeStatus.FILLED)
        closed = trade.with_closed(165.0, OPENED + timedelta(hours=1))

        with patch("autotrade_app.state.transitions.log_state_transition") as mock_log:
            apply_transition(trade, closed, "position_exited")

        mock_log.assert_called_once()
        kwargs = mock_log.call_args.kwargs
        assert kwargs["trade_id"] == trade.id
        assert kwargs["from_state"] == "FILLED"
        assert kwargs["to_state"] == "CLOSED"
        assert kwargs["trigger"] == "position_exited"
        assert kwargs["context"]["pnl"] == pytest.approx(40.0)

    def test_rejects_id_change(self):
        trade = _trade()
        other = ExecutedTrade(**{**vars(trade), "id": "OTHER", "status": TradeStatus.FILLED})

        with pytest.raises(StateTransitionError):
            apply_transition(trade, other, "position_open")

    def test_rejects_closed_at_reset(self):
        cancelled = _trade().with_cancelled(OPENED)
        reclosed = cancelled.with_closed(165.0, OPENED + timedelta(hours=1))

        with pytest.raises(StateTransitionError):
            apply_transition(cancelled, reclosed, "manual_close")

    def test_invalid_transition_is_not_logged(self):
        trade = _trade(TradeStatus.CANCELLED)

        with patch("autotrade_app.state.transitions.log_state_transition") as mock_log:
            with pytest.raises(StateTransitionError):
                apply_transition(trade, trade.with_status(TradeStatus.FILLED), "position_open")

        mock_log.assert_not_called()
