"""
Automatic trade lifecycle management.

Opens bracket orders from consensus signals behind a set of gates, tracks
them through the broker's positions and closes or cancels them on request.
Every operation performs all of its gateway calls before touching the
in-memory store, so a gateway failure leaves state unchanged and the call
can be retried.
"""

from collections import deque
from collections.abc import Callable
from datetime import datetime
from typing import Optional

import structlog

from ..config.defaults import ExecutionParams
from ..config.trading import AutoTradeConfig
from ..data.models import BracketOrderRequest, Position, Quote
from ..errors import GatewayError, MissingDataError
from ..gateway.base import MarketGateway
from ..logging.config import get_gating_logger, log_gate_decision
from ..models.signals import ConsensusSignal, Signal
from ..strategy.consensus import ConsensusEngine
from ..utils.time import epoch_ms, now_utc
from .models import ExecutedTrade, TradeStatistics, TradeStatus
from .transitions import apply_transition, validate_transition

logger = structlog.get_logger(__name__)
gating_logger = get_gating_logger(__name__)


class TradeLifecycleManager:
    """Owns the active-trade store and the closed-trade log."""

    def __init__(
        self,
        gateway: MarketGateway,
        consensus: ConsensusEngine,
        execution: Optional[ExecutionParams] = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.gateway = gateway
        self.consensus = consensus
        self.execution = execution or ExecutionParams()
        self.clock = clock
        self._active: dict[str, ExecutedTrade] = {}
        self._history: deque[ExecutedTrade] = deque(maxlen=self.execution.closed_log_size)
        self._issued_ids: set[str] = set()

    # Queries

    def get_active_trades(self) -> list[ExecutedTrade]:
        return list(self._active.values())

    def get_closed_trades(self) -> list[ExecutedTrade]:
        """Finished trades (closed or cancelled), oldest first."""
        return list(self._history)

    def get_trade(self, trade_id: str) -> Optional[ExecutedTrade]:
        if trade_id in self._active:
            return self._active[trade_id]
        for trade in self._history:
            if trade.id == trade_id:
                return trade
        return None

    # Open

    def execute_signals(self, config: AutoTradeConfig) -> Optional[ExecutedTrade]:
        """
        Analyze ``config.symbol`` and open a bracket order if every gate passes.

        Gates, in order: open-trade limit, directional signal, minimum
        confidence, minimum risk/reward, optional max risk per trade.

        Returns:
            The new trade, or None when a gate rejected the signal

        Raises:
            InvalidInputError: config values unusable (before any gateway call)
            GatewayError: analysis or order placement failed; nothing is recorded
        """
        config.validate()
        subject = config.symbol

        open_count = len(self._active)
        if open_count >= config.max_open_trades:
            log_gate_decision(gating_logger, "max_open_trades", False, subject,
                              f"{open_count} open trades, limit {config.max_open_trades}")
            return None
        log_gate_decision(gating_logger, "max_open_trades", True, subject,
                          f"{open_count} open trades, limit {config.max_open_trades}")

        signal = self.consensus.analyze(config.instrument_id, config.symbol, config.quantity)

        if not self._passes_gates(signal, config):
            return None

        order = BracketOrderRequest(
            symbol=signal.symbol,
            instrument_id=signal.instrument_id,
            side=signal.direction,
            quantity=config.quantity,
            price=signal.price,
            target=signal.target,
            stoploss=signal.stoploss,
        )
        response = self.gateway.place_bracket_order(order)

        now = self.clock()
        pending = ExecutedTrade(
            id=self._new_trade_id(signal.symbol, now),
            symbol=signal.symbol,
            instrument_id=signal.instrument_id,
            direction=signal.direction,
            entry_price=signal.price,
            quantity=config.quantity,
            target=signal.target,
            stoploss=signal.stoploss,
            order_ref=response.order_id,
            status=TradeStatus.PENDING,
            confidence=signal.confidence,
            created_at=now,
        )
        trade = apply_transition(pending, pending.with_status(TradeStatus.EXECUTED), "order_placed")
        self._active[trade.id] = trade
        self._issued_ids.add(trade.id)

        logger.info(
            "Trade executed",
            trade_id=trade.id,
            symbol=trade.symbol,
            direction=trade.direction.value,
            entry=trade.entry_price,
            target=trade.target,
            stoploss=trade.stoploss,
            confidence=round(trade.confidence, 2),
            order_ref=trade.order_ref,
        )
        return trade

    def _passes_gates(self, signal: ConsensusSignal, config: AutoTradeConfig) -> bool:
        subject = config.symbol
        context = {"direction": signal.direction.value, "confidence": round(signal.confidence, 2)}

        if signal.direction is Signal.NONE:
            log_gate_decision(gating_logger, "direction", False, subject,
                              "No consensus direction", context)
            return False

        if signal.confidence < config.min_confidence:
            log_gate_decision(gating_logger, "min_confidence", False, subject,
                              f"Confidence {signal.confidence:.2f}% below {config.min_confidence}%",
                              context)
            return False

        if signal.risk_reward_ratio < config.min_risk_reward:
            log_gate_decision(gating_logger, "risk_reward", False, subject,
                              f"Risk/reward {signal.risk_reward_ratio:.2f} below {config.min_risk_reward}",
                              context)
            return False

        if config.max_risk_per_trade is not None:
            at_risk = signal.risk_per_unit * config.quantity
            if at_risk > config.max_risk_per_trade:
                log_gate_decision(gating_logger, "max_risk_per_trade", False, subject,
                                  f"Risk {at_risk:.2f} exceeds {config.max_risk_per_trade}", context)
                return False

        log_gate_decision(gating_logger, "signal", True, subject, "All entry gates passed", context)
        return True

    def _new_trade_id(self, symbol: str, now: datetime) -> str:
        base = f"{symbol}_{epoch_ms(now)}"
        trade_id = base
        suffix = 1
        while trade_id in self._issued_ids:
            trade_id = f"{base}_{suffix}"
            suffix += 1
        return trade_id

    # Monitor

    def monitor(self) -> list[ExecutedTrade]:
        """
        Reconcile active trades with broker positions.

        An open position marks an EXECUTED trade FILLED. A missing or flat
        position means the bracket exited: the trade is CLOSED at the
        position's last price (or the current quote) and moved to the log.

        Returns:
            Trades closed by this call
        """
        if not self._active:
            return []

        positions = {p.instrument_id: p for p in self.gateway.get_positions()}

        exited = [t for t in self._active.values() if not self._is_open(positions.get(t.instrument_id))]
        needs_quote = sorted({
            t.instrument_id for t in exited
            if self._exit_price(positions.get(t.instrument_id), None) is None
        })
        quotes: dict[str, Quote] = self.gateway.get_quote(needs_quote) if needs_quote else {}

        now = self.clock()
        updates: list[ExecutedTrade] = []
        for trade in self._active.values():
            position = positions.get(trade.instrument_id)
            if self._is_open(position):
                if trade.status is TradeStatus.EXECUTED:
                    updates.append(apply_transition(trade, trade.with_status(TradeStatus.FILLED),
                                                    "position_open"))
                continue

            exit_price = self._exit_price(position, quotes.get(trade.instrument_id))
            if exit_price is None:
                logger.warning("No exit price for exited trade, will retry",
                               trade_id=trade.id, instrument_id=trade.instrument_id)
                continue
            updates.append(apply_transition(trade, trade.with_closed(exit_price, now), "position_exited"))

        closed = []
        for updated in updates:
            if updated.status is TradeStatus.CLOSED:
                del self._active[updated.id]
                self._history.append(updated)
                closed.append(updated)
            else:
                self._active[updated.id] = updated

        logger.info("Monitored active trades", active=len(self._active), closed=len(closed),
                    positions=len(positions))
        return closed

    @staticmethod
    def _is_open(position: Optional[Position]) -> bool:
        return position is not None and position.is_open

    @staticmethod
    def _exit_price(position: Optional[Position], quote: Optional[Quote]) -> Optional[float]:
        if position is not None and position.last_price > 0:
            return position.last_price
        if quote is not None and quote.last_price > 0:
            return quote.last_price
        return None

    # Close / cancel

    def close_trade(self, trade_id: str) -> bool:
        """
        Close an active trade at the current quote.

        Returns:
            True when closed, False for an unknown trade id

        Raises:
            MissingDataError: no quote for the trade's instrument
            GatewayError: quote or cancel failed; the trade stays active
        """
        trade = self._active.get(trade_id)
        if trade is None:
            logger.warning("Close requested for unknown trade", trade_id=trade_id)
            return False

        validate_transition(trade, TradeStatus.CLOSED)

        quote = self.gateway.get_quote([trade.instrument_id]).get(trade.instrument_id)
        if quote is None or quote.last_price <= 0:
            raise MissingDataError(f"No quote to close trade {trade_id}", data_type="quote",
                                   context={"instrument_id": trade.instrument_id})

        closed = trade.with_closed(quote.last_price, self.clock())

        if not self.gateway.cancel_order(trade.order_ref):
            raise GatewayError(f"Broker refused to cancel order {trade.order_ref}",
                               operation="cancel_order", instrument_id=trade.instrument_id)

        closed = apply_transition(trade, closed, "manual_close")
        del self._active[trade_id]
        self._history.append(closed)

        logger.info("Trade closed", trade_id=trade_id, entry=trade.entry_price,
                    exit=closed.exit_price, pnl=closed.pnl)
        return True

    def cancel_trade(self, trade_id: str) -> bool:
        """Cancel an active trade's order without booking pnl."""
        trade = self._active.get(trade_id)
        if trade is None:
            logger.warning("Cancel requested for unknown trade", trade_id=trade_id)
            return False

        validate_transition(trade, TradeStatus.CANCELLED)

        if not self.gateway.cancel_order(trade.order_ref):
            raise GatewayError(f"Broker refused to cancel order {trade.order_ref}",
                               operation="cancel_order", instrument_id=trade.instrument_id)

        cancelled = apply_transition(trade, trade.with_cancelled(self.clock()), "manual_cancel")
        del self._active[trade_id]
        self._history.append(cancelled)
        logger.info("Trade cancelled", trade_id=trade_id)
        return True

    # Statistics

    def get_statistics(self) -> TradeStatistics:
        """Win rate over closed trades; confidence and pnl over everything tracked."""
        tracked = list(self._active.values()) + list(self._history)
        closed = [t for t in self._history if t.status is TradeStatus.CLOSED]
        profitable = [t for t in closed if t.pnl is not None and t.pnl > 0]

        win_rate = len(profitable) / len(closed) * 100.0 if closed else 0.0
        avg_confidence = sum(t.confidence for t in tracked) / len(tracked) if tracked else 0.0
        total_pnl = sum(t.pnl for t in tracked if t.pnl is not None)

        return TradeStatistics(
            active_trades_count=len(self._active),
            closed_trades_count=len(closed),
            profitable_trades_count=len(profitable),
            win_rate=win_rate,
            total_pnl=total_pnl,
            avg_confidence=avg_confidence,
        )
