"""
Trade lifecycle transition rules.

PENDING -> EXECUTED -> FILLED -> CLOSED, EXECUTED -> CLOSED, and CANCELLED
from any non-terminal state. CLOSED and CANCELLED are terminal.
"""

from ..errors import StateTransitionError
from ..logging.config import get_state_logger, log_state_transition
from .models import ExecutedTrade, TradeStatus

state_logger = get_state_logger(__name__)

ALLOWED_TRANSITIONS: dict[TradeStatus, frozenset[TradeStatus]] = {
    TradeStatus.PENDING: frozenset({TradeStatus.EXECUTED, TradeStatus.CANCELLED}),
    TradeStatus.EXECUTED: frozenset({TradeStatus.FILLED, TradeStatus.CLOSED, TradeStatus.CANCELLED}),
    TradeStatus.FILLED: frozenset({TradeStatus.CLOSED, TradeStatus.CANCELLED}),
    TradeStatus.CLOSED: frozenset(),
    TradeStatus.CANCELLED: frozenset(),
}


def can_transition(current: TradeStatus, target: TradeStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def validate_transition(trade: ExecutedTrade, target: TradeStatus) -> None:
    """Raise StateTransitionError unless ``trade`` may move to ``target``."""
    if not can_transition(trade.status, target):
        raise StateTransitionError(
            f"Invalid trade transition from {trade.status.value} to {target.value}",
            current_state=trade.status.value,
            attempted_transition=target.value,
            context={"trade_id": trade.id},
        )


def apply_transition(current: ExecutedTrade, updated: ExecutedTrade, trigger: str) -> ExecutedTrade:
    """
    Validate and log the move from ``current`` to ``updated``.

    Args:
        current: Trade as stored
        updated: Candidate replacement produced by an ExecutedTrade.with_* method
        trigger: What caused the transition (monitor, close, cancel)

    Returns:
        ``updated`` once validated
    """
    if updated.id != current.id:
        raise StateTransitionError(
            "Transition must not change the trade id",
            current_state=current.status.value,
            attempted_transition=updated.status.value,
            context={"trade_id": current.id, "new_id": updated.id},
        )
    if current.closed_at is not None and updated.closed_at != current.closed_at:
        raise StateTransitionError(
            "closed_at is already set",
            current_state=current.status.value,
            attempted_transition=updated.status.value,
            context={"trade_id": current.id},
        )

    validate_transition(current, updated.status)

    log_state_transition(
        state_logger,
        trade_id=current.id,
        from_state=current.status.value,
        to_state=updated.status.value,
        trigger=trigger,
        context={"symbol": current.symbol, "pnl": updated.pnl},
    )
    return updated
