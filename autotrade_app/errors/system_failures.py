"""
System failure error classifications.

These exceptions represent failures outside the engine's control (the broker
gateway) or corruption of the trade lifecycle. They are never retried or
swallowed inside the engine.
"""

from typing import Any, Dict, Optional


class SystemFailureError(Exception):
    """Base class for unrecoverable system failures."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class GatewayError(SystemFailureError):
    """Market gateway call failed (quote, history, order or positions)."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 instrument_id: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.instrument_id = instrument_id


class StateTransitionError(SystemFailureError):
    """Invalid trade lifecycle transition."""

    def __init__(self, message: str, current_state: Optional[str] = None,
                 attempted_transition: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.current_state = current_state
        self.attempted_transition = attempted_transition
