"""Caller input errors, raised before any gateway call is made."""

from typing import Any, Dict, Optional


class InvalidInputError(ValueError):
    """Rejected argument: non-positive price or quantity, unknown name."""

    def __init__(self, message: str, field: Optional[str] = None,
                 value: Any = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.field = field
        self.value = value
        self.context = context or {}
        self.recoverable = True


def require_positive(field: str, value: Any) -> float:
    """Return ``value`` as float or raise InvalidInputError if it is not > 0."""
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise InvalidInputError(f"{field} must be a positive number", field=field, value=value)
    return float(value)


def require_non_negative(field: str, value: Any) -> float:
    """Return ``value`` as float or raise InvalidInputError if it is negative."""
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        raise InvalidInputError(f"{field} must be a non-negative number", field=field, value=value)
    return float(value)
