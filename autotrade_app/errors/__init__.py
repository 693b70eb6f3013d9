"""
Error classification for the trading engine.

Data quality errors are recoverable, system failures are not, and invalid
input is rejected before any side effect happens.
"""

from .data_quality import (
    DataQualityError,
    MissingDataError,
    MalformedDataError,
    InsufficientDataError,
)
from .system_failures import (
    SystemFailureError,
    GatewayError,
    StateTransitionError,
)
from .invalid_input import (
    InvalidInputError,
    require_positive,
    require_non_negative,
)

__all__ = [
    # Data Quality Errors
    "DataQualityError",
    "MissingDataError",
    "MalformedDataError",
    "InsufficientDataError",
    # System Failures
    "SystemFailureError",
    "GatewayError",
    "StateTransitionError",
    # Input Validation
    "InvalidInputError",
    "require_positive",
    "require_non_negative",
]
