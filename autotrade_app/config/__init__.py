"""Configuration defaults, loading and validation."""

from .defaults import DefaultConfig, get_default_config
from .loader import ConfigLoader
from .trading import AutoTradeConfig
from .validation import ConfigValidator, ValidationError

__all__ = [
    "AutoTradeConfig",
    "ConfigLoader",
    "ConfigValidator",
    "DefaultConfig",
    "ValidationError",
    "get_default_config",
]
