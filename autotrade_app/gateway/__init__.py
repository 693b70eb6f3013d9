"""
Market gateway abstraction.

The engine talks to a broker only through ``MarketGateway``; a concrete
session object is constructed by the host and injected into the engine.
"""

from .base import MarketGateway
from .paper import PaperGateway

__all__ = ["MarketGateway", "PaperGateway"]
