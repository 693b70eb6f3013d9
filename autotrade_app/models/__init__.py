"""Shared result models."""

from .signals import ConsensusSignal, Signal

__all__ = ["ConsensusSignal", "Signal"]
