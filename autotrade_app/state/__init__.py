"""
Trade lifecycle module.

Tracks automatically placed trades through
PENDING -> EXECUTED -> FILLED -> CLOSED, with CANCELLED from any open state.
"""
