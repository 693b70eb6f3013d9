"""
Signal detection.

Maps candle series to BUY/SELL/NONE votes: indicator crossovers and zones in
``detector``, price-action heuristics in ``heuristics``, and single-strategy
actionable signals in ``strategies``.
"""
