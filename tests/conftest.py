"""Pytest configuration and shared fixtures."""

from collections.abc import Callable, Sequence
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from autotrade_app.data.models import Candle
from autotrade_app.gateway.paper import PaperGateway

FIXED_NOW = datetime(2024, 10, 14, 9, 0, 0, tzinfo=timezone.utc)   # Monday

RELIANCE_ID = "738561"


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def clock(fixed_now: datetime) -> Callable[[], datetime]:
    """Clock pinned to ``fixed_now``."""
    return lambda: fixed_now


@pytest.fixture
def candles_from_closes() -> Callable[..., list[Candle]]:
    """
    Build candles from a close series.

    Each candle opens at the previous close and its wicks extend 0.5 beyond
    the body. The last candle is stamped at ``end``.
    """
    def _build(
        closes: Sequence[float],
        end: datetime = FIXED_NOW,
        interval_seconds: int = 3600,
        volumes: Optional[Sequence[float]] = None,
    ) -> list[Candle]:
        candles = []
        count = len(closes)
        for i, close in enumerate(closes):
            open_ = closes[i - 1] if i > 0 else close
            candles.append(Candle(
                timestamp=end - timedelta(seconds=interval_seconds * (count - 1 - i)),
                open=float(open_),
                high=max(open_, close) + 0.5,
                low=min(open_, close) - 0.5,
                close=float(close),
                volume=float(volumes[i]) if volumes is not None else 1000.0,
            ))
        return candles
    return _build


@pytest.fixture
def falling_candles() -> Callable[..., list[Candle]]:
    """
    Steadily falling bearish candles.

    Close i is ``start - i * step``; every candle opens ``step`` above its
    close with 0.5 wicks, so each true range is ``step + 1``.
    """
    def _build(
        count: int,
        start: float = 200.0,
        step: float = 1.0,
        end: datetime = FIXED_NOW,
        interval_seconds: int = 3600,
    ) -> list[Candle]:
        candles = []
        for i in range(count):
            close = start - i * step
            open_ = close + step
            candles.append(Candle(
                timestamp=end - timedelta(seconds=interval_seconds * (count - 1 - i)),
                open=open_,
                high=open_ + 0.5,
                low=close - 0.5,
                close=close,
                volume=1000.0,
            ))
        return candles
    return _build


@pytest.fixture
def paper_gateway() -> PaperGateway:
    return PaperGateway()


@pytest.fixture
def seeded_gateway(paper_gateway: PaperGateway, falling_candles) -> PaperGateway:
    """
    Paper gateway with an oversold RELIANCE sell-off on both timeframes.

    Hourly closes fall from 200 to 161 and 15-minute closes from 170.875 to
    161; the last traded price is 161.
    """
    paper_gateway.load_candles(RELIANCE_ID, "hour", falling_candles(40))
    paper_gateway.load_candles(
        RELIANCE_ID, "15minute",
        falling_candles(80, start=170.875, step=0.125, interval_seconds=900),
    )
    paper_gateway.set_price(RELIANCE_ID, 161.0, FIXED_NOW)
    return paper_gateway
