#!/usr/bin/env python3
"""
Basic Usage Example - Autotrade Consensus Trading Engine

This script runs the engine end to end against the in-memory paper gateway:
- Seed an hourly and a 15-minute sell-off for RELIANCE
- Run the multi-timeframe consensus analysis
- Open a bracket trade, let it fill and exit at target
- Price an option and build a small option chain

Run: python examples/basic_usage.py
"""

from datetime import datetime, timedelta, timezone
from typing import List

from autotrade_app.data.models import Candle
from autotrade_app.engine import TradingEngine
from autotrade_app.gateway.paper import PaperGateway
from autotrade_app.logging.config import configure_logging

RELIANCE_ID = "738561"
NIFTY_ID = "256265"


def falling_series(end: datetime, count: int, start: float, step: float, interval: timedelta) -> List[Candle]:
    """Bearish candles closing ``step`` lower each bar."""
    candles = []
    for i in range(count):
        close = start - i * step
        open_price = close + step
        candles.append(Candle(
            timestamp=end - interval * (count - 1 - i),
            open=open_price,
            high=open_price + 0.5,
            low=close - 0.5,
            close=close,
            volume=1000.0,
        ))
    return candles


def seed_gateway(now: datetime) -> PaperGateway:
    gateway = PaperGateway()
    gateway.load_candles(RELIANCE_ID, "hour", falling_series(now, 40, 200.0, 1.0, timedelta(hours=1)))
    gateway.load_candles(RELIANCE_ID, "15minute",
                         falling_series(now, 80, 170.875, 0.125, timedelta(minutes=15)))
    gateway.set_price(RELIANCE_ID, 161.0, now)
    return gateway


def main():
    """Main demo function."""
    configure_logging(level="WARNING")

    print("🚀 Autotrade Consensus Trading Engine - Basic Usage Demo")
    print("=" * 60)

    now = datetime.now(timezone.utc)
    gateway = seed_gateway(now)

    print("1. Initializing the trading engine (consensus threshold lowered to 25%)...")
    engine = TradingEngine(
        gateway,
        overrides={
            "consensus": {"min_confidence_threshold": 25},
            "execution": {"min_confidence": 25},
        },
    )
    print()

    print("2. Consensus analysis for RELIANCE...")
    signal = engine.analyze(RELIANCE_ID, "RELIANCE", quantity=10)
    print(f"   Direction: {signal.direction.value}")
    print(f"   Confidence: {signal.confidence:.1f}%")
    print(f"   Entry: {signal.price}  Target: {signal.target}  Stoploss: {signal.stoploss}")
    print(f"   Risk/Reward: {signal.risk_reward_ratio:.2f}")
    for name, vote in signal.indicator_signals.items():
        print(f"     {name:<20} {vote.value}")
    print()

    print("3. Executing signals...")
    trade = engine.execute_signals(engine.auto_trade_config("RELIANCE", RELIANCE_ID, 10))
    if trade is None:
        print("   No trade opened")
        return
    print(f"   Opened {trade.id} ({trade.direction.value}) order {trade.order_ref}")

    engine.monitor()
    print(f"   Status after first monitor: {engine.get_active_trades()[0].status.value}")

    gateway.close_position(RELIANCE_ID, trade.target)
    for closed in engine.monitor():
        print(f"   Closed {closed.id} at {closed.exit_price} pnl {closed.pnl:.2f}")
    print()

    print("4. Statistics:")
    for key, value in engine.get_statistics().to_dict().items():
        print(f"   {key}: {value}")
    print()

    print("5. Options...")
    quote = engine.price_option(19500.0, 19500.0, 7, volatility=15.0)
    print(f"   ATM call premium: {quote.price:.2f} (delta {quote.greeks.delta:.3f})")
    chain = engine.option_chain("NIFTY", 19520.0, instrument_id=NIFTY_ID)
    print(f"   Chain: {len(chain)} contracts, first {chain[0].symbol}, last {chain[-1].symbol}")
    for suggestion in engine.suggest_strategy("NEUTRAL", 40.0, 19520.0):
        print(f"   Suggestion: {suggestion}")
    print()

    print("✅ Demo completed successfully!")


if __name__ == "__main__":
    main()
