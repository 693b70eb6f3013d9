"""Default configuration parameters for the consensus trading engine."""

from dataclasses import dataclass


@dataclass(frozen=True)
class IndicatorParams:
    """Indicator periods and thresholds."""
    rsi_period: int = 14
    rsi_oversold: float = 30.0
    rsi_overbought: float = 70.0
    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9
    bollinger_period: int = 20
    bollinger_k: float = 2.0
    atr_period: int = 14


@dataclass(frozen=True)
class ConsensusParams:
    """Multi-timeframe consensus parameters."""
    min_confidence_threshold: float = 80.0

    # Timeframes fetched from the gateway
    higher_timeframe: str = "hour"
    higher_lookback_days: int = 2
    lower_timeframe: str = "15minute"
    lower_lookback_days: int = 1

    # Moving average crossover windows
    higher_ma_short: int = 9
    higher_ma_long: int = 21
    lower_ma_short: int = 5
    lower_ma_long: int = 13

    # Heuristics
    volume_multiplier: float = 1.5                  # Last volume vs average
    volume_lookback: int = 10
    trend_lookback: int = 5
    trend_min_count: int = 3                        # Higher highs/lows required
    sr_lookback: int = 20
    sr_proximity_pct: float = 0.05                  # Fraction of the close range


@dataclass(frozen=True)
class RiskParams:
    """ATR-based risk management."""
    target_atr_mult: float = 2.0
    stoploss_atr_mult: float = 1.0
    min_risk_reward: float = 1.5
    risk_budget: float = 10000.0                    # Capital at risk per position


@dataclass(frozen=True)
class ExecutionParams:
    """Automatic execution limits."""
    min_confidence: float = 80.0
    max_open_trades: int = 1
    closed_log_size: int = 500


@dataclass(frozen=True)
class OptionsParams:
    """Options pricing parameters."""
    risk_free_rate: float = 0.05
    dividend_yield: float = 0.0
    strike_interval: float = 100.0
    ladder_width: float = 500.0
    default_volatility: float = 30.0                # Percent
    quote_spread_pct: float = 0.01                  # Bid/ask around theoretical price
    days_in_year: int = 365


@dataclass(frozen=True)
class HistoryParams:
    """Historical data service parameters."""
    cache_ttl_seconds: int = 300
    min_analysis_candles: int = 50
    gap_tolerance_seconds: int = 1                  # Slack beyond the interval length


@dataclass(frozen=True)
class TimeParams:
    """Time-based parameters."""
    timezone: str = "Asia/Kolkata"


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    indicators: IndicatorParams
    consensus: ConsensusParams
    risk: RiskParams
    execution: ExecutionParams
    options: OptionsParams
    history: HistoryParams
    time: TimeParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        indicators=IndicatorParams(),
        consensus=ConsensusParams(),
        risk=RiskParams(),
        execution=ExecutionParams(),
        options=OptionsParams(),
        history=HistoryParams(),
        time=TimeParams(),
    )
