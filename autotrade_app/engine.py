"""
Main trading engine coordinator.

Composes the consensus engine, trade lifecycle manager, historical data
service and options pricer around one injected market gateway:
Gateway → Candles → Indicators → Consensus → Gates → Bracket Orders
"""

from collections.abc import Callable, Mapping
from datetime import date, datetime
from typing import Any, Optional

import structlog

from .analysis.market import MarketAnalysis, analyze_market
from .config.defaults import DefaultConfig
from .config.loader import ConfigLoader
from .config.trading import AutoTradeConfig
from .config.validation import ConfigValidator
from .data.history import HistoricalDataService
from .errors import InsufficientDataError, InvalidInputError
from .gateway.base import MarketGateway
from .models.signals import ConsensusSignal
from .options.chain import build_option_chain
from .options.models import ExpiryType, MarketTrend, OptionContract, OptionQuote, OptionType
from .options.pricing import price_option
from .options.strategies import suggest_strategy
from .signals.strategies import StrategySignal, generate_strategy_signal, parse_strategy
from .state.lifecycle import TradeLifecycleManager
from .state.models import ExecutedTrade, TradeStatistics
from .strategy.consensus import ConsensusEngine
from .utils.time import exchange_today, now_utc

logger = structlog.get_logger(__name__)

# Configuration used when no instrument-specific section applies
GLOBAL_CONFIG_KEY = ""


class TradingEngine:
    """
    Entry point for hosts (CLI, web service, notebooks).

    Holds no module-level state: every engine owns its gateway, config and
    trade store, so several engines can run side by side.
    """

    def __init__(
        self,
        gateway: MarketGateway,
        config_dir: Optional[str] = None,
        overrides: Optional[dict[str, Any]] = None,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        """
        Initialize the trading engine.

        Raises:
            InvalidInputError: merged configuration failed validation
        """
        self.gateway = gateway
        self.clock = clock
        self.overrides = overrides or {}
        self.config_loader = ConfigLoader.create(config_dir)
        self._configs: dict[str, DefaultConfig] = {}

        self.config = self.config_for(GLOBAL_CONFIG_KEY)
        self.history = HistoricalDataService(gateway, self.config.history, clock)
        self.consensus = ConsensusEngine(gateway, self.config, clock, config_resolver=self.config_for)
        self.lifecycle = TradeLifecycleManager(gateway, self.consensus, self.config.execution, clock)

        logger.info("Trading engine initialized", config_dir=str(self.config_loader.config_dir))

    def config_for(self, instrument_id: str) -> DefaultConfig:
        """Validated configuration for an instrument, cached per instrument."""
        cached = self._configs.get(instrument_id)
        if cached is not None:
            return cached

        merged = self.config_loader.merge_config(instrument_id, self.overrides)
        validation_errors = ConfigValidator.validate_config(merged)
        if validation_errors:
            error_msgs = [f"{err.field}: {err.message} (got: {err.value})" for err in validation_errors]
            logger.error("Configuration validation failed", instrument_id=instrument_id,
                         errors=error_msgs)
            first = validation_errors[0]
            raise InvalidInputError(
                f"Invalid configuration: {'; '.join(error_msgs)}",
                field=first.field,
                value=first.value,
                context={"instrument_id": instrument_id},
            )

        config = self.config_loader.build_config(instrument_id, self.overrides)
        self._configs[instrument_id] = config
        return config

    # Consensus trading

    def analyze(self, instrument_id: str, symbol: str, quantity: int = 1) -> ConsensusSignal:
        return self.consensus.analyze(instrument_id, symbol, quantity)

    def auto_trade_config(
        self,
        symbol: str,
        instrument_id: str,
        quantity: int,
        max_risk_per_trade: Optional[float] = None,
    ) -> AutoTradeConfig:
        """Run config with limits taken from the instrument's configuration."""
        config = self.config_for(instrument_id)
        return AutoTradeConfig.from_params(symbol, instrument_id, quantity, config.execution,
                                           config.risk, max_risk_per_trade)

    def execute_signals(self, config: AutoTradeConfig) -> Optional[ExecutedTrade]:
        return self.lifecycle.execute_signals(config)

    def monitor(self) -> list[ExecutedTrade]:
        return self.lifecycle.monitor()

    def close_trade(self, trade_id: str) -> bool:
        return self.lifecycle.close_trade(trade_id)

    def cancel_trade(self, trade_id: str) -> bool:
        return self.lifecycle.cancel_trade(trade_id)

    def get_active_trades(self) -> list[ExecutedTrade]:
        return self.lifecycle.get_active_trades()

    def get_closed_trades(self) -> list[ExecutedTrade]:
        return self.lifecycle.get_closed_trades()

    def get_statistics(self) -> TradeStatistics:
        return self.lifecycle.get_statistics()

    # Single-strategy signals and reports

    def generate_signal(
        self,
        instrument_id: str,
        symbol: str,
        strategy: str = "MA_CROSSOVER",
        parameters: Optional[Mapping[str, Any]] = None,
        interval: str = "minute",
        days_back: int = 7,
    ) -> Optional[StrategySignal]:
        """Evaluate one named strategy on recent candles; None when it does not fire."""
        parse_strategy(strategy)
        config = self.config_for(instrument_id)
        candles = self.history.get_candles(instrument_id, symbol, interval, days_back)
        return generate_strategy_signal(
            candles,
            strategy,
            symbol,
            parameters,
            risk_budget=config.risk.risk_budget,
            atr_period=config.indicators.atr_period,
        )

    def analyze_market(
        self,
        instrument_id: str,
        symbol: str,
        interval: str = "hour",
        days_back: int = 5,
    ) -> MarketAnalysis:
        """
        Market analysis report on one timeframe.

        Raises:
            InsufficientDataError: fewer candles than the analysis minimum
        """
        min_candles = self.config_for(instrument_id).history.min_analysis_candles
        candles = self.history.get_candles(instrument_id, symbol, interval, days_back)
        return analyze_market(candles, symbol, interval, min_candles)

    def analyze_timeframes(self, instrument_id: str, symbol: str) -> dict[str, MarketAnalysis]:
        """Reports for every multi-timeframe series with enough history."""
        reports: dict[str, MarketAnalysis] = {}
        min_candles = self.config_for(instrument_id).history.min_analysis_candles
        series = self.history.get_multi_timeframe(instrument_id, symbol)
        for interval, candles in series.items():
            try:
                reports[interval] = analyze_market(candles, symbol, interval, min_candles)
            except InsufficientDataError as e:
                logger.info("Skipping timeframe with insufficient history", symbol=symbol,
                            interval=interval, available=e.available_count)
        return reports

    # Options

    def price_option(
        self,
        spot: float,
        strike: float,
        days_to_expiry: float,
        volatility: Optional[float] = None,
        rate: Optional[float] = None,
        option_type: str = "CE",
    ) -> OptionQuote:
        """Black-Scholes price and Greeks; volatility in percent."""
        opts = self.config.options
        return price_option(
            spot,
            strike,
            days_to_expiry,
            opts.default_volatility if volatility is None else volatility,
            opts.risk_free_rate if rate is None else rate,
            opts.dividend_yield,
            OptionType.parse(option_type),
        )

    def suggest_strategy(self, trend: str, volatility: float, base_price: float) -> list[str]:
        return suggest_strategy(MarketTrend.parse(trend), volatility, base_price)

    def option_chain(
        self,
        base_symbol: str,
        spot: float,
        instrument_id: str = GLOBAL_CONFIG_KEY,
        volatility: Optional[float] = None,
        expiry_type: str = "WEEKLY",
        today: Optional[date] = None,
    ) -> list[OptionContract]:
        """CE/PE contracts around ``spot`` using the instrument's strike interval."""
        config = self.config_for(instrument_id)
        opts = config.options
        return build_option_chain(
            base_symbol,
            spot,
            opts.default_volatility if volatility is None else volatility,
            ExpiryType.parse(expiry_type),
            interval=opts.strike_interval,
            width=opts.ladder_width,
            today=today or exchange_today(config.time.timezone, self.clock()),
            risk_free_rate=opts.risk_free_rate,
            dividend_yield=opts.dividend_yield,
            spread_pct=opts.quote_spread_pct,
        )

    def get_runtime_stats(self) -> dict[str, Any]:
        """Get runtime statistics."""
        return {
            'active_trades': len(self.lifecycle.get_active_trades()),
            'closed_trades': len(self.lifecycle.get_closed_trades()),
            'configured_instruments': len(self._configs),
            'cache': self.history.cache_stats(),
        }
