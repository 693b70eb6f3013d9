"""Unit tests for configuration management."""

from pathlib import Path

import pytest

from autotrade_app.config import (
    AutoTradeConfig,
    ConfigLoader,
    ConfigValidator,
    get_default_config,
)
from autotrade_app.errors import InvalidInputError


class TestDefaultConfig:
    """Test suite for default configuration."""

    def test_default_config_creation(self) -> None:
        """Defaults match the documented engine constants."""
        config = get_default_config()

        assert config.consensus.min_confidence_threshold == 80.0
        assert config.indicators.rsi_period == 14
        assert config.risk.target_atr_mult == 2.0
        assert config.risk.stoploss_atr_mult == 1.0
        assert config.execution.closed_log_size == 500
        assert config.options.risk_free_rate == 0.05
        assert config.history.cache_ttl_seconds == 300


class TestConfigLoader:
    """Test suite for configuration loader."""

    def test_config_loader_creation(self) -> None:
        """Test that ConfigLoader can be created."""
        loader = ConfigLoader.create()
        assert isinstance(loader.config_dir, Path)

    def test_merge_config_defaults_only(self) -> None:
        """Unknown instruments get the global defaults."""
        config = ConfigLoader.create().merge_config("UNKNOWN-INSTRUMENT")

        assert config["consensus"]["min_confidence_threshold"] == 80.0
        assert config["execution"]["max_open_trades"] == 1

    def test_instrument_overrides_from_yaml(self) -> None:
        """Shipped instruments.yaml overrides apply per instrument."""
        loader = ConfigLoader.create()

        reliance = loader.merge_config("738561")
        nifty = loader.merge_config("256265")

        assert reliance["execution"]["max_open_trades"] == 2
        assert reliance["execution"]["min_confidence"] == 80.0
        assert nifty["options"]["strike_interval"] == 50

    def test_merge_config_with_overrides(self) -> None:
        """Per-call overrides win over instrument and default values."""
        overrides = {"execution": {"max_open_trades": 5}, "risk": {"min_risk_reward": 2.0}}

        config = ConfigLoader.create().merge_config("738561", overrides)

        assert config["execution"]["max_open_trades"] == 5
        assert config["risk"]["min_risk_reward"] == 2.0
        # Other values remain
        assert config["risk"]["risk_budget"] == 10000

    def test_missing_instruments_file(self, tmp_path) -> None:
        """A config directory without instruments.yaml yields defaults."""
        loader = ConfigLoader.create(tmp_path)
        assert loader.load_instrument_config("738561") == {}

    def test_custom_instruments_file(self, tmp_path) -> None:
        """Instrument entries are read from the given directory."""
        (tmp_path / "instruments.yaml").write_text(
            "instruments:\n"
            "  \"42\":\n"
            "    risk:\n"
            "      target_atr_mult: 3.0\n"
            "  \"43\":\n"
        )
        loader = ConfigLoader.create(tmp_path)

        assert loader.load_instrument_config("42") == {"risk": {"target_atr_mult": 3.0}}
        assert loader.load_instrument_config("43") == {}

    def test_build_config_typed(self) -> None:
        """build_config returns dataclasses and ignores unknown keys."""
        config = ConfigLoader.create().build_config(
            "256265", {"options": {"ladder_width": 200, "unknown_key": 1}}
        )

        assert config.options.strike_interval == 50
        assert config.options.ladder_width == 200
        assert not hasattr(config.options, "unknown_key")


class TestConfigValidator:
    """Test suite for configuration validation."""

    def test_defaults_are_valid(self) -> None:
        config = ConfigLoader.create().merge_config("UNKNOWN-INSTRUMENT")
        assert ConfigValidator.validate_config(config) == []

    def test_invalid_rsi_period(self) -> None:
        errors = ConfigValidator.validate_indicator_params({"rsi_period": 0})

        assert len(errors) == 1
        assert errors[0].field == "rsi_period"
        assert errors[0].value == 0

    def test_oversold_above_overbought(self) -> None:
        errors = ConfigValidator.validate_indicator_params({"rsi_oversold": 80, "rsi_overbought": 70})
        assert [e.field for e in errors] == ["rsi_oversold"]

    def test_macd_fast_must_be_shorter(self) -> None:
        errors = ConfigValidator.validate_indicator_params({"macd_fast": 26, "macd_slow": 12})
        assert [e.field for e in errors] == ["macd_fast"]

    def test_threshold_out_of_range(self) -> None:
        errors = ConfigValidator.validate_consensus_params({"min_confidence_threshold": 120})
        assert errors[0].field == "min_confidence_threshold"

    def test_ma_windows_ordered(self) -> None:
        errors = ConfigValidator.validate_consensus_params({"lower_ma_short": 13, "lower_ma_long": 5})
        assert [e.field for e in errors] == ["lower_ma_short"]

    def test_bool_is_not_a_period(self) -> None:
        errors = ConfigValidator.validate_consensus_params({"trend_lookback": True})
        assert [e.field for e in errors] == ["trend_lookback"]

    def test_invalid_risk_params(self) -> None:
        errors = ConfigValidator.validate_risk_params({"target_atr_mult": -1, "risk_budget": 0})
        assert {e.field for e in errors} == {"target_atr_mult", "risk_budget"}

    def test_invalid_execution_params(self) -> None:
        errors = ConfigValidator.validate_execution_params({"max_open_trades": 0})
        assert errors[0].message == "Must be a positive integer"

    def test_invalid_options_params(self) -> None:
        errors = ConfigValidator.validate_options_params({"strike_interval": 0, "quote_spread_pct": 1.5})
        assert {e.field for e in errors} == {"strike_interval", "quote_spread_pct"}

    def test_validate_config_collects_all_sections(self) -> None:
        config = {
            "indicators": {"atr_period": -1},
            "risk": {"stoploss_atr_mult": 0},
            "execution": {"min_confidence": 101},
        }
        errors = ConfigValidator.validate_config(config)
        assert [e.field for e in errors] == ["atr_period", "stoploss_atr_mult", "min_confidence"]


class TestAutoTradeConfig:
    """Test suite for the per-run execution config."""

    def test_from_params(self) -> None:
        config = ConfigLoader.create().build_config("738561")

        run = AutoTradeConfig.from_params("RELIANCE", "738561", 10, config.execution, config.risk, 500.0)

        assert run.max_open_trades == 2
        assert run.min_confidence == 80.0
        assert run.min_risk_reward == 1.5
        assert run.max_risk_per_trade == 500.0
        run.validate()

    @pytest.mark.parametrize("kwargs,field", [
        ({"symbol": ""}, "symbol"),
        ({"instrument_id": ""}, "instrument_id"),
        ({"quantity": 0}, "quantity"),
        ({"quantity": True}, "quantity"),
        ({"min_confidence": 120.0}, "min_confidence"),
        ({"max_open_trades": 0}, "max_open_trades"),
        ({"max_risk_per_trade": -5.0}, "max_risk_per_trade"),
        ({"min_risk_reward": -1.0}, "min_risk_reward"),
    ])
    def test_validate_rejects(self, kwargs, field) -> None:
        values = {"symbol": "RELIANCE", "instrument_id": "738561", "quantity": 10}
        values.update(kwargs)

        with pytest.raises(InvalidInputError) as exc_info:
            AutoTradeConfig(**values).validate()

        assert exc_info.value.field == field
