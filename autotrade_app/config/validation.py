"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any, Callable


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check(
    params: dict[str, Any],
    field: str,
    predicate: Callable[[Any], bool],
    message: str,
    errors: list[ValidationError],
) -> None:
    if field in params and not predicate(params[field]):
        errors.append(ValidationError(field=field, message=message, value=params[field]))


def _positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _positive_number(value: Any) -> bool:
    return _is_number(value) and value > 0


def _percentage(value: Any) -> bool:
    return _is_number(value) and 0 <= value <= 100


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_indicator_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate indicator parameters."""
        errors: list[ValidationError] = []

        for period_field in ("rsi_period", "macd_fast", "macd_slow", "macd_signal",
                             "bollinger_period", "atr_period"):
            _check(params, period_field, _positive_int, "Must be a positive integer", errors)

        _check(params, "rsi_oversold", _percentage, "Must be between 0 and 100", errors)
        _check(params, "rsi_overbought", _percentage, "Must be between 0 and 100", errors)
        _check(params, "bollinger_k", _positive_number, "Must be a positive number", errors)

        oversold = params.get("rsi_oversold")
        overbought = params.get("rsi_overbought")
        if _is_number(oversold) and _is_number(overbought) and oversold >= overbought:
            errors.append(ValidationError(
                field="rsi_oversold",
                message="Must be below rsi_overbought",
                value=oversold
            ))

        fast = params.get("macd_fast")
        slow = params.get("macd_slow")
        if _positive_int(fast) and _positive_int(slow) and fast >= slow:
            errors.append(ValidationError(
                field="macd_fast",
                message="Must be shorter than macd_slow",
                value=fast
            ))

        return errors

    @staticmethod
    def validate_consensus_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate consensus parameters."""
        errors: list[ValidationError] = []

        _check(params, "min_confidence_threshold", _percentage,
               "Must be between 0 and 100", errors)

        for period_field in ("higher_ma_short", "higher_ma_long", "lower_ma_short",
                             "lower_ma_long", "volume_lookback", "trend_lookback",
                             "trend_min_count", "sr_lookback", "higher_lookback_days",
                             "lower_lookback_days"):
            _check(params, period_field, _positive_int, "Must be a positive integer", errors)

        _check(params, "volume_multiplier", _positive_number, "Must be a positive number", errors)
        _check(params, "sr_proximity_pct", lambda v: _is_number(v) and 0 < v < 1,
               "Must be a number between 0 and 1", errors)

        for short_field, long_field in (("higher_ma_short", "higher_ma_long"),
                                        ("lower_ma_short", "lower_ma_long")):
            short = params.get(short_field)
            long = params.get(long_field)
            if _positive_int(short) and _positive_int(long) and short >= long:
                errors.append(ValidationError(
                    field=short_field,
                    message=f"Must be shorter than {long_field}",
                    value=short
                ))

        trend_lookback = params.get("trend_lookback")
        trend_min = params.get("trend_min_count")
        if _positive_int(trend_lookback) and _positive_int(trend_min) and trend_min >= trend_lookback:
            errors.append(ValidationError(
                field="trend_min_count",
                message="Must be below trend_lookback",
                value=trend_min
            ))

        return errors

    @staticmethod
    def validate_risk_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate risk management parameters."""
        errors: list[ValidationError] = []

        _check(params, "target_atr_mult", _positive_number, "Must be a positive number", errors)
        _check(params, "stoploss_atr_mult", _positive_number, "Must be a positive number", errors)
        _check(params, "min_risk_reward", lambda v: _is_number(v) and v >= 0,
               "Must be a non-negative number", errors)
        _check(params, "risk_budget", _positive_number, "Must be a positive number", errors)

        return errors

    @staticmethod
    def validate_execution_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate automatic execution limits."""
        errors: list[ValidationError] = []

        _check(params, "min_confidence", _percentage, "Must be between 0 and 100", errors)
        _check(params, "max_open_trades", _positive_int, "Must be a positive integer", errors)
        _check(params, "closed_log_size", _positive_int, "Must be a positive integer", errors)

        return errors

    @staticmethod
    def validate_options_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate options pricing parameters."""
        errors: list[ValidationError] = []

        _check(params, "risk_free_rate", lambda v: _is_number(v) and -1 < v < 1,
               "Must be an annual rate between -1 and 1", errors)
        _check(params, "dividend_yield", lambda v: _is_number(v) and 0 <= v < 1,
               "Must be an annual yield between 0 and 1", errors)
        _check(params, "strike_interval", _positive_number, "Must be a positive number", errors)
        _check(params, "ladder_width", lambda v: _is_number(v) and v >= 0,
               "Must be a non-negative number", errors)
        _check(params, "default_volatility", _positive_number, "Must be a positive number", errors)
        _check(params, "quote_spread_pct", lambda v: _is_number(v) and 0 <= v < 1,
               "Must be a number between 0 and 1", errors)
        _check(params, "days_in_year", _positive_int, "Must be a positive integer", errors)

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []

        if "indicators" in config:
            errors.extend(ConfigValidator.validate_indicator_params(config["indicators"]))

        if "consensus" in config:
            errors.extend(ConfigValidator.validate_consensus_params(config["consensus"]))

        if "risk" in config:
            errors.extend(ConfigValidator.validate_risk_params(config["risk"]))

        if "execution" in config:
            errors.extend(ConfigValidator.validate_execution_params(config["execution"]))

        if "options" in config:
            errors.extend(ConfigValidator.validate_options_params(config["options"]))

        return errors
