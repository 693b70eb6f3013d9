"""
Candle normalization from raw gateway payloads.

Brokers return history either as row lists ``[ts, open, high, low, close,
volume]`` or as mappings with ``date``/``timestamp`` keys. Both shapes are
converted into validated, chronologically ordered ``Candle`` objects.
"""

from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime
from typing import Any

import structlog

from ..errors import MalformedDataError
from ..utils.time import ensure_utc, from_epoch
from .models import Candle

logger = structlog.get_logger(__name__)

_OHLCV = ("open", "high", "low", "close", "volume")


def _parse_timestamp(raw: Any) -> datetime:
    if isinstance(raw, datetime):
        return ensure_utc(raw)
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return from_epoch(float(raw))
    if isinstance(raw, str):
        try:
            return ensure_utc(datetime.fromisoformat(raw.replace("Z", "+00:00")))
        except ValueError as e:
            raise MalformedDataError(
                f"Unparseable candle timestamp: {raw}",
                raw_data=raw,
                expected_format="ISO-8601 or epoch",
            ) from e
    raise MalformedDataError(
        f"Unsupported candle timestamp type: {type(raw).__name__}",
        raw_data=repr(raw),
        expected_format="ISO-8601 or epoch",
    )


def _to_float(name: str, value: Any, raw: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise MalformedDataError(
            f"Invalid {name} value in candle: {value!r}",
            raw_data=repr(raw),
            expected_format="numeric OHLCV",
        ) from e


def validate_candle(candle: Candle) -> None:
    """Raise MalformedDataError if the candle violates OHLC consistency."""
    if candle.high < max(candle.open, candle.close) or candle.low > min(candle.open, candle.close):
        raise MalformedDataError(
            "Candle high/low inconsistent with open/close",
            raw_data=repr(candle),
            context={"timestamp": candle.timestamp.isoformat()},
        )
    if candle.high < candle.low:
        raise MalformedDataError("Candle high below low", raw_data=repr(candle))
    if candle.volume < 0:
        raise MalformedDataError("Negative candle volume", raw_data=repr(candle))


def normalize_candle(raw: Any) -> Candle:
    """Convert a single gateway row into a validated Candle."""
    if isinstance(raw, Candle):
        validate_candle(raw)
        return raw

    if isinstance(raw, Mapping):
        ts_raw = raw.get("timestamp", raw.get("date"))
        if ts_raw is None:
            raise MalformedDataError(
                "Candle is missing a timestamp", raw_data=repr(raw), expected_format="date/timestamp key"
            )
        values = [raw.get(key, 0.0 if key == "volume" else None) for key in _OHLCV]
    elif isinstance(raw, Sequence) and not isinstance(raw, str) and len(raw) >= 5:
        ts_raw = raw[0]
        values = list(raw[1:6])
        if len(values) == 4:
            values.append(0.0)
    else:
        raise MalformedDataError(
            "Unrecognized candle payload", raw_data=repr(raw), expected_format="mapping or row list"
        )

    o, h, lo, c, v = (_to_float(name, value, raw) for name, value in zip(_OHLCV, values))
    candle = Candle(timestamp=_parse_timestamp(ts_raw), open=o, high=h, low=lo, close=c, volume=v)
    validate_candle(candle)
    return candle


def normalize_candles(rows: Iterable[Any]) -> list[Candle]:
    """
    Normalize gateway rows into chronologically ordered candles.

    Duplicate timestamps keep the last row received.
    """
    by_ts: dict[datetime, Candle] = {}
    count = 0
    for row in rows:
        candle = normalize_candle(row)
        by_ts[candle.timestamp] = candle
        count += 1

    if len(by_ts) != count:
        logger.debug("Dropped duplicate candles", received=count, kept=len(by_ts))

    return [by_ts[ts] for ts in sorted(by_ts)]
