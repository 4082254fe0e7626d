"""Timestamp precision handling for the /write endpoint."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Tuple, Union

from influxline.errors import ConfigError

Instant = Union[datetime, int, float]
Clock = Callable[[], Tuple[int, int]]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MICROS_PER_SECOND = 1_000_000


class Precision(str, Enum):
    """Timestamp unit; the value is the token the /write endpoint expects."""

    SECONDS = "s"
    MILLISECONDS = "ms"
    MICROSECONDS = "u"

    @property
    def scale(self) -> int:
        return _SCALES[self]

    @classmethod
    def parse(cls, value: Union[str, "Precision"]) -> "Precision":
        if isinstance(value, Precision):
            return value
        key = str(value).strip().lower()
        try:
            return _ALIASES[key]
        except KeyError:
            raise ConfigError(f"Unknown timestamp precision: {value!r}") from None


_SCALES = {
    Precision.SECONDS: 1,
    Precision.MILLISECONDS: 1_000,
    Precision.MICROSECONDS: 1_000_000,
}

_ALIASES = {
    "s": Precision.SECONDS,
    "sec": Precision.SECONDS,
    "seconds": Precision.SECONDS,
    "ms": Precision.MILLISECONDS,
    "milliseconds": Precision.MILLISECONDS,
    # "us" is what the old client sent; the endpoint only knows "u".
    "u": Precision.MICROSECONDS,
    "us": Precision.MICROSECONDS,
    "microseconds": Precision.MICROSECONDS,
}


def system_clock() -> Tuple[int, int]:
    """Current wall-clock time as (seconds, microseconds)."""

    micros = time.time_ns() // 1_000
    return divmod(micros, _MICROS_PER_SECOND)


def to_datetime(instant: Instant) -> datetime:
    if isinstance(instant, datetime):
        if instant.tzinfo is None:
            return instant.replace(tzinfo=timezone.utc)
        return instant
    if isinstance(instant, bool) or not isinstance(instant, (int, float)):
        raise TypeError(f"Unsupported timestamp type: {type(instant).__name__}")
    return datetime.fromtimestamp(instant, tz=timezone.utc)


def _round_half_away(numerator: int, denominator: int) -> int:
    quotient, remainder = divmod(abs(numerator), denominator)
    if remainder * 2 >= denominator:
        quotient += 1
    return -quotient if numerator < 0 else quotient


def timestamp_from_instant(instant: Instant, precision: Precision) -> str:
    """Scale an explicit instant to the precision, rounding ties away from zero."""

    delta = to_datetime(instant) - _EPOCH
    micros = (delta.days * 86_400 + delta.seconds) * _MICROS_PER_SECOND + delta.microseconds
    return str(_round_half_away(micros * precision.scale, _MICROS_PER_SECOND))


def timestamp_now(precision: Precision, clock: Clock = system_clock) -> str:
    seconds, micros = clock()
    scale = precision.scale
    return str(seconds * scale + micros * scale // _MICROS_PER_SECOND)
