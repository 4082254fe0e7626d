"""Line protocol point: one measurement sample and its encoder."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Optional, Union

from influxline.errors import EncodingError
from influxline.precision import Clock, Instant, Precision, system_clock, timestamp_from_instant, timestamp_now, to_datetime

RawFieldValue = Union[int, float, bool, str]


class FieldKind(str, Enum):
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    STRING = "string"


@dataclass(frozen=True)
class FieldValue:
    """A field value tagged with the wire type it is written as."""

    kind: FieldKind
    value: RawFieldValue

    @classmethod
    def integer(cls, value: int) -> "FieldValue":
        if isinstance(value, bool) or not isinstance(value, int):
            raise EncodingError(f"Integer field needs an int, got {type(value).__name__}")
        return cls(FieldKind.INTEGER, value)

    @classmethod
    def floating(cls, value: Union[int, float]) -> "FieldValue":
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise EncodingError(f"Float field needs a number, got {type(value).__name__}")
        value = float(value)
        if not math.isfinite(value):
            raise EncodingError(f"Float field must be finite, got {value}")
        return cls(FieldKind.FLOAT, value)

    @classmethod
    def boolean(cls, value: bool) -> "FieldValue":
        if not isinstance(value, bool):
            raise EncodingError(f"Boolean field needs a bool, got {type(value).__name__}")
        return cls(FieldKind.BOOLEAN, value)

    @classmethod
    def string(cls, value: str) -> "FieldValue":
        if not isinstance(value, str):
            raise EncodingError(f"String field needs a str, got {type(value).__name__}")
        return cls(FieldKind.STRING, value)

    @classmethod
    def of(cls, value: Union["FieldValue", RawFieldValue]) -> "FieldValue":
        if isinstance(value, FieldValue):
            return value
        # bool is an int subclass
        if isinstance(value, bool):
            return cls.boolean(value)
        if isinstance(value, int):
            return cls.integer(value)
        if isinstance(value, float):
            return cls.floating(value)
        if isinstance(value, str):
            return cls.string(value)
        raise EncodingError(f"Unsupported field type: {type(value).__name__}")

    def encode(self) -> str:
        if self.kind is FieldKind.INTEGER:
            return f"{self.value}i"
        if self.kind is FieldKind.FLOAT:
            return _format_float(self.value)
        if self.kind is FieldKind.BOOLEAN:
            return "true" if self.value else "false"
        return '"' + self.value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _format_float(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    return repr(value)


def escape_key(val: str) -> str:
    """Escape a measurement, tag key/value or field key."""

    return val.replace(",", "\\,").replace(" ", "\\ ").replace("=", "\\=")


@dataclass
class Point:
    """A single timeseries point.

    Tags and fields are written in insertion order. A point is owned by whoever
    built it until it is handed to a client; it must not change after that.
    """

    measurement: str
    tags: Dict[str, str] = field(default_factory=dict)
    fields: Dict[str, FieldValue] = field(default_factory=dict)
    timestamp: Optional[datetime] = None

    def add_tag(self, name: str, value: str) -> "Point":
        self.tags[name] = str(value)
        return self

    def set_field(self, name: str, value: Union[FieldValue, RawFieldValue]) -> "Point":
        self.fields[name] = FieldValue.of(value)
        return self

    def set_timestamp(self, instant: Instant) -> "Point":
        self.timestamp = to_datetime(instant)
        return self

    def encode(self) -> str:
        """Render the point without its timestamp."""

        if not self.measurement:
            raise EncodingError("Point measurement must not be empty")
        if not self.fields:
            raise EncodingError(f"Point {self.measurement!r} has no fields")
        head = escape_key(self.measurement)
        if self.tags:
            tags = ",".join(f"{escape_key(k)}={escape_key(v)}" for k, v in self.tags.items())
            head = f"{head},{tags}"
        fields = ",".join(f"{escape_key(k)}={v.encode()}" for k, v in self.fields.items())
        return f"{head} {fields}"

    def timestamp_string(self, precision: Precision, clock: Clock = system_clock) -> str:
        if self.timestamp is not None:
            return timestamp_from_instant(self.timestamp, precision)
        return timestamp_now(precision, clock)

    def line(self, precision: Precision, clock: Clock = system_clock) -> str:
        return f"{self.encode()} {self.timestamp_string(precision, clock)}"
