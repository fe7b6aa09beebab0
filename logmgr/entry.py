"""Log levels, structured fields, log entries and their JSON encoding."""

from __future__ import annotations

import abc
import json
import math
from dataclasses import dataclass
from dataclasses import field as _dc_field
from datetime import datetime
from decimal import Decimal
from enum import IntEnum
from typing import Any, Sequence


class Level(IntEnum):
    """Severity of a log entry; higher values are more severe."""

    DEBUG = 0
    INFO = 1
    WARN = 2
    ERROR = 3
    FATAL = 4

    def __str__(self) -> str:
        return self.name.lower()


def _level_name(level: int) -> str:
    try:
        return str(Level(level))
    except ValueError:
        return "unknown"


@dataclass(frozen=True)
class LogField:
    """A single key/value pair attached to a log entry."""

    key: str
    value: Any


def field(key: str, value: Any) -> LogField:
    """Create a structured logging field."""
    return LogField(key, value)


class Sink(abc.ABC):
    """An output destination that receives batches of entries."""

    @abc.abstractmethod
    def write(self, entries: Sequence[Entry]) -> None:
        """Process a batch of log entries."""

    @abc.abstractmethod
    def close(self) -> None:
        """Flush and release the sink."""


def _format_timestamp(moment: datetime) -> str:
    """Format a datetime as RFC 3339 with trailing fractional zeros trimmed."""
    if moment.tzinfo is None or moment.utcoffset() is None:
        moment = moment.astimezone()
    text = (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"
        f"T{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    )
    if moment.microsecond:
        text += "." + f"{moment.microsecond:06d}".rstrip("0")
    offset = moment.utcoffset()
    if not offset:
        return text + "Z"
    total_minutes = int(offset.total_seconds()) // 60
    sign = "-" if total_minutes < 0 else "+"
    hours, minutes = divmod(abs(total_minutes), 60)
    return f"{text}{sign}{hours:02d}:{minutes:02d}"


_STRING_ESCAPES = {code: f"\\u{code:04x}" for code in range(32)}
_STRING_ESCAPES.update(
    {
        ord('"'): '\\"',
        ord("\\"): "\\\\",
        ord("\n"): "\\n",
        ord("\r"): "\\r",
        ord("\t"): "\\t",
    }
)

_HTML_ESCAPES = {
    ord("<"): "\\u003c",
    ord(">"): "\\u003e",
    ord("&"): "\\u0026",
    0x2028: "\\u2028",
    0x2029: "\\u2029",
}


def encode_json_string(text: str) -> str:
    """Encode text as a quoted JSON string, leaving non-ASCII characters as they are."""
    return '"' + text.translate(_STRING_ESCAPES) + '"'


def _format_float(value: float) -> str:
    """Shortest representation, switching to exponent form outside 1e-4 .. 1e6."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    sign = "-" if math.copysign(1.0, value) < 0 else ""
    if value == 0:
        return sign + "0"
    _, digit_tuple, exponent = Decimal(repr(abs(value))).as_tuple()
    raw = "".join(map(str, digit_tuple))
    digits = raw.rstrip("0")
    exponent += len(raw) - len(digits)
    count = len(digits)
    point = count + exponent
    exp10 = point - 1
    if exp10 < -4 or exp10 >= 6:
        mantissa = digits[0] + ("." + digits[1:] if count > 1 else "")
        exp_sign = "-" if exp10 < 0 else "+"
        return f"{sign}{mantissa}e{exp_sign}{abs(exp10):02d}"
    if point <= 0:
        return f"{sign}0.{'0' * -point}{digits}"
    if point >= count:
        return sign + digits + "0" * (point - count)
    return f"{sign}{digits[:point]}.{digits[point:]}"


def encode_json_value(value: Any) -> str:
    """Encode a field value as JSON; values that cannot be encoded become null."""
    if value is None:
        return "null"
    if isinstance(value, str):
        return encode_json_string(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(int(value))
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, datetime):
        return '"' + _format_timestamp(value) + '"'
    try:
        encoded = json.dumps(
            value,
            ensure_ascii=False,
            allow_nan=False,
            sort_keys=True,
            separators=(",", ":"),
        )
    except (TypeError, ValueError, RecursionError):
        return "null"
    return encoded.translate(_HTML_ESCAPES)


@dataclass
class Entry:
    """One log record with flattened structured fields."""

    level: int = Level.DEBUG
    timestamp: datetime = _dc_field(default_factory=lambda: datetime.now().astimezone())
    message: str = ""
    fields: dict[str, Any] = _dc_field(default_factory=dict)

    def marshal_json(self) -> str:
        """Render the entry as one JSON object with fields at the top level."""
        parts = [
            '{"level":"',
            _level_name(self.level),
            '","timestamp":"',
            _format_timestamp(self.timestamp),
            '","message":',
            encode_json_string(self.message),
        ]
        parts.extend(
            f',"{key}":{encode_json_value(value)}' for key, value in self.fields.items()
        )
        parts.append("}")
        return "".join(parts)