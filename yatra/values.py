"""
Value model: the tagged union of practice entry values.

A practice declares one data type; its diary entries hold one of

    Int(n)          unsigned 16-bit count
    Bool(flag)      done / not done
    Time(h, m)      clock time of day
    Text(text)      free text
    Duration(mins)  elapsed minutes

Int, Time and Duration map onto one integer comparison scale
(seconds-equivalent units), which is the only basis for thresholds,
ordering and aggregation. Bool and Text have no position on that scale.
"""

import json
import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, ClassVar, Optional

from yatra.config import DisplayParams
from yatra.errors import ParseError


U16_MAX = 65535

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3600


class DataType(str, Enum):
    """Declared data type of a practice (persisted spelling)."""

    INT = "Int"
    BOOL = "Bool"
    TIME = "Time"
    TEXT = "Text"
    DURATION = "Duration"

    @classmethod
    def _missing_(cls, value):
        # Accept "int", "DURATION", ... on input
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        return None

    @property
    def is_comparable(self) -> bool:
        return self in (DataType.INT, DataType.TIME, DataType.DURATION)


# ---------------------------------------------------------------------------
# Union members
# ---------------------------------------------------------------------------

class Value:
    """Base of the value union. Use the concrete subclasses."""

    data_type: ClassVar[DataType]

    def as_comparable(self) -> Optional[int]:
        """Position on the comparison scale, or None for Bool/Text."""
        return None


@dataclass(frozen=True)
class Int(Value):
    value: int

    data_type: ClassVar[DataType] = DataType.INT

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int) or self.value < 0:
            raise ValueError(f"Int value must be a non-negative integer, got {self.value!r}")

    def as_comparable(self) -> Optional[int]:
        return self.value


@dataclass(frozen=True)
class Bool(Value):
    value: bool

    data_type: ClassVar[DataType] = DataType.BOOL


@dataclass(frozen=True)
class Time(Value):
    h: int
    m: int

    data_type: ClassVar[DataType] = DataType.TIME

    def __post_init__(self):
        if not (0 <= self.h < 24 and 0 <= self.m < 60):
            raise ValueError(f"Invalid time of day {self.h}:{self.m:02d}")

    def as_comparable(self) -> Optional[int]:
        return self.h * SECONDS_PER_HOUR + self.m * SECONDS_PER_MINUTE


@dataclass(frozen=True)
class Text(Value):
    value: str

    data_type: ClassVar[DataType] = DataType.TEXT


@dataclass(frozen=True)
class Duration(Value):
    minutes: int

    data_type: ClassVar[DataType] = DataType.DURATION

    def __post_init__(self):
        if isinstance(self.minutes, bool) or not isinstance(self.minutes, int) or self.minutes < 0:
            raise ValueError(f"Duration must be a non-negative number of minutes, got {self.minutes!r}")

    def as_comparable(self) -> Optional[int]:
        return self.minutes * SECONDS_PER_MINUTE


# ---------------------------------------------------------------------------
# Parsing raw text
# ---------------------------------------------------------------------------

_INT_RE = re.compile(r"\d+")
_TIME_RE = re.compile(r"(\d{1,2}):(\d{2})")


@lru_cache(maxsize=8)
def _duration_pattern(hours_label: str, minutes_label: str) -> "re.Pattern[str]":
    """
    Three mutually exclusive alternatives:

        1. up to 3 digits of minutes, no hours
        2. hours 0-23 alone, optionally followed by the hours label or ':'
        3. hours 0-23, optional separator, minutes 0-59
    """
    h = f"(?:{re.escape(hours_label)})"
    m = f"(?:{re.escape(minutes_label)})"
    hours = r"([0-1]?[0-9]|2[0-3])"
    sep = rf"(?:{h}?\s?|:)?"
    return re.compile(
        rf"(?:(\d{{1,3}}){m}?|{hours}{sep}|{hours}{sep}([0-5]?[0-9]){m}?)"
    )


def _parse_duration(raw: str, display: DisplayParams) -> Duration:
    pattern = _duration_pattern(display.hours_label, display.minutes_label)
    match = pattern.fullmatch(raw.strip())
    if match is None:
        raise ParseError(f"Couldn't parse duration from {raw!r}")

    minutes_only, hours_only, hours, minutes = match.groups()
    if minutes_only is not None:
        return Duration(int(minutes_only))
    if hours_only is not None:
        return Duration(int(hours_only) * 60)
    return Duration(int(hours) * 60 + int(minutes))


def parse_value(
    data_type: DataType,
    raw: str,
    display: Optional[DisplayParams] = None,
) -> Value:
    """Parse user-entered text for a practice of the given data type."""
    display = display or DisplayParams()
    data_type = DataType(data_type)

    if data_type is DataType.TEXT:
        return Text(raw)

    text = raw.strip()

    if data_type is DataType.INT:
        if not _INT_RE.fullmatch(text) or int(text) > U16_MAX:
            raise ParseError(f"Failed to parse int from {raw!r}")
        return Int(int(text))

    if data_type is DataType.BOOL:
        if text == display.checkmark:
            return Bool(True)
        lowered = text.lower()
        if lowered not in ("true", "false"):
            raise ParseError(f"Failed to parse bool from {raw!r}")
        return Bool(lowered == "true")

    if data_type is DataType.TIME:
        match = _TIME_RE.fullmatch(text)
        if match is None:
            raise ParseError(f"Couldn't parse time from {raw!r}")
        h, m = int(match.group(1)), int(match.group(2))
        if h >= 24 or m >= 60:
            raise ParseError(f"Time out of range: {raw!r}")
        return Time(h, m)

    return _parse_duration(text, display)


# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------

def format_value(value: Value, display: Optional[DisplayParams] = None) -> str:
    """Render a value for display using explicit labels."""
    display = display or DisplayParams()

    if isinstance(value, Int):
        return str(value.value)
    if isinstance(value, Bool):
        return display.checkmark if value.value else ""
    if isinstance(value, Time):
        return f"{value.h:02d}:{value.m:02d}"
    if isinstance(value, Text):
        return value.value
    if isinstance(value, Duration):
        hours, minutes = divmod(value.minutes, 60)
        if hours and minutes:
            return f"{hours}{display.hours_label} {minutes}{display.minutes_label}"
        if hours:
            return f"{hours}{display.hours_label}"
        return f"{minutes}{display.minutes_label}"
    raise TypeError(f"Not a Value: {value!r}")


# ---------------------------------------------------------------------------
# Persisted JSON codec
# ---------------------------------------------------------------------------

def _require_int(payload: Any, tag: str) -> int:
    if isinstance(payload, bool) or not isinstance(payload, int):
        raise ParseError(f"{tag} payload must be an integer, got {payload!r}")
    return payload


def value_from_json(raw: Any) -> Optional[Value]:
    """
    Decode the persisted, externally tagged form, e.g. {"Duration": 90}.

    Accepts either a JSON string or an already decoded object. ``None`` and
    an empty object both mean "no value".
    """
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ParseError(f"Invalid value JSON: {e}") from e

    if raw is None or raw == {}:
        return None

    if not isinstance(raw, dict) or len(raw) != 1:
        raise ParseError(f"Expected a single-key tagged object, got {raw!r}")

    (tag, payload), = raw.items()

    try:
        if tag == "Int":
            n = _require_int(payload, tag)
            if n > U16_MAX:
                raise ParseError(f"Int out of range: {n}")
            return Int(n)
        if tag == "Bool":
            if not isinstance(payload, bool):
                raise ParseError(f"Bool payload must be true/false, got {payload!r}")
            return Bool(payload)
        if tag == "Time":
            if not isinstance(payload, dict):
                raise ParseError(f"Time payload must be an object, got {payload!r}")
            return Time(_require_int(payload.get("h"), tag), _require_int(payload.get("m"), tag))
        if tag == "Text":
            if not isinstance(payload, str):
                raise ParseError(f"Text payload must be a string, got {payload!r}")
            return Text(payload)
        if tag == "Duration":
            return Duration(_require_int(payload, tag))
    except ParseError:
        raise
    except ValueError as e:
        raise ParseError(str(e)) from e

    raise ParseError(f"Unknown value tag {tag!r}")


def value_to_json(value: Value) -> dict:
    """Encode a value into the persisted, externally tagged form."""
    if isinstance(value, Int):
        return {"Int": value.value}
    if isinstance(value, Bool):
        return {"Bool": value.value}
    if isinstance(value, Time):
        return {"Time": {"h": value.h, "m": value.m}}
    if isinstance(value, Text):
        return {"Text": value.value}
    if isinstance(value, Duration):
        return {"Duration": value.minutes}
    raise TypeError(f"Not a Value: {value!r}")


# ---------------------------------------------------------------------------
# Comparison scale helpers
# ---------------------------------------------------------------------------

def comparable_pair(a: Optional[Value], b: Optional[Value]) -> Optional[tuple]:
    """
    Both values on the comparison scale, or None when they cannot be compared.

    Values of different data types are never compared with each other.
    """
    if a is None or b is None or a.data_type is not b.data_type:
        return None
    ua, ub = a.as_comparable(), b.as_comparable()
    if ua is None or ub is None:
        return None
    return ua, ub


def value_from_units(data_type: DataType, units: int) -> Value:
    """
    Re-wrap a comparison-scale integer into the practice's native type.

    Sub-minute precision is discarded by integer division.
    """
    data_type = DataType(data_type)
    units = int(units)

    if data_type is DataType.INT:
        return Int(units)
    if data_type is DataType.DURATION:
        return Duration(units // SECONDS_PER_MINUTE)
    if data_type is DataType.TIME:
        total_minutes = units // SECONDS_PER_MINUTE
        return Time(total_minutes // 60, total_minutes % 60)
    raise ValueError(f"{data_type.value} values have no comparison scale")
