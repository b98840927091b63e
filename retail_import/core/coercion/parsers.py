"""
Best-effort field parsers.

Each parser takes non-empty text and either returns a typed value or raises
CoercionFailure. RecordCoercer turns empty text and failures into None,
the equivalent of TRY_CAST(NULLIF(value, '') AS type).
"""

import math
import re
from datetime import date, datetime, time
from typing import Any, Callable

from retail_import.exceptions import CoercionFailure

INT_MIN = -(2 ** 31)
INT_MAX = 2 ** 31 - 1

_INTEGER = re.compile(r"^[+-]?[0-9]+$")
_FLOAT = re.compile(r"^[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?$")
_TIME_24H = re.compile(r"^([0-9]{1,2}):([0-9]{2})(?::([0-9]{2})(?:\.([0-9]{1,7}))?)?$")
_TIME_12H_FORMATS = ("%I:%M:%S %p", "%I:%M %p")


def parse_date(text: str, formats: list[str] | tuple[str, ...] = ("%Y-%m-%d",)) -> date:
    """Parse a calendar date, trying each strptime format in order."""
    value = text.strip()
    for fmt in formats:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    raise CoercionFailure(None, text, "date")


def parse_time(text: str) -> time:
    """
    Parse a time of day.

    Accepts HH:MM, HH:MM:SS and HH:MM:SS.fffffff (up to seven fractional
    digits, truncated to microseconds), or a 12-hour clock with AM/PM.
    """
    value = text.strip()
    match = _TIME_24H.match(value)
    if match:
        hour, minute, second, fraction = match.groups()
        microsecond = int((fraction or "0")[:6].ljust(6, "0"))
        try:
            return time(int(hour), int(minute), int(second or 0), microsecond)
        except ValueError as e:
            raise CoercionFailure(None, text, "time") from e

    for fmt in _TIME_12H_FORMATS:
        try:
            return datetime.strptime(value.upper(), fmt).time()
        except ValueError:
            continue
    raise CoercionFailure(None, text, "time")


def parse_integer(text: str) -> int:
    """Parse a signed 32-bit integer; fractions and digit separators are rejected."""
    value = text.strip()
    if not _INTEGER.match(value):
        raise CoercionFailure(None, text, "integer")
    number = int(value)
    if not INT_MIN <= number <= INT_MAX:
        raise CoercionFailure(None, text, "integer")
    return number


def parse_float(text: str) -> float:
    """Parse a finite floating-point number; nan, inf and overflow are rejected."""
    value = text.strip()
    if not _FLOAT.match(value):
        raise CoercionFailure(None, text, "float")
    number = float(value)
    if not math.isfinite(number):
        raise CoercionFailure(None, text, "float")
    return number


DEFAULT_PARSERS: dict[str, Callable[[str], Any]] = {
    "date": parse_date,
    "time": parse_time,
    "integer": parse_integer,
    "float": parse_float,
}


def is_empty(value: str | None) -> bool:
    """True for None, empty or whitespace-only text."""
    return value is None or not value.strip()

