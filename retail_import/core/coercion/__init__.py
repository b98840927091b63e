"""
Type coercion and NULL normalization of staged rows.
"""

from .coercer import CoercionBatch, RecordCoercer
from .parsers import parse_date, parse_float, parse_integer, parse_time

__all__ = [
    "CoercionBatch",
    "RecordCoercer",
    "parse_date",
    "parse_float",
    "parse_integer",
    "parse_time",
]
