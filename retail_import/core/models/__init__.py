"""
Core data models for the retail sales import pipeline.

All models use Pydantic for runtime validation and type safety.
"""

from .import_result import ImportResult, PipelineState
from .raw_record import RawRecord
from .sales_record import SalesRecord

__all__ = [
    "RawRecord",
    "SalesRecord",
    "ImportResult",
    "PipelineState",
]
