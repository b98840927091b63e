"""
ImportResult model summarising one pipeline run (ephemeral).
"""

from enum import Enum

from pydantic import BaseModel, Field


class PipelineState(str, Enum):
    """Lifecycle of the staging area: EMPTY -> STAGED -> COERCED -> LOADED -> EMPTY."""

    EMPTY = "empty"
    STAGED = "staged"
    COERCED = "coerced"
    LOADED = "loaded"


class ImportResult(BaseModel):
    """
    Outcome of one import run.

    Attributes:
        csv_path: File that was imported
        rows_staged: Rows written to the staging table
        records_loaded: Records written to the target table
        empty_values: Per-column count of empty cells stored as NULL
        unparseable_values: Per-column count of unparseable cells stored as NULL
        final_state: Pipeline state when the run finished
        duration_seconds: Wall-clock duration of the run
    """

    csv_path: str
    rows_staged: int = Field(0, ge=0)
    records_loaded: int = Field(0, ge=0)
    empty_values: dict[str, int] = Field(default_factory=dict)
    unparseable_values: dict[str, int] = Field(default_factory=dict)
    final_state: PipelineState = PipelineState.EMPTY
    duration_seconds: float = Field(0.0, ge=0.0)

    @property
    def nulled_values(self) -> int:
        return sum(self.empty_values.values()) + sum(self.unparseable_values.values())

    class Config:
        json_schema_extra = {
            "example": {
                "csv_path": "data/retail_sales.csv",
                "rows_staged": 2000,
                "records_loaded": 2000,
                "empty_values": {"age": 10, "price_per_unit": 3},
                "unparseable_values": {"sale_date": 1},
                "final_state": "empty",
                "duration_seconds": 0.84
            }
        }
