"""
RecordCoercer - converts staged text rows into typed sales records.
"""

from collections import Counter
from functools import partial
from typing import Any, Callable, Iterable

from retail_import.core.models import RawRecord, SalesRecord
from retail_import.core.schema import SALES_COLUMNS, ColumnSpec
from retail_import.core.schema.import_config import DEFAULT_DATE_FORMATS
from retail_import.exceptions import CoercionFailure
from retail_import.observability.logger import get_logger

from .parsers import DEFAULT_PARSERS, is_empty

logger = get_logger(__name__)


class CoercionBatch:
    """Coerced records of one staging batch plus per-column null counts."""

    def __init__(self, records: list[SalesRecord], empty_values: Counter, unparseable_values: Counter):
        self.records = records
        self.empty_values = empty_values
        self.unparseable_values = unparseable_values

    def __len__(self) -> int:
        return len(self.records)


class RecordCoercer:
    """
    Applies the per-column coercion table to RawRecords.

    Text columns pass through unchanged, so an empty transaction_id, gender
    or category stays "". Every other column is a best-effort cast: empty
    text and unparseable text both become None. Fields are coerced
    independently and a bad field never rejects its row.
    """

    def __init__(
        self,
        columns: tuple[ColumnSpec, ...] = SALES_COLUMNS,
        date_formats: list[str] | None = None,
    ):
        """
        Initialize coercer.

        Args:
            columns: Column table (name and target type per column)
            date_formats: strptime formats accepted for date columns (default:
                ISO, year-first with slashes, US month-first)
        """
        self.columns = columns
        parsers = dict(DEFAULT_PARSERS)
        parsers["date"] = partial(parsers["date"], formats=tuple(date_formats or DEFAULT_DATE_FORMATS))
        self._parsers: dict[str, Callable[[str], Any]] = {
            c.name: parsers[c.type] for c in columns if not c.is_text
        }

    def coerce_field(self, column: ColumnSpec, value: str | None) -> Any:
        """
        Coerce a single field.

        Raises:
            CoercionFailure: If non-blank text cannot be parsed
        """
        if column.is_text:
            return value
        if is_empty(value):
            return None
        try:
            return self._parsers[column.name](value)
        except CoercionFailure as e:
            raise CoercionFailure(column.name, value, column.type) from e

    def coerce(self, raw: RawRecord) -> SalesRecord:
        """Coerce one row, absorbing parse failures into None."""
        return self._coerce(raw, Counter(), Counter())

    def coerce_batch(self, raws: Iterable[RawRecord]) -> CoercionBatch:
        """
        Coerce a batch of rows.

        Returns:
            CoercionBatch with the records and the per-column counts of
            empty and unparseable values that were stored as None
        """
        empty_values: Counter = Counter()
        unparseable_values: Counter = Counter()
        records = [self._coerce(raw, empty_values, unparseable_values) for raw in raws]
        return CoercionBatch(records, empty_values, unparseable_values)

    def _coerce(self, raw: RawRecord, empty_values: Counter, unparseable_values: Counter) -> SalesRecord:
        values: dict[str, Any] = {}
        for column in self.columns:
            value = getattr(raw, column.name)
            if not column.is_text and is_empty(value):
                empty_values[column.name] += 1
                values[column.name] = None
                continue
            try:
                values[column.name] = self.coerce_field(column, value)
            except CoercionFailure as e:
                logger.debug(
                    f"Stored unparseable value as NULL: {e}",
                    extra={"column": column.name, "transaction_id": raw.transaction_id},
                )
                unparseable_values[column.name] += 1
                values[column.name] = None
        return SalesRecord(**values)
