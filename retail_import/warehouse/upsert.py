"""
Idempotent upsert of sales records into the target table.

Implements INSERT ... ON CONFLICT DO UPDATE so that importing the same CSV
twice leaves the target table unchanged.
"""

from collections import Counter

from retail_import.core.models import SalesRecord
from retail_import.core.schema import SALES_COLUMNS, ColumnSpec
from retail_import.exceptions import LoadFailure
from retail_import.observability.logger import get_logger

from .connection import BaseConnectionPool

logger = get_logger(__name__)


class SalesWriter:
    """
    Writes coerced sales records to the target table in one transaction.
    """

    def __init__(
        self,
        pool: BaseConnectionPool,
        table: str = "retail_sales",
        columns: tuple[ColumnSpec, ...] = SALES_COLUMNS,
    ):
        """
        Initialize sales writer.

        Args:
            pool: Store connection pool
            table: Target table name
            columns: Column table
        """
        self.pool = pool
        self.table = table
        self.columns = columns
        self.key = next(c.name for c in columns if c.required)

    def upsert_query(self) -> str:
        names = [c.name for c in self.columns]
        updates = ",\n                ".join(
            f"{name} = EXCLUDED.{name}" for name in names if name != self.key
        )
        return f"""
            INSERT INTO {self.table} ({", ".join(names)})
            VALUES ({self.pool.dialect.placeholders(len(names))})
            ON CONFLICT ({self.key}) DO UPDATE SET
                {updates}
        """

    def check_batch(self, records: list[SalesRecord]) -> None:
        """
        Reject batches the target table must not accept.

        Raises:
            LoadFailure: If a record has no transaction_id or two records share one
        """
        missing = sum(1 for r in records if not (r.transaction_id or "").strip())
        if missing:
            raise LoadFailure(f"{missing} record(s) without {self.key}; batch rejected")

        counts = Counter(r.transaction_id for r in records)
        duplicates = sorted(tid for tid, n in counts.items() if n > 1)
        if duplicates:
            raise LoadFailure(
                f"Duplicate {self.key} values in batch: {', '.join(duplicates[:10])}; batch rejected"
            )

    def upsert_batch(self, records: list[SalesRecord]) -> int:
        """
        Upsert a batch of sales records.

        Either every record becomes visible or none does. None values are
        written as SQL NULL.

        Args:
            records: Coerced sales records

        Returns:
            Number of records upserted

        Raises:
            LoadFailure: If the batch is invalid or the store rejects it
        """
        if not records:
            return 0

        self.check_batch(records)

        dialect = self.pool.dialect
        data_tuples = [
            tuple(dialect.adapt(getattr(r, c.name)) for c in self.columns)
            for r in records
        ]

        try:
            with self.pool.get_connection() as conn:
                cur = conn.cursor()
                cur.executemany(self.upsert_query(), data_tuples)
        except self.pool.database_errors as e:
            raise LoadFailure(f"Target table {self.table} rejected the batch: {e}") from e

        logger.info(
            f"Upserted {len(records)} sales records",
            extra={"table": self.table, "row_count": len(records)},
        )
        return len(records)

    def fetch_all(self) -> list[SalesRecord]:
        """Return every target row as a SalesRecord, ordered by transaction_id."""
        names = ", ".join(c.name for c in self.columns)
        rows = self.pool.execute_query(f"SELECT {names} FROM {self.table} ORDER BY {self.key}")
        return [SalesRecord.model_validate(row) for row in rows]

    def count(self) -> int:
        rows = self.pool.execute_query(f"SELECT COUNT(*) AS row_count FROM {self.table}")
        return rows[0]["row_count"]
