"""
Staging table operations.

The staging table is the owned, all-text holding area of one import run.
"""

from retail_import.core.models import RawRecord
from retail_import.core.schema import SALES_COLUMNS, ColumnSpec
from retail_import.exceptions import ResourceError
from retail_import.observability.logger import get_logger

from .connection import BaseConnectionPool

logger = get_logger(__name__)


class StagingArea:
    """
    Loads, reads and clears the staging table.
    """

    def __init__(
        self,
        pool: BaseConnectionPool,
        table: str = "retail_sales_staging",
        columns: tuple[ColumnSpec, ...] = SALES_COLUMNS,
    ):
        """
        Initialize staging area.

        Args:
            pool: Store connection pool
            table: Staging table name
            columns: Column table
        """
        self.pool = pool
        self.table = table
        self.columns = columns
        self._column_list = ", ".join(c.name for c in columns)

    def replace(self, records: list[RawRecord]) -> int:
        """
        Atomically replace the staging contents with the given rows.

        The truncate and the inserts run in one transaction, so on failure the
        previous staging contents are left untouched.

        Args:
            records: Rows read from the CSV file

        Returns:
            Number of rows staged

        Raises:
            ResourceError: If the store rejects the load
        """
        query = (
            f"INSERT INTO {self.table} ({self._column_list}) "
            f"VALUES ({self.pool.dialect.placeholders(len(self.columns))})"
        )
        rows = [tuple(getattr(r, c.name) for c in self.columns) for r in records]

        try:
            with self.pool.get_connection() as conn:
                cur = conn.cursor()
                cur.execute(self.pool.dialect.truncate(self.table))
                if rows:
                    cur.executemany(query, rows)
        except self.pool.database_errors as e:
            raise ResourceError(f"Cannot load staging table {self.table}: {e}") from e

        logger.info(f"Staged {len(rows)} rows", extra={"table": self.table, "row_count": len(rows)})
        return len(rows)

    def fetch(self) -> list[RawRecord]:
        """
        Read all staged rows.

        Raises:
            ResourceError: If the store cannot be queried
        """
        try:
            rows = self.pool.execute_query(f"SELECT {self._column_list} FROM {self.table}")
        except self.pool.database_errors as e:
            raise ResourceError(f"Cannot read staging table {self.table}: {e}") from e
        return [RawRecord(**row) for row in rows]

    def count(self) -> int:
        rows = self.pool.execute_query(f"SELECT COUNT(*) AS row_count FROM {self.table}")
        return rows[0]["row_count"]

    def truncate(self) -> None:
        """
        Remove every staged row. Safe to call when the table is already empty.

        Raises:
            ResourceError: If the store rejects the statement
        """
        try:
            self.pool.execute_command(self.pool.dialect.truncate(self.table))
        except self.pool.database_errors as e:
            raise ResourceError(f"Cannot reclaim staging table {self.table}: {e}") from e
        logger.info("Staging table reclaimed", extra={"table": self.table})
