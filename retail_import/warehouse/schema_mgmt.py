"""
Schema management for the staging and target tables.

DDL is generated from the column table through the store's dialect.
"""

from retail_import.core.schema import SALES_COLUMNS, ColumnSpec
from retail_import.core.schema.import_config import TableNames
from retail_import.exceptions import ResourceError
from retail_import.observability.logger import get_logger

from .connection import BaseConnectionPool

logger = get_logger(__name__)


class SchemaManager:
    """
    Creates and drops the staging and target tables.

    Staging: every column nullable text.
    Target: typed columns, transaction_id NOT NULL PRIMARY KEY.
    """

    def __init__(
        self,
        pool: BaseConnectionPool,
        tables: TableNames | None = None,
        columns: tuple[ColumnSpec, ...] = SALES_COLUMNS,
    ):
        """
        Initialize schema manager.

        Args:
            pool: Store connection pool
            tables: Staging and target table names
            columns: Column table
        """
        self.pool = pool
        self.tables = tables or TableNames()
        self.columns = columns

    def staging_ddl(self) -> str:
        dialect = self.pool.dialect
        column_defs = ",\n    ".join(f"{c.name} {dialect.text_type} NULL" for c in self.columns)
        return f"CREATE TABLE IF NOT EXISTS {self.tables.staging} (\n    {column_defs}\n)"

    def target_ddl(self) -> str:
        dialect = self.pool.dialect
        column_defs = []
        for c in self.columns:
            nullability = "NOT NULL" if c.required else "NULL"
            column_defs.append(f"{c.name} {dialect.column_types[c.type]} {nullability}")
        key = next(c.name for c in self.columns if c.required)
        column_defs.append(f"PRIMARY KEY ({key})")
        body = ",\n    ".join(column_defs)
        return f"CREATE TABLE IF NOT EXISTS {self.tables.target} (\n    {body}\n)"

    def ensure_tables(self) -> None:
        """
        Create the staging and target tables if they do not exist.

        Raises:
            ResourceError: If the store rejects the DDL
        """
        try:
            with self.pool.get_connection() as conn:
                cur = conn.cursor()
                cur.execute(self.staging_ddl())
                cur.execute(self.target_ddl())
        except self.pool.database_errors as e:
            raise ResourceError(f"Cannot create import tables: {e}") from e

        logger.info(
            "Import tables ready",
            extra={"staging_table": self.tables.staging, "target_table": self.tables.target},
        )

    def drop_tables(self) -> None:
        """Drop both tables if they exist."""
        with self.pool.get_connection() as conn:
            cur = conn.cursor()
            cur.execute(f"DROP TABLE IF EXISTS {self.tables.staging}")
            cur.execute(f"DROP TABLE IF EXISTS {self.tables.target}")
