"""
SQL dialect differences between the supported stores.
"""

from dataclasses import dataclass, field
from datetime import date, time
from typing import Any


@dataclass(frozen=True)
class Dialect:
    """
    Per-backend SQL details.

    Attributes:
        name: Backend name
        placeholder: Query parameter marker
        column_types: Column type -> SQL type of the target table
        text_type: SQL type of staging columns
        truncate_template: Statement that empties a table
        iso_temporal: Whether dates and times are stored as ISO text
    """

    name: str
    placeholder: str
    column_types: dict[str, str] = field(default_factory=dict)
    text_type: str = "TEXT"
    truncate_template: str = "TRUNCATE TABLE {table}"
    iso_temporal: bool = False

    def adapt(self, value: Any) -> Any:
        """Convert a Python value into what the driver should bind."""
        if self.iso_temporal and isinstance(value, (date, time)):
            return value.isoformat()
        return value

    def truncate(self, table: str) -> str:
        return self.truncate_template.format(table=table)

    def placeholders(self, count: int) -> str:
        return ", ".join([self.placeholder] * count)


POSTGRES = Dialect(
    name="postgres",
    placeholder="%s",
    column_types={
        "text": "TEXT",
        "date": "DATE",
        "time": "TIME(6)",
        "integer": "INTEGER",
        "float": "DOUBLE PRECISION",
    },
)

SQLITE = Dialect(
    name="sqlite",
    placeholder="?",
    column_types={
        "text": "TEXT",
        "date": "TEXT",
        "time": "TEXT",
        "integer": "INTEGER",
        "float": "REAL",
    },
    truncate_template="DELETE FROM {table}",
    iso_temporal=True,
)
