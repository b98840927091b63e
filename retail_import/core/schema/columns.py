"""
Declarative column table for retail sales imports.

The order of SALES_COLUMNS is the column order of both the staging table and
the target table.
"""

from typing import Literal

from pydantic import BaseModel, Field

ColumnType = Literal["text", "date", "time", "integer", "float"]


class ColumnSpec(BaseModel):
    """
    One column of the sales table.

    Attributes:
        name: Canonical column name (staging and target)
        type: Target semantic type
        required: Whether the target column is NOT NULL
        aliases: Alternative CSV header names accepted for this column
    """

    name: str = Field(..., min_length=1)
    type: ColumnType
    required: bool = False
    aliases: tuple[str, ...] = ()

    @property
    def is_text(self) -> bool:
        return self.type == "text"

    def header_names(self) -> set[str]:
        """Normalized header names that resolve to this column."""
        return {normalize_header(n) for n in (self.name, *self.aliases)}

    class Config:
        frozen = True


SALES_COLUMNS: tuple[ColumnSpec, ...] = (
    ColumnSpec(name="transaction_id", type="text", required=True, aliases=("transactions_id",)),
    ColumnSpec(name="sale_date", type="date", aliases=("sales_date",)),
    ColumnSpec(name="sale_time", type="time", aliases=("sales_time",)),
    ColumnSpec(name="customer_id", type="integer"),
    ColumnSpec(name="gender", type="text"),
    ColumnSpec(name="age", type="integer"),
    ColumnSpec(name="category", type="text"),
    ColumnSpec(name="quantity", type="integer"),
    ColumnSpec(name="price_per_unit", type="float"),
    ColumnSpec(name="cost_of_goods_sold", type="float", aliases=("cogs",)),
    ColumnSpec(name="total_sale", type="float"),
)

COLUMN_NAMES: tuple[str, ...] = tuple(c.name for c in SALES_COLUMNS)


def normalize_header(name: str) -> str:
    return name.strip().lower()


def with_extra_aliases(
    columns: tuple[ColumnSpec, ...],
    extra_aliases: dict[str, list[str]],
) -> tuple[ColumnSpec, ...]:
    """
    Return a copy of the column table with additional header aliases.

    Raises:
        ValueError: If an alias is configured for an unknown column
    """
    known = {c.name for c in columns}
    unknown = sorted(set(extra_aliases) - known)
    if unknown:
        raise ValueError(f"Aliases configured for unknown columns: {', '.join(unknown)}")

    return tuple(
        c.model_copy(update={"aliases": c.aliases + tuple(extra_aliases.get(c.name, ()))})
        for c in columns
    )
