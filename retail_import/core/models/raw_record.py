"""
RawRecord model representing one CSV row as held in the staging table (ephemeral).
"""

from pydantic import BaseModel


class RawRecord(BaseModel):
    """
    One CSV row, every field kept as the original text.

    Note: RawRecord only lives between the CSV file and the staging table,
    and between the staging table and the coercer. An empty CSV cell is ""
    and is distinct from None, which only appears for rows whose staging
    column is NULL.

    Attributes:
        line_number: 1-based CSV line the row was read from (not persisted)
    """

    transaction_id: str | None = None
    sale_date: str | None = None
    sale_time: str | None = None
    customer_id: str | None = None
    gender: str | None = None
    age: str | None = None
    category: str | None = None
    quantity: str | None = None
    price_per_unit: str | None = None
    cost_of_goods_sold: str | None = None
    total_sale: str | None = None
    line_number: int | None = None

    class Config:
        json_schema_extra = {
            "example": {
                "transaction_id": "T1",
                "sale_date": "2024-01-05",
                "sale_time": "14:30:00",
                "customer_id": "",
                "gender": "M",
                "age": "",
                "category": "Electronics",
                "quantity": "2",
                "price_per_unit": "",
                "cost_of_goods_sold": "",
                "total_sale": "199.98",
                "line_number": 2
            }
        }
