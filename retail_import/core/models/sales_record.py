"""
SalesRecord model representing a typed row of the target sales table.
"""

from datetime import date, time

from pydantic import BaseModel


class SalesRecord(BaseModel):
    """
    Typed sales record stored in the target table.

    None is the only representation of an unknown value (never 0 or "").
    transaction_id is required by the target table; SalesWriter rejects a
    batch holding a record without one, so it is never absent once stored.

    Attributes:
        transaction_id: Business key (primary key of the target table)
        sale_date: Calendar date of the sale
        sale_time: Time of day of the sale, microsecond precision
        customer_id: Customer number
        gender: Free-form short text
        age: Customer age in years
        category: Product category
        quantity: Units sold
        price_per_unit: Unit price
        cost_of_goods_sold: Cost of the goods sold
        total_sale: Sale total
    """

    transaction_id: str | None = None
    sale_date: date | None = None
    sale_time: time | None = None
    customer_id: int | None = None
    gender: str | None = None
    age: int | None = None
    category: str | None = None
    quantity: int | None = None
    price_per_unit: float | None = None
    cost_of_goods_sold: float | None = None
    total_sale: float | None = None

    class Config:
        json_schema_extra = {
            "example": {
                "transaction_id": "T1",
                "sale_date": "2024-01-05",
                "sale_time": "14:30:00",
                "customer_id": None,
                "gender": "M",
                "age": None,
                "category": "Electronics",
                "quantity": 2,
                "price_per_unit": None,
                "cost_of_goods_sold": None,
                "total_sale": 199.98
            }
        }
