"""
Store access: connections, schema, staging table and target upserts.
"""

from .connection import BaseConnectionPool, DatabaseConnectionPool, SQLiteConnectionPool, create_pool
from .schema_mgmt import SchemaManager
from .staging import StagingArea
from .upsert import SalesWriter

__all__ = [
    "BaseConnectionPool",
    "DatabaseConnectionPool",
    "SQLiteConnectionPool",
    "create_pool",
    "SchemaManager",
    "StagingArea",
    "SalesWriter",
]
