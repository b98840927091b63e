"""
Column table and import configuration.
"""

from .columns import COLUMN_NAMES, SALES_COLUMNS, ColumnSpec, normalize_header
from .import_config import ImportConfig, ImportConfigLoader, load_config

__all__ = [
    "COLUMN_NAMES",
    "SALES_COLUMNS",
    "ColumnSpec",
    "normalize_header",
    "ImportConfig",
    "ImportConfigLoader",
    "load_config",
]
