"""
Retail sales CSV import through an all-text staging table.
"""

__version__ = "0.1.0"
