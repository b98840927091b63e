"""
Batch import module.
"""

from .pipeline import ImportPipeline
from .readers import CSVReader

__all__ = [
    "ImportPipeline",
    "CSVReader",
]
