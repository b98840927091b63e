"""
Exceptions raised by the retail sales import pipeline.

Only ResourceError, SchemaMismatchError and LoadFailure (plus ConfigError at
start-up) reach callers. CoercionFailure is raised by the field parsers and
absorbed by the coercer, which turns the field into an absent value.
"""

from typing import Any


class ImportPipelineError(Exception):
    """Base class for all import pipeline errors."""


class ConfigError(ImportPipelineError):
    """Raised when the YAML import configuration cannot be loaded or is invalid."""


class ResourceError(ImportPipelineError):
    """
    Raised when the CSV file cannot be read or the store is unreachable.

    Fatal: raised before the staging or target tables are mutated.
    """


class SchemaMismatchError(ImportPipelineError):
    """
    Raised when the CSV header or a row does not match the declared columns.

    Attributes:
        line_number: CSV line the mismatch was found on (None for header-level problems)
    """

    def __init__(self, message: str, line_number: int | None = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class LoadFailure(ImportPipelineError):
    """
    Raised when the target store rejects the batch.

    The whole batch is rolled back and the staging table is left as-is.
    """


class CoercionFailure(ValueError):
    """Raised when a single field cannot be parsed into its target type."""

    def __init__(self, field_name: str | None, value: Any, target_type: str):
        self.field_name = field_name
        self.value = value
        self.target_type = target_type
        super().__init__(f"{field_name or '<value>'}: cannot parse {value!r} as {target_type}")
