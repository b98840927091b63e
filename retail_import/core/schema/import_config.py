"""
Import configuration management.

Loads table names, CSV options, accepted date formats and extra header
aliases from a YAML file.
"""

import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from retail_import.exceptions import ConfigError

from .columns import SALES_COLUMNS, ColumnSpec, with_extra_aliases

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

DEFAULT_DATE_FORMATS = ["%Y-%m-%d", "%Y/%m/%d", "%m/%d/%Y"]


class TableNames(BaseModel):
    staging: str = "retail_sales_staging"
    target: str = "retail_sales"

    @field_validator("staging", "target")
    @classmethod
    def check_identifier(cls, v: str) -> str:
        """Table names are interpolated into SQL, so only plain identifiers are allowed."""
        if not _IDENTIFIER.match(v):
            raise ValueError(f"'{v}' is not a valid SQL identifier")
        return v


class CSVOptions(BaseModel):
    delimiter: str = Field(",", min_length=1, max_length=1)
    encoding: str = "utf-8-sig"


class ImportConfig(BaseModel):
    """
    Runtime configuration of an import.

    Attributes:
        tables: Staging and target table names
        csv: CSV dialect options
        date_formats: strptime formats tried in order when parsing dates
        aliases: Extra CSV header names per column
    """

    tables: TableNames = Field(default_factory=TableNames)
    csv: CSVOptions = Field(default_factory=CSVOptions)
    date_formats: list[str] = Field(default_factory=lambda: list(DEFAULT_DATE_FORMATS), min_length=1)
    aliases: dict[str, list[str]] = Field(default_factory=dict)

    @field_validator("aliases")
    @classmethod
    def check_alias_columns(cls, v: dict[str, list[str]]) -> dict[str, list[str]]:
        with_extra_aliases(SALES_COLUMNS, v)
        return v

    @property
    def columns(self) -> tuple[ColumnSpec, ...]:
        return with_extra_aliases(SALES_COLUMNS, self.aliases)

    class Config:
        json_schema_extra = {
            "example": {
                "tables": {"staging": "retail_sales_staging", "target": "retail_sales"},
                "csv": {"delimiter": ",", "encoding": "utf-8-sig"},
                "date_formats": ["%Y-%m-%d", "%d.%m.%Y"],
                "aliases": {"transaction_id": ["txn_id"]},
            }
        }


class ImportConfigLoader:
    """
    Loads ImportConfig from a YAML configuration file.

    Expected YAML format (every section is optional):
    ```yaml
    tables:
      staging: retail_sales_staging
      target: retail_sales

    csv:
      delimiter: ","
      encoding: utf-8-sig

    date_formats:
      - "%Y-%m-%d"
      - "%m/%d/%Y"

    aliases:
      transaction_id: [txn_id]
    ```
    """

    def __init__(self, config_path: str | Path):
        """
        Initialize the config loader.

        Args:
            config_path: Path to the YAML configuration file

        Raises:
            ConfigError: If the file does not exist
        """
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise ConfigError(f"Import configuration file not found: {config_path}")

    def load(self) -> ImportConfig:
        """
        Load and validate the configuration.

        Returns:
            ImportConfig instance

        Raises:
            ConfigError: If YAML is malformed or values are invalid
        """
        try:
            with open(self.config_path) as f:
                raw: Any = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {self.config_path}: {e}") from e

        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ConfigError(f"{self.config_path} must contain a mapping at the top level")

        try:
            return ImportConfig.model_validate(raw)
        except ValidationError as e:
            raise ConfigError(f"Invalid import configuration in {self.config_path}: {e}") from e


def load_config(config_path: str | Path | None = None) -> ImportConfig:
    """Load configuration from a YAML file, or return the defaults when no path is given."""
    if config_path is None:
        return ImportConfig()
    return ImportConfigLoader(config_path).load()
