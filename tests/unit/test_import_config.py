"""
Unit tests for import configuration loading.
"""

import pytest

from retail_import.core.schema import ImportConfig, ImportConfigLoader, load_config
from retail_import.exceptions import ConfigError


@pytest.mark.unit
class TestImportConfigLoader:
    """Tests for YAML configuration loading"""

    def test_defaults_without_file(self):
        config = load_config(None)

        assert config.tables.staging == "retail_sales_staging"
        assert config.tables.target == "retail_sales"
        assert config.csv.delimiter == ","
        assert config.date_formats[0] == "%Y-%m-%d"

    def test_shipped_config_matches_defaults(self):
        from pathlib import Path

        path = Path(__file__).parent.parent.parent / "config" / "import.yaml"
        assert load_config(path) == ImportConfig()

    def test_partial_file_keeps_other_defaults(self, tmp_path):
        path = tmp_path / "import.yaml"
        path.write_text("tables:\n  target: sales_2024\n")

        config = load_config(path)

        assert config.tables.target == "sales_2024"
        assert config.tables.staging == "retail_sales_staging"

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "import.yaml"
        path.write_text("")

        assert load_config(path) == ImportConfig()

    def test_extra_aliases_extend_column_table(self, tmp_path):
        path = tmp_path / "import.yaml"
        path.write_text("aliases:\n  transaction_id: [txn_id]\n")

        columns = {c.name: c for c in load_config(path).columns}

        assert "txn_id" in columns["transaction_id"].aliases
        assert "transactions_id" in columns["transaction_id"].aliases

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            ImportConfigLoader(tmp_path / "nope.yaml")

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "import.yaml"
        path.write_text("tables: [unclosed\n")

        with pytest.raises(ConfigError):
            load_config(path)

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "import.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigError):
            load_config(path)

    @pytest.mark.parametrize("name", ["sales; DROP TABLE x", "1sales", "sales-2024", ""])
    def test_table_names_must_be_identifiers(self, tmp_path, name):
        path = tmp_path / "import.yaml"
        path.write_text(f'tables:\n  target: "{name}"\n')

        with pytest.raises(ConfigError):
            load_config(path)

    def test_aliases_for_unknown_column_rejected(self, tmp_path):
        path = tmp_path / "import.yaml"
        path.write_text("aliases:\n  store_id: [store]\n")

        with pytest.raises(ConfigError) as exc_info:
            load_config(path)

        assert "store_id" in str(exc_info.value)

    def test_multi_character_delimiter_rejected(self, tmp_path):
        path = tmp_path / "import.yaml"
        path.write_text('csv:\n  delimiter: ";;"\n')

        with pytest.raises(ConfigError):
            load_config(path)
