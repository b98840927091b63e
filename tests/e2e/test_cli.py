"""
End-to-end tests for the retail-import command line.

Each test drives main() the way the console script does, using a SQLite
store under tmp_path.
"""

import pytest

from retail_import.cli.import_cli import build_parser, main
from retail_import.core.schema import COLUMN_NAMES
from retail_import.warehouse import SQLiteConnectionPool

ROW = ("T1", "2024-01-05", "14:30:00", "", "M", "", "Electronics", "2", "", "", "199.98")


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "cli.db"


@pytest.fixture
def cli(db_path, clean_env):
    """Run the CLI against the temporary SQLite store."""
    def _run(*args):
        return main([
            "--backend", "sqlite",
            "--sqlite-path", str(db_path),
            "--log-format", "text",
            "--log-level", "WARNING",
            *args,
        ])

    return _run


def count_rows(db_path, table):
    pool = SQLiteConnectionPool(db_path)
    pool.open()
    return pool.execute_query(f"SELECT COUNT(*) AS n FROM {table}")[0]["n"]


@pytest.mark.e2e
class TestRunCommand:
    """retail-import run"""

    def test_imports_sample_file(self, cli, db_path, sample_csv):
        assert cli("run", "--input", str(sample_csv)) == 0

        assert count_rows(db_path, "retail_sales") == 6
        assert count_rows(db_path, "retail_sales_staging") == 0

    def test_keep_staging(self, cli, db_path, sample_csv):
        assert cli("run", "--input", str(sample_csv), "--keep-staging") == 0

        assert count_rows(db_path, "retail_sales_staging") == 6

    def test_running_twice_gives_same_table(self, cli, db_path, sample_csv):
        assert cli("run", "--input", str(sample_csv)) == 0
        assert cli("run", "--input", str(sample_csv)) == 0

        assert count_rows(db_path, "retail_sales") == 6

    def test_missing_column_fails(self, cli, db_path, write_csv):
        header = [n for n in COLUMN_NAMES if n != "total_sale"]
        path = write_csv([ROW[:-1]], header=header)

        assert cli("run", "--input", str(path)) == 1

    def test_missing_file_fails(self, cli, tmp_path):
        assert cli("run", "--input", str(tmp_path / "nope.csv")) == 1

    def test_duplicate_ids_fail_and_keep_staging(self, cli, db_path, write_csv):
        assert cli("run", "--input", str(write_csv([ROW, ROW]))) == 1

        assert count_rows(db_path, "retail_sales") == 0
        assert count_rows(db_path, "retail_sales_staging") == 2

    def test_no_create_tables_on_fresh_store(self, cli, sample_csv):
        assert cli("run", "--input", str(sample_csv), "--no-create-tables") == 1

    def test_metrics_file_written(self, cli, sample_csv, tmp_path):
        metrics_file = tmp_path / "retail_import.prom"

        assert cli("run", "--input", str(sample_csv), "--metrics-file", str(metrics_file)) == 0

        text = metrics_file.read_text()
        assert "retail_import_runs_total" in text
        assert 'retail_import_values_nulled_total{column="sale_date",reason="unparseable"}' in text

    def test_custom_config(self, cli, db_path, sample_csv, tmp_path):
        config = tmp_path / "import.yaml"
        config.write_text("tables:\n  staging: stg\n  target: sales_copy\n")

        assert cli("--config", str(config), "run", "--input", str(sample_csv)) == 0

        assert count_rows(db_path, "sales_copy") == 6

    def test_invalid_config_fails(self, cli, sample_csv, tmp_path):
        config = tmp_path / "import.yaml"
        config.write_text("tables:\n  target: 'sales; drop'\n")

        assert cli("--config", str(config), "run", "--input", str(sample_csv)) == 1


@pytest.mark.e2e
class TestAdminCommands:
    """init-db, reclaim and status"""

    def test_init_db_creates_tables(self, cli, db_path):
        assert cli("init-db") == 0

        assert count_rows(db_path, "retail_sales") == 0
        assert count_rows(db_path, "retail_sales_staging") == 0

    def test_reclaim_clears_staging(self, cli, db_path, sample_csv):
        cli("run", "--input", str(sample_csv), "--keep-staging")

        assert cli("reclaim") == 0
        assert cli("reclaim") == 0

        assert count_rows(db_path, "retail_sales_staging") == 0
        assert count_rows(db_path, "retail_sales") == 6

    def test_status_prints_counts(self, cli, sample_csv, capsys):
        cli("run", "--input", str(sample_csv), "--keep-staging")
        capsys.readouterr()

        assert cli("status") == 0

        out = capsys.readouterr().out
        assert "retail_sales_staging: 6 row(s)" in out
        assert "retail_sales: 6 row(s)" in out

    def test_status_before_init_fails(self, cli):
        assert cli("status") == 1

    def test_reclaim_before_init_fails(self, cli):
        assert cli("reclaim") == 1


@pytest.mark.e2e
class TestGlobalOptions:
    """Options shared by every command"""

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out

    def test_run_requires_input(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["run"])

    def test_env_file_selects_backend(self, clean_env, tmp_path, sample_csv):
        db_path = tmp_path / "from_env.db"
        env_file = tmp_path / "import.env"
        env_file.write_text(f"DB_BACKEND=sqlite\nSQLITE_PATH={db_path}\nLOG_LEVEL=WARNING\n")

        assert main(["--env-file", str(env_file), "run", "--input", str(sample_csv)]) == 0

        assert count_rows(db_path, "retail_sales") == 6

    def test_env_file_overrides_existing_variables(self, clean_env, tmp_path, sample_csv):
        clean_env["DB_BACKEND"] = "postgres"
        clean_env["LOG_LEVEL"] = "DEBUG"
        db_path = tmp_path / "override.db"
        env_file = tmp_path / "import.env"
        env_file.write_text(f"DB_BACKEND=sqlite\nSQLITE_PATH={db_path}\nLOG_LEVEL=WARNING\n")

        assert main(["--env-file", str(env_file), "run", "--input", str(sample_csv)]) == 0

        assert count_rows(db_path, "retail_sales") == 6
        assert clean_env["LOG_LEVEL"] == "WARNING"

    def test_missing_env_file_fails(self, clean_env, tmp_path, sample_csv, capsys):
        missing = tmp_path / "missing.env"

        exit_code = main([
            "--env-file", str(missing), "--log-format", "text",
            "run", "--input", str(sample_csv),
        ])

        assert exit_code == 1
        assert "Environment file not found" in capsys.readouterr().out

    def test_postgres_without_password_fails(self, clean_env, sample_csv):
        assert main(["--log-level", "WARNING", "run", "--input", str(sample_csv)]) == 1
