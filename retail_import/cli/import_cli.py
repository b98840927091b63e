"""
Command-line interface for retail sales imports.

Usage:
    python -m retail_import.cli.import_cli run --input <file_path> [options]
    python -m retail_import.cli.import_cli init-db [options]
    python -m retail_import.cli.import_cli reclaim [options]
    python -m retail_import.cli.import_cli status [options]
"""

import argparse
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from retail_import.batch.pipeline import ImportPipeline
from retail_import.core.schema import load_config
from retail_import.exceptions import ConfigError, ImportPipelineError, ResourceError
from retail_import.observability import metrics
from retail_import.observability.logger import get_logger, setup_logger, ROOT_LOGGER_NAME
from retail_import.warehouse import BaseConnectionPool, create_pool

logger = get_logger(__name__)


def load_env_file(path: str) -> None:
    """
    Load variables from a .env file, overriding values already set.

    Raises:
        ConfigError: If the file does not exist
    """
    env_path = Path(path)
    if not env_path.is_file():
        raise ConfigError(f"Environment file not found: {path}")
    load_dotenv(env_path, override=True)


def build_pool(args) -> BaseConnectionPool:
    """
    Create and open the store selected on the command line.

    Raises:
        ResourceError: If the store cannot be reached
    """
    if args.backend == "sqlite":
        pool = create_pool("sqlite", db_path=args.sqlite_path)
    else:
        try:
            pool = create_pool(
                "postgres",
                host=args.db_host,
                port=args.db_port,
                database=args.db_name,
                user=args.db_user,
                password=args.db_password,
            )
        except ValueError as e:
            raise ResourceError(str(e)) from e

    try:
        pool.open()
    except pool.database_errors as e:
        raise ResourceError(f"Cannot connect to {args.backend} store: {e}") from e
    return pool


def run_command(args, pool: BaseConnectionPool, config) -> None:
    """
    Execute the import.

    Args:
        args: Command-line arguments
        pool: Open store
        config: Import configuration
    """
    logger.info(f"Importing {args.input}")
    pipeline = ImportPipeline(pool, config)
    try:
        result = pipeline.run(
            args.input,
            reclaim_staging=not args.keep_staging,
            create_tables=not args.no_create_tables,
        )
    finally:
        if args.metrics_file:
            metrics.write_metrics_file(args.metrics_file)

    logger.info("=" * 60)
    logger.info("IMPORT COMPLETE")
    logger.info("=" * 60)
    logger.info(f"Rows staged: {result.rows_staged}")
    logger.info(f"Records loaded: {result.records_loaded}")
    logger.info(f"Values stored as NULL: {result.nulled_values}")
    for column, count in sorted(result.unparseable_values.items()):
        logger.info(f"  unparseable {column}: {count}")
    logger.info(f"Staging state: {result.final_state.value}")
    logger.info("=" * 60)


def init_db_command(args, pool: BaseConnectionPool, config) -> None:
    ImportPipeline(pool, config).schema_manager.ensure_tables()


def reclaim_command(args, pool: BaseConnectionPool, config) -> None:
    ImportPipeline(pool, config).reclaim()


def status_command(args, pool: BaseConnectionPool, config) -> None:
    """Print row counts of the staging and target tables."""
    pipeline = ImportPipeline(pool, config)
    try:
        staged = pipeline.staging.count()
        loaded = pipeline.writer.count()
    except pool.database_errors as e:
        raise ResourceError(f"Cannot query import tables (run init-db first?): {e}") from e

    print(f"{config.tables.staging}: {staged} row(s)")
    print(f"{config.tables.target}: {loaded} row(s)")


COMMANDS = {
    "run": run_command,
    "init-db": init_db_command,
    "reclaim": reclaim_command,
    "status": status_command,
}


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        description="Retail sales CSV import through an all-text staging table",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Import a CSV into PostgreSQL (password from DB_PASSWORD)
  retail-import run --input data/retail_sales.csv

  # Import into a local SQLite file and keep the staging rows
  retail-import --backend sqlite --sqlite-path sales.db run \\
      --input data/retail_sales.csv --keep-staging

  # Show staging and target row counts
  retail-import status
        """
    )

    parser.add_argument(
        "--env-file",
        help="Load environment variables from this .env file"
    )
    parser.add_argument(
        "--config",
        help="Path to import configuration YAML file"
    )
    parser.add_argument(
        "--backend",
        choices=["postgres", "sqlite"],
        help="Store backend (default: env DB_BACKEND or postgres)"
    )
    parser.add_argument(
        "--sqlite-path",
        help="SQLite database file (default: env SQLITE_PATH or retail_sales.db)"
    )

    # Database connection arguments, unset values fall back to DB_* env vars
    parser.add_argument("--db-host", help="Database host (default: env DB_HOST or localhost)")
    parser.add_argument("--db-port", type=int, help="Database port (default: env DB_PORT or 5432)")
    parser.add_argument("--db-name", help="Database name (default: env DB_NAME or retail)")
    parser.add_argument("--db-user", help="Database user (default: env DB_USER or retail_import)")
    parser.add_argument("--db-password", help="Database password (default: env DB_PASSWORD)")

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (default: env LOG_LEVEL or INFO)"
    )
    parser.add_argument(
        "--log-format",
        choices=["json", "text"],
        help="Log format (default: env LOG_FORMAT or json)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", help="Import a CSV file")
    run_parser.add_argument(
        "--input",
        required=True,
        help="Path to the sales CSV file"
    )
    run_parser.add_argument(
        "--keep-staging",
        action="store_true",
        help="Leave the staged rows in place after a successful load"
    )
    run_parser.add_argument(
        "--no-create-tables",
        action="store_true",
        help="Fail instead of creating missing tables"
    )
    run_parser.add_argument(
        "--metrics-file",
        help="Write Prometheus metrics to this textfile after the run"
    )

    subparsers.add_parser("init-db", help="Create the staging and target tables")
    subparsers.add_parser("reclaim", help="Delete all rows from the staging table")
    subparsers.add_parser("status", help="Show staging and target row counts")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point. Returns the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        if args.env_file:
            load_env_file(args.env_file)
    except ConfigError as e:
        setup_logger(ROOT_LOGGER_NAME, level=args.log_level, format_type=args.log_format)
        logger.error(f"{args.command} failed: {e}")
        return 1
    args.backend = args.backend or os.getenv("DB_BACKEND", "postgres")

    setup_logger(ROOT_LOGGER_NAME, level=args.log_level, format_type=args.log_format)

    try:
        config = load_config(args.config)
        pool = build_pool(args)
    except ImportPipelineError as e:
        logger.error(f"{args.command} failed: {e}")
        return 1

    try:
        COMMANDS[args.command](args, pool, config)
    except ImportPipelineError as e:
        logger.error(f"{args.command} failed: {e}", extra={"error_type": type(e).__name__})
        return 1
    finally:
        pool.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
