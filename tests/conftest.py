"""
Pytest configuration and fixtures for retail-import tests

This module provides shared fixtures for unit, integration, and E2E tests.
"""
import csv
import os
from pathlib import Path
from typing import Generator

import pytest

from retail_import.core.schema import COLUMN_NAMES
from retail_import.warehouse import DatabaseConnectionPool, SchemaManager, SQLiteConnectionPool


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that require Docker containers"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests that drive the command-line interface"
    )


# =======================
# DATABASE FIXTURES (Testcontainers)
# =======================

def start_postgres_container():
    """
    Start the PostgreSQL test container, skipping when Docker is not available.

    Returns:
        Started PostgresContainer instance
    """
    from testcontainers.postgres import PostgresContainer

    # the constructor already talks to the Docker daemon
    try:
        container = PostgresContainer(
            image="postgres:16.2-alpine",
            username="test_import",
            password="test_password",
            dbname="test_retail",
        )
        container.start()
    except Exception as e:
        pytest.skip(f"PostgreSQL container unavailable: {e}")
    return container


@pytest.fixture(scope="session")
def postgres_container():
    """
    Start PostgreSQL container for integration tests

    Yields:
        PostgresContainer instance
    """
    container = start_postgres_container()

    yield container

    container.stop()


@pytest.fixture(scope="function")
def pg_pool(postgres_container) -> Generator[DatabaseConnectionPool, None, None]:
    """
    Open pool against the test container with freshly created import tables

    Yields:
        Open DatabaseConnectionPool
    """
    pool = DatabaseConnectionPool(
        host=postgres_container.get_container_host_ip(),
        port=int(postgres_container.get_exposed_port(5432)),
        database="test_retail",
        user="test_import",
        password="test_password",
    )
    pool.open()
    manager = SchemaManager(pool)
    manager.drop_tables()
    manager.ensure_tables()

    yield pool

    manager.drop_tables()
    pool.close()


# =======================
# SQLITE FIXTURES
# =======================

@pytest.fixture(scope="function")
def sqlite_pool(tmp_path) -> Generator[SQLiteConnectionPool, None, None]:
    """
    Open SQLite store in a temporary directory with the import tables created

    Yields:
        Open SQLiteConnectionPool
    """
    pool = SQLiteConnectionPool(tmp_path / "retail_sales.db")
    pool.open()
    SchemaManager(pool).ensure_tables()

    yield pool

    pool.close()


# =======================
# FILE FIXTURES
# =======================

@pytest.fixture(scope="session")
def test_data_dir() -> Path:
    """
    Get path to test data fixtures directory

    Returns:
        Path to tests/fixtures directory
    """
    return Path(__file__).parent / "fixtures"


@pytest.fixture(scope="session")
def sample_csv(test_data_dir) -> Path:
    """Sample CSV using the original header names (transactions_id, cogs)."""
    return test_data_dir / "retail_sales.csv"


@pytest.fixture
def write_csv(tmp_path):
    """
    Factory writing rows to a CSV file under tmp_path

    Usage:
        path = write_csv([("T1", "2024-01-05", ...)])
        path = write_csv(rows, header=["transaction_id", ...], name="other.csv")
    """
    def _write(rows, header=COLUMN_NAMES, name="sales.csv") -> Path:
        path = tmp_path / name
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            if header is not None:
                writer.writerow(header)
            writer.writerows(rows)
        return path

    return _write


# =======================
# CONFIGURATION FIXTURES
# =======================

@pytest.fixture(scope="session")
def test_env_file() -> Path:
    """Path to config/test.env"""
    return Path(__file__).parent.parent / "config" / "test.env"


@pytest.fixture
def clean_env(monkeypatch):
    """
    Remove connection and logging variables for the duration of a test.

    Values set during the test (e.g. by load_dotenv) are undone afterwards.
    """
    for name in (
        "DB_BACKEND", "DB_HOST", "DB_PORT", "DB_NAME", "DB_USER",
        "DB_PASSWORD", "SQLITE_PATH", "LOG_LEVEL", "LOG_FORMAT",
    ):
        # setenv first so monkeypatch records the original state
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return os.environ
