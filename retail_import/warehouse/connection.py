"""
Store connection management.

PostgreSQL access goes through a psycopg3 connection pool; SQLite access
uses short-lived sqlite3 connections behind the same interface, so the
staging, schema and upsert code is backend-agnostic.
"""
import os
import sqlite3
import time
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path

import psycopg
from psycopg.conninfo import make_conninfo
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool, PoolTimeout

from retail_import.observability.logger import get_logger

from .dialects import POSTGRES, SQLITE, Dialect

logger = get_logger(__name__)


def execute(cursor, statement: str, params: tuple | None = None):
    """Run a statement on a DB-API cursor, omitting empty parameter sets."""
    if params:
        return cursor.execute(statement, params)
    return cursor.execute(statement)


class BaseConnectionPool(ABC):
    """
    Common interface of the store backends.

    get_connection() yields a DB-API connection inside a transaction that is
    committed when the block exits normally and rolled back when it raises.
    Rows come back as dictionaries keyed by column name.
    """

    dialect: Dialect
    database_errors: tuple[type[Exception], ...]

    @property
    def placeholder(self) -> str:
        return self.dialect.placeholder

    @abstractmethod
    def open(self) -> None:
        """Open the store, raising the backend's error if it is unreachable."""

    @abstractmethod
    def close(self) -> None:
        """Release store resources."""

    @abstractmethod
    def get_connection(self):
        """Context manager yielding a transactional connection."""

    def execute_query(self, query: str, params: tuple | None = None) -> list[dict]:
        """Run a SELECT in its own transaction and return every row."""
        with self.get_connection() as conn:
            cur = conn.cursor()
            execute(cur, query, params)
            return [dict(row) for row in cur.fetchall()]

    def execute_command(self, command: str, params: tuple | None = None) -> int:
        """Run a DML or DDL statement in its own transaction; returns the affected row count."""
        with self.get_connection() as conn:
            cur = conn.cursor()
            execute(cur, command, params)
            return cur.rowcount

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class DatabaseConnectionPool(BaseConnectionPool):
    """
    PostgreSQL store backed by a psycopg_pool ConnectionPool.

    Connection settings not passed explicitly are read from DB_HOST, DB_PORT,
    DB_NAME, DB_USER and DB_PASSWORD. There is no default password.
    """

    dialect = POSTGRES
    database_errors = (psycopg.Error, PoolTimeout)

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        database: str | None = None,
        user: str | None = None,
        password: str | None = None,
        min_size: int = 1,
        max_size: int = 2,
        timeout: float = 30.0,
    ) -> None:
        """
        Args:
            host: Server host (env DB_HOST, default localhost)
            port: Server port (env DB_PORT, default 5432)
            database: Database name (env DB_NAME, default retail)
            user: Role name (env DB_USER, default retail_import)
            password: Role password (env DB_PASSWORD, required)
            min_size: Connections kept open by the pool
            max_size: Upper bound on pooled connections
            timeout: Seconds to wait for the server or a free connection

        Raises:
            ValueError: If no password is configured
        """
        self.host = host or os.getenv("DB_HOST", "localhost")
        self.port = port or int(os.getenv("DB_PORT", "5432"))
        self.database = database or os.getenv("DB_NAME", "retail")
        self.user = user or os.getenv("DB_USER", "retail_import")
        password = password or os.getenv("DB_PASSWORD")
        if not password:
            raise ValueError(
                "No database password configured; pass one explicitly or set DB_PASSWORD"
            )

        self.min_size = min_size
        self.max_size = max_size
        self.timeout = timeout
        self.conninfo = make_conninfo(
            host=self.host,
            port=self.port,
            dbname=self.database,
            user=self.user,
            password=password,
            connect_timeout=int(timeout),
        )
        self._pool: ConnectionPool | None = None

    def open(self, max_retries: int = 3, retry_delay: float = 2.0) -> None:
        """
        Open the pool, waiting until min_size connections are established.

        A failed attempt discards its pool; the last failure is re-raised.

        Args:
            max_retries: Connection attempts before giving up
            retry_delay: Seconds to sleep between attempts

        Raises:
            PoolTimeout: If the server cannot be reached after max_retries attempts
        """
        if self._pool is not None:
            return

        attempt = 1
        while True:
            pool = ConnectionPool(
                self.conninfo,
                min_size=self.min_size,
                max_size=self.max_size,
                timeout=self.timeout,
                kwargs={"row_factory": dict_row},
                open=False,
            )
            try:
                pool.open(wait=True, timeout=self.timeout)
            except self.database_errors as e:
                pool.close()
                if attempt >= max_retries:
                    logger.error(f"Giving up on {self.host}:{self.port} after {attempt} attempts")
                    raise
                logger.warning(
                    f"PostgreSQL not reachable (attempt {attempt}/{max_retries}): {e}",
                    extra={"host": self.host, "port": self.port},
                )
                attempt += 1
                time.sleep(retry_delay)
                continue

            self._pool = pool
            logger.debug(f"Connected to {self.database} on {self.host}:{self.port}")
            return

    def close(self) -> None:
        if self._pool is not None:
            self._pool.close()
            self._pool = None

    @contextmanager
    def get_connection(self):
        """
        Borrow a pooled connection for one transaction.

        Raises:
            RuntimeError: If open() has not been called
        """
        if self._pool is None:
            raise RuntimeError("PostgreSQL pool is not open; call open() first")

        # psycopg_pool commits on normal exit and rolls back on exception
        with self._pool.connection() as conn:
            yield conn


class SQLiteConnectionPool(BaseConnectionPool):
    """
    SQLite store with one short-lived connection per transaction.
    """

    dialect = SQLITE
    database_errors = (sqlite3.Error,)

    def __init__(self, db_path: str | Path | None = None):
        """
        Args:
            db_path: Database file (defaults to env var SQLITE_PATH, then retail_sales.db)
        """
        self.db_path = Path(db_path or os.getenv("SQLITE_PATH", "retail_sales.db"))
        self._opened = False

    def _connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def open(self) -> None:
        """
        Check that the database file can be opened.

        Raises:
            sqlite3.Error: If the file cannot be opened or created
        """
        conn = self._connection()
        try:
            conn.execute("SELECT 1")
        finally:
            conn.close()
        self._opened = True

    def close(self) -> None:
        self._opened = False

    @contextmanager
    def get_connection(self):
        if not self._opened:
            raise RuntimeError("SQLite store is not open. Call open() first.")

        conn = self._connection()
        try:
            yield conn
            conn.commit()
        except BaseException:
            conn.rollback()
            raise
        finally:
            conn.close()


def create_pool(backend: str = "postgres", **kwargs) -> BaseConnectionPool:
    """
    Build a connection pool for a backend.

    Args:
        backend: "postgres" or "sqlite"
        **kwargs: Arguments passed to the pool constructor

    Raises:
        ValueError: If the backend is unknown
    """
    if backend == "postgres":
        return DatabaseConnectionPool(**kwargs)
    if backend == "sqlite":
        return SQLiteConnectionPool(**kwargs)
    raise ValueError(f"Unsupported backend: {backend}")
