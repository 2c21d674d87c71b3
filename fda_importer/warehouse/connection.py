"""
Pooled PostgreSQL connections for the device store.

One DatabaseConnectionPool is built per process and handed to the writer,
query and schema components. Rows come back as dictionaries.
"""
import os
from contextlib import contextmanager

from psycopg.conninfo import make_conninfo
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool


class DatabaseConnectionPool:
    """
    psycopg_pool wrapper configured from arguments or DB_* variables.

    Args:
        host: Database host (DB_HOST, default localhost)
        port: Database port (DB_PORT, default 5432)
        database: Database name (DB_NAME, default fda_devices)
        user: Database user (DB_USER, default importer)
        password: Database password (DB_PASSWORD, required)
        min_size: Connections kept open
        max_size: Upper bound on open connections
        timeout: Seconds to wait for a connection

    Raises:
        ValueError: If no password is configured
    """

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        database: str | None = None,
        user: str | None = None,
        password: str | None = None,
        min_size: int = 1,
        max_size: int = 4,
        timeout: float = 30.0,
    ) -> None:
        self.host = host or os.getenv("DB_HOST", "localhost")
        self.port = port or int(os.getenv("DB_PORT", "5432"))
        self.database = database or os.getenv("DB_NAME", "fda_devices")
        self.user = user or os.getenv("DB_USER", "importer")
        password = password or os.getenv("DB_PASSWORD")
        if not password:
            raise ValueError("No database password: set DB_PASSWORD or pass password=")

        self.min_size = min_size
        self.max_size = max_size
        self.timeout = timeout
        self.conninfo = make_conninfo(
            host=self.host,
            port=self.port,
            dbname=self.database,
            user=self.user,
            password=password,
            connect_timeout=int(self.timeout),
        )
        self._pool: ConnectionPool | None = None

    @property
    def is_open(self) -> bool:
        return self._pool is not None

    def open(self) -> None:
        """
        Open the pool and block until the first connection is ready.

        Raises:
            psycopg_pool.PoolTimeout: If the database is unreachable within timeout
        """
        if self._pool is not None:
            return
        pool = ConnectionPool(
            conninfo=self.conninfo,
            min_size=self.min_size,
            max_size=self.max_size,
            timeout=self.timeout,
            kwargs={"row_factory": dict_row},
            open=False,
        )
        pool.open(wait=True, timeout=self.timeout)
        self._pool = pool

    def close(self) -> None:
        if self._pool is not None:
            self._pool.close()
            self._pool = None

    @contextmanager
    def get_connection(self):
        """Borrow a connection; RuntimeError if the pool is not open"""
        if self._pool is None:
            raise RuntimeError("Connection pool is not open. Call open() first.")
        with self._pool.connection() as conn:
            yield conn

    def execute_query(self, query: str, params: tuple | dict | None = None) -> list[dict]:
        with self.get_connection() as conn:
            return conn.execute(query, params).fetchall()

    def execute_command(self, command: str, params: tuple | dict | None = None) -> int:
        """Run a statement in its own transaction and return the affected row count"""
        with self.get_connection() as conn:
            rowcount = conn.execute(command, params).rowcount
            conn.commit()
        return rowcount

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
