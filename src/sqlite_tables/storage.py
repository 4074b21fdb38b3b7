"""SQLite connection management.

Every public operation opens a connection, runs its statement(s) and closes
the connection again. The in-memory database keeps a single shared
connection, since its contents die with the connection.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Mapping, Sequence

from sqlite_tables import config
from sqlite_tables.exceptions import StorageError
from sqlite_tables.schema import quote_identifier

logger = logging.getLogger(__name__)

MEMORY = ":memory:"


class Connection:
    """Thin statement API over a ``sqlite3.Connection``.

    Engine errors are logged and re-raised as :class:`StorageError`.
    """

    def __init__(self, conn: sqlite3.Connection, writable: bool) -> None:
        self._conn = conn
        self.writable = writable

    def query(self, sql: str, args: Sequence[Any] = ()) -> list[sqlite3.Row]:
        """Run a SELECT and return all rows."""
        return self._run(sql, args).fetchall()

    def insert(self, table_name: str, values: Mapping[str, Any]) -> int:
        """Insert one row and return its row id."""
        self._check_writable("insert")
        if values:
            columns = ", ".join(quote_identifier(c) for c in values)
            placeholders = ", ".join("?" for _ in values)
            sql = f"INSERT INTO {quote_identifier(table_name)} ({columns}) VALUES ({placeholders})"
        else:
            sql = f"INSERT INTO {quote_identifier(table_name)} DEFAULT VALUES"
        cursor = self._run(sql, list(values.values()))
        return int(cursor.lastrowid)

    def update(
        self,
        table_name: str,
        values: Mapping[str, Any],
        where: str,
        args: Sequence[Any] = (),
    ) -> int:
        """Update matching rows and return the affected row count."""
        self._check_writable("update")
        assignments = ", ".join(f"{quote_identifier(c)} = ?" for c in values)
        sql = f"UPDATE {quote_identifier(table_name)} SET {assignments}"
        if where:
            sql += f" WHERE {where}"
        return self._run(sql, [*values.values(), *args]).rowcount

    def delete(self, table_name: str, where: str, args: Sequence[Any] = ()) -> int:
        """Delete matching rows and return the affected row count."""
        self._check_writable("delete")
        sql = f"DELETE FROM {quote_identifier(table_name)}"
        if where:
            sql += f" WHERE {where}"
        return self._run(sql, args).rowcount

    def execute(self, sql: str, args: Sequence[Any] = ()) -> int:
        """Run any statement and return the affected row count."""
        return self._run(sql, args).rowcount

    def _check_writable(self, operation: str) -> None:
        if not self.writable:
            raise StorageError(f"Cannot {operation} on a read-only connection")

    def _run(self, sql: str, args: Sequence[Any]) -> sqlite3.Cursor:
        logger.debug("SQL: %s; args=%r", sql, list(args))
        try:
            return self._conn.execute(sql, tuple(args))
        except sqlite3.Error as e:
            logger.error(f"Statement failed: {sql}: {e}", exc_info=True)
            raise StorageError(str(e)) from e


class SQLiteManagement:
    """Opens connections to one SQLite database."""

    def __init__(
        self,
        db_path: str | Path | None = None,
        timeout: float | None = None,
        foreign_keys: bool | None = None,
    ) -> None:
        """
        Args:
            db_path: Database file, or ``":memory:"``. Defaults to the
                configured path.
            timeout: Busy timeout in seconds.
            foreign_keys: Whether SQLite enforces foreign-key constraints.
        """
        self.db_path = str(db_path if db_path is not None else config.DEFAULT_DB_PATH)
        self.timeout = timeout if timeout is not None else config.DB_TIMEOUT
        self.foreign_keys = config.FOREIGN_KEYS if foreign_keys is None else foreign_keys
        self._shared: sqlite3.Connection | None = None
        self._lock = threading.RLock()

        if self.db_path != MEMORY:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

    @contextmanager
    def readable(self) -> Iterator[Connection]:
        """Context manager for a read connection."""
        with self._connect(writable=False) as conn:
            yield conn

    @contextmanager
    def writable(self) -> Iterator[Connection]:
        """Context manager for a write connection; commits on success."""
        with self._connect(writable=True) as conn:
            yield conn

    def close(self) -> None:
        """Close the shared in-memory connection, if any."""
        if self._shared is not None:
            self._shared.close()
            self._shared = None

    def _open(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(self.db_path, timeout=self.timeout, check_same_thread=False)
        except sqlite3.Error as e:
            logger.error(f"Cannot open database {self.db_path}: {e}", exc_info=True)
            raise StorageError(str(e)) from e
        conn.row_factory = sqlite3.Row
        conn.execute(f"PRAGMA foreign_keys = {'ON' if self.foreign_keys else 'OFF'}")
        return conn

    @contextmanager
    def _connect(self, writable: bool) -> Iterator[Connection]:
        if self.db_path == MEMORY:
            with self._lock:
                if self._shared is None:
                    self._shared = self._open()
                conn = self._shared
                try:
                    yield Connection(conn, writable)
                    conn.commit()
                except Exception:
                    conn.rollback()
                    raise
            return

        conn = self._open()
        try:
            yield Connection(conn, writable)
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
