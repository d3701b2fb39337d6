"""SQLite management utilities."""

from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable, Iterator, Sequence

from semantic_recall.core.errors import StorageError

DEFAULT_PRAGMAS = (
    "PRAGMA journal_mode=WAL;",
    "PRAGMA synchronous=NORMAL;",
    "PRAGMA foreign_keys=ON;",
    "PRAGMA temp_store=MEMORY;",
)

BUSY_TIMEOUT_SECONDS = 30.0


class SQLiteDatabase:
    """Thin wrapper around sqlite3 with one connection per thread.

    WAL mode plus per-thread connections lets searches read committed state
    while a background worker is replacing an embedding.
    """

    def __init__(self, db_path: Path, read_only: bool = False) -> None:
        self.db_path = db_path.expanduser()
        self.read_only = read_only
        self._local = threading.local()
        self._all_lock = threading.Lock()
        self._all: list[sqlite3.Connection] = []

    def connect(self) -> sqlite3.Connection:
        connection: sqlite3.Connection | None = getattr(self._local, "connection", None)
        if connection is None:
            try:
                if self.read_only:
                    uri = f"file:{self.db_path}?mode=ro"
                    connection = sqlite3.connect(
                        uri, uri=True, timeout=BUSY_TIMEOUT_SECONDS, check_same_thread=False
                    )
                else:
                    self.db_path.parent.mkdir(parents=True, exist_ok=True)
                    connection = sqlite3.connect(
                        self.db_path, timeout=BUSY_TIMEOUT_SECONDS, check_same_thread=False
                    )
                connection.row_factory = sqlite3.Row
                for pragma in DEFAULT_PRAGMAS:
                    connection.execute(pragma)
            except sqlite3.Error as exc:
                raise StorageError(f"Cannot open database {self.db_path}: {exc}") from exc
            self._local.connection = connection
            with self._all_lock:
                self._all.append(connection)
        return connection

    def close(self) -> None:
        """Close every connection opened by any thread."""
        with self._all_lock:
            connections, self._all = self._all, []
        for connection in connections:
            connection.close()
        self._local = threading.local()

    def __enter__(self) -> "SQLiteDatabase":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.commit()
        else:
            self.rollback()
        self.close()

    def commit(self) -> None:
        connection = getattr(self._local, "connection", None)
        if connection is not None:
            connection.commit()

    def rollback(self) -> None:
        connection = getattr(self._local, "connection", None)
        if connection is not None:
            connection.rollback()

    def executescript(self, script: str) -> None:
        conn = self.connect()
        try:
            conn.executescript(script)
        except sqlite3.Error as exc:
            raise StorageError(f"Schema script failed: {exc}") from exc

    def execute(self, sql: str, params: Sequence[Any] | None = None) -> sqlite3.Cursor:
        conn = self.connect()
        try:
            return conn.execute(sql, params or [])
        except sqlite3.Error as exc:
            raise StorageError(str(exc)) from exc

    def executemany(self, sql: str, seq_of_params: Iterable[Sequence[Any]]) -> sqlite3.Cursor:
        conn = self.connect()
        try:
            return conn.executemany(sql, seq_of_params)
        except sqlite3.Error as exc:
            raise StorageError(str(exc)) from exc

    def query(self, sql: str, params: Sequence[Any] | None = None) -> list[sqlite3.Row]:
        cursor = self.execute(sql, params)
        return cursor.fetchall()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Cursor]:
        """Run the block in a single write transaction, rolling back on any error."""
        conn = self.connect()
        cursor = conn.cursor()
        try:
            if not conn.in_transaction:
                cursor.execute("BEGIN IMMEDIATE")
            yield cursor
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise StorageError(str(exc)) from exc
        except BaseException:
            conn.rollback()
            raise
        finally:
            cursor.close()

    def ensure_schema(self, schema_sql: str | None = None) -> None:
        if schema_sql is None:
            schema_path = Path(__file__).with_name("schema.sql")
            schema_sql = schema_path.read_text(encoding="utf-8")
        self.executescript(schema_sql)


def iter_rows(cursor: sqlite3.Cursor) -> Iterator[sqlite3.Row]:
    """Yield rows from a cursor lazily."""
    try:
        while True:
            row = cursor.fetchone()
            if row is None:
                break
            yield row
    except sqlite3.Error as exc:
        raise StorageError(str(exc)) from exc
    finally:
        cursor.close()


__all__ = ["SQLiteDatabase", "iter_rows"]
