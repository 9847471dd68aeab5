from __future__ import annotations

import json
import sqlite3
import threading
import time
from contextlib import contextmanager
from queue import Empty, Full, Queue
from typing import TYPE_CHECKING

from mobile_detect.cache.keys import DEFAULT_MAX_KEY_LENGTH, validate_key
from mobile_detect.cache.ttl import expiry_for, is_expired

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator, Mapping
    from pathlib import Path

    from mobile_detect.cache.protocol import TTL


class SqliteConnectionPool:
    """Thread-safe connection pool for SQLite."""

    def __init__(self, db_path: Path, max_connections: int = 5) -> None:
        self._db_path = db_path
        self._max_connections = max_connections
        self._pool: Queue[sqlite3.Connection] = Queue(maxsize=max_connections)
        self._schema_lock = threading.Lock()
        self._schema_initialized = False

    def _ensure_initialized(self, conn: sqlite3.Connection) -> None:
        if self._schema_initialized:
            return
        with self._schema_lock:
            if self._schema_initialized:
                return
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute(
                "CREATE TABLE IF NOT EXISTS cache ("
                "  key TEXT PRIMARY KEY,"
                "  value TEXT NOT NULL,"
                "  created_at REAL NOT NULL,"
                "  expires_at REAL"
                ")"
            )
            conn.commit()
            self._schema_initialized = True

    def _create_connection(self) -> sqlite3.Connection:
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        conn.execute("PRAGMA busy_timeout=5000")
        self._ensure_initialized(conn)
        return conn

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Acquire a connection from the pool, returning it when done."""
        try:
            conn = self._pool.get_nowait()
        except Empty:
            conn = self._create_connection()

        try:
            yield conn
        finally:
            try:
                self._pool.put_nowait(conn)
            except Full:
                conn.close()

    def close(self) -> None:
        while True:
            try:
                self._pool.get_nowait().close()
            except Empty:
                return


class SqliteCacheStore:
    """Persistent cache store backed by a single SQLite table.

    Values are JSON-encoded, so only JSON-compatible values (the booleans and
    strings a detector produces) round-trip. Expired rows are deleted lazily
    when read.
    """

    def __init__(
        self,
        db_path: Path,
        max_key_length: int = DEFAULT_MAX_KEY_LENGTH,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._db_path = db_path
        self.max_key_length = max_key_length
        self._clock = clock
        self._pool = SqliteConnectionPool(db_path)

    def _check(self, key: object) -> str:
        return validate_key(key, self.max_key_length)

    def _read(self, conn: sqlite3.Connection, key: str) -> tuple[bool, object]:
        row = conn.execute("SELECT value, expires_at FROM cache WHERE key = ?", (key,)).fetchone()
        if row is None:
            return False, None
        value, expires_at = row
        if is_expired(expires_at, self._clock()):
            conn.execute("DELETE FROM cache WHERE key = ?", (key,))
            conn.commit()
            return False, None
        return True, json.loads(value)

    def get(self, key: str, default: object = None) -> object:
        self._check(key)
        with self._pool.connection() as conn:
            found, value = self._read(conn, key)
        return value if found else default

    def set(self, key: str, value: object, ttl: TTL = None) -> bool:
        self._check(key)
        now = self._clock()
        storable, expires_at = expiry_for(ttl, now)
        with self._pool.connection() as conn:
            if not storable:
                conn.execute("DELETE FROM cache WHERE key = ?", (key,))
                conn.commit()
                return False
            conn.execute(
                "INSERT OR REPLACE INTO cache (key, value, created_at, expires_at) VALUES (?, ?, ?, ?)",
                (key, json.dumps(value), now, expires_at),
            )
            conn.commit()
        return True

    def delete(self, key: str) -> bool:
        self._check(key)
        with self._pool.connection() as conn:
            conn.execute("DELETE FROM cache WHERE key = ?", (key,))
            conn.commit()
        return True

    def clear(self) -> bool:
        with self._pool.connection() as conn:
            conn.execute("DELETE FROM cache")
            conn.commit()
        return True

    def has(self, key: str) -> bool:
        self._check(key)
        with self._pool.connection() as conn:
            found, _ = self._read(conn, key)
        return found

    def get_multiple(self, keys: Iterable[str], default: object = None) -> dict[str, object]:
        keys = [self._check(key) for key in keys]
        return {key: self.get(key, default) for key in keys}

    def set_multiple(self, values: Mapping[str, object], ttl: TTL = None) -> bool:
        for key in values:
            self._check(key)
        results = [self.set(key, value, ttl) for key, value in values.items()]
        return all(results)

    def delete_multiple(self, keys: Iterable[str]) -> bool:
        keys = [self._check(key) for key in keys]
        with self._pool.connection() as conn:
            conn.executemany("DELETE FROM cache WHERE key = ?", [(key,) for key in keys])
            conn.commit()
        return True

    def get_keys(self) -> set[str]:
        with self._pool.connection() as conn:
            conn.execute("DELETE FROM cache WHERE expires_at IS NOT NULL AND expires_at <= ?", (self._clock(),))
            conn.commit()
            rows = conn.execute("SELECT key FROM cache").fetchall()
        return {row[0] for row in rows}

    def count(self) -> int:
        return len(self.get_keys())

    def close(self) -> None:
        self._pool.close()
