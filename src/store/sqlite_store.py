# src/store/sqlite_store.py - v2
"""SQLite-based key-value store (STORE_BACKEND=sqlite).

Uses stdlib sqlite3, no external dependency. One row per key; INSERT OR
REPLACE gives atomic per-key overwrites.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from searchcache.store.base_store import BaseKeyValueStore, StoreError

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_entries (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);
"""


class SqliteKeyValueStore(BaseKeyValueStore):
    """SQLite-backed key-value store."""

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path).expanduser()
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)

    async def get(self, key: str) -> str | None:
        try:
            row = self._conn.execute(
                "SELECT value FROM kv_entries WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to read {key!r}: {e}") from e
        return None if row is None else row[0]

    async def set(self, key: str, value: str) -> None:
        try:
            self._conn.execute(
                """INSERT OR REPLACE INTO kv_entries (key, value, updated_at)
                   VALUES (?, ?, CURRENT_TIMESTAMP)""",
                (key, value),
            )
            self._conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to write {key!r}: {e}") from e

    async def delete(self, key: str) -> None:
        try:
            self._conn.execute("DELETE FROM kv_entries WHERE key = ?", (key,))
            self._conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to delete {key!r}: {e}") from e

    async def list_keys(self, prefix: str = "") -> list[str]:
        # substr() avoids LIKE wildcard escaping for '_' and '%' in prefixes
        try:
            rows = self._conn.execute(
                "SELECT key FROM kv_entries WHERE substr(key, 1, ?) = ? ORDER BY key",
                (len(prefix), prefix),
            ).fetchall()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to list keys: {e}") from e
        return [row[0] for row in rows]

    async def close(self) -> None:
        """Close the database connection."""
        self._conn.close()
