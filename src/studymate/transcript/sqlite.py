"""SQLite key-value backend.

Persists values in a single table of a SQLite database file.
Uses aiosqlite for async access.
"""

from datetime import datetime, timezone
from pathlib import Path

import aiosqlite

from .base import KeyValueStore


class SQLiteKeyValueStore(KeyValueStore):
    """SQLite-backed key-value store.

    Supports persistent storage across sessions.
    """

    def __init__(self, path: str | Path = "./studymate.db"):
        self._db_path = Path(path)
        self._connection: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Open the database and create the table if needed."""
        if self._connection is not None:
            return
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(self._db_path)
        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)
        await self._connection.commit()

    async def disconnect(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    def _require_connection(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise RuntimeError("SQLiteKeyValueStore is not connected; call connect() first")
        return self._connection

    async def get(self, key: str) -> str | None:
        connection = self._require_connection()
        async with connection.execute(
            "SELECT value FROM kv WHERE key = ?",
            (key,)
        ) as cursor:
            row = await cursor.fetchone()
        return row[0] if row else None

    async def put(self, key: str, value: str) -> None:
        connection = self._require_connection()
        now = datetime.now(timezone.utc).isoformat()
        await connection.execute("""
            INSERT INTO kv (key, value, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
        """, (key, value, now))
        await connection.commit()

    async def delete(self, key: str) -> None:
        connection = self._require_connection()
        await connection.execute("DELETE FROM kv WHERE key = ?", (key,))
        await connection.commit()

    @property
    def backend_type(self) -> str:
        return "sqlite"

    @property
    def db_path(self) -> Path:
        return self._db_path
