"""SQLite cache backend.

Persists translations in a local database file using aiosqlite.
"""

from collections.abc import Mapping
from pathlib import Path

import aiosqlite

from .base import CacheBackend, CacheBackendError, CacheKey


class SQLiteCacheBackend(CacheBackend):
    """Stores one row per ``(message_id, target_language)``."""

    def __init__(self, path: str | Path = "./translations_cache.db"):
        self._db_path = Path(path)
        self._connection: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Open the database and create the table."""
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._connection = await aiosqlite.connect(self._db_path)
            await self._connection.execute("""
                CREATE TABLE IF NOT EXISTS translations_cache (
                    message_id INTEGER NOT NULL,
                    target_language TEXT NOT NULL,
                    translated TEXT NOT NULL,
                    PRIMARY KEY (message_id, target_language)
                )
            """)
            await self._connection.commit()
        except (aiosqlite.Error, OSError) as e:
            raise CacheBackendError(f"Cannot open cache at {self._db_path}: {e}") from e

    async def disconnect(self) -> None:
        if self._connection:
            await self._connection.close()
            self._connection = None

    def _require_connection(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise CacheBackendError("Cache backend is not connected")
        return self._connection

    async def load(self) -> dict[CacheKey, str]:
        connection = self._require_connection()
        try:
            async with connection.execute(
                "SELECT message_id, target_language, translated FROM translations_cache"
            ) as cursor:
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise CacheBackendError(f"Cache load failed: {e}") from e

        return {(message_id, lang): text for message_id, lang, text in rows}

    async def save(self, entries: Mapping[CacheKey, str]) -> None:
        if not entries:
            return
        connection = self._require_connection()
        try:
            await connection.executemany("""
                INSERT INTO translations_cache (message_id, target_language, translated)
                VALUES (?, ?, ?)
                ON CONFLICT(message_id, target_language) DO UPDATE SET translated = excluded.translated
            """, [(message_id, lang, text) for (message_id, lang), text in entries.items()])
            await connection.commit()
        except aiosqlite.Error as e:
            raise CacheBackendError(f"Cache save failed: {e}") from e

    @property
    def backend_type(self) -> str:
        return "sqlite"

    @property
    def db_path(self) -> Path:
        return self._db_path
