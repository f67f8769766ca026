"""SQLite message store.

Provides a durable conversation log shared through a database file.
Uses aiosqlite for async access. Inserts are pushed to subscribers by a
background poll task, so rows written by other processes using the same
file (the other participant) are delivered the same way as our own.
"""

import asyncio
import contextlib
import logging
from datetime import UTC, datetime
from pathlib import Path

import aiosqlite

from .base import MessageStore, MessageStoreError, Subscription
from .models import Message, NewMessage, Role

logger = logging.getLogger(__name__)

_COLUMNS = "id, role, text_original, text_translated, target_language, audio_url, created_at"


class SQLiteMessageStore(MessageStore):
    """SQLite-backed message store.

    Stores the conversation in a SQLite database file and polls it for
    inserts while at least one subscriber is registered.
    """

    def __init__(
        self,
        path: str | Path = "./medlingo.db",
        poll_interval: float = 0.5,
    ):
        super().__init__()
        self._db_path = Path(path)
        self._poll_interval = poll_interval
        self._connection: aiosqlite.Connection | None = None
        self._poll_task: asyncio.Task | None = None
        self._deliver_lock = asyncio.Lock()
        self._last_delivered = 0

    async def connect(self) -> None:
        """Initialize database connection and schema."""
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._connection = await aiosqlite.connect(self._db_path)
            await self._connection.execute("PRAGMA journal_mode = WAL")
            await self._create_schema()
            async with self._connection.execute(
                "SELECT COALESCE(MAX(id), 0) FROM conversations"
            ) as cursor:
                row = await cursor.fetchone()
                self._last_delivered = row[0]
        except (aiosqlite.Error, OSError) as e:
            raise MessageStoreError(f"Cannot open message store at {self._db_path}: {e}") from e

        if self._subscriptions:
            self._start_polling()

    async def _create_schema(self) -> None:
        """Create database tables."""
        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS conversations (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                role TEXT NOT NULL,
                text_original TEXT NOT NULL,
                text_translated TEXT,
                target_language TEXT NOT NULL,
                audio_url TEXT,
                created_at TEXT NOT NULL
            )
        """)

        await self._connection.execute("""
            CREATE INDEX IF NOT EXISTS idx_conversations_created
            ON conversations(created_at, id)
        """)

        await self._connection.commit()

    async def disconnect(self) -> None:
        """Stop polling and close the database connection."""
        if self._poll_task is not None:
            self._poll_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._poll_task
            self._poll_task = None

        if self._connection:
            await self._connection.close()
            self._connection = None

    def _require_connection(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise MessageStoreError("Message store is not connected")
        return self._connection

    async def append(self, message: NewMessage) -> Message:
        """Insert a row and push it to subscribers."""
        connection = self._require_connection()
        created_at = datetime.now(UTC)

        try:
            cursor = await connection.execute("""
                INSERT INTO conversations
                (role, text_original, text_translated, target_language, audio_url, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
            """, (
                message.role.value,
                message.text_original,
                message.text_translated,
                message.target_language,
                message.audio_url,
                created_at.isoformat(),
            ))
            message_id = cursor.lastrowid
            await cursor.close()
            await connection.commit()
        except aiosqlite.Error as e:
            raise MessageStoreError(f"Insert failed: {e}") from e

        stored = Message.from_new(message, message_id, created_at)
        try:
            await self._deliver_new()
        except MessageStoreError as e:
            # The row is committed; the poll task will deliver it later
            logger.warning("Immediate delivery of message %s failed: %s", message_id, e)
        return stored

    async def list_messages(self) -> list[Message]:
        """Get the full history."""
        connection = self._require_connection()
        try:
            async with connection.execute(
                f"SELECT {_COLUMNS} FROM conversations ORDER BY created_at ASC, id ASC"
            ) as cursor:
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise MessageStoreError(f"Query failed: {e}") from e

        return [self._row_to_message(row) for row in rows]

    @staticmethod
    def _row_to_message(row: tuple) -> Message:
        message_id, role, text_original, text_translated, target_language, audio_url, ts = row
        return Message(
            id=message_id,
            role=Role(role),
            text_original=text_original,
            text_translated=text_translated,
            target_language=target_language,
            audio_url=audio_url,
            created_at=datetime.fromisoformat(ts),
        )

    def _on_subscribed(self, subscription: Subscription) -> None:
        if self._connection is not None:
            self._start_polling()

    def _start_polling(self) -> None:
        if self._poll_task is None or self._poll_task.done():
            self._poll_task = asyncio.create_task(self._poll())

    async def _poll(self) -> None:
        """Deliver new rows until cancelled."""
        while True:
            try:
                await self._deliver_new()
            except MessageStoreError as e:
                logger.warning("Message poll failed: %s", e)
            await asyncio.sleep(self._poll_interval)

    async def _deliver_new(self) -> None:
        """Publish every row newer than the last delivered one, in id order."""
        if self._connection is None:
            return

        async with self._deliver_lock:
            try:
                async with self._connection.execute(
                    f"SELECT {_COLUMNS} FROM conversations WHERE id > ? ORDER BY id ASC",
                    (self._last_delivered,)
                ) as cursor:
                    rows = await cursor.fetchall()
            except aiosqlite.Error as e:
                raise MessageStoreError(f"Query failed: {e}") from e

            for row in rows:
                message = self._row_to_message(row)
                self._last_delivered = message.id
                self._publish(message)

    @property
    def backend_type(self) -> str:
        return "sqlite"

    @property
    def db_path(self) -> Path:
        return self._db_path
