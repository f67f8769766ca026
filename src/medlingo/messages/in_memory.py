"""In-memory message store.

Simple list-based storage for a single process.
Data is lost when the application exits.
"""

from datetime import UTC, datetime

from .base import MessageStore
from .models import Message, NewMessage


class InMemoryMessageStore(MessageStore):
    """In-memory message store (process-only).

    Subscribers are notified synchronously once an insert is accepted.
    Suitable for single-process use or testing.
    """

    def __init__(self) -> None:
        super().__init__()
        self._messages: list[Message] = []
        self._next_id = 1

    async def connect(self) -> None:
        """Open the store (no-op for in-memory)."""
        pass

    async def disconnect(self) -> None:
        """Close the store (no-op for in-memory)."""
        pass

    async def append(self, message: NewMessage) -> Message:
        """Append and publish."""
        stored = Message.from_new(message, self._next_id, datetime.now(UTC))
        self._next_id += 1
        self._messages.append(stored)
        self._publish(stored)
        return stored

    async def list_messages(self) -> list[Message]:
        """Get the full history."""
        return sorted(self._messages, key=lambda m: m.sort_key)

    @property
    def backend_type(self) -> str:
        return "memory"
