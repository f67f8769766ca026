"""Abstract base class for message stores.

The message store is the single source of truth for the conversation.
The abstraction hides:
- Storage format and location
- How inserts are pushed to subscribers (direct call, polling, ...)
- Connection management
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from .models import Message, NewMessage

logger = logging.getLogger(__name__)

InsertCallback = Callable[[Message], None]


class MessageStoreError(Exception):
    """Raised when the store cannot accept or return messages."""


class Subscription:
    """Handle for a registered insert callback."""

    def __init__(self, store: "MessageStore", callback: InsertCallback):
        self._store = store
        self.callback = callback
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        """Stop receiving inserts. Safe to call more than once."""
        if self._active:
            self._active = False
            self._store._remove_subscription(self)


class MessageStore(ABC):
    """Append-only, timestamp-ordered conversation log with insert push.

    Implementations assign ``id`` and ``created_at`` on append and deliver
    every accepted insert to subscribers in acceptance order.
    """

    def __init__(self) -> None:
        self._subscriptions: list[Subscription] = []

    @abstractmethod
    async def connect(self) -> None:
        """Open the store."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the store gracefully."""

    @abstractmethod
    async def append(self, message: NewMessage) -> Message:
        """Append a message and return it with its assigned id and timestamp.

        Raises:
            MessageStoreError: If the insert fails
        """

    @abstractmethod
    async def list_messages(self) -> list[Message]:
        """Return the full history ordered by creation time, oldest first.

        Raises:
            MessageStoreError: If the query fails
        """

    def subscribe(self, on_insert: InsertCallback) -> Subscription:
        """Register a callback fired for every future insert."""
        subscription = Subscription(self, on_insert)
        self._subscriptions.append(subscription)
        self._on_subscribed(subscription)
        return subscription

    def _on_subscribed(self, subscription: Subscription) -> None:
        """Hook for backends that need to start delivery machinery."""

    def _remove_subscription(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def _publish(self, message: Message) -> None:
        """Hand an accepted insert to every active subscriber.

        A failing callback is logged and skipped; the row is already stored
        and the remaining subscribers (and later inserts) still get delivered.
        """
        for subscription in list(self._subscriptions):
            if not subscription.active:
                continue
            try:
                subscription.callback(message)
            except Exception:
                logger.exception(
                    "Subscriber %r failed on message %s", subscription.callback, message.id
                )

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""

    async def __aenter__(self) -> "MessageStore":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.disconnect()
