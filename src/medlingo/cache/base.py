"""Abstract base class for translation cache backends.

A backend is the durable half of the translation cache. The abstraction
hides:
- Storage format (SQLite table, JSON document, nothing at all)
- Connection management
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping

# (message_id, target_language)
CacheKey = tuple[int, str]


class CacheBackendError(Exception):
    """Raised when the backend cannot be read or written."""


class CacheBackend(ABC):
    """Durable key-value store for ``(message_id, target_language) -> text``."""

    @abstractmethod
    async def connect(self) -> None:
        """Acquire the underlying store."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Release the underlying store."""

    @abstractmethod
    async def load(self) -> dict[CacheKey, str]:
        """Read every stored entry.

        Raises:
            CacheBackendError: If the store cannot be read
        """

    @abstractmethod
    async def save(self, entries: Mapping[CacheKey, str]) -> None:
        """Upsert entries.

        Raises:
            CacheBackendError: If the store cannot be written
        """

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""
