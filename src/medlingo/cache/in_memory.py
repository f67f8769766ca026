"""In-memory cache backend.

Keeps nothing beyond the process; the cache behaves as session-only.
"""

from collections.abc import Mapping

from .base import CacheBackend, CacheKey


class InMemoryCacheBackend(CacheBackend):
    """Dict-backed store, mainly for tests and throwaway sessions."""

    def __init__(self) -> None:
        self._entries: dict[CacheKey, str] = {}

    async def connect(self) -> None:
        pass

    async def disconnect(self) -> None:
        pass

    async def load(self) -> dict[CacheKey, str]:
        return dict(self._entries)

    async def save(self, entries: Mapping[CacheKey, str]) -> None:
        self._entries.update(entries)

    @property
    def backend_type(self) -> str:
        return "memory"
