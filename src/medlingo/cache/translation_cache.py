"""Per-viewer translation cache.

Memoizes ``(message_id, target_language) -> translated text`` in memory and
mirrors every change into a durable backend. The in-memory map is the
authority for the running session; a backend that fails to load or save
only costs durability.
"""

import logging
from collections.abc import Iterator, Mapping

from .base import CacheBackend, CacheBackendError, CacheKey
from .in_memory import InMemoryCacheBackend

logger = logging.getLogger(__name__)


class TranslationCache:
    """Owned translation cache with an explicit load/persist lifecycle.

    Usage:
        cache = TranslationCache(create_cache_backend("sqlite", path=...))
        await cache.load_all()
        await cache.merge({12: "Hola"}, "es")
        cache.get(12, "es")  # "Hola"
        await cache.close()
    """

    def __init__(self, backend: CacheBackend | None = None):
        self._backend = backend or InMemoryCacheBackend()
        self._entries: dict[CacheKey, str] = {}
        self._connected = False
        self._closed = False
        self._version = 0

    @property
    def backend(self) -> CacheBackend:
        return self._backend

    @property
    def version(self) -> int:
        """Incremented on every change; lets renderers detect staleness cheaply."""
        return self._version

    def get(self, message_id: int, target_language: str) -> str | None:
        """Look up a translation."""
        return self._entries.get((message_id, target_language))

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CacheKey]:
        return iter(self._entries)

    def languages(self) -> set[str]:
        """Languages with at least one cached translation."""
        return {lang for _, lang in self._entries}

    async def load_all(self) -> int:
        """Acquire the backend and load every stored entry.

        Returns:
            Number of entries loaded (0 if the backend could not be read)
        """
        self._closed = False
        try:
            if not self._connected:
                await self._backend.connect()
                self._connected = True
            stored = await self._backend.load()
        except CacheBackendError as e:
            logger.warning(
                "Could not load translation cache (%s); starting empty: %s",
                self._backend.backend_type, e
            )
            return 0

        # Entries produced this session win over what was on disk
        for key, text in stored.items():
            self._entries.setdefault(key, text)
        self._version += 1
        logger.debug("Loaded %d cached translations", len(stored))
        return len(stored)

    async def put(self, message_id: int, target_language: str, text: str) -> bool:
        """Store one translation.

        Returns:
            True if the cache changed
        """
        return await self.merge({message_id: text}, target_language) > 0

    async def merge(self, translations: Mapping[int, str], target_language: str) -> int:
        """Apply a batch of translations for one language as a single update.

        All entries land in memory before the first suspension point, so
        readers on the same event loop never observe half a batch.

        Returns:
            Number of entries that changed
        """
        changed = self._apply({
            (message_id, target_language): text
            for message_id, text in translations.items()
        })
        if changed:
            await self.persist(changed)
        return len(changed)

    def _apply(self, entries: Mapping[CacheKey, str]) -> dict[CacheKey, str]:
        changed: dict[CacheKey, str] = {}
        for key, text in entries.items():
            current = self._entries.get(key)
            if current == text:
                continue
            if current is not None:
                logger.warning(
                    "Overwriting cached translation for message %s (%s) with a different value",
                    key[0], key[1]
                )
            self._entries[key] = text
            changed[key] = text
        if changed:
            self._version += 1
        return changed

    async def persist(self, entries: Mapping[CacheKey, str] | None = None) -> bool:
        """Write entries (default: all) to the backend.

        Returns:
            False if the backend write failed; the in-memory state is kept
        """
        to_save = dict(self._entries) if entries is None else dict(entries)
        if self._closed:
            # A batch abandoned at shutdown resolved late
            logger.debug("Cache closed; %d translations kept in memory only", len(to_save))
            return False
        try:
            if not self._connected:
                await self._backend.connect()
                self._connected = True
            await self._backend.save(to_save)
        except CacheBackendError as e:
            logger.error("Failed to persist %d cached translations: %s", len(to_save), e)
            return False
        return True

    async def close(self) -> None:
        """Release the backend."""
        self._closed = True
        if self._connected:
            await self._backend.disconnect()
            self._connected = False
