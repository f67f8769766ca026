"""JSON file cache backend.

Keeps the whole cache as one JSON object keyed ``"<message_id>_<lang>"``,
the same layout browsers keep in local storage. Every save rewrites the
document through a uniquely named temporary file and an atomic rename.
Saves are serialized so concurrent merges for different languages all
reach the file.
"""

import asyncio
import json
import logging
import os
import tempfile
from collections.abc import Mapping
from pathlib import Path

from .base import CacheBackend, CacheBackendError, CacheKey

logger = logging.getLogger(__name__)


def encode_key(key: CacheKey) -> str:
    message_id, lang = key
    return f"{message_id}_{lang}"


def decode_key(raw: str) -> CacheKey | None:
    """Parse ``"<id>_<lang>"``; returns None for keys that do not fit."""
    head, sep, lang = raw.partition("_")
    if not sep or not lang or not head.isdigit():
        return None
    return int(head), lang


class JSONFileCacheBackend(CacheBackend):
    """Single JSON document on disk."""

    def __init__(self, path: str | Path = "./translations_cache.json"):
        self._path = Path(path)
        self._document: dict[str, str] = {}
        self._save_lock = asyncio.Lock()

    async def connect(self) -> None:
        try:
            self._document = await asyncio.to_thread(self._read)
        except (OSError, ValueError) as e:
            raise CacheBackendError(f"Cannot read cache file {self._path}: {e}") from e

    async def disconnect(self) -> None:
        pass

    def _read(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        data = json.loads(self._path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("cache document is not a JSON object")
        return {str(k): str(v) for k, v in data.items()}

    def _write(self, document: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=self._path.parent,
            prefix=self._path.name + ".",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            json.dump(document, tmp, ensure_ascii=False, indent=2)
        try:
            os.replace(tmp.name, self._path)
        except OSError:
            os.unlink(tmp.name)
            raise

    async def load(self) -> dict[CacheKey, str]:
        entries: dict[CacheKey, str] = {}
        for raw_key, text in self._document.items():
            key = decode_key(raw_key)
            if key is None:
                logger.warning("Skipping malformed cache key %r in %s", raw_key, self._path)
                continue
            entries[key] = text
        return entries

    async def save(self, entries: Mapping[CacheKey, str]) -> None:
        if not entries:
            return
        async with self._save_lock:
            document = dict(self._document)
            document.update({encode_key(key): text for key, text in entries.items()})
            try:
                await asyncio.to_thread(self._write, document)
            except OSError as e:
                raise CacheBackendError(f"Cannot write cache file {self._path}: {e}") from e
            self._document = document

    @property
    def backend_type(self) -> str:
        return "json"

    @property
    def path(self) -> Path:
        return self._path
