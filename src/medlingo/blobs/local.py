"""Filesystem blob store."""

import asyncio
import logging
import time
from pathlib import Path

from .base import BlobStore, BlobStoreError

logger = logging.getLogger(__name__)


def recording_filename(role: str, extension: str = "webm") -> str:
    """Name a recording the way the audio bucket expects: ``<millis>_<role>.<ext>``."""
    return f"{int(time.time() * 1000)}_{role}.{extension}"


class LocalBlobStore(BlobStore):
    """Stores blobs in a local directory.

    URLs are ``<base_url>/<filename>`` when a base URL is configured
    (e.g. a static file server), otherwise ``file://`` URIs.
    """

    def __init__(self, directory: str | Path = "./audio", base_url: str | None = None):
        self._directory = Path(directory)
        self._base_url = base_url.rstrip("/") if base_url else None

    async def upload(
        self,
        data: bytes,
        filename: str,
        content_type: str = "audio/webm",
    ) -> str:
        """Write the blob and return its URL."""
        if not data:
            raise BlobStoreError("Refusing to upload an empty blob")
        if Path(filename).name != filename:
            raise BlobStoreError(f"Invalid object name: {filename}")

        target = self._directory / filename
        try:
            await asyncio.to_thread(self._write, target, data)
        except OSError as e:
            raise BlobStoreError(f"Upload of {filename} failed: {e}") from e

        logger.debug("Stored %d bytes (%s) at %s", len(data), content_type, target)

        if self._base_url:
            return f"{self._base_url}/{filename}"
        return target.resolve().as_uri()

    @staticmethod
    def _write(target: Path, data: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        if target.exists():
            raise FileExistsError(f"Object already exists: {target.name}")
        target.write_bytes(data)

    @property
    def backend_type(self) -> str:
        return "local"

    @property
    def directory(self) -> Path:
        return self._directory
