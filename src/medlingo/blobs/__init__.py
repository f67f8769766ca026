"""Object storage for recorded audio clips."""

from typing import Any

from .base import BlobStore, BlobStoreError
from .local import LocalBlobStore, recording_filename


def create_blob_store(backend: str = "local", **config: Any) -> BlobStore:
    """Create a blob store.

    Args:
        backend: Backend type ("local" currently supported)
        **config: Backend-specific configuration
            - directory: str | Path (default: './audio')
            - base_url: str | None

    Raises:
        ValueError: If backend type is not supported
    """
    if backend == "local":
        return LocalBlobStore(**config)

    raise ValueError(
        f"Unsupported blob store backend: {backend}. "
        f"Supported backends: local"
    )


__all__ = [
    "BlobStore",
    "BlobStoreError",
    "LocalBlobStore",
    "create_blob_store",
    "recording_filename",
]
