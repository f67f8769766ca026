"""Factory for creating translation cache backends."""

from typing import Any

from .base import CacheBackend


def create_cache_backend(backend: str = "memory", **kwargs: Any) -> CacheBackend:
    """Create a cache backend.

    Args:
        backend: Backend type ("memory", "sqlite" or "json")
        **kwargs: Backend-specific configuration (``path`` for sqlite/json)

    Returns:
        CacheBackend instance

    Raises:
        ValueError: If backend type is not supported
    """
    if backend == "memory":
        from .in_memory import InMemoryCacheBackend
        return InMemoryCacheBackend(**kwargs)

    elif backend == "sqlite":
        from .sqlite import SQLiteCacheBackend
        return SQLiteCacheBackend(**kwargs)

    elif backend == "json":
        from .json_file import JSONFileCacheBackend
        return JSONFileCacheBackend(**kwargs)

    raise ValueError(
        f"Unsupported cache backend: {backend}. "
        f"Supported backends: memory, sqlite, json"
    )
