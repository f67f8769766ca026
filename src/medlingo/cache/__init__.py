"""Translation cache module for medlingo.

Provides the per-viewer translation memo and its durable backends.
"""

from .base import CacheBackend, CacheBackendError, CacheKey
from .factory import create_cache_backend
from .translation_cache import TranslationCache

__all__ = [
    "CacheBackend",
    "CacheBackendError",
    "CacheKey",
    "TranslationCache",
    "create_cache_backend",
]
