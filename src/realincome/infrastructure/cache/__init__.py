"""Series cache and its storage backends."""

from realincome.infrastructure.cache.backends import InMemoryCacheBackend, LocalFileCacheBackend
from realincome.infrastructure.cache.manager import CacheManager

__all__ = ["CacheManager", "InMemoryCacheBackend", "LocalFileCacheBackend"]
