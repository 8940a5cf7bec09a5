"""Result cache for parsed FOXML documents.

Key Components:
    ResultCache: Policy wrapper (absolute path key, one week TTL)
    MemoryCacheBackend: In-process storage
    FileCacheBackend: Directory storage shared between processes

``RedisCacheBackend`` lives in ``foxml_parser.cache.redis_backend`` and needs
the ``redis`` extra.
"""

from .backends import CacheBackend, CacheEntry, FileCacheBackend, MemoryCacheBackend
from .policy import ResultCache

__all__ = [
    "CacheBackend",
    "CacheEntry",
    "FileCacheBackend",
    "MemoryCacheBackend",
    "ResultCache",
]
