"""Caching policy for parse results.

Results are keyed by the absolute path of the parsed file and kept for a
week. The key deliberately ignores file contents: a file rewritten in place
within the TTL is served from cache unless ``key_includes_mtime`` is enabled,
which folds the modification time and size into the key.
"""

import os
from typing import Any, Optional, Union

from foxml_parser.shared.config import (
    DEFAULT_CACHE_MAX_ENTRIES,
    DEFAULT_CACHE_TTL_SECONDS,
    CacheConfig,
)
from foxml_parser.shared.logging import get_logger

from .backends import CacheBackend, FileCacheBackend, MemoryCacheBackend

Target = Union[str, "os.PathLike[str]"]

_logger = get_logger(__name__, component="cache")


class ResultCache:
    """Wraps a ``CacheBackend`` with the parse-result caching policy.

    Args:
        backend: Storage collaborator (``get``/``set`` with TTL); defaults to a
            bounded in-memory backend
        ttl_seconds: Lifetime of stored results, one week by default
        key_includes_mtime: Include modification time and size in the key
    """

    def __init__(
        self,
        backend: Optional[CacheBackend] = None,
        ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS,
        key_includes_mtime: bool = False,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")
        if backend is None:
            backend = MemoryCacheBackend(DEFAULT_CACHE_MAX_ENTRIES)
        self.backend = backend
        self.ttl_seconds = ttl_seconds
        self.key_includes_mtime = key_includes_mtime

    @classmethod
    def from_config(cls, config: CacheConfig) -> "ResultCache":
        """Build the cache and backend described by ``config``."""
        backend: CacheBackend
        if config.backend == "file":
            backend = FileCacheBackend(config.directory)  # type: ignore[arg-type]
        elif config.backend == "redis":
            from .redis_backend import RedisCacheBackend

            backend = RedisCacheBackend.from_url(
                config.redis_url, key_prefix=config.key_prefix  # type: ignore[arg-type]
            )
        else:
            backend = MemoryCacheBackend(config.max_entries)
        return cls(backend, config.ttl_seconds, config.key_includes_mtime)

    def key_for(self, target: Target) -> str:
        """Cache key for ``target``: its absolute path, optionally with mtime/size."""
        path = os.path.abspath(os.fspath(target))
        if not self.key_includes_mtime:
            return path
        try:
            stat = os.stat(path)
        except OSError:
            return path
        return f"{path}|{stat.st_mtime_ns}|{stat.st_size}"

    def get(self, target: Target) -> Optional[Any]:
        """Return the cached root for ``target``, or ``None``."""
        key = self.key_for(target)
        value = self.backend.get(key)
        _logger.debug("Cache lookup", extra={"key": key, "hit": value is not None})
        return value

    def set(self, target: Target, value: Any) -> None:
        """Store a successfully parsed root for ``target``."""
        key = self.key_for(target)
        self.backend.set(key, value, self.ttl_seconds)
        _logger.debug("Cache store", extra={"key": key, "ttl_seconds": self.ttl_seconds})
