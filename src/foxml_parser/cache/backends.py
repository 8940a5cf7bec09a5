"""Key/value storage backends for parse results.

Backends only store and expire values; the caching policy (what key, what
TTL, when to write) lives in ``ResultCache``. Every backend tolerates
concurrent readers and writers: two parses racing on the same key both write
and the last write wins.
"""

import hashlib
import os
import pickle
import tempfile
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, Protocol, Union, runtime_checkable

from foxml_parser.shared.logging import get_logger

Clock = Callable[[], float]

_logger = get_logger(__name__, component="cache")


@runtime_checkable
class CacheBackend(Protocol):
    """Storage collaborator used by ``ResultCache``."""

    def get(self, key: str) -> Optional[Any]:
        """Return the stored value, or ``None`` when absent or expired."""

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Store ``value`` under ``key`` for ``ttl_seconds``."""


@dataclass
class CacheEntry:
    """A stored value with its absolute expiry timestamp."""

    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class MemoryCacheBackend:
    """In-process backend; safe to share between threads.

    Expired entries are dropped on every write. With ``max_entries`` set, the
    least recently used entry is evicted once the bound is exceeded.

    Args:
        max_entries: Maximum number of live entries, unbounded when ``None``
        clock: Time source returning seconds since the epoch
    """

    def __init__(self, max_entries: Optional[int] = None, clock: Clock = time.time) -> None:
        if max_entries is not None and max_entries <= 0:
            raise ValueError("max_entries must be > 0")
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                return None
            self._entries.move_to_end(key)
            return entry.value

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        with self._lock:
            now = self._clock()
            self._purge_expired(now)
            self._entries[key] = CacheEntry(value, now + ttl_seconds)
            self._entries.move_to_end(key)
            if self.max_entries is not None:
                while len(self._entries) > self.max_entries:
                    self._entries.popitem(last=False)

    def _purge_expired(self, now: float) -> None:
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


class FileCacheBackend:
    """Directory of pickled entries shareable between processes.

    Each key maps to one file named after the SHA-256 of the key. Writes go
    to a temporary file in the same directory and are moved into place with
    ``os.replace``, so readers never observe a partially written entry.
    Unreadable entries are treated as absent.
    """

    SUFFIX = ".pickle"

    def __init__(self, directory: Union[str, Path], clock: Clock = time.time) -> None:
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self._clock = clock

    def path_for(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self.directory / (digest + self.SUFFIX)

    def get(self, key: str) -> Optional[Any]:
        path = self.path_for(key)
        try:
            with path.open("rb") as handle:
                entry = pickle.load(handle)
        except FileNotFoundError:
            return None
        except (pickle.UnpicklingError, EOFError, AttributeError, ImportError, IndexError, ValueError) as exc:
            _logger.warning(
                "Discarding unreadable cache entry",
                extra={"key": key, "path": str(path), "error": str(exc)},
            )
            return None

        if not isinstance(entry, CacheEntry) or entry.is_expired(self._clock()):
            return None
        return entry.value

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        entry = CacheEntry(value, self._clock() + ttl_seconds)
        fd, temp_name = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as handle:
                pickle.dump(entry, handle, protocol=pickle.HIGHEST_PROTOCOL)
            os.replace(temp_name, self.path_for(key))
        except BaseException:
            if os.path.exists(temp_name):
                os.unlink(temp_name)
            raise

    def purge_expired(self) -> int:
        """Delete expired or unreadable entries; returns how many were removed."""
        removed = 0
        now = self._clock()
        for path in self.directory.glob("*" + self.SUFFIX):
            try:
                with path.open("rb") as handle:
                    entry = pickle.load(handle)
                expired = not isinstance(entry, CacheEntry) or entry.is_expired(now)
            except (OSError, pickle.UnpicklingError, EOFError, AttributeError, ImportError, IndexError, ValueError):
                expired = True
            if expired:
                path.unlink(missing_ok=True)
                removed += 1
        return removed
