"""Redis-backed cache backend for sharing parse results between workers."""

import pickle
from typing import Any, Optional

from redis import Redis

from foxml_parser.shared.logging import get_logger

_logger = get_logger(__name__, component="cache")


class RedisCacheBackend:
    """Stores pickled values with a server-side expiry (``SET ... EX``).

    Args:
        client: A connected ``redis.Redis`` client
        key_prefix: Namespace prepended to every key
    """

    def __init__(self, client: Redis, key_prefix: str = "foxml:") -> None:
        self.client = client
        self.key_prefix = key_prefix

    @classmethod
    def from_url(cls, redis_url: str, key_prefix: str = "foxml:") -> "RedisCacheBackend":
        return cls(Redis.from_url(redis_url), key_prefix=key_prefix)

    def _name(self, key: str) -> str:
        return self.key_prefix + key

    def get(self, key: str) -> Optional[Any]:
        payload = self.client.get(self._name(key))
        if payload is None:
            return None
        try:
            return pickle.loads(payload)
        except (pickle.UnpicklingError, EOFError, AttributeError, ImportError, IndexError, ValueError) as exc:
            _logger.warning(
                "Discarding unreadable cache entry",
                extra={"key": key, "error": str(exc)},
            )
            return None

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        payload = pickle.dumps(value, protocol=pickle.HIGHEST_PROTOCOL)
        self.client.set(self._name(key), payload, ex=ttl_seconds)
