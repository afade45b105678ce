"""Response cache with an explicit, injectable interface.

Two backends share the `get(key)` / `set(key, value, ttl)` contract:
- MemoryCache: process-local dict with expiry
- RedisCache: external store, values JSON-encoded

Callers receive a cache instance; there is no module-level cache object.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from typing import Any, Callable, Optional, Protocol

import redis

from .config import ProviderConfig

logger = logging.getLogger(__name__)


class Cache(Protocol):
    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any, ttl: int = 30) -> None: ...


class MemoryCache:
    """In-memory cache; expired entries are evicted on read."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._data: dict[str, tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            expires, value = entry
            if self._clock() > expires:
                del self._data[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl: int = 30) -> None:
        with self._lock:
            now = self._clock()
            for k in [k for k, (expires, _) in self._data.items() if now > expires]:
                del self._data[k]
            self._data[key] = (now + float(ttl), value)

    def __len__(self) -> int:
        return len(self._data)


class RedisCache:
    """Redis-backed cache. Connection errors degrade to cache misses."""

    def __init__(self, url: str, client: Optional[redis.Redis] = None):
        self.url = url
        self.client = client if client is not None else redis.Redis.from_url(url, decode_responses=True)
        logger.info("Using Redis caching at %s", url)

    def get(self, key: str) -> Optional[Any]:
        try:
            raw = self.client.get(key)
        except redis.RedisError as e:
            logger.warning("Redis GET error: %s", e)
            return None
        return json.loads(raw) if raw is not None else None

    def set(self, key: str, value: Any, ttl: int = 30) -> None:
        try:
            self.client.setex(key, int(ttl), json.dumps(value))
        except redis.RedisError as e:
            logger.warning("Redis SET error: %s", e)


def cache_from_config(cfg: ProviderConfig) -> Cache:
    """Redis when a URL is configured, otherwise an in-memory cache."""
    if cfg.redis_url:
        return RedisCache(cfg.redis_url)
    logger.info("Using in-memory caching")
    return MemoryCache()


def get_or_set(cache: Optional[Cache], key: str, ttl: int, producer: Callable[[], Any]) -> Any:
    """Return the cached value for `key`, producing and storing it on a miss."""
    if cache is None:
        return producer()
    hit = cache.get(key)
    if hit is not None:
        logger.debug("cache hit: %s", key)
        return hit
    value = producer()
    cache.set(key, value, ttl)
    return value
