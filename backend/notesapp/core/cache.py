"""
Cache layer: a key-value store with per-entry expiry and prefix deletion.

Two backends share the same interface:
  - MemoryCache: in-process, backed by cachetools (default, used in tests).
  - RedisCache: shared across workers, backed by redis-py.

Backends raise CacheUnavailableError when the underlying store fails; callers
decide whether that is fatal.
"""

import logging
import re
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable

import redis
from cachetools import TLRUCache

from notesapp.config import Settings
from notesapp.core.exceptions import CacheUnavailableError

logger = logging.getLogger(__name__)


class Cache(ABC):
    """Minimal cache contract used by the services."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the cached value, or None if absent or expired."""

    @abstractmethod
    def set(self, key: str, value: str, ttl: int) -> None:
        """Store a value that expires after ``ttl`` seconds."""

    @abstractmethod
    def delete_prefix(self, prefix: str) -> int:
        """Delete every key starting with ``prefix``. Returns the number removed."""

    @abstractmethod
    def ping(self) -> bool:
        """Liveness check."""


class MemoryCache(Cache):
    """In-process cache with a time-to-use per entry."""

    def __init__(self, maxsize: int = 1024, timer: Callable[[], float] = time.monotonic):
        # values are (payload, ttl) so each entry expires on its own schedule
        self._data: TLRUCache = TLRUCache(
            maxsize=maxsize,
            ttu=lambda _key, value, now: now + value[1],
            timer=timer,
        )
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._data.get(key)
        return entry[0] if entry is not None else None

    def set(self, key: str, value: str, ttl: int) -> None:
        with self._lock:
            self._data[key] = (value, ttl)

    def delete_prefix(self, prefix: str) -> int:
        with self._lock:
            self._data.expire()
            keys = [k for k in list(self._data.keys()) if k.startswith(prefix)]
            for k in keys:
                self._data.pop(k, None)
        return len(keys)

    def ping(self) -> bool:
        return True

    def __len__(self) -> int:
        with self._lock:
            self._data.expire()
            return len(self._data)


_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


class RedisCache(Cache):
    """Redis-backed cache (GET / SETEX / SCAN+DEL / PING)."""

    def __init__(self, client: redis.Redis):
        self.client = client

    @classmethod
    def from_url(cls, url: str, socket_timeout: float = 1.0) -> "RedisCache":
        client = redis.Redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )
        return cls(client)

    def get(self, key: str) -> str | None:
        try:
            return self.client.get(key)
        except redis.RedisError as e:
            raise CacheUnavailableError("get", str(e)) from e

    def set(self, key: str, value: str, ttl: int) -> None:
        try:
            self.client.setex(key, ttl, value)
        except redis.RedisError as e:
            raise CacheUnavailableError("set", str(e)) from e

    def delete_prefix(self, prefix: str) -> int:
        pattern = _GLOB_SPECIAL.sub(r"\\\1", prefix) + "*"
        try:
            keys = list(self.client.scan_iter(match=pattern))
            if not keys:
                return 0
            return self.client.delete(*keys)
        except redis.RedisError as e:
            raise CacheUnavailableError("delete_prefix", str(e)) from e

    def ping(self) -> bool:
        try:
            return bool(self.client.ping())
        except redis.RedisError as e:
            raise CacheUnavailableError("ping", str(e)) from e


def build_cache(settings: Settings) -> Cache:
    """Select the cache backend from settings."""
    backend = settings.CACHE_BACKEND.lower()
    if backend == "memory":
        logger.info(f"Cache backend: in-memory (maxsize={settings.CACHE_MAXSIZE})")
        return MemoryCache(maxsize=settings.CACHE_MAXSIZE)
    if backend == "redis":
        logger.info("Cache backend: redis")
        return RedisCache.from_url(settings.REDIS_URL, settings.REDIS_SOCKET_TIMEOUT)
    raise ValueError(f"Unsupported CACHE_BACKEND: {settings.CACHE_BACKEND!r} (memory | redis)")
