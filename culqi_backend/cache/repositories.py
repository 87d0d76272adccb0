import copy
import json
import time
from abc import ABC, abstractmethod
from typing import Any, Callable

import inject
from redis import Redis

from .models import CacheEntry


class TokenCacheRepository(ABC):
    TYPE_IN_MEMORY: str = "in_memory"
    TYPE_REDIS: str = "redis"

    @abstractmethod
    def get(self, key: str) -> dict[str, Any] | None:
        ...  # pragma: no cover

    @abstractmethod
    def set(self, key: str, value: dict[str, Any], ttl: int) -> None:
        ...  # pragma: no cover


class InMemoryTokenCacheRepository(TokenCacheRepository):
    """
    Process local token cache. Expired entries are dropped when read and
    swept on every write, so the storage only holds live tokens.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self.clock = clock
        self.storage: dict[str, CacheEntry] = {}

    def get(self, key: str) -> dict[str, Any] | None:
        entry = self.storage.get(key)
        if entry is None:
            return None

        if entry.is_expired(self.clock()):
            del self.storage[key]
            return None

        # Callers get their own copy and cannot alter the cached token
        return copy.deepcopy(entry.value)

    def set(self, key: str, value: dict[str, Any], ttl: int) -> None:
        now = self.clock()
        self.purge_expired(now)
        self.storage[key] = CacheEntry(
            value=copy.deepcopy(value), expires_at=now + ttl
        )

    def purge_expired(self, now: float) -> None:
        expired = [key for key, entry in self.storage.items() if entry.is_expired(now)]
        for key in expired:
            del self.storage[key]


class RedisTokenCacheRepository(TokenCacheRepository):
    KEY_PREFIX: str = "token:"

    redis: Redis

    @inject.autoparams()
    def __init__(self, redis: Redis) -> None:
        self.redis = redis

    def get(self, key: str) -> dict[str, Any] | None:
        value = self.redis.get(self.KEY_PREFIX + key)

        if value and isinstance(value, str):
            cached: dict[str, Any] = json.loads(value)
            return cached

        return None

    def set(self, key: str, value: dict[str, Any], ttl: int) -> None:
        try:
            self.redis.setex(self.KEY_PREFIX + key, ttl, json.dumps(value))
        except Exception as e:
            raise Exception(f"Error caching token {key}: {e}")
