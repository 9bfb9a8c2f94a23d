# apps/infrastructure/cache.py
"""
TTL Cache

Small prefixed key/value cache on top of the Django cache backend.
Entries expire after their TTL; there is no eviction policy beyond that.
"""
import logging
from typing import Any, Callable, Optional

from django.conf import settings
from django.core.cache import cache

logger = logging.getLogger(__name__)

# Sentinel so a cached None is distinguishable from a miss
_MISSING = object()


class TTLCache:
    """
    Namespaced cache with per-entry TTL

    Every key written is recorded in a registry entry so clear() can drop
    the whole namespace without touching other users of the backend.
    """

    def __init__(self, prefix: str, default_ttl: Optional[int] = None):
        self.prefix = prefix
        self.default_ttl = default_ttl
        self.hits = 0
        self.misses = 0

    def _ttl(self, ttl: Optional[int]) -> int:
        if ttl is not None:
            return ttl
        if self.default_ttl is not None:
            return self.default_ttl
        return getattr(settings, "STORE_CACHE_TTL", 300)

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    def _registry_key(self) -> str:
        return f"{self.prefix}:__keys__"

    def get(self, key: str, default: Any = None) -> Any:
        value = cache.get(self._key(key), _MISSING)
        if value is _MISSING:
            self.misses += 1
            return default
        self.hits += 1
        return value

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        ttl = self._ttl(ttl)
        cache.set(self._key(key), value, ttl)

        keys = cache.get(self._registry_key(), set())
        keys.add(key)
        # Registry outlives entries so clear() still finds them
        cache.set(self._registry_key(), keys, None)
        logger.debug(f"Cached {self._key(key)} for {ttl}s")

    def get_or_set(self, key: str, factory: Callable[[], Any], ttl: Optional[int] = None) -> Any:
        """Return the cached value, computing and storing it on a miss"""
        value = self.get(key, _MISSING)
        if value is _MISSING:
            value = factory()
            self.set(key, value, ttl)
        return value

    def delete(self, key: str) -> None:
        cache.delete(self._key(key))
        keys = cache.get(self._registry_key(), set())
        if key in keys:
            keys.discard(key)
            cache.set(self._registry_key(), keys, None)

    def has(self, key: str) -> bool:
        return cache.get(self._key(key), _MISSING) is not _MISSING

    def clear(self) -> int:
        """
        Drop every key written under this prefix

        Returns:
            Number of keys removed
        """
        keys = cache.get(self._registry_key(), set())
        cache.delete_many([self._key(k) for k in keys])
        cache.delete(self._registry_key())
        logger.info(f"Cleared {len(keys)} cached entries under '{self.prefix}'")
        return len(keys)

    def stats(self) -> dict:
        total = self.hits + self.misses
        return {
            "prefix": self.prefix,
            "keys": len(cache.get(self._registry_key(), set())),
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": round(self.hits / total, 3) if total else 0.0,
        }


# Shared namespaces
catalog_cache = TTLCache("catalog")
analytics_cache = TTLCache("analytics", default_ttl=600)
