"""
Cache-aside primitives over Redis.

Every backend call is wrapped so a Redis outage degrades to cache misses
instead of failing the request. Hit/miss counters are process-wide and only
reset through `reset_stats`.
"""

import json
import logging
import threading
from typing import Any, Optional

from redis.exceptions import RedisError

from core.logging import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)

DEFAULT_TTL = 300


class CacheCounters:
    """Hit/miss counters shared by every request in the process."""

    def __init__(self):
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def hit(self) -> int:
        with self._lock:
            self.hits += 1
            return self.hits

    def miss(self) -> int:
        with self._lock:
            self.misses += 1
            return self.misses

    def snapshot(self) -> tuple:
        with self._lock:
            return self.hits, self.misses

    def reset(self) -> None:
        with self._lock:
            self.hits = 0
            self.misses = 0


def hit_rate(hits: int, misses: int) -> float:
    total = hits + misses
    if total == 0:
        return 0.0
    return round(hits / total, 4)


class CacheStore:
    def __init__(self, client, counters: Optional[CacheCounters] = None):
        self.client = client
        self.counters = counters or CacheCounters()

    async def get(self, key: str) -> Optional[Any]:
        """Cached value for `key`, or None on a miss or backend fault."""
        try:
            raw = await self.client.get(key)
        except RedisError as e:
            logger.warning("Cache get error", extra={"key": key, "error": str(e)})
            return None

        if raw is None:
            total = self.counters.miss()
            logger.debug("Cache miss", extra={"key": key, "total_misses": total})
            return None

        try:
            value = json.loads(raw)
        except (TypeError, ValueError) as e:
            # Unreadable entry, drop it so the next read repopulates
            logger.warning("Cache decode error", extra={"key": key, "error": str(e)})
            await self.delete(key)
            self.counters.miss()
            return None

        total = self.counters.hit()
        logger.debug("Cache hit", extra={"key": key, "total_hits": total})
        return value

    async def set(self, key: str, value: Any, ttl: int = DEFAULT_TTL) -> bool:
        try:
            await self.client.set(key, json.dumps(value, default=str), ex=ttl)
        except (RedisError, TypeError, ValueError) as e:
            logger.warning("Cache set error", extra={"key": key, "error": str(e)})
            return False
        logger.debug("Cache set", extra={"key": key, "ttl": ttl})
        return True

    async def delete(self, key: str) -> bool:
        try:
            await self.client.delete(key)
        except RedisError as e:
            logger.warning("Cache delete error", extra={"key": key, "error": str(e)})
            return False
        return True

    async def delete_matching(self, pattern: str) -> int:
        """Delete every key matching a glob pattern. Returns the number deleted."""
        try:
            keys = [key async for key in self.client.scan_iter(match=pattern)]
            if not keys:
                return 0
            deleted = await self.client.delete(*keys)
        except RedisError as e:
            logger.warning("Cache delete pattern error", extra={"pattern": pattern, "error": str(e)})
            return 0
        logger.debug("Cache pattern deleted", extra={"pattern": pattern, "count": deleted})
        return deleted

    async def flush_all(self) -> bool:
        try:
            await self.client.flushdb()
        except RedisError as e:
            logger.error("Cache flush error", extra={"error": str(e)})
            return False
        logger.warning("Cache flushed - all keys deleted")
        return True

    async def ping(self) -> bool:
        try:
            return bool(await self.client.ping())
        except RedisError:
            return False

    async def stats(self) -> dict:
        hits, misses = self.counters.snapshot()
        result = {
            "connected": False,
            "hits": hits,
            "misses": misses,
            "hit_rate": hit_rate(hits, misses),
            "total_keys": 0,
        }
        try:
            result["total_keys"] = await self.client.dbsize()
            result["connected"] = True
        except RedisError as e:
            logger.warning("Cache stats error", extra={"error": str(e)})
        return result

    def reset_stats(self) -> None:
        self.counters.reset()
        logger.info("Cache statistics reset")
