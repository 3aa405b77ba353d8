"""
Key/value state behind the login defenses (rate-limit counters, lockouts, CAPTCHA
challenges, attempt history).

MemorySecurityStore is process-local: fine for a single server process. When redis_url
is configured, RedisSecurityStore shares the same state across processes. Redis errors
are logged and treated as "nothing recorded", the same way the store behaves when empty.
"""
import asyncio
import json
import logging
import time
from typing import Any, Callable

from acrossmedia.core.redis import get_redis_client

logger = logging.getLogger(__name__)

KEY_PREFIX = "security:"


class MemorySecurityStore:
    """Dict-backed store with per-key expiry. `clock` returns epoch seconds (injectable for tests)."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._data: dict[str, tuple[Any, float | None]] = {}

    def now(self) -> float:
        return self._clock()

    def _live(self, key: str) -> tuple[Any, float | None] | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        _, expires_at = entry
        if expires_at is not None and self.now() >= expires_at:
            del self._data[key]
            return None
        return entry

    async def incr(self, key: str, ttl_seconds: int) -> tuple[int, float]:
        """Increment a counter; the window starts on the first hit. Returns (count, expires_at)."""
        entry = self._live(key)
        if entry is None:
            expires_at = self.now() + ttl_seconds
            self._data[key] = (1, expires_at)
            return 1, expires_at
        count, expires_at = entry
        self._data[key] = (count + 1, expires_at)
        return count + 1, expires_at

    async def decr(self, key: str) -> None:
        entry = self._live(key)
        if entry is None:
            return
        count, expires_at = entry
        self._data[key] = (max(count - 1, 0), expires_at)

    async def get_json(self, key: str) -> dict | None:
        entry = self._live(key)
        return dict(entry[0]) if entry else None

    async def set_json(self, key: str, value: dict, ttl_seconds: int) -> None:
        self._data[key] = (dict(value), self.now() + ttl_seconds)

    async def pop_json(self, key: str) -> dict | None:
        entry = self._live(key)
        if entry is None:
            return None
        del self._data[key]
        return dict(entry[0])

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def push_timestamp(self, key: str, ts: float, keep: int, ttl_seconds: int) -> list[float]:
        """Append ts to a bounded history (last `keep` items). Returns the history, oldest first."""
        entry = self._live(key)
        history = list(entry[0]) if entry else []
        history.append(ts)
        history = history[-keep:]
        self._data[key] = (history, self.now() + ttl_seconds)
        return history

    async def purge(self) -> int:
        """Drop expired keys. Returns how many were removed."""
        now = self.now()
        expired = [k for k, (_, exp) in self._data.items() if exp is not None and now >= exp]
        for k in expired:
            del self._data[k]
        return len(expired)

    def __len__(self) -> int:
        return len(self._data)


class RedisSecurityStore:
    """Same interface on top of redis.asyncio. Keys are namespaced under security:."""

    def __init__(self, redis_client: Any, clock: Callable[[], float] = time.time):
        self._redis = redis_client
        self._clock = clock

    def now(self) -> float:
        return self._clock()

    async def incr(self, key: str, ttl_seconds: int) -> tuple[int, float]:
        k = KEY_PREFIX + key
        try:
            count = await self._redis.incr(k)
            if count == 1:
                await self._redis.expire(k, ttl_seconds)
                return 1, self.now() + ttl_seconds
            ttl = await self._redis.ttl(k)
            if ttl is None or ttl < 0:
                await self._redis.expire(k, ttl_seconds)
                ttl = ttl_seconds
            return int(count), self.now() + ttl
        except Exception as e:
            logger.warning("Redis security store incr failed for %s: %s", key, e, exc_info=False)
            return 0, self.now() + ttl_seconds

    async def decr(self, key: str) -> None:
        k = KEY_PREFIX + key
        try:
            count = await self._redis.decr(k)
            if count < 0:
                await self._redis.set(k, 0, keepttl=True)
        except Exception as e:
            logger.warning("Redis security store decr failed for %s: %s", key, e, exc_info=False)

    async def get_json(self, key: str) -> dict | None:
        try:
            raw = await self._redis.get(KEY_PREFIX + key)
            return json.loads(raw) if raw else None
        except Exception as e:
            logger.warning("Redis security store get failed for %s: %s", key, e, exc_info=False)
            return None

    async def set_json(self, key: str, value: dict, ttl_seconds: int) -> None:
        try:
            await self._redis.set(KEY_PREFIX + key, json.dumps(value), ex=ttl_seconds)
        except Exception as e:
            logger.warning("Redis security store set failed for %s: %s", key, e, exc_info=False)

    async def pop_json(self, key: str) -> dict | None:
        try:
            raw = await self._redis.getdel(KEY_PREFIX + key)
            return json.loads(raw) if raw else None
        except Exception as e:
            logger.warning("Redis security store pop failed for %s: %s", key, e, exc_info=False)
            return None

    async def delete(self, key: str) -> None:
        try:
            await self._redis.delete(KEY_PREFIX + key)
        except Exception as e:
            logger.warning("Redis security store delete failed for %s: %s", key, e, exc_info=False)

    async def push_timestamp(self, key: str, ts: float, keep: int, ttl_seconds: int) -> list[float]:
        k = KEY_PREFIX + key
        try:
            pipe = self._redis.pipeline()
            pipe.rpush(k, ts)
            pipe.ltrim(k, -keep, -1)
            pipe.expire(k, ttl_seconds)
            pipe.lrange(k, 0, -1)
            results = await pipe.execute()
            return [float(x) for x in results[-1]]
        except Exception as e:
            logger.warning("Redis security store push failed for %s: %s", key, e, exc_info=False)
            return [ts]

    async def purge(self) -> int:
        # Redis expires keys itself
        return 0


_memory_store = MemorySecurityStore()


async def get_security_store() -> MemorySecurityStore | RedisSecurityStore:
    """FastAPI dependency: Redis-backed store when configured and reachable, else the process store."""
    client = await get_redis_client()
    if client is not None:
        return RedisSecurityStore(client)
    return _memory_store


def memory_store() -> MemorySecurityStore:
    return _memory_store


async def security_state_janitor(store: MemorySecurityStore, interval_seconds: int) -> None:
    """Background task: purge expired in-process entries every interval."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            removed = await store.purge()
            if removed:
                logger.debug("Purged %d expired security entries", removed)
        except Exception:
            logger.exception("Security state purge failed")
