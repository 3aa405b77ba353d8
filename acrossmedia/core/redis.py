"""
Optional async Redis client for shared login security state. If redis_url is empty or the
connection fails, returns None and callers fall back to the in-process store.
A failed connection is not retried for RECONNECT_BACKOFF_SECONDS so login requests
do not each pay for a connect timeout.
"""
import asyncio
import logging
import time
from typing import Any

from acrossmedia.config import get_settings

logger = logging.getLogger(__name__)

RECONNECT_BACKOFF_SECONDS = 30

_redis_client: Any = None
_retry_after: float = 0.0
_connect_lock = asyncio.Lock()


def _display_url(url: str) -> str:
    return url.split("@")[-1] if "@" in url else url


async def get_redis_client() -> Any:
    """Lazy singleton: one async Redis client, or None if disabled or currently unreachable."""
    global _redis_client, _retry_after
    if _redis_client is not None:
        return _redis_client
    url = (get_settings().redis_url or "").strip()
    if not url or time.monotonic() < _retry_after:
        return None
    async with _connect_lock:
        if _redis_client is not None:
            return _redis_client
        try:
            from redis.asyncio import Redis
            client = Redis.from_url(url, decode_responses=True, socket_connect_timeout=2)
            await client.ping()
        except Exception as e:
            _retry_after = time.monotonic() + RECONNECT_BACKOFF_SECONDS
            logger.warning(
                "Redis unavailable at %s (using in-process security store for %ds): %s",
                _display_url(url), RECONNECT_BACKOFF_SECONDS, e,
            )
            return None
        _redis_client = client
        logger.info("Redis security store connected: %s", _display_url(url))
        return _redis_client


async def close_redis() -> None:
    """Graceful shutdown: close Redis connection."""
    global _redis_client
    if _redis_client is not None:
        try:
            await _redis_client.aclose()
        except Exception as e:
            logger.warning("Redis close error: %s", e)
        _redis_client = None
