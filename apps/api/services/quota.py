"""Fixed-window hit counters kept in Redis, counted in-process while Redis is down."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Dict, Tuple

import redis.asyncio as redis
from redis.exceptions import RedisError

from config import settings

logger = logging.getLogger(__name__)

KEY_PREFIX = "trwl:"

# key -> (hits, window end as unix time)
_local_counters: Dict[str, Tuple[int, float]] = {}
_local_lock = asyncio.Lock()


async def _hit_redis(key: str, window_seconds: int) -> int:
    client = redis.from_url(settings.REDIS_URL, decode_responses=True)
    try:
        hits = await client.incr(key)
        if hits == 1:
            await client.expire(key, window_seconds)
        return int(hits)
    finally:
        await client.aclose()


async def _hit_local(key: str, window_seconds: int) -> int:
    now = time.time()
    async with _local_lock:
        for expired in [k for k, (_, end) in _local_counters.items() if now >= end]:
            del _local_counters[expired]
        hits, window_end = _local_counters.get(key, (0, now + window_seconds))
        _local_counters[key] = (hits + 1, window_end)
        return hits + 1


async def hit(name: str, window_seconds: int) -> int:
    """Count one hit for ``name`` in its current window and return the total so far."""
    key = f"{KEY_PREFIX}{name}"
    window_seconds = max(int(window_seconds), 1)
    try:
        return await _hit_redis(key, window_seconds)
    except (RedisError, OSError) as exc:
        logger.debug("Counting %s in-process, redis unavailable: %s", key, exc)
        return await _hit_local(key, window_seconds)


async def allow(name: str, limit: int, window_seconds: int) -> bool:
    return await hit(name, window_seconds) <= max(int(limit), 1)


def reset_local_counters() -> None:
    _local_counters.clear()
