"""
Sliding-window rate limiting for login and invite creation.

Windows live in Redis when ``redis_url`` is configured so that every worker
shares them; without Redis each process keeps its own window in memory.
"""
import logging
import time
import uuid
from collections import defaultdict, deque
from typing import Deque, Dict, Optional

import redis.asyncio as redis
from fastapi import Request

from app.config import settings
from app.core.errors import RateLimited

logger = logging.getLogger(__name__)


CLEANUP_INTERVAL_SECONDS = 60


class MemoryWindow:
    """Per-process sliding-window log. Idle keys are swept so the map stays bounded."""

    def __init__(self):
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._windows: Dict[str, int] = {}
        self._last_cleanup = 0.0

    def _cleanup(self, now: float) -> None:
        idle = [
            key
            for key, hits in self._hits.items()
            if not hits or hits[-1] <= now - self._windows.get(key, 0)
        ]
        for key in idle:
            del self._hits[key]
            self._windows.pop(key, None)
        if idle:
            logger.debug(f"Dropped {len(idle)} idle rate limit keys")
        self._last_cleanup = now

    async def hit(self, key: str, limit: int, window_seconds: int) -> bool:
        # no awaits below, so check-then-append cannot interleave
        now = time.monotonic()
        if now - self._last_cleanup >= CLEANUP_INTERVAL_SECONDS:
            self._cleanup(now)
        hits = self._hits[key]
        self._windows[key] = window_seconds
        while hits and hits[0] <= now - window_seconds:
            hits.popleft()
        if len(hits) >= limit:
            return False
        hits.append(now)
        return True

    def reset(self) -> None:
        self._hits.clear()
        self._windows.clear()


class RedisWindow:
    """Sliding-window log kept in a Redis sorted set per key."""

    def __init__(self, client: "redis.Redis"):
        self.client = client

    async def hit(self, key: str, limit: int, window_seconds: int) -> bool:
        now = time.time()
        async with self.client.pipeline(transaction=True) as pipe:
            pipe.zremrangebyscore(key, 0, now - window_seconds)
            pipe.zcard(key)
            _, count = await pipe.execute()
        if count >= limit:
            return False
        async with self.client.pipeline(transaction=True) as pipe:
            pipe.zadd(key, {f"{now}:{uuid.uuid4().hex}": now})
            pipe.expire(key, window_seconds)
            await pipe.execute()
        return True


_window = None


def get_window():
    global _window
    if _window is None:
        if settings.redis_url:
            logger.info("Rate limiting backed by Redis")
            _window = RedisWindow(redis.from_url(settings.redis_url, decode_responses=True))
        else:
            logger.info("Rate limiting backed by process memory")
            _window = MemoryWindow()
    return _window


def client_key(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def create_rate_limiter(limit: int, window_seconds: int, key_prefix: str = "rate_limit"):
    """
    Create a rate limiter dependency with specific parameters.

    Usage:
        login_limit = create_rate_limiter(limit=10, window_seconds=60, key_prefix="login")

        @router.post("/google")
        async def login(..., _: None = Depends(login_limit)):
            ...
    """

    async def rate_limiter(request: Request) -> None:
        key = f"{key_prefix}:{client_key(request)}"
        allowed = await get_window().hit(key, limit, window_seconds)
        if not allowed:
            logger.warning(f"Rate limit exceeded for {key} ({limit}/{window_seconds}s)")
            raise RateLimited(
                f"Rate limit exceeded. Maximum {limit} requests per {window_seconds} seconds."
            )

    return rate_limiter


def reset_memory_window(window: Optional[MemoryWindow] = None) -> None:
    target = window or _window
    if isinstance(target, MemoryWindow):
        target.reset()
