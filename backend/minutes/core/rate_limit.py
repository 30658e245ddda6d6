# minutes/core/rate_limit.py
"""
Fixed-window rate limiting.

The limiter is a capability, not a module singleton: the application builds
one at startup (``build_rate_limiter``), keeps it on ``app.state`` and hands
it to handlers through the ``get_rate_limiter`` dependency. Two backends:

- ``InMemoryRateLimiter``: counters live in this process; correct only while
  a single instance serves traffic.
- ``RedisRateLimiter``: counters live in Redis (INCR + EXPIRE), shared by
  every instance pointing at the same server.
"""
import math
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict

import redis.asyncio as aioredis
from fastapi import HTTPException, Request, status

from minutes.core import logging as log


@dataclass(frozen=True)
class RateLimit:
    limit: int
    window_seconds: int


@dataclass(frozen=True)
class RateLimitResult:
    success: bool
    remaining: int
    reset_in: int  # seconds until the window resets


RATE_LIMITS: Dict[str, RateLimit] = {
    "login": RateLimit(limit=5, window_seconds=15 * 60),    # per client IP
    "upload": RateLimit(limit=10, window_seconds=60 * 60),  # per user
    "process": RateLimit(limit=5, window_seconds=60),       # per user
}


class RateLimiter(ABC):
    """Fixed-window counter keyed by an arbitrary string."""

    @abstractmethod
    async def check(self, key: str, limit: int, window_seconds: int) -> RateLimitResult:
        """Count one request for ``key`` and report whether it is allowed."""

    @abstractmethod
    async def reset(self, key: str) -> None:
        """Forget the window for ``key`` (e.g. after a successful login)."""

    @abstractmethod
    async def get_count(self, key: str) -> int:
        """Requests counted in the current window (0 when expired)."""

    async def close(self) -> None:
        return None


class InMemoryRateLimiter(RateLimiter):
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._store: Dict[str, tuple[int, float]] = {}  # key -> (count, reset_at)

    async def check(self, key: str, limit: int, window_seconds: int) -> RateLimitResult:
        now = self._clock()
        self._cleanup(now)
        entry = self._store.get(key)

        if entry is None:
            self._store[key] = (1, now + window_seconds)
            return RateLimitResult(True, limit - 1, window_seconds)

        count, reset_at = entry
        reset_in = max(0, math.ceil(reset_at - now))
        if count >= limit:
            return RateLimitResult(False, 0, reset_in)

        self._store[key] = (count + 1, reset_at)
        return RateLimitResult(True, limit - count - 1, reset_in)

    async def reset(self, key: str) -> None:
        self._store.pop(key, None)

    async def get_count(self, key: str) -> int:
        entry = self._store.get(key)
        if entry is None or self._clock() >= entry[1]:
            return 0
        return entry[0]

    def _cleanup(self, now: float) -> None:
        expired = [k for k, (_, reset_at) in self._store.items() if now >= reset_at]
        for k in expired:
            del self._store[k]


class RedisRateLimiter(RateLimiter):
    def __init__(self, client: aioredis.Redis, prefix: str = "ratelimit:"):
        self._redis = client
        self._prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def check(self, key: str, limit: int, window_seconds: int) -> RateLimitResult:
        redis_key = self._key(key)
        count = await self._redis.incr(redis_key)
        if count == 1:
            await self._redis.expire(redis_key, window_seconds)
            ttl = window_seconds
        else:
            ttl = await self._redis.ttl(redis_key)
            if ttl < 0:
                # Key lost its TTL (crash between INCR and EXPIRE); start a new window
                await self._redis.expire(redis_key, window_seconds)
                ttl = window_seconds

        if count > limit:
            return RateLimitResult(False, 0, ttl)
        return RateLimitResult(True, limit - count, ttl)

    async def reset(self, key: str) -> None:
        await self._redis.delete(self._key(key))

    async def get_count(self, key: str) -> int:
        value = await self._redis.get(self._key(key))
        return int(value) if value else 0

    async def close(self) -> None:
        await self._redis.aclose()


def build_rate_limiter(backend: str, redis_url: str | None = None) -> RateLimiter:
    if backend == "redis":
        return RedisRateLimiter(aioredis.from_url(redis_url, decode_responses=True))
    if backend == "memory":
        return InMemoryRateLimiter()
    raise ValueError(f"Unknown rate limit backend: {backend}")


def get_rate_limiter(request: Request) -> RateLimiter:
    """FastAPI dependency returning the application's limiter."""
    return request.app.state.rate_limiter


def get_client_ip(request: Request) -> str:
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"


async def enforce(limiter: RateLimiter, bucket: str, key: str, message: str = "Too many requests.") -> None:
    """
    Count a request against ``RATE_LIMITS[bucket]`` and raise 429 when over.
    """
    rule = RATE_LIMITS[bucket]
    full_key = f"{bucket}:{key}"
    result = await limiter.check(full_key, rule.limit, rule.window_seconds)
    if not result.success:
        log.rate_limit_exceeded(full_key, bucket)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"{message} Try again in {result.reset_in} seconds.",
            headers={"Retry-After": str(result.reset_in)},
        )
