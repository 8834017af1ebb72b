"""
Request Counter Stores

Rate limiting state lives behind a small ``CounterStore`` interface so the
middleware holds no process-wide maps of its own:

- InMemoryCounterStore: sliding window, scoped to one worker process
- RedisCounterStore: fixed window shared by every worker through Redis

Report data itself is never cached; Redis only holds request counters.
"""

import asyncio
import time
from typing import Dict, List, Optional, Protocol

import structlog
from redis.asyncio import ConnectionPool, Redis

from pos_analytics.config import get_settings

logger = structlog.get_logger(__name__)

# Global Redis connection
_redis_pool: Optional[ConnectionPool] = None
_redis_client: Optional[Redis] = None


async def init_redis() -> Redis:
    """Initialize Redis connection pool"""
    global _redis_pool, _redis_client

    if _redis_client is not None:
        return _redis_client

    settings = get_settings()
    _redis_pool = ConnectionPool.from_url(
        settings.redis.get_url(),
        max_connections=settings.redis.max_connections,
        socket_timeout=settings.redis.socket_timeout,
        decode_responses=True,
    )
    _redis_client = Redis(connection_pool=_redis_pool)

    try:
        await _redis_client.ping()
        logger.info("Redis connection established")
    except Exception as e:
        logger.error("Redis connection failed", error=str(e))
        raise

    return _redis_client


async def close_redis() -> None:
    """Close Redis connection pool"""
    global _redis_pool, _redis_client

    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None

    if _redis_pool:
        await _redis_pool.disconnect()
        _redis_pool = None
        logger.info("Redis connection closed")


def get_redis() -> Redis:
    """Get Redis client instance"""
    if _redis_client is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis_client


class CounterStore(Protocol):
    """Counts hits per key within a time window."""

    async def hit(self, key: str, window_seconds: int, limit: int) -> int:
        """
        Count one hit for ``key`` and return the hits in the current window,
        this one included. A result above ``limit`` means the hit is rejected.
        """
        ...


class InMemoryCounterStore:
    """
    Sliding-window counter held by the current process.

    Each worker keeps its own counts, so the effective limit scales with the
    number of workers. Rejected hits are not recorded, so a client that keeps
    retrying is let through again once its accepted hits age out. Clients
    idle for a whole window are dropped.
    """

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._hits: Dict[str, List[float]] = {}
        self._last_sweep = clock()
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._hits)

    def _sweep(self, now: float, window_seconds: int) -> None:
        for key in list(self._hits):
            if now - self._hits[key][-1] >= window_seconds:
                del self._hits[key]
        self._last_sweep = now

    async def hit(self, key: str, window_seconds: int, limit: int) -> int:
        now = self._clock()
        async with self._lock:
            if now - self._last_sweep >= window_seconds:
                self._sweep(now, window_seconds)

            recent = [t for t in self._hits.get(key, ()) if now - t < window_seconds]
            if len(recent) >= limit:
                if recent:
                    self._hits[key] = recent
                return len(recent) + 1

            recent.append(now)
            self._hits[key] = recent
            return len(recent)


class RedisCounterStore:
    """
    Fixed-window counter in Redis, shared across workers.

    Every hit is counted, rejected ones included; the key expires with its
    window, so a limited client starts fresh in the next window.

    Example:
        store = RedisCounterStore(get_redis())
        count = await store.hit("10.0.0.1", window_seconds=60, limit=100)
    """

    def __init__(self, client: Redis, namespace: str = "ratelimit"):
        self.client = client
        self.namespace = namespace

    async def hit(self, key: str, window_seconds: int, limit: int) -> int:
        window = int(time.time() // window_seconds)
        redis_key = f"{self.namespace}:{key}:{window}"
        async with self.client.pipeline(transaction=True) as pipe:
            pipe.incr(redis_key)
            pipe.expire(redis_key, window_seconds)
            count, _ = await pipe.execute()
        return int(count)


def build_counter_store() -> CounterStore:
    """Counter store for the configured rate-limit backend."""
    settings = get_settings()
    if settings.security.rate_limit_backend == "redis":
        return RedisCounterStore(get_redis())
    return InMemoryCounterStore()
