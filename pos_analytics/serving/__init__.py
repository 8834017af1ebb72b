"""
Serving Module
"""
from .counters import (
    CounterStore,
    InMemoryCounterStore,
    RedisCounterStore,
    build_counter_store,
    close_redis,
    get_redis,
    init_redis,
)

__all__ = [
    "CounterStore",
    "InMemoryCounterStore",
    "RedisCounterStore",
    "build_counter_store",
    "init_redis",
    "close_redis",
    "get_redis",
]
