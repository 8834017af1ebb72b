"""
Unit Tests - Rate Limit Counter Stores
"""
import pytest

from pos_analytics.serving.counters import InMemoryCounterStore, RedisCounterStore


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakePipeline:
    def __init__(self, counts: dict):
        self.counts = counts
        self.commands = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False

    def incr(self, key):
        self.commands.append(("incr", key))

    def expire(self, key, seconds):
        self.commands.append(("expire", key, seconds))

    async def execute(self):
        results = []
        for command in self.commands:
            if command[0] == "incr":
                self.counts[command[1]] = self.counts.get(command[1], 0) + 1
                results.append(self.counts[command[1]])
            else:
                results.append(True)
        self.commands = []
        return results


class FakeRedis:
    def __init__(self):
        self.counts = {}

    def pipeline(self, transaction=True):
        return FakePipeline(self.counts)


class TestInMemoryCounterStore:
    """Tests for the sliding-window store"""

    async def test_counts_hits_per_key(self):
        store = InMemoryCounterStore(clock=FakeClock())

        assert await store.hit("10.0.0.1", 60, 10) == 1
        assert await store.hit("10.0.0.1", 60, 10) == 2
        assert await store.hit("10.0.0.2", 60, 10) == 1

    async def test_old_hits_leave_the_window(self):
        clock = FakeClock()
        store = InMemoryCounterStore(clock=clock)

        await store.hit("client", 60, 10)
        clock.now += 30
        await store.hit("client", 60, 10)
        clock.now += 31

        assert await store.hit("client", 60, 10) == 2

    async def test_rejected_hits_are_not_recorded(self):
        """Test a client retrying while limited is admitted once the window moves on"""
        clock = FakeClock()
        store = InMemoryCounterStore(clock=clock)

        assert await store.hit("client", 60, 2) == 1
        clock.now += 10
        assert await store.hit("client", 60, 2) == 2

        for _ in range(5):
            clock.now += 5
            assert await store.hit("client", 60, 2) == 3

        # First accepted hit is now 60s old; the retries left no trace
        clock.now += 25
        assert await store.hit("client", 60, 2) == 2

    async def test_idle_clients_are_dropped(self):
        clock = FakeClock()
        store = InMemoryCounterStore(clock=clock)

        for i in range(50):
            await store.hit(f"10.0.0.{i}", 60, 10)
        assert len(store) == 50

        clock.now += 61
        await store.hit("10.0.1.1", 60, 10)

        assert len(store) == 1


class TestRedisCounterStore:
    """Tests for the shared fixed-window store"""

    async def test_increments_namespaced_window_key(self):
        client = FakeRedis()
        store = RedisCounterStore(client, namespace="test")

        assert await store.hit("client", 60, 10) == 1
        assert await store.hit("client", 60, 10) == 2

        (key,) = client.counts
        assert key.startswith("test:client:")
