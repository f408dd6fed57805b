import pytest
from a2a.types import TaskState

from aion.taskstore.settings import CacheSettings
from aion.taskstore.tasks.cache import CacheStats, TaskCache

from conftest import make_task, text_message


class FakeTimer:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class TestTaskCache:
    """Tests for TaskCache."""

    @pytest.fixture
    def timer(self):
        return FakeTimer()

    @pytest.fixture
    def settings(self):
        return CacheSettings(_env_file=None, ttl_active=60, ttl_finalized=600, max_size=3, record_stats=True)

    @pytest.fixture
    def cache(self, settings, timer):
        return TaskCache(settings, timer=timer)

    def test_miss_then_hit(self, cache):
        task = make_task("t1")

        assert cache.get("t1") is None
        cache.put(task)

        assert cache.get("t1") == task
        assert cache.stats() == CacheStats(hits=1, misses=1, evictions=0)

    def test_active_entry_expires_after_active_ttl(self, cache, timer):
        cache.put(make_task("t1", state=TaskState.working))

        timer.advance(59)
        assert cache.get("t1") is not None
        timer.advance(2)
        assert cache.get("t1") is None

    def test_terminal_entry_outlives_active_ttl(self, cache, timer):
        cache.put(make_task("done", state=TaskState.completed))
        cache.put(make_task("busy", state=TaskState.working))

        timer.advance(61)
        assert cache.get("busy") is None
        assert cache.get("done") is not None

        timer.advance(540)
        assert cache.get("done") is None

    def test_size_bound_evicts_least_recently_used(self, cache):
        for task_id in ("a", "b", "c"):
            cache.put(make_task(task_id))
        cache.get("a")
        cache.put(make_task("d"))

        assert "b" not in cache
        assert all(task_id in cache for task_id in ("a", "c", "d"))
        assert cache.stats().evictions == 1

    def test_expired_entries_count_as_evictions(self, cache, timer):
        cache.put(make_task("t1"))
        timer.advance(61)

        assert len(cache) == 0
        assert cache.stats().evictions == 1

    def test_invalidate(self, cache):
        cache.put(make_task("t1"))
        cache.invalidate("t1")
        cache.invalidate("never-cached")

        assert cache.get("t1") is None
        assert cache.stats().evictions == 0

    def test_snapshots_are_isolated(self, cache):
        task = make_task("t1", history=[text_message("hi")])
        cache.put(task)
        task.history.append(text_message("mutated after put"))

        first = cache.get("t1")
        first.history.clear()

        assert len(cache.get("t1").history) == 1

    def test_stats_disabled(self, timer):
        cache = TaskCache(CacheSettings(_env_file=None, record_stats=False), timer=timer)
        cache.get("t1")
        cache.put(make_task("t1"))
        cache.get("t1")

        assert cache.stats() == CacheStats()

    def test_hit_rate(self):
        assert CacheStats().hit_rate == 0.0
        assert CacheStats(hits=3, misses=1).hit_rate == 0.75
        assert CacheStats(hits=3, misses=1).requests == 4

    def test_clear(self, cache):
        cache.put(make_task("t1"))
        cache.clear()
        assert len(cache) == 0
