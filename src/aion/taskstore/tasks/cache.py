"""In-process read-through cache of task snapshots."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from a2a.types import Task
from cachetools import TLRUCache

from aion.taskstore.logging import get_logger
from aion.taskstore.settings import CacheSettings
from aion.taskstore.types import is_terminal_state

logger = get_logger(__name__)

__all__ = [
    "CacheStats",
    "TaskCache",
]


@dataclass(frozen=True)
class CacheStats:
    """Snapshot of cache counters."""
    hits: int = 0
    misses: int = 0
    evictions: int = 0

    @property
    def requests(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        if not self.requests:
            return 0.0
        return self.hits / self.requests


class _TaskLRUCache(TLRUCache):
    """TLRU cache reporting entries dropped for size or age."""

    def __init__(self, maxsize, ttu, timer, on_evict: Callable[[], None]):
        super().__init__(maxsize, ttu, timer)
        self._on_evict = on_evict

    def popitem(self):
        key, value = super().popitem()
        self._on_evict()
        return key, value

    def expire(self, time=None):
        expired = super().expire(time)
        for _ in expired:
            self._on_evict()
        return expired


class TaskCache:
    """Size-bounded task cache with a longer lifetime for finished tasks.

    Entries for tasks in a terminal state live for ``ttl_finalized`` seconds,
    all others for ``ttl_active`` seconds; the least recently used entry goes
    first once ``max_size`` is reached. Snapshots are deep copies in both
    directions so callers never share state with the cache.

    Args:
        settings: Cache tuning.
        timer: Clock in seconds used for expiry, ``time.monotonic`` by default.
    """

    def __init__(self, settings: Optional[CacheSettings] = None, timer: Callable[[], float] = time.monotonic):
        self.settings = settings or CacheSettings()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._cache = _TaskLRUCache(
            maxsize=self.settings.max_size,
            ttu=self._time_to_use,
            timer=timer,
            on_evict=self._record_eviction,
        )

    def get(self, task_id: str) -> Optional[Task]:
        with self._lock:
            task = self._cache.get(task_id)
            if task is None:
                self._record(miss=True)
                logger.debug("Cache miss")
                return None
            self._record(miss=False)
        logger.debug("Cache hit")
        return task.model_copy(deep=True)

    def put(self, task: Task) -> None:
        """Cache a snapshot of ``task``; the lifetime follows its state."""
        snapshot = task.model_copy(deep=True)
        with self._lock:
            self._cache[task.id] = snapshot

    def invalidate(self, task_id: str) -> None:
        with self._lock:
            self._cache.pop(task_id, None)

    def clear(self) -> None:
        with self._lock:
            for task_id in list(self._cache.keys()):
                self._cache.pop(task_id, None)

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(hits=self._hits, misses=self._misses, evictions=self._evictions)

    def __len__(self) -> int:
        with self._lock:
            self._cache.expire()
            return len(self._cache)

    def __contains__(self, task_id: str) -> bool:
        with self._lock:
            return task_id in self._cache

    def _time_to_use(self, task_id: str, task: Task, now: float) -> float:
        if is_terminal_state(task.status.state):
            return now + self.settings.ttl_finalized
        return now + self.settings.ttl_active

    def _record(self, miss: bool) -> None:
        if not self.settings.record_stats:
            return
        if miss:
            self._misses += 1
        else:
            self._hits += 1

    def _record_eviction(self) -> None:
        logger.debug("Cache entry evicted")
        if self.settings.record_stats:
            self._evictions += 1
