from .cache import CacheStats, TaskCache
from .factory import TaskStoreFactory
from .store import RelationalTaskStore

__all__ = [
    "CacheStats",
    "TaskCache",
    "RelationalTaskStore",
    "TaskStoreFactory",
]
