"""Relational store for A2A tasks."""

from .exceptions import (
    DeserializationError,
    InvalidArgumentError,
    SerializationError,
    StorageError,
    TaskStoreError,
)
from .settings import CacheSettings, DatabaseSettings, TaskStoreSettings
from .tasks import CacheStats, RelationalTaskStore, TaskCache, TaskStoreFactory

__all__ = [
    "RelationalTaskStore",
    "TaskStoreFactory",
    "TaskCache",
    "CacheStats",
    "TaskStoreSettings",
    "CacheSettings",
    "DatabaseSettings",
    "TaskStoreError",
    "InvalidArgumentError",
    "SerializationError",
    "DeserializationError",
    "StorageError",
]
