"""Relational implementation of ``TaskStore``."""

from __future__ import annotations

import time
from datetime import datetime
from typing import Callable, Optional

from a2a.server.context import ServerCallContext
from a2a.server.tasks import TaskStore
from a2a.types import Task
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from typing_extensions import override

from aion.taskstore.db.dialect import JsonParameterAdapter
from aion.taskstore.db.repositories import (
    ArtifactsRepository,
    HistoryRepository,
    RepositoryContext,
    TasksRepository,
)
from aion.taskstore.db.schema import TaskStoreTables, build_tables
from aion.taskstore.db.statements import TaskStoreStatements
from aion.taskstore.exceptions import InvalidArgumentError, StorageError
from aion.taskstore.logging import get_logger, task_log_context
from aion.taskstore.settings import TaskStoreSettings
from aion.taskstore.utils import utcnow
from .cache import CacheStats, TaskCache

logger = get_logger(__name__)

__all__ = [
    "RelationalTaskStore",
]


class RelationalTaskStore(TaskStore):
    """Store tasks across the ``tasks``, ``history`` and ``artifacts`` tables.

    Every call runs in its own session and transaction: a save either lands
    in all tables or in none. Loaded tasks are kept in a ``TaskCache`` that
    is invalidated by every successful save or delete of the same id.

    Args:
        engine: Async engine whose pool provides the connections.
        settings: Persistence and cache options. Read from the environment if omitted.
        session_factory: Session factory bound to ``engine``. A new one is created if omitted.
        clock: Source of "now" for finalization and missing status timestamps.
        cache_timer: Clock in seconds for cache expiry.
    """

    def __init__(
            self,
            engine: AsyncEngine,
            settings: Optional[TaskStoreSettings] = None,
            *,
            session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
            clock: Optional[Callable[[], datetime]] = None,
            cache_timer: Optional[Callable[[], float]] = None,
    ):
        self.settings = settings or TaskStoreSettings()
        self.tables: TaskStoreTables = build_tables(self.settings.table_prefix)

        self._session_factory = session_factory or async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False
        )
        self._context = RepositoryContext(
            statements=TaskStoreStatements.from_tables(self.tables),
            json_adapter=JsonParameterAdapter.for_url(engine.url),
            batch_size=self.settings.batch_size,
            clock=clock or utcnow,
        )

        self._cache: Optional[TaskCache] = None
        if self.settings.cache.enabled:
            self._cache = TaskCache(self.settings.cache, timer=cache_timer or time.monotonic)

    @property
    def cache_stats(self) -> CacheStats:
        """Counters of the task cache; all zero when caching is disabled."""
        if self._cache is None:
            return CacheStats()
        return self._cache.stats()

    @override
    async def save(self, task: Task, context: ServerCallContext | None = None) -> None:
        """Persist a task in one transaction.

        Args:
            task: Task to store. History is appended, artifacts are replaced.
            context: Accepted for the ``TaskStore`` interface, unused.

        Raises:
            InvalidArgumentError: If ``task`` is None or has a blank id.
            SerializationError: If part of the task cannot be encoded.
            StorageError: If the database rejects the transaction.
        """
        if task is None:
            raise InvalidArgumentError("Task must not be None")
        task_id = self._require_id(task.id)

        with task_log_context(task_id):
            try:
                async with self._session_factory() as session, session.begin():
                    tasks = TasksRepository(session, self._context)
                    await tasks.save(task)
                    await HistoryRepository(session, self._context).save_all(task_id, task.history)
                    if self.settings.store_artifacts:
                        await ArtifactsRepository(session, self._context).save_all(task_id, task.artifacts)
                    if self.settings.store_metadata:
                        await tasks.update_metadata(task_id, task.metadata)
            except SQLAlchemyError as exc:
                logger.error("Failed to save task", exc_info=exc)
                raise StorageError("save", task_id) from exc

            self.invalidate(task_id)
            logger.debug("Task saved in state %s", task.status.state.value)

    @override
    async def get(self, task_id: str, context: ServerCallContext | None = None) -> Task | None:
        """Load a task, from the cache when possible.

        Returns:
            The task, or None if no record exists.

        Raises:
            InvalidArgumentError: If ``task_id`` is blank.
            DeserializationError: If a stored payload cannot be read back.
            StorageError: If the database cannot be read.
        """
        task_id = self._require_id(task_id)

        with task_log_context(task_id):
            if self._cache is not None:
                cached = self._cache.get(task_id)
                if cached is not None:
                    return cached

            try:
                task = await self._load(task_id)
            except SQLAlchemyError as exc:
                logger.error("Failed to load task", exc_info=exc)
                raise StorageError("load", task_id) from exc

            if task is not None and self._cache is not None:
                self._cache.put(task)
            return task

    @override
    async def delete(self, task_id: str, context: ServerCallContext | None = None) -> None:
        """Delete a task with its history and artifacts.

        Raises:
            InvalidArgumentError: If ``task_id`` is blank.
            StorageError: If the database rejects the transaction.
        """
        task_id = self._require_id(task_id)

        with task_log_context(task_id):
            try:
                async with self._session_factory() as session, session.begin():
                    deleted = await TasksRepository(session, self._context).delete_by_id(task_id)
            except SQLAlchemyError as exc:
                logger.error("Failed to delete task", exc_info=exc)
                raise StorageError("delete", task_id) from exc

            self.invalidate(task_id)
            if deleted:
                logger.debug("Task deleted")

    async def is_task_active(self, task_id: str) -> bool:
        """Check that a task exists and is not in a terminal state."""
        task_id = self._require_id(task_id)
        with task_log_context(task_id):
            try:
                async with self._session_factory() as session:
                    return await TasksRepository(session, self._context).is_task_active(task_id)
            except SQLAlchemyError as exc:
                logger.error("Failed to read task state", exc_info=exc)
                raise StorageError("read state of", task_id) from exc

    async def is_task_finalized(self, task_id: str) -> bool:
        """Check that a task exists and has been saved in a terminal state."""
        task_id = self._require_id(task_id)
        with task_log_context(task_id):
            try:
                async with self._session_factory() as session:
                    return await TasksRepository(session, self._context).is_task_finalized(task_id)
            except SQLAlchemyError as exc:
                logger.error("Failed to read task state", exc_info=exc)
                raise StorageError("read state of", task_id) from exc

    def invalidate(self, task_id: str) -> None:
        """Drop the cached snapshot of a task, if any."""
        if self._cache is not None:
            self._cache.invalidate(task_id)

    async def _load(self, task_id: str) -> Optional[Task]:
        async with self._session_factory() as session:
            tasks = TasksRepository(session, self._context)
            record = await tasks.find_by_id(task_id)
            if record is None:
                return None

            status = tasks.build_task_status(record)
            history = await HistoryRepository(session, self._context).find_by_task_id(
                task_id, record.context_id)

            artifacts = None
            if self.settings.store_artifacts:
                artifacts = await ArtifactsRepository(session, self._context).find_by_task_id(task_id) or None

            metadata = None
            if self.settings.store_metadata:
                metadata = tasks.load_metadata(record)

        return Task(
            id=record.task_id,
            context_id=record.context_id,
            status=status,
            history=history,
            artifacts=artifacts,
            metadata=metadata,
        )

    @staticmethod
    def _require_id(task_id: Optional[str]) -> str:
        if task_id is None or not str(task_id).strip():
            raise InvalidArgumentError("Task id must not be blank")
        return task_id
