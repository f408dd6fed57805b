"""Base repository implementation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Iterator, Optional, Sequence

from sqlalchemy.sql.expression import Executable
from sqlalchemy.ext.asyncio import AsyncSession

from aion.taskstore.db.dialect import JsonParameterAdapter, PassthroughJsonAdapter
from aion.taskstore.db.statements import TaskStoreStatements
from aion.taskstore.serialization import to_json
from aion.taskstore.utils import utcnow


@dataclass(frozen=True)
class RepositoryContext:
    """Per-store configuration shared by all repositories."""
    statements: TaskStoreStatements
    json_adapter: JsonParameterAdapter = PassthroughJsonAdapter()
    batch_size: int = 100
    clock: Callable[[], datetime] = utcnow


class BaseRepository:
    """Base repository bound to one session and one store configuration."""

    def __init__(self, session: AsyncSession, context: RepositoryContext):
        self._session = session
        self._context = context

    @property
    def statements(self) -> TaskStoreStatements:
        return self._context.statements

    def _json_param(self, value: Any) -> Any:
        """Encode a value as JSON and wrap it for the target dialect."""
        return self._context.json_adapter.adapt(to_json(value))

    async def _batch_insert(self, stmt: Executable, rows: Sequence[dict[str, Any]]) -> None:
        """Insert rows in chunks of at most ``batch_size``."""
        for chunk in _chunks(rows, self._context.batch_size):
            await self._session.execute(stmt, list(chunk))

    async def _scalar(self, stmt: Executable, **params: Any) -> Optional[Any]:
        result = await self._session.execute(stmt, params)
        return result.scalar_one_or_none()


def _chunks(rows: Sequence[dict[str, Any]], size: int) -> Iterator[Sequence[dict[str, Any]]]:
    for start in range(0, len(rows), size):
        yield rows[start:start + size]
