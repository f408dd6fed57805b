"""Task record repository implementation."""

from __future__ import annotations

from typing import Any, Optional

from a2a.types import Message, Task, TaskState, TaskStatus
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from aion.taskstore.exceptions import DeserializationError
from aion.taskstore.logging import get_logger
from aion.taskstore.serialization import from_json, model_to_json
from aion.taskstore.types import TaskRecord, is_terminal_state
from aion.taskstore.utils import format_timestamp, parse_timestamp
from .base import BaseRepository

logger = get_logger(__name__)


class TasksRepository(BaseRepository):
    """Repository for the single record row of each task."""

    async def save(self, task: Task) -> None:
        """Insert or update the record row of a task.

        The row is updated first; when no row matched it is inserted, and an
        insert that loses a race against a concurrent first save falls back
        to the update.
        """
        params = self._record_params(task)
        if await self._update_record(params):
            return

        try:
            async with self._session.begin_nested():
                await self._session.execute(self.statements.insert_task, params)
        except IntegrityError:
            logger.warning("Task record was inserted concurrently, retrying as update")
            await self._update_record(params)

    async def find_by_id(self, task_id: str) -> Optional[TaskRecord]:
        """Find a record row by task id."""
        result = await self._session.execute(self.statements.select_task, {"task_id": task_id})
        row = result.mappings().one_or_none()
        if row is None:
            return None
        return TaskRecord.model_validate(dict(row))

    async def update_metadata(self, task_id: str, metadata: Optional[dict[str, Any]]) -> None:
        """Replace the metadata of a task; empty metadata is stored as NULL."""
        await self._session.execute(
            self.statements.update_metadata,
            {"task_id": task_id, "metadata_json": self._json_param(metadata or None)})

    async def delete_by_id(self, task_id: str) -> bool:
        """Delete a record row; history and artifacts go with it by cascade."""
        result = await self._session.execute(self.statements.delete_task, {"task_id": task_id})
        return result.rowcount > 0

    async def is_task_active(self, task_id: str) -> bool:
        """Check that the task exists and its state is not terminal."""
        state = await self._scalar(self.statements.select_status_state, task_id=task_id)
        return state is not None and not is_terminal_state(state)

    async def is_task_finalized(self, task_id: str) -> bool:
        """Check that the task exists and has been saved in a terminal state."""
        finalized_at = await self._scalar(self.statements.select_finalized_at, task_id=task_id)
        return finalized_at is not None

    @staticmethod
    def build_task_status(record: TaskRecord) -> TaskStatus:
        """Rebuild the task status from its record row.

        Raises:
            DeserializationError: If the stored state or status message cannot be read.
        """
        try:
            state = TaskState(record.status_state)
        except ValueError as exc:
            raise DeserializationError(f"Unknown task state: {record.status_state!r}") from exc

        message = None
        payload = from_json(record.status_message_json, dict)
        if payload is not None:
            try:
                message = Message.model_validate(payload)
            except ValidationError as exc:
                raise DeserializationError("Invalid status message") from exc

        return TaskStatus(
            state=state,
            message=message,
            timestamp=format_timestamp(record.status_timestamp),
        )

    @staticmethod
    def load_metadata(record: TaskRecord) -> Optional[dict[str, Any]]:
        """Decode the metadata column of a record row; empty maps become None."""
        return from_json(record.metadata_json, dict) or None

    async def _update_record(self, params: dict[str, Any]) -> int:
        if params["finalized_at"] is not None:
            stmt = self.statements.update_task_finalizing
        else:
            stmt = self.statements.update_task_active
            params = {key: value for key, value in params.items() if key != "finalized_at"}

        result = await self._session.execute(stmt, params)
        return result.rowcount

    def _record_params(self, task: Task) -> dict[str, Any]:
        now = self._context.clock()
        status = task.status

        status_timestamp = parse_timestamp(status.timestamp) or now
        finalized_at = now if is_terminal_state(status.state) else None

        return {
            "task_id": task.id,
            "context_id": task.context_id or task.id,
            "status_state": status.state.value,
            "status_message_json": self._context.json_adapter.adapt(model_to_json(status.message)),
            "status_timestamp": status_timestamp,
            "finalized_at": finalized_at,
        }
