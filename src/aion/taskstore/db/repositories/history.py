"""History repository implementation."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from a2a.types import Message, Role
from sqlalchemy.engine import RowMapping

from aion.taskstore.exceptions import DeserializationError
from aion.taskstore.logging import get_logger
from aion.taskstore.serialization import PartCodec, from_json
from .base import BaseRepository

logger = get_logger(__name__)


class HistoryRepository(BaseRepository):
    """Append-only message log of each task, ordered by sequence number."""

    async def save_all(self, task_id: str, messages: Optional[Sequence[Message]]) -> None:
        """Persist the messages that are not stored yet.

        ``messages`` is the full history of the task. Rows already stored are
        authoritative: only the part of ``messages`` beyond the stored count
        is inserted, and a list that is not longer than what is stored
        changes nothing. An empty list clears the history.

        Args:
            task_id: Owning task.
            messages: Full message history in order.
        """
        if not messages:
            await self._session.execute(self.statements.delete_history, {"task_id": task_id})
            logger.debug("History cleared")
            return

        existing = await self._scalar(self.statements.count_history, task_id=task_id) or 0
        if len(messages) <= existing:
            return

        rows = [
            self._to_row(task_id, message, sequence_num)
            for sequence_num, message in enumerate(messages[existing:], start=existing)
        ]
        await self._batch_insert(self.statements.insert_history, rows)
        logger.debug("Appended %d message(s) after %d stored", len(rows), existing)

    async def find_by_task_id(self, task_id: str, context_id: Optional[str] = None) -> list[Message]:
        """Load the history of a task in sequence order.

        Args:
            task_id: Owning task, set as back-reference on every message.
            context_id: Context of the task, set as back-reference on every message.

        Raises:
            DeserializationError: If a stored row cannot be read back.
        """
        result = await self._session.execute(self.statements.select_history, {"task_id": task_id})
        return [
            self._to_message(row, task_id, context_id)
            for row in result.mappings().all()
        ]

    def _to_row(self, task_id: str, message: Message, sequence_num: int) -> dict[str, Any]:
        return {
            "task_id": task_id,
            "message_id": message.message_id or f"{task_id}-msg-{sequence_num}",
            "role": message.role.value.upper(),
            "content_json": self._json_param(PartCodec.encode(message.parts)),
            "metadata_json": self._json_param(message.metadata or None),
            "sequence_num": sequence_num,
        }

    @staticmethod
    def _to_message(row: RowMapping, task_id: str, context_id: Optional[str]) -> Message:
        content = from_json(row["content_json"], list)
        if content is None:
            raise DeserializationError(
                f"Missing content of history message {row['message_id']!r}")

        try:
            role = Role(str(row["role"]).lower())
        except ValueError as exc:
            raise DeserializationError(f"Unknown message role: {row['role']!r}") from exc

        return Message(
            message_id=row["message_id"],
            role=role,
            parts=PartCodec.decode(content),
            metadata=from_json(row["metadata_json"], dict) or None,
            task_id=task_id,
            context_id=context_id,
        )
