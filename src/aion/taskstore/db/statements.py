"""SQL statements of the task store repositories.

Statements are plain ``text()`` SQL so JSON parameters reach the driver
exactly as the dialect adapter produced them. Timestamp parameters and
columns are typed so every engine stores and returns real datetimes.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import DateTime, TextClause, bindparam, text
from sqlalchemy.sql.expression import Executable

from .schema import TaskStoreTables

__all__ = [
    "TaskStoreStatements",
]

_TIMESTAMP = DateTime(timezone=True)

_TASK_COLUMNS = (
    "task_id, context_id, status_state, status_message_json, "
    "status_timestamp, metadata_json, finalized_at"
)


def _timestamps(clause: TextClause, *names: str) -> TextClause:
    return clause.bindparams(*(bindparam(name, type_=_TIMESTAMP) for name in names))


@dataclass(frozen=True)
class TaskStoreStatements:
    """Every statement the repositories issue, bound to concrete table names."""
    tasks_table: str

    update_task_finalizing: Executable
    update_task_active: Executable
    insert_task: Executable
    select_task: Executable
    update_metadata: Executable
    select_metadata: Executable
    delete_task: Executable
    select_status_state: Executable
    select_finalized_at: Executable

    count_history: Executable
    delete_history: Executable
    insert_history: Executable
    select_history: Executable

    delete_artifacts: Executable
    insert_artifacts: Executable
    select_artifacts: Executable

    @classmethod
    def from_tables(cls, tables: TaskStoreTables) -> TaskStoreStatements:
        tasks = tables.tasks.name
        history = tables.history.name
        artifacts = tables.artifacts.name

        return cls(
            tasks_table=tasks,

            # Terminal save: keep the first finalization instant
            update_task_finalizing=_timestamps(text(
                f"UPDATE {tasks} SET context_id = :context_id, status_state = :status_state, "
                f"status_message_json = :status_message_json, status_timestamp = :status_timestamp, "
                f"finalized_at = COALESCE(finalized_at, :finalized_at), updated_at = CURRENT_TIMESTAMP "
                f"WHERE task_id = :task_id"
            ), "status_timestamp", "finalized_at"),
            update_task_active=_timestamps(text(
                f"UPDATE {tasks} SET context_id = :context_id, status_state = :status_state, "
                f"status_message_json = :status_message_json, status_timestamp = :status_timestamp, "
                f"finalized_at = NULL, updated_at = CURRENT_TIMESTAMP "
                f"WHERE task_id = :task_id"
            ), "status_timestamp"),
            insert_task=_timestamps(text(
                f"INSERT INTO {tasks} (task_id, context_id, status_state, status_message_json, "
                f"status_timestamp, finalized_at) "
                f"VALUES (:task_id, :context_id, :status_state, :status_message_json, "
                f":status_timestamp, :finalized_at)"
            ), "status_timestamp", "finalized_at"),
            select_task=text(
                f"SELECT {_TASK_COLUMNS} FROM {tasks} WHERE task_id = :task_id"
            ).columns(status_timestamp=_TIMESTAMP, finalized_at=_TIMESTAMP),
            update_metadata=text(
                f"UPDATE {tasks} SET metadata_json = :metadata_json, updated_at = CURRENT_TIMESTAMP "
                f"WHERE task_id = :task_id"
            ),
            select_metadata=text(
                f"SELECT metadata_json FROM {tasks} WHERE task_id = :task_id"
            ),
            delete_task=text(
                f"DELETE FROM {tasks} WHERE task_id = :task_id"
            ),
            select_status_state=text(
                f"SELECT status_state FROM {tasks} WHERE task_id = :task_id"
            ),
            select_finalized_at=text(
                f"SELECT finalized_at FROM {tasks} WHERE task_id = :task_id"
            ).columns(finalized_at=_TIMESTAMP),

            count_history=text(
                f"SELECT COUNT(*) FROM {history} WHERE task_id = :task_id"
            ),
            delete_history=text(
                f"DELETE FROM {history} WHERE task_id = :task_id"
            ),
            insert_history=text(
                f"INSERT INTO {history} (task_id, message_id, role, content_json, metadata_json, sequence_num) "
                f"VALUES (:task_id, :message_id, :role, :content_json, :metadata_json, :sequence_num)"
            ),
            select_history=text(
                f"SELECT message_id, role, content_json, metadata_json, sequence_num FROM {history} "
                f"WHERE task_id = :task_id ORDER BY sequence_num ASC"
            ),

            delete_artifacts=text(
                f"DELETE FROM {artifacts} WHERE task_id = :task_id"
            ),
            insert_artifacts=text(
                f"INSERT INTO {artifacts} (task_id, artifact_id, name, description, content_json, "
                f"metadata_json, extensions_json, sequence_num) "
                f"VALUES (:task_id, :artifact_id, :name, :description, :content_json, "
                f":metadata_json, :extensions_json, :sequence_num)"
            ),
            select_artifacts=text(
                f"SELECT artifact_id, name, description, content_json, metadata_json, extensions_json, "
                f"sequence_num FROM {artifacts} WHERE task_id = :task_id ORDER BY sequence_num ASC"
            ),
        )
