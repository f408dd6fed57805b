"""Table definitions of the relational task store.

The schema is owned by the host application; these definitions describe it
so it can be provisioned with ``metadata.create_all()``. Every table name
carries the configured prefix, e.g. ``a2a_tasks``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Table,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB

from aion.taskstore.settings import DEFAULT_TABLE_PREFIX

__all__ = [
    "JSONType",
    "TaskStoreTables",
    "build_tables",
]

JSONType = JSON().with_variant(JSONB(), "postgresql")


@dataclass(frozen=True)
class TaskStoreTables:
    """Tables of one task store schema."""
    metadata: MetaData
    tasks: Table
    history: Table
    artifacts: Table

    @property
    def prefix(self) -> str:
        return self.tasks.name[: -len("tasks")]


def build_tables(prefix: Optional[str] = DEFAULT_TABLE_PREFIX, metadata: Optional[MetaData] = None) -> TaskStoreTables:
    """Describe the task store tables for a table name prefix.

    Args:
        prefix: Prepended to every table name; None or empty means no prefix.
        metadata: Metadata to register the tables on. A new one is created if omitted.

    Returns:
        The three tables bound to ``metadata``.
    """
    prefix = prefix or ""
    metadata = metadata if metadata is not None else MetaData()
    tasks_name = f"{prefix}tasks"

    tasks = Table(
        tasks_name,
        metadata,
        Column("task_id", String(255), primary_key=True),
        Column("context_id", String(255), nullable=False),
        Column("status_state", String(50), nullable=False),
        Column("status_message_json", JSONType),
        Column("status_timestamp", DateTime(timezone=True)),
        Column("metadata_json", JSONType),
        Column("finalized_at", DateTime(timezone=True)),
        Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
        Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
        Index(f"ix_{tasks_name}_context_id", "context_id"),
    )

    history = Table(
        f"{prefix}history",
        metadata,
        Column(
            "task_id",
            String(255),
            ForeignKey(f"{tasks_name}.task_id", ondelete="CASCADE"),
            nullable=False),
        Column("message_id", String(255), nullable=False),
        Column("role", String(20), nullable=False),
        Column("content_json", JSONType, nullable=False),
        Column("metadata_json", JSONType),
        Column("sequence_num", Integer, nullable=False),
        PrimaryKeyConstraint("task_id", "sequence_num"),
    )

    artifacts = Table(
        f"{prefix}artifacts",
        metadata,
        Column(
            "task_id",
            String(255),
            ForeignKey(f"{tasks_name}.task_id", ondelete="CASCADE"),
            nullable=False),
        Column("artifact_id", String(255), nullable=False),
        Column("name", String(255)),
        Column("description", Text),
        Column("content_json", JSONType, nullable=False),
        Column("metadata_json", JSONType),
        Column("extensions_json", JSONType),
        Column("sequence_num", Integer, nullable=False),
        PrimaryKeyConstraint("task_id", "sequence_num"),
    )

    return TaskStoreTables(
        metadata=metadata,
        tasks=tasks,
        history=history,
        artifacts=artifacts,
    )
