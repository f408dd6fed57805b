import os
import sys
from pathlib import Path
from typing import Optional

import pytest
from a2a.types import (
    Artifact,
    DataPart,
    FilePart,
    FileWithBytes,
    FileWithUri,
    Message,
    Part,
    Role,
    Task,
    TaskState,
    TaskStatus,
    TextPart,
)
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Add package sources to sys.path for tests
PROJECT_ROOT = Path(__file__).resolve().parents[1]
src_path = PROJECT_ROOT / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from aion.taskstore.db.dialect import PassthroughJsonAdapter  # noqa: E402
from aion.taskstore.db.manager import configure_sqlite_engine  # noqa: E402
from aion.taskstore.db.repositories import RepositoryContext  # noqa: E402
from aion.taskstore.db.schema import build_tables  # noqa: E402
from aion.taskstore.db.statements import TaskStoreStatements  # noqa: E402
from aion.taskstore.settings import CacheSettings, TaskStoreSettings  # noqa: E402

TABLE_PREFIX = "a2a_"


def text_message(
        text: str,
        role: Role = Role.user,
        message_id: Optional[str] = None,
        task_id: Optional[str] = None,
        context_id: Optional[str] = None,
        metadata: Optional[dict] = None,
) -> Message:
    return Message(
        message_id=message_id or f"msg-{text}",
        role=role,
        parts=[Part(root=TextPart(text=text))],
        task_id=task_id,
        context_id=context_id,
        metadata=metadata,
    )


def make_task(
        task_id: str = "t1",
        state: TaskState = TaskState.working,
        history: Optional[list[Message]] = None,
        artifacts: Optional[list[Artifact]] = None,
        metadata: Optional[dict] = None,
        context_id: str = "ctx-1",
        timestamp: Optional[str] = "2024-05-01T10:00:00+00:00",
        status_message: Optional[Message] = None,
) -> Task:
    return Task(
        id=task_id,
        context_id=context_id,
        status=TaskStatus(state=state, message=status_message, timestamp=timestamp),
        history=history,
        artifacts=artifacts,
        metadata=metadata,
    )


def mixed_parts() -> list[Part]:
    return [
        Part(root=TextPart(text="report ready", metadata={"lang": "en"})),
        Part(root=FilePart(file=FileWithBytes(bytes="aGVsbG8=", mime_type="text/plain", name="hello.txt"))),
        Part(root=FilePart(file=FileWithUri(uri="https://example.com/r.pdf", mime_type="application/pdf", name="r.pdf"))),
        Part(root=DataPart(data={"score": 0.9, "tags": ["a", "b"]})),
    ]


def make_artifact(artifact_id: str, text: str = "out", **kwargs) -> Artifact:
    return Artifact(
        artifact_id=artifact_id,
        parts=[Part(root=TextPart(text=text))],
        **kwargs,
    )


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'tasks.db'}"


@pytest.fixture
def tables():
    return build_tables(TABLE_PREFIX)


@pytest.fixture
async def engine(database_url, tables):
    """File backed SQLite engine with the task store schema."""
    engine = create_async_engine(database_url)
    configure_sqlite_engine(engine)
    async with engine.begin() as conn:
        await conn.run_sync(tables.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def repository_context(tables):
    return RepositoryContext(
        statements=TaskStoreStatements.from_tables(tables),
        json_adapter=PassthroughJsonAdapter(),
        batch_size=2,
    )


@pytest.fixture
def store_settings():
    return TaskStoreSettings(
        store_artifacts=True,
        store_metadata=True,
        batch_size=2,
        table_prefix=TABLE_PREFIX,
        cache=CacheSettings(enabled=True, ttl_active=60, ttl_finalized=600, max_size=10),
    )


@pytest.fixture
def postgres_url():
    """PostgreSQL URL for integration tests, skipped when not configured."""
    url = os.environ.get("AION_TASKSTORE_TEST_POSTGRES_URL")
    if not url:
        pytest.skip("AION_TASKSTORE_TEST_POSTGRES_URL is not set")
    return url
