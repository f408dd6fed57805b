import pytest
from a2a.types import Artifact
from sqlalchemy import text

from aion.taskstore.db.repositories import ArtifactsRepository, TasksRepository

from conftest import make_artifact, make_task, mixed_parts


class TestArtifactsRepository:
    """Tests for ArtifactsRepository against a SQLite database."""

    @pytest.fixture(autouse=True)
    async def task_row(self, session_factory, repository_context):
        async with session_factory() as session, session.begin():
            await TasksRepository(session, repository_context).save(make_task())

    async def _save(self, session_factory, context, artifacts):
        async with session_factory() as session, session.begin():
            await ArtifactsRepository(session, context).save_all("t1", artifacts)

    async def _load(self, session_factory, context):
        async with session_factory() as session:
            return await ArtifactsRepository(session, context).find_by_task_id("t1")

    @pytest.mark.asyncio
    async def test_round_trip(self, session_factory, repository_context):
        artifact = Artifact(
            artifact_id="a1",
            name="report",
            description="Quarterly report",
            parts=mixed_parts(),
            metadata={"pages": 3},
            extensions=["https://example.com/ext/v1"],
        )
        await self._save(session_factory, repository_context, [artifact])

        assert await self._load(session_factory, repository_context) == [artifact]

    @pytest.mark.asyncio
    async def test_full_replace_leaves_no_residue(self, session_factory, repository_context):
        await self._save(session_factory, repository_context, [make_artifact(f"old-{i}") for i in range(3)])
        await self._save(session_factory, repository_context, [make_artifact("new-0"), make_artifact("new-1")])

        loaded = await self._load(session_factory, repository_context)
        assert [a.artifact_id for a in loaded] == ["new-0", "new-1"]

    @pytest.mark.asyncio
    async def test_order_follows_position(self, session_factory, repository_context):
        # batch_size is 2 in the fixture context
        ids = ["e", "d", "c", "b", "a"]
        await self._save(session_factory, repository_context, [make_artifact(i) for i in ids])

        async with session_factory() as session:
            result = await session.execute(text(
                "SELECT artifact_id, sequence_num FROM a2a_artifacts ORDER BY sequence_num"))
            rows = result.all()

        assert [tuple(row) for row in rows] == [(i, n) for n, i in enumerate(ids)]
        assert [a.artifact_id for a in await self._load(session_factory, repository_context)] == ids

    @pytest.mark.asyncio
    async def test_empty_list_clears_artifacts(self, session_factory, repository_context):
        await self._save(session_factory, repository_context, [make_artifact("a1")])
        await self._save(session_factory, repository_context, [])

        assert await self._load(session_factory, repository_context) == []

    @pytest.mark.asyncio
    async def test_empty_metadata_and_extensions_read_as_absent(self, session_factory, repository_context):
        await self._save(session_factory, repository_context, [make_artifact("a1", metadata={}, extensions=[])])

        (loaded,) = await self._load(session_factory, repository_context)
        assert loaded.metadata is None
        assert loaded.extensions is None
