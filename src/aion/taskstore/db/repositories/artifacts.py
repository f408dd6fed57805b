"""Artifact repository implementation."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from a2a.types import Artifact
from sqlalchemy.engine import RowMapping

from aion.taskstore.exceptions import DeserializationError
from aion.taskstore.logging import get_logger
from aion.taskstore.serialization import PartCodec, from_json
from .base import BaseRepository

logger = get_logger(__name__)


class ArtifactsRepository(BaseRepository):
    """Current artifact set of each task, replaced as a whole on every save."""

    async def save_all(self, task_id: str, artifacts: Optional[Sequence[Artifact]]) -> None:
        """Replace the stored artifacts of a task with ``artifacts``."""
        await self._session.execute(self.statements.delete_artifacts, {"task_id": task_id})
        if not artifacts:
            logger.debug("Artifacts cleared")
            return

        rows = [
            self._to_row(task_id, artifact, sequence_num)
            for sequence_num, artifact in enumerate(artifacts)
        ]
        await self._batch_insert(self.statements.insert_artifacts, rows)
        logger.debug("Replaced artifacts with %d row(s)", len(rows))

    async def find_by_task_id(self, task_id: str) -> list[Artifact]:
        """Load the artifacts of a task in sequence order."""
        result = await self._session.execute(self.statements.select_artifacts, {"task_id": task_id})
        return [self._to_artifact(row) for row in result.mappings().all()]

    def _to_row(self, task_id: str, artifact: Artifact, sequence_num: int) -> dict[str, Any]:
        return {
            "task_id": task_id,
            "artifact_id": artifact.artifact_id,
            "name": artifact.name,
            "description": artifact.description,
            "content_json": self._json_param(PartCodec.encode(artifact.parts)),
            "metadata_json": self._json_param(artifact.metadata or None),
            "extensions_json": self._json_param(artifact.extensions or None),
            "sequence_num": sequence_num,
        }

    @staticmethod
    def _to_artifact(row: RowMapping) -> Artifact:
        content = from_json(row["content_json"], list)
        if content is None:
            raise DeserializationError(
                f"Missing content of artifact {row['artifact_id']!r}")

        return Artifact(
            artifact_id=row["artifact_id"],
            name=row["name"],
            description=row["description"],
            parts=PartCodec.decode(content),
            metadata=from_json(row["metadata_json"], dict) or None,
            extensions=from_json(row["extensions_json"], list) or None,
        )
