from .artifacts import ArtifactsRepository
from .base import BaseRepository, RepositoryContext
from .history import HistoryRepository
from .tasks import TasksRepository

__all__ = [
    "BaseRepository",
    "RepositoryContext",
    "TasksRepository",
    "HistoryRepository",
    "ArtifactsRepository",
]
