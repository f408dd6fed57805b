"""Task store factory.

This module provides TaskStoreFactory which verifies the configured
database, initializes the engine and builds the relational task store.
"""

from typing import Optional

from aion.taskstore.db.manager import DbManager
from aion.taskstore.db.utils import verify_connection
from aion.taskstore.logging import get_logger
from aion.taskstore.settings import DatabaseSettings, TaskStoreSettings, db_settings as default_db_settings
from .store import RelationalTaskStore

logger = get_logger(__name__)


class TaskStoreFactory:
    """Factory for the relational task store.

    Handles:
    - Database connection verification
    - DbManager initialization
    - Task store construction
    - Resource cleanup
    """

    def __init__(
            self,
            db_manager: DbManager,
            settings: Optional[TaskStoreSettings] = None,
            db_settings: Optional[DatabaseSettings] = None,
    ):
        """Initialize the task store factory.

        Args:
            db_manager: Database manager instance to initialize
            settings: Task store options, read from the environment if omitted
            db_settings: Database connection settings, the module-wide ``db_settings`` if omitted
        """
        self.db_manager = db_manager
        self.settings = settings or TaskStoreSettings()
        self.db_settings = db_settings or default_db_settings
        self._store: Optional[RelationalTaskStore] = None

    async def initialize(self) -> Optional[RelationalTaskStore]:
        """Connect to the database and build the task store.

        Returns:
            RelationalTaskStore if initialization succeeded, None otherwise
        """
        if self._store is not None:
            return self._store

        url = self.db_settings.sqlalchemy_url
        if not url:
            logger.debug("AION_TASKSTORE_DATABASE_URL environment variable not set, no task store created")
            return None

        is_connection_verified = await verify_connection(url)
        if not is_connection_verified:
            logger.warning("Cannot verify database connection")
            return None

        try:
            await self.db_manager.initialize(url)
            self._store = RelationalTaskStore(
                self.db_manager.get_engine(),
                self.settings,
                session_factory=self.db_manager.get_session_factory())
        except Exception as exc:
            logger.error("Failed to initialize task store", exc_info=exc)
            await self.cleanup()
            return None

        logger.info("Relational task store initialized")
        return self._store

    async def cleanup(self) -> None:
        """Close database connections if initialized."""
        self._store = None
        if not self.db_manager.is_initialized:
            return

        try:
            await self.db_manager.close()
            logger.info("Database connections closed")
        except Exception as exc:
            logger.error("Error closing database", exc_info=exc)

    @property
    def is_initialized(self) -> bool:
        """Check if the task store is ready."""
        return self._store is not None


__all__ = ["TaskStoreFactory"]
