from typing import Any, Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from aion.taskstore.logging import get_logger
from .utils import mask_url, sqlalchemy_url

logger = get_logger(__name__)

__all__ = [
    "DbManager",
    "configure_sqlite_engine",
    "db_manager",
]


def configure_sqlite_engine(engine: AsyncEngine) -> None:
    """Enable foreign keys and working SAVEPOINTs on a SQLite engine.

    The driver's own transaction handling is switched off and every
    transaction is started with an explicit ``BEGIN``.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


class DbManager:
    """Async database manager.

    Owns the SQLAlchemy engine (and its connection pool) and the session
    factory used by the task store.
    """

    def __init__(self):
        """Initialize the database manager with no active engine."""
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None
        self._dsn: Optional[str] = None

    @property
    def is_initialized(self) -> bool:
        """Check if the engine is created."""
        return self._engine is not None

    async def initialize(self, dsn: str, **engine_options: Any) -> None:
        """Create the engine and session factory.

        Args:
            dsn: Database connection URL. PostgreSQL URLs get the psycopg driver.
            **engine_options: Extra keyword arguments for ``create_async_engine``.
        """
        if self.is_initialized:
            logger.warning("Database already initialized")
            return

        self._dsn = sqlalchemy_url(dsn)

        options = {"pool_pre_ping": True, "echo": False}
        options.update(engine_options)
        self._engine = create_async_engine(self._dsn, **options)

        if self._engine.dialect.name == "sqlite":
            configure_sqlite_engine(self._engine)

        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False
        )

        logger.info("Database engine created for %s", mask_url(self._dsn))

    def get_engine(self) -> AsyncEngine:
        """Get the active engine.

        Raises:
            RuntimeError: If manager is not initialized.
        """
        if not self._engine:
            logger.error("No database engine initialized.")
            raise RuntimeError("Engine not initialized")
        return self._engine

    def get_dsn(self) -> str:
        """Get the database connection URL used by the engine.

        Raises:
            RuntimeError: If manager is not initialized.
        """
        if not self._dsn:
            logger.error("Database DSN not available.")
            raise RuntimeError("DSN not initialized")
        return self._dsn

    def get_session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Get SQLAlchemy session factory."""
        if not self._session_factory:
            logger.error("SQLAlchemy session factory not initialized.")
            raise RuntimeError("Session factory not initialized")
        return self._session_factory

    def get_session(self) -> AsyncSession:
        """Get new SQLAlchemy session."""
        session_factory = self.get_session_factory()
        return session_factory()

    async def close(self) -> None:
        """Dispose the engine and its pooled connections."""
        if self._engine:
            logger.info('Closing database engine')
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            self._dsn = None
            logger.info('Database engine closed')


db_manager = DbManager()
