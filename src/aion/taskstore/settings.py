import re
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

__all__ = [
    "BaseEnvSettings",
    "CacheSettings",
    "TaskStoreSettings",
    "DatabaseSettings",
    "db_settings",
    "AppSettings",
    "app_settings",
]

DEFAULT_TABLE_PREFIX = "a2a_"

_TABLE_PREFIX_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class BaseEnvSettings(BaseSettings):
    """Base class for env settings."""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


class CacheSettings(BaseEnvSettings):
    """
    Read-through task cache configuration.

    Entries for tasks in a terminal state live for ``ttl_finalized`` seconds,
    entries for active tasks for ``ttl_active`` seconds.
    """
    enabled: bool = Field(
        default=True,
        alias="AION_TASKSTORE_CACHE_ENABLED",
        description="Enable the in-process task cache"
    )

    ttl_active: float = Field(
        default=600,
        gt=0,
        alias="AION_TASKSTORE_CACHE_TTL_ACTIVE",
        description="Time-to-live in seconds for tasks that are still active"
    )

    ttl_finalized: float = Field(
        default=3600,
        gt=0,
        alias="AION_TASKSTORE_CACHE_TTL_FINALIZED",
        description="Time-to-live in seconds for tasks in a terminal state"
    )

    max_size: int = Field(
        default=1000,
        gt=0,
        alias="AION_TASKSTORE_CACHE_MAX_SIZE",
        description="Maximum number of cached tasks"
    )

    record_stats: bool = Field(
        default=True,
        alias="AION_TASKSTORE_CACHE_RECORD_STATS",
        description="Count cache hits, misses and evictions"
    )


class TaskStoreSettings(BaseEnvSettings):
    """Persistence options of the relational task store."""
    store_artifacts: bool = Field(
        default=True,
        alias="AION_TASKSTORE_STORE_ARTIFACTS",
        description="Persist and load task artifacts"
    )

    store_metadata: bool = Field(
        default=True,
        alias="AION_TASKSTORE_STORE_METADATA",
        description="Persist and load task metadata"
    )

    batch_size: int = Field(
        default=100,
        gt=0,
        alias="AION_TASKSTORE_BATCH_SIZE",
        description="Rows per batched insert statement"
    )

    table_prefix: str = Field(
        default=DEFAULT_TABLE_PREFIX,
        alias="AION_TASKSTORE_TABLE_PREFIX",
        description="Prefix prepended to every table name"
    )

    cache: CacheSettings = Field(default_factory=CacheSettings)

    @field_validator("table_prefix")
    @classmethod
    def validate_table_prefix(cls, value: Optional[str]) -> str:
        """Only plain SQL identifier characters are allowed in the prefix"""
        if not value:
            return ""
        if not _TABLE_PREFIX_PATTERN.match(value):
            raise ValueError(f"Invalid table prefix: {value!r}")
        return value


class DatabaseSettings(BaseEnvSettings):
    """
    Database connection settings.

    Any SQLAlchemy URL is accepted. PostgreSQL URLs without a driver are
    converted to the async psycopg driver by ``sqlalchemy_url``.
    """
    url: Optional[str] = Field(
        default=None,
        alias="AION_TASKSTORE_DATABASE_URL",
        description="Database connection URL"
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, value: Optional[str]) -> Optional[str]:
        """Validate database URL format"""
        if value is None or value == "":
            return None

        try:
            make_url(value)
        except ArgumentError as e:
            raise ValueError(f"Invalid database URL: {value}") from e

        return value

    @property
    def sqlalchemy_url(self) -> Optional[str]:
        """Database URL with an async driver selected"""
        from aion.taskstore.db.utils import sqlalchemy_url
        if not self.url:
            return None
        return sqlalchemy_url(self.url)

    @property
    def backend_name(self) -> Optional[str]:
        """Dialect name of the configured URL (``postgresql``, ``sqlite``, ...)"""
        if not self.url:
            return None
        return make_url(self.url).get_backend_name()


class AppSettings(BaseEnvSettings):
    """Application configuration settings."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        description="Logging level to use.",
        alias="LOG_LEVEL",
        default="INFO"
    )


# Initialize settings instances
try:
    db_settings = DatabaseSettings()
    app_settings = AppSettings()
except Exception as ex:
    print(f"Error loading configuration: {ex}")
    print("Please check your .env file and ensure all required variables are set.")
    raise
