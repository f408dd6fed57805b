from .dialect import JsonParameterAdapter, PassthroughJsonAdapter, PostgresJsonbAdapter
from .manager import DbManager, configure_sqlite_engine, db_manager
from .schema import TaskStoreTables, build_tables
from .statements import TaskStoreStatements
from .utils import mask_url, sqlalchemy_url, verify_connection

__all__ = [
    "DbManager",
    "db_manager",
    "configure_sqlite_engine",
    "JsonParameterAdapter",
    "PassthroughJsonAdapter",
    "PostgresJsonbAdapter",
    "TaskStoreTables",
    "build_tables",
    "TaskStoreStatements",
    "mask_url",
    "sqlalchemy_url",
    "verify_connection",
]
