from .base import TaskStoreLogger, TaskStoreLogRecord, get_current_task_id, task_log_context
from .factory import get_logger
from .handlers import LogStreamHandler, LogStreamFormatter

__all__ = [
    "get_logger",
    "get_current_task_id",
    "task_log_context",
    "TaskStoreLogger",
    "TaskStoreLogRecord",
    "LogStreamHandler",
    "LogStreamFormatter",
]
