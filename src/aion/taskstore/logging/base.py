from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

__all__ = [
    "TaskStoreLogRecord",
    "TaskStoreLogger",
    "get_current_task_id",
    "task_log_context",
]

_current_task_id: ContextVar[Optional[str]] = ContextVar("aion_taskstore_task_id", default=None)


def get_current_task_id() -> Optional[str]:
    """Task id the running store operation works on, if any"""
    return _current_task_id.get()


@contextmanager
def task_log_context(task_id: Optional[str]) -> Iterator[None]:
    """
    Bind a task id to every log record emitted inside the block.

    Args:
        task_id: Identifier of the task being stored, loaded or deleted
    """
    token = _current_task_id.set(task_id)
    try:
        yield
    finally:
        _current_task_id.reset(token)


class TaskStoreLogRecord(logging.LogRecord):
    """
    LogRecord that captures the task id of the current store operation.

    Attributes:
        task_id: Identifier bound with ``task_log_context``, or None outside
                 of a store operation.
    """
    task_id: Optional[str]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.task_id = get_current_task_id()


class TaskStoreLogger(logging.Logger):
    """
    Logger that creates TaskStoreLogRecord instances.
    """

    def makeRecord(self, name, level, fn, lno, msg, args, exc_info,
                   func=None, extra=None, sinfo=None) -> TaskStoreLogRecord:
        """
        Create a TaskStoreLogRecord instance.

        Raises:
            KeyError: If extra dict attempts to overwrite protected keys
                     ('message', 'asctime', or any existing record attribute)
        """
        rv = TaskStoreLogRecord(
            name, level, fn, lno, msg,
            args, exc_info, func, sinfo
        )
        if extra is not None:
            for key in extra:
                if (key in ["message", "asctime"]) or (key in rv.__dict__):
                    raise KeyError("Attempt to overwrite %r in TaskStoreLogRecord" % key)
                rv.__dict__[key] = extra[key]
        return rv
