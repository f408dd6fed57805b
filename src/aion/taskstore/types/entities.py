"""Pydantic models for database records."""

from __future__ import annotations

import datetime as _dt
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

__all__ = [
    "TaskRecord",
]


class TaskRecord(BaseModel):
    """Representation of a row in the ``tasks`` table.

    JSON columns are kept as returned by the driver: JSON text for engines
    that expose JSON as strings, already decoded values for engines that
    decode JSON columns themselves.
    """
    model_config = ConfigDict(frozen=True)

    task_id: str
    context_id: str
    status_state: str
    status_message_json: Optional[Any] = None
    status_timestamp: Optional[_dt.datetime] = None
    metadata_json: Optional[Any] = None
    finalized_at: Optional[_dt.datetime] = None

    @property
    def is_finalized(self) -> bool:
        return self.finalized_at is not None
