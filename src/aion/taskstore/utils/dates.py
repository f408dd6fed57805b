from datetime import datetime, timezone
from typing import Optional

from aion.taskstore.exceptions import SerializationError

__all__ = [
    "utcnow",
    "to_utc",
    "parse_timestamp",
    "format_timestamp",
]


def utcnow() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def to_utc(value: datetime) -> datetime:
    """Convert to UTC; naive values are taken to be UTC already"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 status timestamp

    Args:
        value (str): Timestamp in ISO-8601 form, ``Z`` suffix allowed

    Returns:
        datetime: Aware UTC datetime, or None for a missing timestamp

    Raises:
        SerializationError: If the value is not a valid ISO-8601 timestamp
    """
    if not value:
        return None
    try:
        return to_utc(datetime.fromisoformat(value))
    except ValueError as exc:
        raise SerializationError(f"Invalid status timestamp: {value!r}") from exc


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return to_utc(value).isoformat()
