"""JSON helpers shared by the repositories.

Stored payloads reach the store in two shapes depending on the engine: JSON
text (string-typed drivers) or values the driver already decoded (PostgreSQL
``jsonb``). Rows written by earlier schema versions may also hold a JSON
document that was encoded twice, i.e. a JSON string whose content is the
real document. ``from_json`` accepts all of these.
"""

from __future__ import annotations

import json
from typing import Any, Optional

from pydantic import BaseModel

from aion.taskstore.exceptions import DeserializationError, SerializationError

__all__ = [
    "to_json",
    "from_json",
    "model_to_json",
]


def to_json(value: Any) -> Optional[str]:
    """Encode a JSON-compatible value as text.

    Args:
        value: Mapping, list or scalar built from JSON-compatible types.

    Returns:
        JSON text, or None when ``value`` is None.

    Raises:
        SerializationError: If the value holds something JSON cannot represent.
    """
    if value is None:
        return None
    try:
        return json.dumps(value, ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise SerializationError(
            f"JSON serialize failed: {type(value).__name__}"
        ) from exc


def model_to_json(model: Optional[BaseModel]) -> Optional[str]:
    """Encode a pydantic model in its wire form (camelCase, no nulls)."""
    if model is None:
        return None
    try:
        return to_json(model.model_dump(mode="json", by_alias=True, exclude_none=True))
    except ValueError as exc:
        raise SerializationError(
            f"JSON serialize failed: {type(model).__name__}"
        ) from exc


def from_json(
        raw: Any,
        expected: type | tuple[type, ...] = (dict, list),
) -> Optional[Any]:
    """Decode a stored JSON payload.

    A payload that decodes to a string although ``expected`` is a container
    is treated as doubly-encoded and decoded one more time.

    Args:
        raw: Column value as returned by the driver.
        expected: Type (or types) the decoded value must have.

    Returns:
        The decoded value, or None for SQL NULL, JSON null and blank text.

    Raises:
        DeserializationError: If the payload is not valid JSON or does not
            decode to ``expected`` after the unwrap attempt.
    """
    if raw is None:
        return None

    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")

    if isinstance(raw, str):
        if not raw.strip():
            return None
        value = _loads(raw)
    else:
        value = raw

    if isinstance(value, str) and not _accepts(expected, str):
        value = _loads(value)

    if value is None:
        return None

    if not isinstance(value, expected):
        raise DeserializationError(
            f"JSON deserialize failed: expected {_type_names(expected)}, got {type(value).__name__}"
        )
    return value


def _loads(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise DeserializationError(f"JSON deserialize failed: {exc.msg}") from exc


def _accepts(expected: type | tuple[type, ...], candidate: type) -> bool:
    if isinstance(expected, tuple):
        return candidate in expected
    return candidate is expected


def _type_names(expected: type | tuple[type, ...]) -> str:
    if isinstance(expected, tuple):
        return " or ".join(t.__name__ for t in expected)
    return expected.__name__
