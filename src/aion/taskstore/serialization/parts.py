"""Codec for the polymorphic a2a ``Part`` union.

Stored form of a part list::

    [
      {"type": "TEXT", "text": "..."},
      {"type": "FILE", "file": {"mimeType": "...", "name": "...", "bytes": "..."}},
      {"type": "FILE", "file": {"mimeType": "...", "name": "...", "uri": "..."}},
      {"type": "DATA", "data": {...}, "metadata": {...}}
    ]

``metadata`` is omitted when empty. The upper-case ``type`` tag is the
persisted discriminator and differs from the ``kind`` tag of the a2a wire
format on purpose: rows written by other implementations use it too.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, Optional

from a2a.types import DataPart, FilePart, FileWithBytes, FileWithUri, Part, TextPart

from aion.taskstore.exceptions import DeserializationError, SerializationError
from aion.taskstore.logging import get_logger

logger = get_logger(__name__)

__all__ = [
    "PartType",
    "PartCodec",
]


class PartType(str, Enum):
    """Discriminator values of stored parts."""
    TEXT = "TEXT"
    FILE = "FILE"
    DATA = "DATA"


class PartCodec:
    """Encode a2a parts into JSON trees and decode them back."""

    TYPE_FIELD = "type"
    TEXT_FIELD = "text"
    FILE_FIELD = "file"
    DATA_FIELD = "data"
    METADATA_FIELD = "metadata"
    MIME_TYPE_FIELD = "mimeType"
    NAME_FIELD = "name"
    BYTES_FIELD = "bytes"
    URI_FIELD = "uri"

    # -- Encoding ------------------------------------------------------------

    @classmethod
    def encode(cls, parts: Optional[Iterable[Part | TextPart | FilePart | DataPart]]) -> list[dict[str, Any]]:
        """Convert parts into a list of tagged JSON objects.

        Args:
            parts: Parts in order; ``Part`` wrappers and bare variants are both accepted.

        Returns:
            List of JSON objects, empty when ``parts`` is None or empty.

        Raises:
            SerializationError: If an element is not one of the three part variants.
        """
        if not parts:
            return []
        return [cls._encode_part(part) for part in parts]

    @classmethod
    def _encode_part(cls, part: Part | TextPart | FilePart | DataPart) -> dict[str, Any]:
        variant = part.root if isinstance(part, Part) else part

        if isinstance(variant, TextPart):
            node = {cls.TYPE_FIELD: PartType.TEXT.value, cls.TEXT_FIELD: variant.text}
        elif isinstance(variant, FilePart):
            node = {cls.TYPE_FIELD: PartType.FILE.value, cls.FILE_FIELD: cls._encode_file(variant.file)}
        elif isinstance(variant, DataPart):
            node = {cls.TYPE_FIELD: PartType.DATA.value, cls.DATA_FIELD: variant.data}
        else:
            raise SerializationError(f"Unsupported part type: {type(variant).__name__}")

        if variant.metadata:
            node[cls.METADATA_FIELD] = variant.metadata
        return node

    @classmethod
    def _encode_file(cls, file: FileWithBytes | FileWithUri) -> dict[str, Any]:
        node = {
            cls.MIME_TYPE_FIELD: file.mime_type,
            cls.NAME_FIELD: file.name,
        }
        if isinstance(file, FileWithBytes):
            node[cls.BYTES_FIELD] = file.bytes
        elif isinstance(file, FileWithUri):
            node[cls.URI_FIELD] = file.uri
        else:
            raise SerializationError(f"Unsupported file content: {type(file).__name__}")
        return node

    # -- Decoding ------------------------------------------------------------

    @classmethod
    def decode(cls, tree: Any) -> list[Part]:
        """Convert a JSON tree back into parts.

        Elements without a known ``type`` tag, or missing the field their
        variant needs, are skipped.

        Args:
            tree: Decoded JSON value; anything but a list yields no parts.

        Returns:
            Parts in stored order.

        Raises:
            DeserializationError: If a file part carries neither ``bytes`` nor ``uri``.
        """
        if not isinstance(tree, list):
            return []

        parts: list[Part] = []
        for node in tree:
            part = cls._decode_part(node)
            if part is not None:
                parts.append(part)
        return parts

    @classmethod
    def _decode_part(cls, node: Any) -> Optional[Part]:
        if not isinstance(node, dict) or cls.TYPE_FIELD not in node:
            return None

        part_type = node[cls.TYPE_FIELD]
        metadata = cls._decode_metadata(node)

        match part_type:
            case PartType.TEXT.value:
                if cls.TEXT_FIELD not in node:
                    return None
                return Part(root=TextPart(text=str(node[cls.TEXT_FIELD]), metadata=metadata))
            case PartType.FILE.value:
                if not isinstance(node.get(cls.FILE_FIELD), dict):
                    return None
                return Part(root=FilePart(file=cls._decode_file(node[cls.FILE_FIELD]), metadata=metadata))
            case PartType.DATA.value:
                if not isinstance(node.get(cls.DATA_FIELD), dict):
                    return None
                return Part(root=DataPart(data=node[cls.DATA_FIELD], metadata=metadata))
            case _:
                logger.debug("Skipping stored part with unknown type %r", part_type)
                return None

    @classmethod
    def _decode_file(cls, node: dict[str, Any]) -> FileWithBytes | FileWithUri:
        mime_type = node.get(cls.MIME_TYPE_FIELD)
        name = node.get(cls.NAME_FIELD)

        if node.get(cls.BYTES_FIELD) is not None:
            return FileWithBytes(bytes=node[cls.BYTES_FIELD], mime_type=mime_type, name=name)
        if node.get(cls.URI_FIELD) is not None:
            return FileWithUri(uri=node[cls.URI_FIELD], mime_type=mime_type, name=name)

        raise DeserializationError("File content must have either 'bytes' or 'uri'")

    @classmethod
    def _decode_metadata(cls, node: dict[str, Any]) -> Optional[dict[str, Any]]:
        metadata = node.get(cls.METADATA_FIELD)
        if isinstance(metadata, dict) and metadata:
            return metadata
        return None
