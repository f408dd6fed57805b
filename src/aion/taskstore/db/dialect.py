"""JSON parameter adapters.

PostgreSQL rejects plain text parameters for ``jsonb`` columns when they are
sent through untyped binds, so the JSON text has to travel inside the
driver's typed JSON wrapper. Other engines accept the text as is.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

from psycopg.types.json import Jsonb
from sqlalchemy.engine import URL, make_url
from typing_extensions import override

from aion.taskstore.logging import get_logger

logger = get_logger(__name__)

__all__ = [
    "PSYCOPG_DRIVER",
    "JsonParameterAdapter",
    "PassthroughJsonAdapter",
    "PostgresJsonbAdapter",
]


PSYCOPG_DRIVER = "psycopg"

_POSTGRES_BACKENDS = ("postgresql", "postgres")


def _identity(text: str) -> str:
    return text


class JsonParameterAdapter(ABC):
    """Turns JSON text into the bind parameter a JSON column accepts."""

    name: str = "abstract"

    @abstractmethod
    def adapt(self, json_text: Optional[str]) -> Any:
        """Wrap JSON text for binding; None stays None."""
        raise NotImplementedError

    @classmethod
    def for_url(cls, url: str | URL | None) -> JsonParameterAdapter:
        """Select the adapter for a database URL.

        Detection failures fall back to ``PassthroughJsonAdapter``.
        """
        try:
            parsed = make_url(url)
            backend = parsed.get_backend_name()
        except Exception as exc:
            logger.warning(
                "Could not detect database dialect, sending JSON as text: %s", exc)
            return PassthroughJsonAdapter()

        driver = parsed.drivername.partition("+")[2]
        if backend in _POSTGRES_BACKENDS and not driver:
            # Bare postgresql:// URLs are run with psycopg, see sqlalchemy_url()
            driver = PSYCOPG_DRIVER

        # Only psycopg needs its Jsonb wrapper; asyncpg and psycopg2 take JSON text
        if backend in _POSTGRES_BACKENDS and driver == PSYCOPG_DRIVER:
            adapter = PostgresJsonbAdapter()
        else:
            adapter = PassthroughJsonAdapter()

        logger.info("Using %s JSON parameters for %s", adapter.name, parsed.drivername)
        return adapter

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class PassthroughJsonAdapter(JsonParameterAdapter):
    """JSON text is bound unchanged."""

    name = "text"

    @override
    def adapt(self, json_text: Optional[str]) -> Optional[str]:
        return json_text


class PostgresJsonbAdapter(JsonParameterAdapter):
    """JSON text is bound as a psycopg ``Jsonb`` value."""

    name = "jsonb"

    @override
    def adapt(self, json_text: Optional[str]) -> Optional[Jsonb]:
        if json_text is None:
            return None
        # Already encoded, psycopg must not dump it again
        return Jsonb(json_text, dumps=_identity)
