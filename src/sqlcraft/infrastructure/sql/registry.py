"""
Named store of query builders.

``QueryRegistry`` is a caller-owned object: the caller creates it, passes it
where it is needed and clears it when done. Nothing is held at module level.
"""

import copy
from typing import Dict, Optional, TypeVar, Union

from sqlcraft.config import Settings, get_settings
from sqlcraft.utils.logging import get_logger

from .core.identifier import IdentifierEnclosure
from .dialects import Dialect, get_dialect
from .operations import Delete, Insert, Select, Update, WhereClause

logger = get_logger(__name__)

Builder = Union[Select, Insert, Update, Delete, WhereClause]
T = TypeVar("T", Select, Insert, Update, Delete, WhereClause)


class QueryRegistry:
    """
    Produce builders and optionally keep them under an id.

    ``set_id`` marks the next produced builder for storage; the id is
    consumed by that call whether or not it was stored before.

    Example:
        >>> queries = QueryRegistry()
        >>> queries.set_id("active_users").select("id").from_("users").where("active = 1")
        >>> queries.get("active_users").render()
        'SELECT id FROM users WHERE active = 1'
    """

    def __init__(self, dialect: Optional[Union[str, Dialect]] = None) -> None:
        """
        Initialize an empty registry.

        Args:
            dialect: Optional dialect (or its name) applied to every produced
                builder, enabling identifier enclosing with its symbols
        """
        if isinstance(dialect, str):
            dialect = get_dialect(dialect)
        self.dialect = dialect
        self._queries: Dict[str, Builder] = {}
        self._id: Optional[str] = None

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "QueryRegistry":
        """Create a registry using the configured dialect, if any."""
        settings = settings if settings is not None else get_settings()
        return cls(dialect=settings.dialect)

    def set_id(self, query_id: str) -> "QueryRegistry":
        """Store the next produced builder under ``query_id``."""
        self._id = query_id
        return self

    def get_id(self) -> Optional[str]:
        return self._id

    def select(self, *columns: str) -> Select:
        """Start a SELECT query."""
        return self._store(Select(*columns))

    def insert(self) -> Insert:
        return self._store(Insert())

    def update(self) -> Update:
        return self._store(Update())

    def delete(self) -> Delete:
        return self._store(Delete())

    def where(self, expression: str) -> WhereClause:
        """Start a standalone WHERE clause (typically for nesting)."""
        return self._store(WhereClause().where(expression))

    def _store(self, builder: T) -> T:
        if self.dialect is not None and isinstance(builder, IdentifierEnclosure):
            self.dialect.apply(builder)

        query_id, self._id = self._id, None
        if query_id is not None:
            self._queries[query_id] = builder
            logger.debug(
                "query_stored", query_id=query_id, builder=type(builder).__name__
            )

        return builder

    def get(self, query_id: str) -> Optional[Builder]:
        """Return an independent copy of a stored builder, or None."""
        reference = self.get_reference(query_id)
        if reference is None:
            return None
        return copy.deepcopy(reference)

    def get_reference(self, query_id: str) -> Optional[Builder]:
        """Return the stored builder itself (shared), or None."""
        return self._queries.get(query_id)

    def remove(self, query_id: str) -> bool:
        """Forget a stored builder; returns whether it existed."""
        return self._queries.pop(query_id, None) is not None

    def clear(self) -> None:
        self._queries.clear()
        self._id = None

    def __contains__(self, query_id: object) -> bool:
        return query_id in self._queries

    def __len__(self) -> int:
        return len(self._queries)
