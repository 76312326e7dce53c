"""SQL DELETE statement builder."""

from typing import Optional

from ..core.identifier import IdentifierEnclosure
from .where import WhereClause


class Delete(IdentifierEnclosure, WhereClause):
    """
    Build a DELETE query.

    Example:
        >>> Delete().from_("t").where("id = :id").render()
        'DELETE FROM t WHERE id = :id'
    """

    def __init__(self) -> None:
        super().__init__()
        self._from: Optional[str] = None

    def from_(self, name: str) -> "Delete":
        self._from = name
        return self

    def render(self) -> str:
        return f"DELETE FROM {self.enclose(self._from or '')}" + self._render_where()
