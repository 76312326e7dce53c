"""SQL UPDATE statement builder."""

from typing import Any, Dict, Optional

from ..core.identifier import IdentifierEnclosure
from .conflict import ConflictAlternative
from .where import WhereClause


class Update(IdentifierEnclosure, ConflictAlternative, WhereClause):
    """
    Build an UPDATE query.

    Example:
        >>> Update().table("t").set("a", ":a").set("b", "b + 1").where("id = :id").render()
        'UPDATE t SET a = :a, b = b + 1 WHERE id = :id'
    """

    def __init__(self) -> None:
        super().__init__()
        self._table: Optional[str] = None
        self._set: Dict[str, Any] = {}

    def table(self, name: str) -> "Update":
        self._table = name
        return self

    def set(self, name: str, value: Any) -> "Update":
        """Assign a raw value expression to a column; a later call for the same column wins."""
        self._set[name] = value
        return self

    def render(self) -> str:
        out = "UPDATE" + self._render_alternative()
        out += f" {self.enclose(self._table or '')}"

        if self._set:
            assignments = [
                f"{self.enclose(name)} = {value}" for name, value in self._set.items()
            ]
            out += " SET " + ", ".join(assignments)

        return out + self._render_where()
