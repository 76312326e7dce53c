"""
SQL INSERT statement builder.

Values are raw expressions (bind placeholders, literals already quoted by
the caller); they are rendered verbatim.
"""

from typing import Any, List, Optional, Union

from ..core.identifier import IdentifierEnclosure
from .conflict import ConflictAlternative
from .select import SelectCore


class Insert(IdentifierEnclosure, ConflictAlternative):
    """
    Build an INSERT query.

    ``values`` is either a list of tuples (one call per tuple) or, when
    called with a single SELECT, that sub-select's rendering. Adding a tuple
    after a sub-select drops the sub-select.

    Example:
        >>> Insert().into("t").on("a", "b").values(1, 2).values(":a", ":b").render()
        'INSERT INTO t (a, b) VALUES (1, 2), (:a, :b)'
        >>> Insert().or_ignore().into("t").default_values().render()
        'INSERT OR IGNORE INTO t DEFAULT VALUES'
    """

    def __init__(self) -> None:
        self._into: Optional[str] = None
        self._columns: List[str] = []
        self._values: Union[List[List[Any]], str] = []
        self._default_values = False

    def into(self, name: str) -> "Insert":
        """Set the target table."""
        self._into = name
        return self

    def on(self, *columns: str) -> "Insert":
        """Add target columns."""
        self._columns.extend(columns)
        return self

    def values(self, *expressions: Any) -> "Insert":
        """
        Add one tuple of value expressions, or use a SELECT as the source.

        Args:
            *expressions: Raw value expressions, or exactly one SELECT builder
        """
        if len(expressions) == 1 and isinstance(expressions[0], SelectCore):
            self._values = expressions[0].render()
            return self

        if isinstance(self._values, str):
            self._values = []

        self._values.append(list(expressions))
        return self

    def default_values(self) -> "Insert":
        """Insert a row made of default values only."""
        self._default_values = True
        return self

    def render(self) -> str:
        out = "INSERT" + self._render_alternative()
        out += f" INTO {self.enclose(self._into or '')}"

        if self._default_values:
            return out + " DEFAULT VALUES"

        if self._columns:
            out += " (" + ", ".join(self.enclose(self._columns)) + ")"

        if isinstance(self._values, str):
            return f"{out} {self._values}"

        if not self._values:
            return out

        tuples = [
            "(" + ", ".join(str(value) for value in values) + ")"
            for values in self._values
        ]
        return out + " VALUES " + ", ".join(tuples)

    def __str__(self) -> str:
        return self.render()
