"""
WHERE clause builder.

Accumulates predicate fragments chained with AND / OR. A fragment is an
opaque string: it is concatenated, never parsed. Another ``WhereClause``
can be embedded as a parenthesized group.
"""

from dataclasses import dataclass, field
from typing import List, Optional, TypeVar, Union

W = TypeVar("W", bound="WhereClause")

WHERE_TOKEN = " WHERE "


@dataclass
class WhereState:
    """Accumulated WHERE fragments, each already prefixed with its operator."""

    where: List[str] = field(default_factory=list)


class WhereClause:
    """
    Build a WHERE clause.

    The logic operator set by ``and_where`` / ``or_where`` applies to that
    single call only; plain ``where`` chains with AND.

    Example:
        >>> str(WhereClause().where("a = 1").or_where("b = 2"))
        ' WHERE a = 1 OR b = 2'
    """

    def __init__(self) -> None:
        self._state = self._new_state()
        self._logic_operator: Optional[str] = None

    def _new_state(self) -> WhereState:
        return WhereState()

    def where(self: W, expression: Union[str, "WhereClause"]) -> W:
        """
        Add an expression (regular string or a WHERE clause).

        Args:
            expression: Raw predicate, or a ``WhereClause`` embedded as a
                parenthesized group

        Returns:
            The builder itself
        """
        prefix = ""
        if self._state.where:
            prefix = f"{self._logic_operator or 'AND'} "

        self._state.where.append(prefix + render_fragment(expression))
        self._logic_operator = None

        return self

    def and_where(self: W, expression: Union[str, "WhereClause"]) -> W:
        """Add an expression chained with AND."""
        self._logic_operator = "AND"
        return self.where(expression)

    def or_where(self: W, expression: Union[str, "WhereClause"]) -> W:
        """Add an expression chained with OR."""
        self._logic_operator = "OR"
        return self.where(expression)

    def conditions(self) -> str:
        """Return the predicate text without the leading WHERE token."""
        return " ".join(self._state.where)

    def reset(self: W) -> W:
        """Swap in a fresh, empty state."""
        self._state = self._new_state()
        self._logic_operator = None
        return self

    def _render_where(self) -> str:
        if not self._state.where:
            return ""
        return WHERE_TOKEN + self.conditions()

    def render(self) -> str:
        """Generate the clause (empty string when no predicate was added)."""
        return self._render_where()

    def __str__(self) -> str:
        return self.render()


def render_fragment(expression: Union[str, WhereClause]) -> str:
    """
    Turn a predicate argument into one fragment.

    Strings are used verbatim. A SELECT builder becomes a parenthesized
    sub-query; any other ``WhereClause`` is unwrapped of its WHERE token and
    parenthesized.
    """
    # Imported here: select.py builds on this module.
    from .select import SelectCore

    if isinstance(expression, SelectCore):
        return f"({expression.render()})"
    if isinstance(expression, WhereClause):
        return f"({expression.conditions()})"
    return expression
