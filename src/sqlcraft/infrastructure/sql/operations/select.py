"""
SELECT query builders.

``SelectCore`` holds everything one SELECT branch owns (columns, sources,
WHERE, GROUP BY, HAVING). ``Select`` adds what applies to the whole
statement: set-operator composition, ORDER BY and LIMIT / OFFSET.

Composition copies the rendered branch out and swaps in a fresh core
state, so ORDER BY / LIMIT / OFFSET are never cleared and apply once to
the composed statement.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, TypeVar, Union

from ..core.identifier import IdentifierEnclosure
from ..exceptions import BuilderUsageError
from .where import WhereClause, WhereState, render_fragment

S = TypeVar("S", bound="SelectCore")

Source = Union[str, "SelectCore"]


@dataclass
class SourceEntry:
    """One FROM source: a name, a join chain, or a parenthesized sub-select."""

    source: str
    alias: Optional[str] = None


@dataclass
class SelectCoreState(WhereState):
    """State of one SELECT branch; replaced wholesale on composition."""

    columns: List[str] = field(default_factory=list)
    distinct_or_all: Optional[str] = None
    sources: List[SourceEntry] = field(default_factory=list)
    group_by: List[str] = field(default_factory=list)
    having: Optional[str] = None


class Join:
    """
    Proxy returned by the join family.

    Bound to the FROM list of its SELECT; ``on`` and ``using`` complete the
    last source and hand the SELECT back. Any other attribute is looked up
    on the SELECT so a chain can go on without a join condition.
    """

    def __init__(self, parent: "SelectCore", sources: List[SourceEntry]) -> None:
        self._parent = parent
        self._sources = sources

    def on(self, expression: Union[str, WhereClause]) -> "SelectCore":
        """Complete the join with an ON predicate."""
        last = self._sources[-1]
        last.source = f"{last.source} ON {render_fragment(expression)}"
        return self._parent

    def using(self, *columns: str) -> "SelectCore":
        """Complete the join with a USING column list."""
        last = self._sources[-1]
        enclosed = ", ".join(self._parent.enclose(list(columns)))
        last.source = f"{last.source} USING ({enclosed})"
        return self._parent

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self._parent, name)


class SelectCore(IdentifierEnclosure, WhereClause):
    """Core of the SELECT query."""

    _state: SelectCoreState

    def __init__(self, *columns: str) -> None:
        super().__init__()
        self._state.columns.extend(columns)

    def _new_state(self) -> SelectCoreState:
        return SelectCoreState()

    def distinct(self: S) -> S:
        """Make a SELECT DISTINCT."""
        self._state.distinct_or_all = "DISTINCT"
        return self

    def all(self: S) -> S:
        """Make a SELECT ALL."""
        self._state.distinct_or_all = "ALL"
        return self

    def select(self: S, *columns: str) -> S:
        """Add columns."""
        self._state.columns.extend(columns)
        return self

    def group_by(self: S, *expressions: str) -> S:
        self._state.group_by.extend(expressions)
        return self

    def having(self: S, expression: str) -> S:
        self._state.having = expression
        return self

    def from_(self: S, *sources: Source) -> S:
        """
        Add sources (regular names or SELECT queries).

        A SELECT source is rendered and parenthesized immediately.
        """
        for source in sources:
            if isinstance(source, SelectCore):
                source = f"({source.render()})"
            self._state.sources.append(SourceEntry(source))
        return self

    def as_(self: S, alias: str) -> S:
        """Alias the last declared source; no-op when there is none."""
        if self._state.sources:
            self._state.sources[-1].alias = alias
        return self

    def join(self, source: Source) -> Join:
        return self._join("JOIN", source)

    def natural_join(self, source: Source) -> Join:
        return self._join("NATURAL JOIN", source)

    def left_join(self, source: Source) -> Join:
        return self._join("LEFT JOIN", source)

    def natural_left_join(self, source: Source) -> Join:
        return self._join("NATURAL LEFT JOIN", source)

    def left_outer_join(self, source: Source) -> Join:
        return self._join("LEFT OUTER JOIN", source)

    def natural_left_outer_join(self, source: Source) -> Join:
        return self._join("NATURAL LEFT OUTER JOIN", source)

    def inner_join(self, source: Source) -> Join:
        return self._join("INNER JOIN", source)

    def natural_inner_join(self, source: Source) -> Join:
        return self._join("NATURAL INNER JOIN", source)

    def cross_join(self, source: Source) -> Join:
        return self._join("CROSS JOIN", source)

    def natural_cross_join(self, source: Source) -> Join:
        return self._join("NATURAL CROSS JOIN", source)

    def _join(self, join_type: str, source: Source) -> Join:
        """
        Join a source onto the last declared one.

        Raises:
            BuilderUsageError: If no FROM source was declared yet
        """
        sources = self._state.sources
        if not sources:
            raise BuilderUsageError(
                "Cannot join if there is no FROM set",
                operation=join_type.lower().replace(" ", "_"),
            )

        if isinstance(source, SelectCore):
            source = f"({source.render()})"

        last = sources[-1]
        last.source = f"{self.enclose(last.source)} {join_type} {self.enclose(source)}"

        return Join(self, sources)

    def _render_core(self) -> str:
        state = self._state
        out = "SELECT"

        if state.distinct_or_all is not None:
            out += f" {state.distinct_or_all}"

        if state.columns:
            out += " " + ", ".join(self.enclose(state.columns))
        else:
            out += " *"

        if state.sources:
            handle = []
            for entry in state.sources:
                if entry.alias is None:
                    handle.append(self.enclose(entry.source))
                else:
                    handle.append(
                        f"{self.enclose(entry.source)} AS {self.enclose(entry.alias)}"
                    )
            out += " FROM " + ", ".join(handle)

        out += self._render_where()

        if state.group_by:
            out += " GROUP BY " + ", ".join(self.enclose(state.group_by))
            if state.having:
                out += f" HAVING {state.having}"

        return out

    def render(self) -> str:
        return self._render_core()


class Select(SelectCore):
    """
    Build a SELECT query.

    Example:
        >>> query = Select("a", "b").from_("t").where("a = 1").order_by("a").limit(10)
        >>> query.render()
        'SELECT a, b FROM t WHERE a = 1 ORDER BY a LIMIT 10'
        >>> Select().from_("a").union().select().from_("b").render()
        'SELECT * FROM a UNION SELECT * FROM b'
    """

    def __init__(self, *columns: str) -> None:
        super().__init__(*columns)
        self._compounds: List[str] = []
        self._order_by: List[str] = []
        self._limit: List[int] = []
        self._offset: Optional[str] = None

    def union(self) -> "Select":
        """Start a new SELECT branch, unioned with the previous one."""
        return self._compose("UNION")

    def union_all(self) -> "Select":
        return self._compose("UNION ALL")

    def intersect(self) -> "Select":
        return self._compose("INTERSECT")

    def except_(self) -> "Select":
        return self._compose("EXCEPT")

    def _compose(self, operator: str) -> "Select":
        self._compounds.append(f"{self._render_core()} {operator}")
        self.reset()
        return self

    def order_by(self, *terms: str) -> "Select":
        self._order_by.extend(terms)
        return self

    def limit(self, *expressions: int) -> "Select":
        """
        Add limit expressions.

        With an offset set, only the first one is rendered
        (``LIMIT n OFFSET m``); otherwise all are rendered comma-separated.
        """
        self._limit.extend(expressions)
        return self

    def offset(self, expression: Union[int, str]) -> "Select":
        self._offset = str(expression)
        return self

    def render(self) -> str:
        out = ""

        if self._compounds:
            out += " ".join(self._compounds) + " "

        out += self._render_core()

        if self._order_by:
            out += " ORDER BY " + ", ".join(self.enclose(self._order_by))

        if self._limit:
            out += " LIMIT"
            if self._offset is not None:
                out += f" {self._limit[0]} OFFSET {self._offset}"
            else:
                out += " " + ", ".join(str(limit) for limit in self._limit)

        return out
