"""
SQL identifier handling utilities.

Provides the enclosing feature shared by every query builder (column names,
table names, ORDER BY / GROUP BY terms) and a strict quoting helper for
callers that need a dialect-escaped identifier.
"""

import re
from typing import List, Optional, Sequence, Union, overload

# An identifier holding whitespace or an opening parenthesis is already an
# expression (function call, alias, sub-query) and is never enclosed.
_EXPRESSION_PATTERN = re.compile(r"\s|\(")


def quote_identifier(name: str, dialect: str = "postgresql") -> str:
    """
    Quote a SQL identifier (table or column name).

    Args:
        name: The identifier to quote
        dialect: Database dialect ("postgresql", "sqlite", "mysql", "mssql")

    Returns:
        Properly quoted identifier

    Examples:
        >>> quote_identifier("company_id")
        '"company_id"'
        >>> quote_identifier("table", dialect="mysql")
        '`table`'
        >>> quote_identifier("order", dialect="mssql")
        '[order]'
    """
    if dialect == "mysql":
        escaped = name.replace("`", "``")
        return f"`{escaped}`"
    if dialect == "mssql":
        escaped = name.replace("]", "]]")
        return f"[{escaped}]"
    escaped = name.replace('"', '""')
    return f'"{escaped}"'


class IdentifierEnclosure:
    """
    Enclose identifiers with configurable symbols.

    Enclosing is disabled by default. When enabled, bare identifiers are
    wrapped as ``opening + identifier + closing``; identifiers that contain
    whitespace or ``(`` are returned untouched.

    Example:
        >>> builder.set_enclose_symbol("[", "]")
        >>> builder.enable_enclose_identifier()
        False
        >>> builder.enclose(["a", "count(b)"])
        ['[a]', 'count(b)']
    """

    _enable_enclose: bool = False
    _opening_symbol: str = '"'
    _closing_symbol: str = '"'

    def set_enclose_symbol(
        self, opening_symbol: str, closing_symbol: Optional[str] = None
    ):
        """
        Set enclose symbols.

        Args:
            opening_symbol: Symbol placed before the identifier
            closing_symbol: Symbol placed after it (defaults to the opening one)

        Returns:
            The builder itself
        """
        self._opening_symbol = opening_symbol
        self._closing_symbol = closing_symbol or opening_symbol
        return self

    def enable_enclose_identifier(self, enable: bool = True) -> bool:
        """Enable or disable enclosing; returns the previous state."""
        old = self._enable_enclose
        self._enable_enclose = enable
        return old

    @overload
    def enclose(self, identifiers: str) -> str: ...

    @overload
    def enclose(self, identifiers: Sequence[str]) -> List[str]: ...

    def enclose(self, identifiers: Union[str, Sequence[str]]) -> Union[str, List[str]]:
        """Enclose one identifier or each identifier of a sequence."""
        if not self._enable_enclose:
            return identifiers if isinstance(identifiers, str) else list(identifiers)

        if isinstance(identifiers, str):
            return self._enclose(identifiers)

        return [self._enclose(identifier) for identifier in identifiers]

    def _enclose(self, identifier: str) -> str:
        if _EXPRESSION_PATTERN.search(identifier) is None:
            return f"{self._opening_symbol}{identifier}{self._closing_symbol}"
        return identifier
