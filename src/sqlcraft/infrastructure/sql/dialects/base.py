"""
SQL dialect presets.

A dialect only decides how identifiers are enclosed: which symbols wrap
them and how a literal quote escapes an embedded closing symbol.
"""

from dataclasses import dataclass
from typing import Dict, TypeVar

from ..core.identifier import IdentifierEnclosure, quote_identifier

B = TypeVar("B", bound=IdentifierEnclosure)


@dataclass(frozen=True)
class Dialect:
    """Identifier enclosing rules of one SQL dialect."""

    name: str
    opening_symbol: str
    closing_symbol: str

    def quote(self, identifier: str) -> str:
        """Quote an identifier using this dialect's escaping rules."""
        return quote_identifier(identifier, dialect=self.name)

    def apply(self, builder: B) -> B:
        """
        Configure a builder to enclose identifiers the way this dialect does.

        Args:
            builder: Any builder sharing the enclosing feature

        Returns:
            The same builder, with enclosing enabled
        """
        builder.set_enclose_symbol(self.opening_symbol, self.closing_symbol)
        builder.enable_enclose_identifier(True)
        return builder


POSTGRESQL = Dialect("postgresql", '"', '"')
SQLITE = Dialect("sqlite", '"', '"')
MYSQL = Dialect("mysql", "`", "`")
MSSQL = Dialect("mssql", "[", "]")

DIALECTS: Dict[str, Dialect] = {
    dialect.name: dialect for dialect in (POSTGRESQL, SQLITE, MYSQL, MSSQL)
}


def get_dialect(name: str) -> Dialect:
    """
    Look up a dialect preset by name.

    Raises:
        KeyError: If no preset exists for ``name``
    """
    try:
        return DIALECTS[name.lower()]
    except KeyError:
        raise KeyError(
            f"Unknown dialect '{name}'. Known dialects: {', '.join(sorted(DIALECTS))}"
        ) from None
