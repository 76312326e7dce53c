"""
SQL module for fluent statement construction.

Builders accumulate fragments in memory and render them to SQL text; they
never execute anything. Identifier enclosing is shared by every builder
and can be preconfigured per dialect.
"""

from .core.identifier import IdentifierEnclosure, quote_identifier
from .dialects import Dialect, get_dialect
from .exceptions import BuilderUsageError
from .operations import Delete, Insert, Join, Select, SelectCore, Update, WhereClause
from .registry import QueryRegistry

__all__ = [
    "quote_identifier",
    "IdentifierEnclosure",
    "Dialect",
    "get_dialect",
    "BuilderUsageError",
    "WhereClause",
    "SelectCore",
    "Select",
    "Join",
    "Insert",
    "Update",
    "Delete",
    "QueryRegistry",
]
