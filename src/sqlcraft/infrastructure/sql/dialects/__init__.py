"""Dialect presets for identifier enclosing."""

from .base import DIALECTS, MSSQL, MYSQL, POSTGRESQL, SQLITE, Dialect, get_dialect

__all__ = [
    "Dialect",
    "DIALECTS",
    "POSTGRESQL",
    "SQLITE",
    "MYSQL",
    "MSSQL",
    "get_dialect",
]
