"""Statement builders."""

from .delete import Delete
from .insert import Insert
from .select import Join, Select, SelectCore, SourceEntry
from .update import Update
from .where import WhereClause

__all__ = [
    "WhereClause",
    "SelectCore",
    "Select",
    "Join",
    "SourceEntry",
    "Insert",
    "Update",
    "Delete",
]
