"""Result cursor, statement handles and the SQLAlchemy connection layer."""

from .connection import Connection, SQLAlchemyConnection
from .cursor import ResultCursor
from .database import ConnectionRegistry, Database
from .events import ConnectionEvents
from .exceptions import ConfigurationError, ConnectionNotFoundError, DriverError
from .fetch_style import (
    CursorDirection,
    CursorOffset,
    FetchMode,
    FetchStyle,
    Orientation,
)
from .statement import SQLAlchemyStatement, StatementHandle

__all__ = [
    "ConfigurationError",
    "Connection",
    "ConnectionEvents",
    "ConnectionNotFoundError",
    "ConnectionRegistry",
    "CursorDirection",
    "CursorOffset",
    "Database",
    "DriverError",
    "FetchMode",
    "FetchStyle",
    "Orientation",
    "ResultCursor",
    "SQLAlchemyConnection",
    "SQLAlchemyStatement",
    "StatementHandle",
]
