"""
Connection layer over SQLAlchemy.

``SQLAlchemyConnection`` opens one SQLAlchemy ``Connection`` on an engine
built from a database URL and hands out ``SQLAlchemyStatement`` handles.

Outside an explicit transaction, every statement that returns no rows is
committed as soon as it has run.
"""

from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

import sqlalchemy as sa
from sqlalchemy import dialects as sa_dialects
from sqlalchemy import exc as sa_exc
from sqlalchemy.engine import CursorResult, Engine, Transaction, make_url

from sqlcraft.utils.logging import get_logger, mask_dsn

from .exceptions import (
    SQLSTATE_UNSUPPORTED_ATTRIBUTE,
    ConfigurationError,
    DriverError,
)
from .statement import SQLAlchemyStatement

logger = get_logger(__name__)

# SQLSTATE 25000: invalid transaction state
SQLSTATE_INVALID_TRANSACTION_STATE = "25000"

ATTR_AUTOCOMMIT = "AUTOCOMMIT"
ATTR_CLIENT_VERSION = "CLIENT_VERSION"
ATTR_DRIVER = "DRIVER"
ATTR_DRIVER_NAME = "DRIVER_NAME"
ATTR_ISOLATION_LEVEL = "ISOLATION_LEVEL"
ATTR_SCROLLABLE_CURSORS = "SCROLLABLE_CURSORS"
ATTR_SERVER_VERSION = "SERVER_VERSION"


class Connection(Protocol):
    """What a ``Database`` needs from a connection layer."""

    def prepare(
        self, sql: str, options: Optional[Dict[str, Any]] = None
    ) -> SQLAlchemyStatement: ...

    def query(self, sql: str) -> SQLAlchemyStatement: ...

    def quote(self, value: Any, type_hint: Any = None) -> str: ...

    def begin_transaction(self) -> bool: ...

    def commit(self) -> bool: ...

    def roll_back(self) -> bool: ...

    def last_insert_id(self, name: Optional[str] = None) -> str: ...

    def get_attribute(self, name: str) -> Any: ...

    def set_attribute(self, name: str, value: Any) -> Any: ...

    def error_code(self) -> str: ...

    def error_info(self) -> Tuple[str, Optional[int], Optional[str]]: ...

    def supports_scrollable_cursors(self) -> bool: ...

    def close(self) -> None: ...


class SQLAlchemyConnection:
    """
    One open connection to a database.

    Args:
        dsn: SQLAlchemy database URL (``postgresql://host/db``, ``sqlite://``)
        username: Overrides the URL user when non-empty
        password: Overrides the URL password when non-empty
        options: Keyword arguments for ``sqlalchemy.create_engine``

    Raises:
        ConfigurationError: If the URL cannot be parsed or its driver loaded
        DriverError: If the database refuses the connection
    """

    def __init__(
        self,
        dsn: str,
        username: str = "",
        password: str = "",
        options: Optional[Dict[str, Any]] = None,
    ) -> None:
        try:
            url = make_url(dsn)
        except sa_exc.ArgumentError as e:
            raise ConfigurationError(f"Invalid database URL '{mask_dsn(dsn)}': {e}") from e

        if username:
            url = url.set(username=username)
        if password:
            url = url.set(password=password)

        try:
            self.engine: Engine = sa.create_engine(url, **(options or {}))
        except (sa_exc.NoSuchModuleError, ImportError) as e:
            raise ConfigurationError(
                f"Cannot load a driver for '{url.drivername}': {e}"
            ) from e
        except sa_exc.ArgumentError as e:
            # Raised by the dialect when it rejects parts of the URL
            raise ConfigurationError(
                f"Invalid database URL '{url.render_as_string(hide_password=True)}': {e}"
            ) from e

        try:
            self._connection = self.engine.connect()
        except sa_exc.DBAPIError as e:
            self.engine.dispose()
            raise DriverError.from_dbapi_error(e) from e

        self._transaction: Optional[Transaction] = None
        self._autocommit = True
        self._scrollable: Optional[bool] = None
        self._last_row_id: Any = None
        self._error: Optional[DriverError] = None

        logger.debug(
            "connection_layer_opened",
            dsn=url.render_as_string(hide_password=True),
            dialect=self.engine.dialect.name,
        )

    @property
    def closed(self) -> bool:
        return self._connection.closed

    def supports_scrollable_cursors(self) -> bool:
        """
        Whether DBAPI cursors of this driver can be repositioned.

        Asked once per connection: a throwaway cursor is checked for a
        callable ``scroll`` (DB-API 2.0 optional extension).
        """
        if self._scrollable is None:
            dbapi_connection = self._connection.connection
            cursor = dbapi_connection.cursor()
            try:
                self._scrollable = callable(getattr(cursor, "scroll", None))
            finally:
                cursor.close()
        return self._scrollable

    def prepare(
        self, sql: str, options: Optional[Dict[str, Any]] = None
    ) -> SQLAlchemyStatement:
        """
        Prepare a statement for execution.

        Args:
            sql: SQL text with ``:name`` or driver-style placeholders
            options: ``{"scrollable": False}`` forces a forward-only handle
        """
        options = options or {}
        scrollable = self.supports_scrollable_cursors() and options.get(
            "scrollable", True
        )
        logger.debug("statement_prepared", sql=sql, scrollable=scrollable)
        return SQLAlchemyStatement(
            self._connection,
            sql,
            scrollable=scrollable,
            on_executed=self._after_execute,
        )

    def query(self, sql: str) -> SQLAlchemyStatement:
        """
        Prepare and execute a statement without parameters.

        Raises:
            DriverError: If the driver refuses the statement
        """
        statement = self.prepare(sql)
        try:
            statement.execute()
        except DriverError as e:
            self._error = e
            raise
        self._error = None
        return statement

    def _after_execute(self, result: CursorResult) -> None:
        if not result.returns_rows:
            self._last_row_id = result.lastrowid
        if (
            self._autocommit
            and self._transaction is None
            and not result.returns_rows
            and self._connection.in_transaction()
        ):
            self._connection.commit()

    def quote(self, value: Any, type_hint: Any = None) -> str:
        """
        Render ``value`` as a SQL literal for this dialect.

        Example:
            >>> connection.quote("O'Reilly")
            "'O''Reilly'"
        """
        literal = sa.literal(value, type_=type_hint)
        return str(
            literal.compile(
                dialect=self.engine.dialect, compile_kwargs={"literal_binds": True}
            )
        )

    def begin_transaction(self) -> bool:
        """
        Start an explicit transaction.

        Raises:
            DriverError: If one is already active
        """
        if self._transaction is not None:
            raise DriverError(
                "There is already an active transaction",
                sqlstate=SQLSTATE_INVALID_TRANSACTION_STATE,
            )
        if self._connection.in_transaction():
            # Autobegun by a previous read; nothing left to keep
            self._connection.commit()
        self._transaction = self._connection.begin()
        return True

    def commit(self) -> bool:
        self._end_transaction("commit")
        return True

    def roll_back(self) -> bool:
        self._end_transaction("rollback")
        return True

    def _end_transaction(self, how: str) -> None:
        transaction = self._transaction
        if transaction is None:
            raise DriverError(
                "There is no active transaction",
                sqlstate=SQLSTATE_INVALID_TRANSACTION_STATE,
            )
        self._transaction = None
        try:
            if how == "commit":
                transaction.commit()
            else:
                transaction.rollback()
        except sa_exc.DBAPIError as e:
            self._error = DriverError.from_dbapi_error(e)
            raise self._error from e

    @property
    def in_transaction(self) -> bool:
        return self._transaction is not None

    def last_insert_id(self, name: Optional[str] = None) -> str:
        """
        Id of the last inserted row, or the current value of sequence ``name``.

        Returns "0" when no insert id is known.
        """
        if name is not None:
            value = self._connection.execute(
                sa.text("SELECT currval(:name)"), {"name": name}
            ).scalar()
        else:
            value = self._last_row_id
        return "0" if value is None else str(value)

    def _attribute_getters(self) -> Dict[str, Callable[[], Any]]:
        dialect = self.engine.dialect
        return {
            ATTR_AUTOCOMMIT: lambda: self._autocommit and self._transaction is None,
            ATTR_CLIENT_VERSION: lambda: getattr(
                dialect.dbapi, "sqlite_version", getattr(dialect.dbapi, "__version__", None)
            ),
            ATTR_DRIVER: lambda: dialect.driver,
            ATTR_DRIVER_NAME: lambda: dialect.name,
            ATTR_ISOLATION_LEVEL: self._connection.get_isolation_level,
            ATTR_SCROLLABLE_CURSORS: self.supports_scrollable_cursors,
            ATTR_SERVER_VERSION: lambda: ".".join(
                str(part) for part in (dialect.server_version_info or ())
            ),
        }

    def get_attribute(self, name: str) -> Any:
        """
        Read a connection attribute.

        Raises:
            DriverError: IM001 for an unknown attribute
        """
        getter = self._attribute_getters().get(name.upper())
        if getter is None:
            raise DriverError(
                f"Driver does not support the attribute '{name}'",
                sqlstate=SQLSTATE_UNSUPPORTED_ATTRIBUTE,
            )
        return getter()

    def get_attributes(self) -> Dict[str, Any]:
        return {name: getter() for name, getter in self._attribute_getters().items()}

    def set_attribute(self, name: str, value: Any) -> Any:
        """
        Set a writable attribute (AUTOCOMMIT, ISOLATION_LEVEL).

        Returns:
            The previous value

        Raises:
            DriverError: IM001 for an unknown or read-only attribute
        """
        key = name.upper()
        if key == ATTR_AUTOCOMMIT:
            previous = self._autocommit
            self._autocommit = bool(value)
            return previous
        if key == ATTR_ISOLATION_LEVEL:
            previous = self._connection.get_isolation_level()
            self._connection.execution_options(isolation_level=value)
            return previous

        raise DriverError(
            f"Driver does not support setting the attribute '{name}'",
            sqlstate=SQLSTATE_UNSUPPORTED_ATTRIBUTE,
        )

    def set_attributes(self, attributes: Dict[str, Any]) -> Dict[str, Any]:
        """Set several attributes; returns their previous values."""
        return {name: self.set_attribute(name, value) for name, value in attributes.items()}

    def error_code(self) -> str:
        return "00000" if self._error is None else self._error.sqlstate

    def error_info(self) -> Tuple[str, Optional[int], Optional[str]]:
        if self._error is None:
            return ("00000", None, None)
        return self._error.error_info()

    @staticmethod
    def get_available_drivers() -> List[str]:
        """Dialects bundled with SQLAlchemy."""
        return list(sa_dialects.__all__)

    def close(self) -> None:
        """Roll back an open transaction, close the connection, dispose the engine."""
        if self._transaction is not None:
            self._transaction.rollback()
            self._transaction = None
        self._connection.close()
        self.engine.dispose()
        logger.debug("connection_layer_closed", dialect=self.engine.dialect.name)

    def __enter__(self) -> "SQLAlchemyConnection":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
