"""
Named database connections.

A ``Database`` is one named connection: it opens its SQLAlchemy layer on
first use and wraps every statement handle in a ``ResultCursor``.
``ConnectionRegistry`` is the caller-owned set of them, filled on demand
from explicit parameters or from the configured connection list.

Usage:
    registry = ConnectionRegistry()
    db = registry.get_instance("main", dsn="sqlite:///app.db")
    cursor = db.query("SELECT id, name FROM users")
    rows = cursor.fetch_all()
    registry.close_all()
"""

from typing import Any, Dict, List, Optional, Tuple

from sqlcraft.config import Settings, get_settings
from sqlcraft.utils.logging import get_logger, sanitize_for_logging

from .connection import SQLAlchemyConnection
from .cursor import ResultCursor
from .events import ConnectionEvents
from .exceptions import ConnectionNotFoundError

logger = get_logger(__name__)


class Database:
    """
    One named connection, opened lazily.

    Args:
        connection_id: Name of the connection
        dsn: SQLAlchemy database URL
        username: Overrides the URL user when non-empty
        password: Overrides the URL password when non-empty
        options: Keyword arguments for ``sqlalchemy.create_engine``
        events: Listeners notified when the connection opens and closes
    """

    def __init__(
        self,
        connection_id: str,
        dsn: str,
        username: str = "",
        password: str = "",
        options: Optional[Dict[str, Any]] = None,
        events: Optional[ConnectionEvents] = None,
    ) -> None:
        self.id = connection_id
        self.dsn = dsn
        self.username = username
        self._password = password
        self.options = dict(options or {})
        self.events = events if events is not None else ConnectionEvents()
        self._layer: Optional[SQLAlchemyConnection] = None

    def _payload(self) -> Dict[str, Any]:
        return sanitize_for_logging(
            {"id": self.id, "dsn": self.dsn, "username": self.username}
        )

    @property
    def is_open(self) -> bool:
        return self._layer is not None

    def get_layer(self) -> SQLAlchemyConnection:
        """
        Return the connection layer, opening it on first use.

        Raises:
            ConfigurationError: If the DSN or its driver is unusable
            DriverError: If the database refuses the connection
        """
        if self._layer is None:
            self._layer = SQLAlchemyConnection(
                self.dsn,
                username=self.username,
                password=self._password,
                options=self.options,
            )
            payload = self._payload()
            logger.info("connection_opened", connection_id=self.id, dsn=payload["dsn"])
            self.events.dispatch("opened", payload)
        return self._layer

    def prepare(self, sql: str, options: Optional[Dict[str, Any]] = None) -> ResultCursor:
        """Prepare ``sql``; execute it through the returned cursor."""
        return ResultCursor(self.get_layer().prepare(sql, options))

    def query(self, sql: str) -> ResultCursor:
        """Execute ``sql`` without parameters and return its cursor."""
        return ResultCursor(self.get_layer().query(sql))

    def quote(self, value: Any, type_hint: Any = None) -> str:
        return self.get_layer().quote(value, type_hint)

    def begin_transaction(self) -> bool:
        return self.get_layer().begin_transaction()

    def commit(self) -> bool:
        return self.get_layer().commit()

    def roll_back(self) -> bool:
        return self.get_layer().roll_back()

    def last_insert_id(self, name: Optional[str] = None) -> str:
        return self.get_layer().last_insert_id(name)

    def get_attribute(self, name: str) -> Any:
        return self.get_layer().get_attribute(name)

    def get_attributes(self) -> Dict[str, Any]:
        return self.get_layer().get_attributes()

    def set_attribute(self, name: str, value: Any) -> Any:
        return self.get_layer().set_attribute(name, value)

    def set_attributes(self, attributes: Dict[str, Any]) -> Dict[str, Any]:
        return self.get_layer().set_attributes(attributes)

    def error_code(self) -> str:
        return self.get_layer().error_code()

    def error_info(self) -> Tuple[str, Optional[int], Optional[str]]:
        return self.get_layer().error_info()

    def get_available_drivers(self) -> List[str]:
        return SQLAlchemyConnection.get_available_drivers()

    def close(self) -> None:
        """Close the layer if it is open; the database may be reopened later."""
        if self._layer is None:
            return
        self._layer.close()
        self._layer = None
        logger.info("connection_closed", connection_id=self.id)
        self.events.dispatch("closed", self._payload())


class ConnectionRegistry:
    """
    Caller-owned set of named ``Database`` objects.

    Args:
        settings: Source of the connection list and ``autoload``;
            ``get_settings()`` when omitted
        events: Listeners shared by every database of this registry
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        events: Optional[ConnectionEvents] = None,
    ) -> None:
        self.settings = settings if settings is not None else get_settings()
        self.events = events if events is not None else ConnectionEvents()
        self._instances: Dict[str, Database] = {}
        self._last_id: Optional[str] = None

    def get_instance(
        self,
        connection_id: str,
        dsn: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Database:
        """
        Return the database named ``connection_id``, creating it if needed.

        An existing database is returned as is, whatever the parameters.
        Without a ``dsn``, a new one is built from the connection list.

        Raises:
            ConnectionNotFoundError: If the id is unknown and no dsn is given
        """
        database = self._instances.get(connection_id)

        if database is None:
            if dsn is None:
                configured = self.settings.connections.get(connection_id)
                if configured is None:
                    raise ConnectionNotFoundError(connection_id)
                dsn = configured.dsn
                username = configured.username if username is None else username
                password = configured.password if password is None else password
                options = configured.options if options is None else options

            database = Database(
                connection_id,
                dsn,
                username=username or "",
                password=password or "",
                options=options,
                events=self.events,
            )
            self._instances[connection_id] = database
            logger.debug("connection_registered", connection_id=connection_id)

        self._last_id = connection_id
        return database

    def get_last_instance(self) -> Database:
        """
        Return the last database obtained through ``get_instance``.

        Falls back to the ``autoload`` connection when none was used yet.

        Raises:
            ConnectionNotFoundError: If none was used and nothing is autoloaded
        """
        if self._last_id is not None and self._last_id in self._instances:
            return self._instances[self._last_id]

        autoload = self.settings.autoload
        if not autoload:
            raise ConnectionNotFoundError(
                None, "No connection has been used yet and no autoload is configured"
            )
        return self.get_instance(autoload)

    def close(self, connection_id: str) -> bool:
        """Close and forget one database; returns whether it was known."""
        database = self._instances.pop(connection_id, None)
        if database is None:
            return False
        database.close()
        if self._last_id == connection_id:
            self._last_id = None
        return True

    def close_all(self) -> None:
        for connection_id in list(self._instances):
            self.close(connection_id)

    def __contains__(self, connection_id: object) -> bool:
        return connection_id in self._instances

    def __len__(self) -> int:
        return len(self._instances)
