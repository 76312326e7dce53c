"""Exceptions raised by the connection layer and the result cursor.

``DriverError`` carries the driver's SQLSTATE-equivalent code and its
driver-specific code so callers can branch on them without parsing
messages. Nothing in this package retries on either error.
"""

from typing import Any, Dict, Optional

# SQLSTATE codes raised by this package itself
SQLSTATE_GENERAL_ERROR = "HY000"
SQLSTATE_FUNCTION_SEQUENCE = "HY010"
SQLSTATE_NOT_IMPLEMENTED = "HYC00"
SQLSTATE_UNSUPPORTED_ATTRIBUTE = "IM001"


class DriverError(Exception):
    """
    Structured error for a failed prepare, query, execute or fetch.

    Args:
        message: Driver message
        sqlstate: Five character SQLSTATE code
        driver_code: Driver-specific error code, when the driver gives one
        original_error: Exception raised by the driver (optional)
    """

    def __init__(
        self,
        message: str,
        sqlstate: str = SQLSTATE_GENERAL_ERROR,
        driver_code: Optional[int] = None,
        original_error: Optional[BaseException] = None,
    ):
        self.message = message
        self.sqlstate = sqlstate
        self.driver_code = driver_code
        self.original_error = original_error
        super().__init__(message)

    def __str__(self) -> str:
        code = "" if self.driver_code is None else self.driver_code
        return f"{self.message} ({self.sqlstate}/{code})"

    @classmethod
    def from_dbapi_error(cls, error: BaseException) -> "DriverError":
        """
        Build a DriverError from a SQLAlchemy ``StatementError``/``DBAPIError``.

        The SQLSTATE is read from ``sqlstate`` (psycopg 3) or ``pgcode``
        (psycopg2) on the driver exception; the driver code from
        ``sqlite_errorcode`` or an integer first argument (MySQL drivers).
        """
        orig = getattr(error, "orig", None) or error

        sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)

        driver_code = getattr(orig, "sqlite_errorcode", None)
        if driver_code is None and orig.args and isinstance(orig.args[0], int):
            driver_code = orig.args[0]

        if orig.args and isinstance(orig.args[-1], str):
            message = orig.args[-1]
        else:
            message = str(orig)

        return cls(
            message,
            sqlstate=sqlstate or SQLSTATE_GENERAL_ERROR,
            driver_code=driver_code,
            original_error=error,
        )

    def error_info(self) -> tuple:
        """Return ``(sqlstate, driver_code, message)``."""
        return (self.sqlstate, self.driver_code, self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to structured dict for logging."""
        return {
            "error_type": type(self).__name__,
            "sqlstate": self.sqlstate,
            "driver_code": self.driver_code,
            "message": self.message,
            "original_error_type": (
                type(self.original_error).__name__ if self.original_error else None
            ),
        }


class ConfigurationError(Exception):
    """Raised when a handle, DSN or fetch style cannot be used as configured."""


class ConnectionNotFoundError(ConfigurationError):
    """
    Raised when a connection id is unknown and no parameters were given.

    Args:
        connection_id: The id that was looked up (None for "last used")
    """

    def __init__(self, connection_id: Optional[str], message: Optional[str] = None):
        self.connection_id = connection_id
        if message is None:
            message = (
                f"Connection '{connection_id}' is not declared in the connection list"
            )
        super().__init__(message)
