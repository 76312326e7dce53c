"""
Native statement handles.

``StatementHandle`` is the protocol a ``ResultCursor`` consumes.
``SQLAlchemyStatement`` implements it over a SQLAlchemy ``Connection``:
named (``:name``) parameters go through ``sqlalchemy.text``, positional
sequences through ``Connection.exec_driver_sql`` (driver paramstyle).
"""

from typing import (
    Any,
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    Union,
    runtime_checkable,
)

import sqlalchemy as sa
from sqlalchemy import exc as sa_exc
from sqlalchemy.engine import Connection, CursorResult

from sqlcraft.utils.logging import get_logger

from .exceptions import (
    SQLSTATE_FUNCTION_SEQUENCE,
    SQLSTATE_NOT_IMPLEMENTED,
    DriverError,
)
from .fetch_style import FetchStyle, Orientation

logger = get_logger(__name__)

Parameters = Union[Mapping[str, Any], Sequence[Any]]


@runtime_checkable
class StatementHandle(Protocol):
    """What a result cursor needs from a native statement."""

    scrollable: bool

    @property
    def position(self) -> int: ...

    @property
    def columns(self) -> List[str]: ...

    @property
    def returns_rows(self) -> bool: ...

    def execute(self, parameters: Optional[Parameters] = None) -> bool: ...

    def bind_parameter(
        self,
        name: Union[str, int],
        value: Any,
        type_: Any = None,
        length: Optional[int] = None,
    ) -> bool: ...

    def fetch(
        self,
        style: Optional[FetchStyle] = None,
        orientation: Orientation = Orientation.NEXT,
        offset: int = 0,
    ) -> Any: ...

    def fetch_all(self, style: Optional[FetchStyle] = None) -> List[Any]: ...

    def fetch_column(self, index: int = 0) -> Any: ...

    def row_count(self) -> int: ...

    def scroll(self, position: int) -> None: ...

    def close_cursor(self) -> bool: ...

    def error_code(self) -> str: ...

    def error_info(self) -> Tuple[str, Optional[int], Optional[str]]: ...


class SQLAlchemyStatement:
    """
    A prepared SQL text bound to one SQLAlchemy connection.

    Rows are returned as plain tuples unless a ``FetchStyle`` is passed.

    On a scrollable statement rows are read from the DBAPI cursor directly,
    so the cursor stays open for repositioning once exhausted; otherwise
    they are read through the ``CursorResult``.
    """

    def __init__(
        self,
        connection: Connection,
        sql: str,
        scrollable: bool = False,
        on_executed: Optional[Callable[[CursorResult], None]] = None,
    ) -> None:
        self.connection = connection
        self.sql = sql
        self.scrollable = scrollable
        self._on_executed = on_executed

        self._bound: Dict[Union[str, int], Any] = {}
        self._bound_types: Dict[str, Any] = {}
        self._result: Optional[CursorResult] = None
        self._dbapi_cursor: Any = None
        self._position = 0
        self._error: Optional[DriverError] = None

    @property
    def position(self) -> int:
        """Index of the row the next forward fetch returns."""
        return self._position

    @property
    def columns(self) -> List[str]:
        if self._result is None or not self._result.returns_rows:
            return []
        return list(self._result.keys())

    @property
    def returns_rows(self) -> bool:
        return self._result is not None and self._result.returns_rows

    def bind_parameter(
        self,
        name: Union[str, int],
        value: Any,
        type_: Any = None,
        length: Optional[int] = None,
    ) -> bool:
        """
        Bind a value used by every following ``execute()``.

        Args:
            name: Parameter name (``:name`` placeholders) or 1-based position
            value: Parameter value
            type_: SQLAlchemy type applied to a named parameter
            length: Accepted for compatibility; SQLAlchemy sizes values itself
        """
        self._bound[name] = value
        if type_ is not None and isinstance(name, str):
            self._bound_types[name] = type_
        return True

    def execute(self, parameters: Optional[Parameters] = None) -> bool:
        """
        Execute the statement, merging ``parameters`` over bound ones.

        Raises:
            DriverError: If the driver refuses the statement
        """
        self._reset_result()

        try:
            if self._is_positional(parameters):
                result = self.connection.exec_driver_sql(
                    self.sql, self._positional_parameters(parameters)
                )
            else:
                named = {k: v for k, v in self._bound.items() if isinstance(k, str)}
                named.update(parameters or {})  # type: ignore[arg-type]
                clause = sa.text(self.sql)
                if self._bound_types:
                    clause = clause.bindparams(
                        *[
                            sa.bindparam(name, type_=type_)
                            for name, type_ in self._bound_types.items()
                        ]
                    )
                result = self.connection.execute(clause, named)
        except sa_exc.StatementError as e:
            self._error = DriverError.from_dbapi_error(e)
            logger.warning("statement_failed", sql=self.sql, **self._error.to_dict())
            raise self._error from e

        self._result = result
        self._dbapi_cursor = result.cursor if result.returns_rows else None
        logger.debug(
            "statement_executed",
            sql=self.sql,
            returns_rows=result.returns_rows,
            rowcount=result.rowcount,
        )

        if self._on_executed is not None:
            self._on_executed(result)
        return True

    def _is_positional(self, parameters: Optional[Parameters]) -> bool:
        if parameters is None:
            return any(isinstance(k, int) for k in self._bound)
        return not isinstance(parameters, Mapping)

    def _positional_parameters(self, parameters: Optional[Parameters]) -> tuple:
        if parameters is not None:
            return tuple(parameters)  # type: ignore[arg-type]
        positions = sorted(k for k in self._bound if isinstance(k, int))
        return tuple(self._bound[k] for k in positions)

    def _reset_result(self) -> None:
        if self._result is not None:
            self._result.close()
        self._result = None
        self._dbapi_cursor = None
        self._position = 0
        self._error = None

    def _require_result(self, operation: str) -> CursorResult:
        if self._result is None:
            raise DriverError(
                f"Cannot {operation}: the statement has not been executed",
                sqlstate=SQLSTATE_FUNCTION_SEQUENCE,
            )
        return self._result

    def _require_scrollable(self, operation: str) -> None:
        if not self.scrollable:
            raise DriverError(
                f"Cannot {operation}: the cursor is forward-only",
                sqlstate=SQLSTATE_NOT_IMPLEMENTED,
            )

    def _fetchone(self) -> Optional[Sequence[Any]]:
        if self._dbapi_cursor is not None and self.scrollable:
            row = self._dbapi_cursor.fetchone()
        else:
            row = self._require_result("fetch").fetchone()
        if row is not None:
            self._position += 1
        return row

    def _decode(self, row: Sequence[Any], style: Optional[FetchStyle]) -> Any:
        values = tuple(row)
        if style is None:
            return values
        return style.decode(self.columns, values)

    def fetch(
        self,
        style: Optional[FetchStyle] = None,
        orientation: Orientation = Orientation.NEXT,
        offset: int = 0,
    ) -> Any:
        """
        Fetch one row, or None past either end of the result set.

        Args:
            style: Decoding of the row; a plain tuple when omitted
            orientation: Positioning; anything but NEXT needs a scrollable cursor
            offset: Target position for ABSOLUTE

        Raises:
            DriverError: HY010 before execute, HYC00 when scrolling a
                forward-only cursor
        """
        self._require_result("fetch")

        if orientation is not Orientation.NEXT:
            self._require_scrollable(f"fetch {orientation.value}")
            count = self.row_count()
            if orientation is Orientation.FIRST:
                target = 0
            elif orientation is Orientation.LAST:
                if count < 0:
                    raise DriverError(
                        "Cannot fetch last: the driver does not report a row count",
                        sqlstate=SQLSTATE_NOT_IMPLEMENTED,
                    )
                target = count - 1
            elif orientation is Orientation.PRIOR:
                target = self._position - 2
            else:
                target = offset

            if target < 0 or (count >= 0 and target >= count):
                return None
            self.scroll(target)

        row = self._fetchone()
        if row is None:
            return None
        return self._decode(row, style)

    def fetch_all(self, style: Optional[FetchStyle] = None) -> List[Any]:
        """Fetch every remaining row."""
        result = self._require_result("fetch")
        if self._dbapi_cursor is not None and self.scrollable:
            rows = self._dbapi_cursor.fetchall()
        else:
            rows = result.fetchall()
        self._position += len(rows)
        return [self._decode(row, style) for row in rows]

    def fetch_column(self, index: int = 0) -> Any:
        """Return one column of the next row, or None when there is none."""
        row = self._fetchone()
        if row is None:
            return None
        return row[index]

    def row_count(self) -> int:
        """Rows affected or returned; -1 when the driver cannot tell."""
        return self._require_result("count rows").rowcount

    def scroll(self, position: int) -> None:
        """Move so that the next fetch returns row ``position``."""
        self._require_result("scroll")
        self._require_scrollable("scroll")
        self._dbapi_cursor.scroll(position, mode="absolute")
        self._position = position

    def close_cursor(self) -> bool:
        """Release the result so the statement can be executed again."""
        self._reset_result()
        return True

    def error_code(self) -> str:
        return "00000" if self._error is None else self._error.sqlstate

    def error_info(self) -> Tuple[str, Optional[int], Optional[str]]:
        if self._error is None:
            return ("00000", None, None)
        return self._error.error_info()
