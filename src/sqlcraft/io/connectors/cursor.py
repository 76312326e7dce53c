"""
Random-access cursor over a native statement handle.

``ResultCursor`` presents the same iteration and positioned-fetch surface
whether or not the driver supports scrollable cursors. Rows are cached by
position in a sparse map; a forward-only handle is advanced on demand and
every row it passes over is cached, so any position below the handle's
is served from the cache.

Usage:
    cursor = ResultCursor(connection.prepare("SELECT id FROM users"))
    cursor.execute()
    last = cursor.fetch_last()
    ids = [row["id"] for row in cursor]
"""

from dataclasses import replace
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from sqlcraft.utils.logging import get_logger

from .exceptions import ConfigurationError
from .fetch_style import (
    CursorDirection,
    CursorOffset,
    FetchMode,
    FetchStyle,
    Orientation,
)
from .statement import Parameters, StatementHandle

logger = get_logger(__name__)

Row = Tuple[Any, ...]


class ResultCursor:
    """
    Cursor with a position-indexed row cache.

    Positions start at 0. ``key()`` is the current position; -1 means
    "before the first row". Every ``execute()`` starts a fresh cache.

    ``fetch_column()`` reads straight from the handle. On a forward-only
    handle the row it consumes is never cached and cannot be returned by
    any later fetch.
    """

    def __init__(self, handle: StatementHandle) -> None:
        """
        Wrap a native statement handle.

        Raises:
            ConfigurationError: If ``handle`` is not a statement handle
        """
        if not isinstance(handle, StatementHandle):
            raise ConfigurationError(
                f"Expected a statement handle, got {type(handle).__name__}"
            )
        self._handle = handle
        self._style = FetchStyle()
        self._reset()

    def _reset(self) -> None:
        self._cache: Dict[int, Row] = {}
        self._size: Optional[int] = None
        self._count: Optional[int] = None
        self._key = -1

    @property
    def handle(self) -> StatementHandle:
        return self._handle

    @property
    def style(self) -> FetchStyle:
        return self._style

    def execute(self, parameters: Optional[Parameters] = None) -> "ResultCursor":
        """
        Discard every cached row and the row count, then execute the statement.

        The cache is emptied even when the driver refuses the statement.

        Raises:
            DriverError: If the driver refuses the statement
        """
        self._reset()
        self._handle.execute(parameters)
        return self

    def bind_parameter(
        self,
        name: Union[str, int],
        value: Any,
        type_: Any = None,
        length: Optional[int] = None,
    ) -> bool:
        return self._handle.bind_parameter(name, value, type_, length)

    def set_fetching_style(
        self,
        offset: Union[CursorOffset, str] = CursorOffset.FROM_START,
        direction: Union[CursorDirection, str] = CursorDirection.FORWARD,
        mode: Union[FetchMode, str] = FetchMode.AS_MAP,
        arg1: Any = None,
        arg2: Optional[Sequence[Any]] = None,
    ) -> "ResultCursor":
        """
        Configure how rows are returned. Nothing is fetched.

        Args:
            offset: Where ``rewind()`` starts
            direction: Step of ``next()``
            mode: Row decoding
            arg1: Class (or dotted path) for AS_CLASS, object for
                AS_REUSABLE_OBJECT
            arg2: Constructor arguments for AS_CLASS
        """
        mode = FetchMode(mode)
        style = FetchStyle(
            offset=CursorOffset(offset),
            direction=CursorDirection(direction),
            mode=mode,
        )
        if mode is FetchMode.AS_CLASS:
            style.class_ = arg1
            style.constructor_args = tuple(arg2 or ())
        elif mode is FetchMode.AS_REUSABLE_OBJECT:
            style.target = arg1

        self._style = style
        return self

    # Row cache

    def _row_at(self, position: int) -> Optional[Row]:
        """Return the raw row at ``position``, fetching it if needed."""
        if position < 0:
            return None
        if position in self._cache:
            return self._cache[position]
        if self._size is not None and position >= self._size:
            return None

        handle = self._handle

        if handle.scrollable:
            if handle.position == position:
                row = handle.fetch(None, Orientation.NEXT)
            else:
                row = handle.fetch(None, Orientation.ABSOLUTE, position)
            if row is not None:
                self._cache[position] = row
            return row

        while handle.position <= position:
            fetched_at = handle.position
            row = handle.fetch(None, Orientation.NEXT)
            if row is None:
                self._size = fetched_at
                return None
            self._cache[fetched_at] = row

        return self._cache.get(position)

    def _fetch_remaining(self) -> int:
        """Cache every row not cached yet; return how many were fetched."""
        handle = self._handle

        if not handle.scrollable:
            start = handle.position
            rows = handle.fetch_all(None)
            for index, row in enumerate(rows):
                self._cache[start + index] = row
            self._size = start + len(rows)
            return len(rows)

        fetched = 0
        tail_start = max(self._cache) + 1 if self._cache else 0

        if self._size is None or tail_start < self._size:
            if handle.position != tail_start:
                handle.scroll(tail_start)
            rows = handle.fetch_all(None)
            for index, row in enumerate(rows):
                self._cache[tail_start + index] = row
            fetched += len(rows)
            self._size = tail_start + len(rows)

        for position in range(tail_start):
            if position not in self._cache:
                row = handle.fetch(None, Orientation.ABSOLUTE, position)
                if row is not None:
                    self._cache[position] = row
                    fetched += 1

        return fetched

    def _decode(
        self, row: Optional[Row], mode: Optional[Union[FetchMode, str]] = None
    ) -> Any:
        if row is None:
            return None
        style = self._style
        if mode is not None:
            style = replace(style, mode=FetchMode(mode))
        return style.decode(self._handle.columns, row)

    # Iteration

    def rewind(self) -> None:
        """Move to the first row of the configured offset, fetching it if needed."""
        if self._style.offset is CursorOffset.FROM_END:
            self._key = self.count() - 1
        else:
            self._key = 0
        self._row_at(self._key)

    def valid(self) -> bool:
        return self._key in self._cache

    def current(self) -> Any:
        return self._decode(self._cache.get(self._key))

    def key(self) -> int:
        return self._key

    def next(self) -> None:
        """Step in the configured direction, fetching the row if needed."""
        if self._style.direction is CursorDirection.BACKWARD:
            self._key = max(self._key - 1, -1)
        else:
            self._key += 1
        self._row_at(self._key)

    def __iter__(self) -> Iterator[Any]:
        self.rewind()
        while self.valid():
            yield self.current()
            self.next()

    # Positioned fetches

    def fetch_first(self, mode: Optional[Union[FetchMode, str]] = None) -> Any:
        """
        Move to and return the first row, or None for an empty result.

        Args:
            mode: Decoding of this row only; the configured style is kept
        """
        handle = self._handle
        if 0 not in self._cache and handle.scrollable:
            row = handle.fetch(None, Orientation.FIRST)
            if row is not None:
                self._cache[0] = row
        else:
            self._row_at(0)

        self._key = 0
        return self._decode(self._cache.get(0), mode)

    def fetch_last(self, mode: Optional[Union[FetchMode, str]] = None) -> Any:
        """
        Move to and return the last row, or None for an empty result.

        Only that row is fetched on a scrollable handle; a forward-only
        handle is read up to it.

        Args:
            mode: Decoding of this row only; the configured style is kept
        """
        position = self.count() - 1
        if position < 0:
            return None

        handle = self._handle
        if position not in self._cache and handle.scrollable:
            row = handle.fetch(None, Orientation.LAST)
            if row is not None:
                self._cache[position] = row
        else:
            self._row_at(position)

        self._key = position
        return self._decode(self._cache.get(position), mode)

    def fetch_next(self) -> Any:
        """Move one row forward and return it, or None past the end."""
        self._key += 1
        self._row_at(self._key)
        return self.current()

    def fetch_prior(self) -> Any:
        """Move one row back and return it, or None before the start."""
        self._key = max(self._key - 1, -1)
        self._row_at(self._key)
        return self.current()

    def fetch_all(self) -> List[Any]:
        """
        Return every row in result order, then rewind.

        Only positions not cached yet are fetched; cached rows are kept
        and merged by position.
        """
        cached = len(self._cache)
        fetched = self._fetch_remaining()
        logger.debug("cursor_cache_merged", cached=cached, fetched=fetched)

        self.rewind()
        return [self._decode(self._cache[position]) for position in sorted(self._cache)]

    def fetch_column(self, index: int = 0) -> Any:
        """Return one column of the handle's next row, bypassing the cache."""
        return self._handle.fetch_column(index)

    def count(self) -> int:
        """
        Rows affected or returned by the last execution, memoized.

        When the driver cannot tell (SQLite reports -1 for SELECT), the
        remaining rows are fetched into the cache to count them.
        """
        if self._count is None:
            count = self._handle.row_count()
            if self._handle.returns_rows:
                if count < 0:
                    if self._size is None:
                        self._fetch_remaining()
                    count = self._size if self._size is not None else 0
                else:
                    self._size = count
            self._count = count
        return self._count

    def close_cursor(self) -> bool:
        """Release the native result; the cursor may be executed again."""
        closed = self._handle.close_cursor()
        self._reset()
        return closed

    def error_code(self) -> str:
        return self._handle.error_code()

    def error_info(self) -> Tuple[str, Optional[int], Optional[str]]:
        return self._handle.error_info()
