"""Conflict-resolution alternatives shared by INSERT and UPDATE."""

from typing import Optional, TypeVar

C = TypeVar("C", bound="ConflictAlternative")


class ConflictAlternative:
    """
    Select an exclusive ``OR <KEYWORD>`` alternative.

    Only the last call counts: ``or_replace().or_ignore()`` renders
    ``OR IGNORE``.
    """

    _or: Optional[str] = None

    def or_rollback(self: C) -> C:
        return self._set_alternative("ROLLBACK")

    def or_abort(self: C) -> C:
        return self._set_alternative("ABORT")

    def or_replace(self: C) -> C:
        return self._set_alternative("REPLACE")

    def or_fail(self: C) -> C:
        return self._set_alternative("FAIL")

    def or_ignore(self: C) -> C:
        return self._set_alternative("IGNORE")

    def _set_alternative(self: C, keyword: str) -> C:
        self._or = keyword
        return self

    def _render_alternative(self) -> str:
        if self._or is None:
            return ""
        return f" OR {self._or}"
