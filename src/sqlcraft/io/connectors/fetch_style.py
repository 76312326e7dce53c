"""
Fetching style of a result cursor.

A ``FetchStyle`` says where ``rewind()`` starts (``CursorOffset``), which
way ``next()`` steps (``CursorDirection``) and how a raw row is decoded
(``FetchMode``). ``Orientation`` is the lower-level positioning asked of a
native statement handle.
"""

import importlib
from dataclasses import dataclass, field
from enum import Enum
from types import SimpleNamespace
from typing import Any, Dict, List, Optional, Sequence, Union

from .exceptions import ConfigurationError


class FetchMode(str, Enum):
    """How a row is decoded."""

    AS_MAP = "map"
    AS_SET = "set"
    AS_OBJECT = "object"
    AS_CLASS = "class"
    AS_REUSABLE_OBJECT = "reusable_object"
    AS_DEBUG_MAP = "debug_map"


class CursorOffset(str, Enum):
    FROM_START = "from_start"
    FROM_END = "from_end"


class CursorDirection(str, Enum):
    FORWARD = "forward"
    BACKWARD = "backward"


class Orientation(str, Enum):
    """Positioning of a single fetch on a native handle."""

    NEXT = "next"
    PRIOR = "prior"
    FIRST = "first"
    LAST = "last"
    ABSOLUTE = "absolute"


@dataclass
class FetchStyle:
    """
    Decoding configuration applied to every row a cursor returns.

    Args:
        offset: Where iteration starts
        direction: Step of ``next()``
        mode: Row decoding
        class_: Class (or dotted path) instantiated for ``AS_CLASS``
        constructor_args: Positional arguments for the ``AS_CLASS`` constructor
        target: Object whose attributes are overwritten for ``AS_REUSABLE_OBJECT``
    """

    offset: CursorOffset = CursorOffset.FROM_START
    direction: CursorDirection = CursorDirection.FORWARD
    mode: FetchMode = FetchMode.AS_MAP
    class_: Optional[Union[type, str]] = None
    constructor_args: Sequence[Any] = field(default_factory=tuple)
    target: Any = None

    def decode(self, columns: Sequence[str], values: Sequence[Any]) -> Any:
        """
        Decode one raw row.

        Example:
            >>> FetchStyle().decode(["id", "name"], (1, "a"))
            {'id': 1, 'name': 'a'}
            >>> FetchStyle(mode=FetchMode.AS_SET).decode(["id"], [1])
            (1,)
        """
        mode = self.mode

        if mode is FetchMode.AS_SET:
            return tuple(values)

        if mode is FetchMode.AS_DEBUG_MAP:
            return _debug_map(columns, values)

        # Later duplicates win, as in a plain mapping
        mapping = dict(zip(columns, values))

        if mode is FetchMode.AS_MAP:
            return mapping
        if mode is FetchMode.AS_OBJECT:
            return SimpleNamespace(**mapping)
        if mode is FetchMode.AS_CLASS:
            instance = self.resolve_class()(*self.constructor_args)
            return _assign(instance, mapping)
        if mode is FetchMode.AS_REUSABLE_OBJECT:
            if self.target is None:
                raise ConfigurationError(
                    "AS_REUSABLE_OBJECT fetch style requires a target object"
                )
            return _assign(self.target, mapping)

        raise ConfigurationError(f"Unknown fetch mode: {mode!r}")

    def resolve_class(self) -> type:
        """
        Return the ``AS_CLASS`` class, importing it from a dotted path.

        Raises:
            ConfigurationError: If no class is set or it cannot be imported
        """
        class_ = self.class_
        if class_ is None:
            raise ConfigurationError("AS_CLASS fetch style requires a class")
        if isinstance(class_, type):
            return class_

        module_name, _, attribute = class_.rpartition(".")
        if not module_name:
            raise ConfigurationError(
                f"Class must be given as 'package.module.Class', got '{class_}'"
            )
        try:
            resolved = getattr(importlib.import_module(module_name), attribute)
        except (ImportError, AttributeError) as e:
            raise ConfigurationError(f"Cannot import fetch class '{class_}': {e}") from e

        if not isinstance(resolved, type):
            raise ConfigurationError(f"'{class_}' is not a class")
        return resolved


def _assign(instance: Any, mapping: Dict[str, Any]) -> Any:
    for name, value in mapping.items():
        setattr(instance, name, value)
    return instance


def _debug_map(columns: Sequence[str], values: Sequence[Any]) -> Dict[str, Any]:
    """Map columns to values; a duplicated column collects all its values."""
    collected: Dict[str, List[Any]] = {}
    for column, value in zip(columns, values):
        if column not in collected:
            collected[column] = []
        collected[column].append(value)

    return {
        column: bucket[0] if len(bucket) == 1 else bucket
        for column, bucket in collected.items()
    }
