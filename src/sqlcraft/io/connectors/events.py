"""
Connection lifecycle events.

Listeners are registered per ``ConnectionEvents`` object (owned by a
``ConnectionRegistry``), never on a process-wide instance.

Usage:
    events = ConnectionEvents()

    @events.listens_for("opened")
    def on_open(payload):
        print(payload["id"], payload["dsn"])
"""

from typing import Any, Callable, Dict, List, Set

EVENTS: Set[str] = {"opened", "closed"}

Listener = Callable[[Dict[str, Any]], Any]


class ConnectionEvents:
    """Registry of ``opened`` / ``closed`` listeners."""

    def __init__(self) -> None:
        self._listeners: Dict[str, List[Listener]] = {name: [] for name in EVENTS}

    def listen(self, event_name: str, fn: Listener) -> None:
        """
        Register a listener.

        Raises:
            ValueError: If the event name is unknown
        """
        if event_name not in EVENTS:
            raise ValueError(
                f"Unknown event: '{event_name}'. "
                f"Valid events: {', '.join(sorted(EVENTS))}"
            )
        self._listeners[event_name].append(fn)

    def listens_for(self, event_name: str) -> Callable[[Listener], Listener]:
        def decorator(fn: Listener) -> Listener:
            self.listen(event_name, fn)
            return fn

        return decorator

    def remove(self, event_name: str, fn: Listener) -> None:
        listeners = self._listeners.get(event_name, [])
        if fn in listeners:
            listeners.remove(fn)

    def dispatch(self, event_name: str, payload: Dict[str, Any]) -> None:
        """Call every listener of ``event_name`` with ``payload``, in order."""
        for fn in list(self._listeners.get(event_name, [])):
            fn(payload)

    def clear(self) -> None:
        for listeners in self._listeners.values():
            listeners.clear()
