"""In-process pointer event bus feeding the dial's drag handlers."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from threading import RLock


class PointerKind(str, Enum):
    MOVE = "move"
    UP = "up"


@dataclass(frozen=True, slots=True)
class PointerEvent:
    kind: PointerKind
    x: float = 0.0
    y: float = 0.0


PointerHandler = Callable[[PointerEvent], None]
Unsubscribe = Callable[[], None]


class PointerBus:
    """Window-level pointer stream; handlers subscribe per event kind."""

    __slots__ = ("_handlers", "_next_id", "_lock")

    def __init__(self) -> None:
        self._handlers: dict[PointerKind, dict[int, PointerHandler]] = {
            kind: {} for kind in PointerKind
        }
        self._next_id = 1
        self._lock = RLock()

    def subscribe(self, kind: PointerKind, handler: PointerHandler) -> Unsubscribe:
        with self._lock:
            handler_id = self._next_id
            self._next_id += 1
            self._handlers[kind][handler_id] = handler

        def _unsubscribe() -> None:
            with self._lock:
                self._handlers[kind].pop(handler_id, None)

        return _unsubscribe

    def handler_count(self, kind: PointerKind | None = None) -> int:
        with self._lock:
            if kind is not None:
                return len(self._handlers[kind])
            return sum(len(h) for h in self._handlers.values())

    def publish(self, event: PointerEvent) -> int:
        """Deliver *event* to current subscribers; returns how many ran."""
        with self._lock:
            handlers = list(self._handlers[event.kind].values())
        for handler in handlers:
            handler(event)
        return len(handlers)

    def move(self, x: float, y: float) -> int:
        return self.publish(PointerEvent(PointerKind.MOVE, x, y))

    def up(self, x: float = 0.0, y: float = 0.0) -> int:
        return self.publish(PointerEvent(PointerKind.UP, x, y))
