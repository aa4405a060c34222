from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Callable, DefaultDict, List

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    POINTER_MOVE = "pointermove"
    CLICK = "click"
    KEY_DOWN = "keydown"
    POINTER_DOWN = "pointerdown"
    TOUCH_START = "touchstart"


MOVEMENT_EVENTS = frozenset({EventKind.POINTER_MOVE, EventKind.TOUCH_START})
ACTION_EVENTS = frozenset({EventKind.CLICK, EventKind.KEY_DOWN})


@dataclass(frozen=True)
class InteractionEvent:
    """A user-interface event as delivered by the host.

    `trusted` is False for events a script dispatched itself rather than ones the
    platform generated from real input.
    """

    kind: EventKind
    trusted: bool = True


Listener = Callable[[InteractionEvent], None]


class EventSource:
    """Minimal listener registry, one list per event kind."""

    def __init__(self) -> None:
        self._listeners: DefaultDict[EventKind, List[Listener]] = defaultdict(list)

    def add_listener(self, kind: EventKind, listener: Listener) -> None:
        if listener not in self._listeners[kind]:
            self._listeners[kind].append(listener)

    def remove_listener(self, kind: EventKind, listener: Listener) -> None:
        try:
            self._listeners[kind].remove(listener)
        except ValueError:
            logger.debug("Listener for %s already removed", kind.value)

    def listener_count(self, kind: EventKind | None = None) -> int:
        if kind is not None:
            return len(self._listeners[kind])
        return sum(len(listeners) for listeners in self._listeners.values())

    def dispatch(self, event: InteractionEvent) -> None:
        # Copy so listeners may unsubscribe while being called.
        for listener in list(self._listeners[event.kind]):
            listener(event)
