from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from quiz_gate.gate.events import (
    ACTION_EVENTS,
    MOVEMENT_EVENTS,
    EventKind,
    EventSource,
    InteractionEvent,
)

logger = logging.getLogger(__name__)


@dataclass
class HumanEvidence:
    """Interaction proof gathered while the gate is still locked."""

    counts: Dict[EventKind, int] = field(default_factory=dict)
    movement_seen: bool = False
    action_seen: bool = False

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    def record(self, kind: EventKind) -> None:
        self.counts[kind] = self.counts.get(kind, 0) + 1
        if kind in MOVEMENT_EVENTS:
            self.movement_seen = True
        if kind in ACTION_EVENTS:
            self.action_seen = True

    def is_sufficient(self, min_events: int) -> bool:
        return self.movement_seen and self.action_seen and self.total >= min_events


class InteractionAccumulator:
    """
    Decides when organic input is strong enough to call the visitor human.

    A single click is trivial to forge, so confirmation needs movement, a discrete action
    (click or key press) and at least `min_events` trusted events in total. Untrusted
    events never count. Once confirmed, the accumulator detaches its listeners, drops
    the evidence and ignores anything further.
    """

    def __init__(self, min_events: int = 3):
        if min_events < 1:
            raise ValueError("min_events must be at least 1")
        self.min_events = min_events
        self.evidence: Optional[HumanEvidence] = HumanEvidence()
        self.confirmed = False
        self._source: Optional[EventSource] = None
        self._callbacks: List[Callable[[], None]] = []

    def on_confirmed(self, callback: Callable[[], None]) -> None:
        self._callbacks.append(callback)

    def attach(self, source: EventSource) -> None:
        if self.confirmed:
            return
        self.detach()
        self._source = source
        for kind in EventKind:
            source.add_listener(kind, self.observe)

    def detach(self) -> None:
        if self._source is None:
            return
        for kind in EventKind:
            self._source.remove_listener(kind, self.observe)
        self._source = None

    def observe(self, event: InteractionEvent) -> bool:
        """Feed one event; returns True when this event completed the confirmation."""
        if self.confirmed or self.evidence is None:
            return False
        if not event.trusted:
            logger.debug("Ignoring untrusted %s event", event.kind.value)
            return False
        self.evidence.record(event.kind)
        if self.evidence.is_sufficient(self.min_events):
            self.confirm()
            return True
        return False

    def confirm(self) -> None:
        """Mark the visitor human, whether from organic evidence or an explicit start."""
        if self.confirmed:
            return
        self.confirmed = True
        logger.info("Human presence confirmed")
        self.detach()
        self.evidence = None
        for callback in list(self._callbacks):
            callback()
