from __future__ import annotations

import logging
from typing import Callable, List

from quiz_gate.gate.events import EventKind, EventSource, InteractionEvent
from quiz_gate.gate.heuristics import BotHeuristic, EnvironmentSignals
from quiz_gate.gate.interaction import InteractionAccumulator

logger = logging.getLogger(__name__)

EnvironmentProvider = Callable[[], EnvironmentSignals]

START_EVENTS = frozenset({EventKind.CLICK, EventKind.KEY_DOWN, EventKind.TOUCH_START})


class ActivationGate:
    """
    One-shot latch guarding every network operation.

    Starts locked and unlocks once the bot heuristic accepts the current environment
    (which includes an empty honeypot) and the interaction accumulator has confirmed a
    human, either organically or through the explicit start affordance. It never
    re-locks. `permits()` is what operations consult: the latch must be open and the
    environment must still look clean right now.
    """

    def __init__(
        self,
        heuristic: BotHeuristic,
        accumulator: InteractionAccumulator,
        environment: EnvironmentProvider,
    ):
        self.heuristic = heuristic
        self.accumulator = accumulator
        self.environment = environment
        self._unlocked = False
        self._callbacks: List[Callable[[], None]] = []
        accumulator.on_confirmed(self._on_human_confirmed)

    @property
    def unlocked(self) -> bool:
        return self._unlocked

    @property
    def human_confirmed(self) -> bool:
        return self.accumulator.confirmed

    def on_unlock(self, callback: Callable[[], None]) -> None:
        self._callbacks.append(callback)

    def listen(self, source: EventSource) -> None:
        """Start accumulating organic interaction from `source`."""
        if not self._unlocked:
            self.accumulator.attach(source)

    def environment_clean(self) -> bool:
        return not self.heuristic.is_bot(self.environment())

    def start(self, event: InteractionEvent) -> bool:
        """Explicit start affordance. Only a trusted click, tap or key press counts."""
        if self._unlocked:
            return True
        if not event.trusted or event.kind not in START_EVENTS:
            logger.debug("Ignoring start request from %s event (trusted=%s)", event.kind.value, event.trusted)
            return False
        if not self.environment_clean():
            return False
        self.accumulator.confirm()
        return self.try_unlock()

    def try_unlock(self) -> bool:
        if self._unlocked:
            return True
        if not self.accumulator.confirmed:
            return False
        if not self.environment_clean():
            return False
        self._unlocked = True
        logger.info("Activation gate unlocked")
        for callback in list(self._callbacks):
            callback()
        return True

    def permits(self) -> bool:
        return self._unlocked and self.environment_clean()

    def _on_human_confirmed(self) -> None:
        self.try_unlock()
