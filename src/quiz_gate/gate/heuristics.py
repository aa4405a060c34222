from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional

from quiz_gate.config.schema import GateConfig

logger = logging.getLogger(__name__)


class Verdict(str, Enum):
    ACCEPT = "accept"
    REJECT = "reject"


@dataclass(frozen=True)
class EnvironmentSignals:
    """Snapshot of what the host environment reveals about the visitor."""

    user_agent: str = ""
    automation_flag: bool = False
    global_markers: FrozenSet[str] = field(default_factory=frozenset)
    honeypot_value: str = ""

    @property
    def honeypot_filled(self) -> bool:
        return bool(self.honeypot_value.strip())


@dataclass(frozen=True)
class BotCheckResult:
    verdict: Verdict
    reason: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.verdict is Verdict.ACCEPT


class BotHeuristic:
    """
    Pure predicate over environment signals.

    Each signal is independently sufficient to reject. The check touches no network and
    holds no state, so callers may re-run it as often as they like. Bots that evade every
    signal are accepted; the interaction accumulator is the second line.
    """

    def __init__(self, config: GateConfig):
        self.config = config

    def evaluate(self, signals: EnvironmentSignals) -> BotCheckResult:
        marker = self._user_agent_marker(signals.user_agent)
        if marker is not None:
            return BotCheckResult(Verdict.REJECT, f"user agent contains '{marker}'")
        if signals.automation_flag:
            return BotCheckResult(Verdict.REJECT, "automation flag set")
        present = self._automation_globals(signals.global_markers)
        if present:
            return BotCheckResult(Verdict.REJECT, f"automation globals present: {', '.join(present)}")
        if signals.honeypot_filled:
            return BotCheckResult(Verdict.REJECT, "honeypot field filled")
        return BotCheckResult(Verdict.ACCEPT)

    def is_bot(self, signals: EnvironmentSignals) -> bool:
        result = self.evaluate(signals)
        if not result.accepted:
            logger.debug("Environment rejected: %s", result.reason)
        return not result.accepted

    def _user_agent_marker(self, user_agent: str) -> Optional[str]:
        lowered = user_agent.lower()
        return next(
            (marker for marker in self.config.bot_user_agent_markers if marker in lowered),
            None,
        )

    def _automation_globals(self, present: FrozenSet[str]) -> list[str]:
        return sorted(name for name in self.config.automation_markers if name in present)
