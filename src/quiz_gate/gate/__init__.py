from .activation import ActivationGate
from .events import EventKind, EventSource, InteractionEvent
from .heuristics import BotCheckResult, BotHeuristic, EnvironmentSignals, Verdict
from .interaction import HumanEvidence, InteractionAccumulator

__all__ = [
    "ActivationGate",
    "BotCheckResult",
    "BotHeuristic",
    "EnvironmentSignals",
    "EventKind",
    "EventSource",
    "HumanEvidence",
    "InteractionAccumulator",
    "InteractionEvent",
    "Verdict",
]
