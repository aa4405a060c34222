from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Generic, Optional, TypeVar

T = TypeVar("T")

Clock = Callable[[], float]


class Channel(str, Enum):
    """The two cached read streams. Each has its own TTL class."""

    QUESTIONS = "questions"
    LEADERBOARD = "leaderboard"


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    payload: T
    stored_at: float
    ttl: float

    def age(self, now: float) -> float:
        return now - self.stored_at


def is_valid(entry: Optional[CacheEntry], now: float) -> bool:
    """An entry is usable while its age is strictly below its TTL."""
    if entry is None:
        return False
    return 0 <= entry.age(now) < entry.ttl


class ResponseCache:
    """In-memory memo of the latest successful read per channel."""

    def __init__(self, ttls: Dict[Channel, float], clock: Clock):
        missing = set(Channel) - set(ttls)
        if missing:
            raise KeyError(f"No TTL configured for: {', '.join(sorted(c.value for c in missing))}")
        self.ttls = dict(ttls)
        self.clock = clock
        self._entries: Dict[Channel, CacheEntry] = {}

    def get(self, channel: Channel) -> Optional[CacheEntry]:
        """Return the entry for `channel` if it is still fresh, dropping it otherwise."""
        entry = self._entries.get(channel)
        if entry is None:
            return None
        if is_valid(entry, self.clock()):
            return entry
        del self._entries[channel]
        return None

    def store(self, channel: Channel, payload) -> CacheEntry:
        entry = CacheEntry(payload=payload, stored_at=self.clock(), ttl=self.ttls[channel])
        self._entries[channel] = entry
        return entry

    def invalidate(self, channel: Channel | None = None) -> None:
        if channel is None:
            self._entries.clear()
        else:
            self._entries.pop(channel, None)

    def __contains__(self, channel: Channel) -> bool:
        return self.get(channel) is not None
