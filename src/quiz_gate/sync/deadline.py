from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, TypeVar

from quiz_gate.sync.errors import FetchTimeoutError

T = TypeVar("T")


@dataclass(frozen=True)
class Ticket:
    channel: str
    generation: int


class DeadlineChannel:
    """
    Runs one operation at a time per channel against an explicit deadline.

    Every call takes a ticket. A call that misses its deadline is cancelled and its
    ticket expired, and so is any ticket superseded by a newer call. Callers check
    `is_current(ticket)` before applying a result, so a late response can never
    overwrite state that the timeout path already set.
    """

    def __init__(self, name: str):
        self.name = name
        self._generation = 0

    def begin(self) -> Ticket:
        self._generation += 1
        return Ticket(self.name, self._generation)

    def expire(self, ticket: Ticket) -> None:
        if self.is_current(ticket):
            self._generation += 1

    def is_current(self, ticket: Ticket) -> bool:
        return ticket.channel == self.name and ticket.generation == self._generation

    async def run(self, ticket: Ticket, operation: Awaitable[T], timeout: float) -> T:
        task = asyncio.ensure_future(operation)
        try:
            done, _ = await asyncio.wait({task}, timeout=timeout)
        except asyncio.CancelledError:
            self.expire(ticket)
            task.cancel()
            raise
        if task in done:
            return task.result()
        self.expire(ticket)
        task.cancel()
        task.add_done_callback(_discard_outcome)
        raise FetchTimeoutError(self.name, timeout)


def _discard_outcome(task: asyncio.Future) -> None:
    if not task.cancelled():
        task.exception()
