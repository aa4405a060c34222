from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Callable, Optional

import httpx

from quiz_gate.config import Settings, load_settings
from quiz_gate.data_models import QuestionId
from quiz_gate.gate import (
    ActivationGate,
    BotHeuristic,
    EnvironmentSignals,
    EventKind,
    EventSource,
    InteractionAccumulator,
    InteractionEvent,
)
from quiz_gate.session import (
    OutcomeKind,
    QuizSession,
    SessionFlags,
    SubmissionCommitter,
    SubmissionOutcome,
    apply_submission_outcome,
)
from quiz_gate.sync import DataSource, LoadResult, ResilientFetcher
from quiz_gate.utils.logging import configure_from_settings

logger = logging.getLogger(__name__)


def apply_load_result(session: QuizSession, flags: SessionFlags, result: LoadResult) -> SessionFlags:
    """
    Fold a load into the session and return the updated flags.

    Each channel is inspected on its own. A question failure with nothing live on screen
    degrades the session to the fallback set and marks the backend unavailable. Live
    questions already on screen are kept, and only a timeout or 5xx then marks the
    backend unavailable. Timeouts and 5xx responses also raise the critical flag.
    Leaderboard failures only swap in the sample leaderboard.
    """
    questions = result.questions
    if questions is not None:
        if questions.ok:
            session.replace_questions(questions.payload)
            # Sticky backend-down is never cleared within a session.
            flags = flags.with_changes(
                data_loaded=True,
                data_source=questions.source.value,
                backend_available=not flags.critical_error,
            )
        else:
            substituted = not session.questions or flags.data_source == DataSource.FALLBACK.value
            if substituted:
                session.replace_questions(questions.payload)
                flags = flags.with_changes(data_source=DataSource.FALLBACK.value)
            backend_down = questions.error.backend_down
            flags = flags.with_changes(
                data_loaded=True,
                critical_error=flags.critical_error or backend_down,
            )
            # A transient failure behind live questions leaves availability alone.
            if substituted or backend_down:
                flags = flags.with_changes(backend_available=False)

    leaderboard = result.leaderboard
    if leaderboard is not None:
        session.leaderboard = list(leaderboard.payload)
    return flags


class QuizClient:
    """
    Facade wiring the activation gate, the fetch layer, the quiz session and the committer.

    Nothing here touches the network until the gate unlocks. Organic input arrives through
    `dispatch`; the explicit start affordance goes through `start`. When the gate opens
    inside a running event loop the initial load is scheduled automatically and exposed
    as `initial_load`.

    Attributes
    ----------
    settings : Settings
        Validated configuration.
    events : EventSource
        Listener registry the interaction accumulator subscribes to.
    gate : ActivationGate
        One-shot latch consulted by every network operation.
    fetcher : ResilientFetcher
        Cached, rate-limited, timeout-bounded backend access.
    session : QuizSession
        Questions, answers, leaderboard and last graded result.
    flags : SessionFlags
        Immutable flag snapshot, replaced after every operation.
    """

    def __init__(
        self,
        settings: Settings,
        environment: Callable[[], EnvironmentSignals],
        http: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.settings = settings
        self.events = EventSource()
        self.gate = ActivationGate(
            BotHeuristic(settings.gate),
            InteractionAccumulator(settings.gate.min_interaction_events),
            environment,
        )
        self._owns_http = http is None
        self.http = http or ResilientFetcher.create_http_client(settings)
        self.fetcher = ResilientFetcher(settings, self.http, clock)
        self.committer = SubmissionCommitter(self.fetcher, self.gate, settings.submission)
        self.session = QuizSession()
        self.flags = SessionFlags()
        self.initial_load: Optional[asyncio.Task] = None

        self.gate.on_unlock(self._on_unlock)
        self.gate.listen(self.events)

    @classmethod
    def from_config(
        cls,
        config_path: str | Path | None = None,
        environment: Optional[Callable[[], EnvironmentSignals]] = None,
        **kwargs,
    ) -> "QuizClient":
        """Load settings from YAML, configure logging and build a client."""
        settings = load_settings(config_path)
        configure_from_settings(settings.logging)
        return cls(settings, environment or EnvironmentSignals, **kwargs)

    def dispatch(self, event: InteractionEvent) -> None:
        self.events.dispatch(event)

    def start(self, event: Optional[InteractionEvent] = None) -> bool:
        """Explicit start affordance; defaults to a trusted click."""
        return self.gate.start(event or InteractionEvent(EventKind.CLICK))

    async def load(self) -> Optional[LoadResult]:
        """Automatic load. Served from cache where fresh and subject to the rate limit."""
        return await self._load(bypass_cache=False)

    async def refresh(self) -> Optional[LoadResult]:
        """User-triggered reload. Skips the cache but not the gate or the rate limit."""
        return await self._load(bypass_cache=True)

    def select_answer(self, question_id: QuestionId, choice: str) -> None:
        self.session.select_answer(question_id, choice)

    async def submit(self, name: Optional[str] = None) -> SubmissionOutcome:
        if name is not None:
            self.session.name = name
        if self.flags.submitting:
            return SubmissionOutcome(OutcomeKind.BLOCKED)
        checked = self.flags
        self.flags = checked.with_changes(submitting=True)
        try:
            outcome = await self.committer.submit(self.session, checked)
        finally:
            self.flags = self.flags.with_changes(submitting=False)
        self.flags = apply_submission_outcome(self.flags, outcome)
        return outcome

    def reset(self) -> None:
        self.session.reset()

    async def aclose(self) -> None:
        if self.initial_load is not None and not self.initial_load.done():
            self.initial_load.cancel()
        if self._owns_http:
            await self.http.aclose()

    async def __aenter__(self) -> "QuizClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _load(self, *, bypass_cache: bool) -> Optional[LoadResult]:
        if not self.gate.permits():
            logger.debug("Load skipped: activation gate closed")
            return None
        if self.flags.loading:
            return None
        self.flags = self.flags.with_changes(loading=True)
        try:
            result = await self.fetcher.load(bypass_cache=bypass_cache)
        finally:
            self.flags = self.flags.with_changes(loading=False)
        self.flags = apply_load_result(self.session, self.flags, result)
        return result

    def _on_unlock(self) -> None:
        self.flags = self.flags.with_changes(human_confirmed=True, quiz_started=True)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop yet; the host calls load() itself.
            return
        self.initial_load = loop.create_task(self.load())
        self.initial_load.add_done_callback(_log_initial_load_failure)


def _log_initial_load_failure(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Initial load failed", exc_info=exc)
