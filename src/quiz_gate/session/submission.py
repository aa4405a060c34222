from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from quiz_gate.config.schema import SubmissionConfig
from quiz_gate.data_models import AnswerMap, Question, SubmissionRequest
from quiz_gate.gate.activation import ActivationGate
from quiz_gate.session.state import QuizSession, SessionFlags
from quiz_gate.sync.errors import BackendHTTPError, SyncError
from quiz_gate.sync.fetch import ResilientFetcher
from quiz_gate.utils.logging import get_logger

logger = get_logger(__name__)

BACKEND_DOWN_MESSAGE = "The quiz server is currently unavailable. Please reload the page to try again."
UNAVAILABLE_MESSAGE = "Submissions are disabled because the quiz server could not be reached."
NOT_LOADED_MESSAGE = "The questions have not loaded yet. Please wait a moment."
TRY_AGAIN_MESSAGE = "Your answers could not be submitted. Please try again."


class SubmissionPhase(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SETTLED = "settled"
    FAILED = "failed"


class OutcomeKind(str, Enum):
    BLOCKED = "blocked"
    UNAVAILABLE = "unavailable"
    INVALID = "invalid"
    SETTLED = "settled"
    TRANSIENT = "transient"
    BACKEND_DOWN = "backend_down"


@dataclass(frozen=True)
class SubmissionOutcome:
    kind: OutcomeKind
    message: str = ""
    score: Optional[float] = None

    @property
    def user_visible(self) -> bool:
        # Gate-blocked attempts get no feedback at all.
        return self.kind is not OutcomeKind.BLOCKED

    @property
    def succeeded(self) -> bool:
        return self.kind is OutcomeKind.SETTLED


def validate_submission(
    name: str,
    questions: List[Question],
    answers: AnswerMap,
    config: SubmissionConfig,
) -> Optional[str]:
    """Return the first user-facing validation message, or None when the attempt may be sent."""
    trimmed = name.strip()
    if not trimmed:
        return "Please enter your name."
    if not config.name_min_length <= len(trimmed) <= config.name_max_length:
        return (
            f"Your name must be between {config.name_min_length} and "
            f"{config.name_max_length} characters."
        )
    total = len(questions)
    if total == 0:
        return NOT_LOADED_MESSAGE
    answered = len(answers)
    if answered != total:
        return f"Please answer all questions before submitting ({answered} of {total} answered)."
    if any(not str(value).strip() for value in answers.values()):
        return "Every question needs a selected answer."
    return None


class SubmissionCommitter:
    """
    Validates an attempt, posts it and interprets the graded result.

    Walks idle -> validating -> submitting -> settled|failed. The first failing check
    wins. Gate failures are silent so automated callers learn nothing from them.
    """

    def __init__(self, fetcher: ResilientFetcher, gate: ActivationGate, config: SubmissionConfig):
        self.fetcher = fetcher
        self.gate = gate
        self.config = config
        self.phase = SubmissionPhase.IDLE

    @property
    def busy(self) -> bool:
        return self.phase in (SubmissionPhase.VALIDATING, SubmissionPhase.SUBMITTING)

    async def submit(self, session: QuizSession, flags: SessionFlags) -> SubmissionOutcome:
        """
        Run one attempt against `session`. `flags` is read, never modified; callers fold the
        outcome back into their flags with `apply_submission_outcome`.
        """
        if self.busy:
            return SubmissionOutcome(OutcomeKind.BLOCKED)

        self.phase = SubmissionPhase.VALIDATING
        if not flags.quiz_started or not self.gate.permits():
            logger.debug("submit.gate_blocked")
            self.phase = SubmissionPhase.IDLE
            return SubmissionOutcome(OutcomeKind.BLOCKED)

        if not flags.backend_available or flags.critical_error:
            self.phase = SubmissionPhase.IDLE
            return SubmissionOutcome(OutcomeKind.UNAVAILABLE, UNAVAILABLE_MESSAGE)

        if not flags.data_loaded or not session.questions:
            self.phase = SubmissionPhase.IDLE
            return SubmissionOutcome(OutcomeKind.INVALID, NOT_LOADED_MESSAGE)

        problem = validate_submission(session.name, session.questions, session.answers, self.config)
        if problem is not None:
            self.phase = SubmissionPhase.IDLE
            return SubmissionOutcome(OutcomeKind.INVALID, problem)

        self.phase = SubmissionPhase.SUBMITTING
        request = SubmissionRequest.build(session.name.strip(), session.answers)
        try:
            result = await self.fetcher.submit(request)
        except SyncError as exc:
            self.phase = SubmissionPhase.FAILED
            logger.warning("submit.failed", error=str(exc), backend_down=exc.backend_down)
            if exc.backend_down:
                return SubmissionOutcome(OutcomeKind.BACKEND_DOWN, BACKEND_DOWN_MESSAGE)
            return SubmissionOutcome(OutcomeKind.TRANSIENT, _transient_message(exc))

        self.phase = SubmissionPhase.SETTLED
        session.score = result.score
        session.message = result.message
        if result.high_scores is not None:
            session.leaderboard = list(result.high_scores)
        session.name = ""
        session.answers = {}
        logger.info("submit.settled", score=result.score)
        return SubmissionOutcome(OutcomeKind.SETTLED, result.message, result.score)


def apply_submission_outcome(flags: SessionFlags, outcome: SubmissionOutcome) -> SessionFlags:
    """Backend-down is sticky for the rest of the session; nothing else touches the flags."""
    if outcome.kind is OutcomeKind.BACKEND_DOWN:
        return flags.with_changes(backend_available=False, critical_error=True)
    return flags


def _transient_message(exc: SyncError) -> str:
    if isinstance(exc, BackendHTTPError) and exc.detail:
        return f"{exc.detail} Please try again."
    return TRY_AGAIN_MESSAGE
