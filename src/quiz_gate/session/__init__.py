from .state import Progress, QuizSession, SessionFlags
from .submission import (
    OutcomeKind,
    SubmissionCommitter,
    SubmissionOutcome,
    SubmissionPhase,
    apply_submission_outcome,
    validate_submission,
)

__all__ = [
    "OutcomeKind",
    "Progress",
    "QuizSession",
    "SessionFlags",
    "SubmissionCommitter",
    "SubmissionOutcome",
    "SubmissionPhase",
    "apply_submission_outcome",
    "validate_submission",
]
