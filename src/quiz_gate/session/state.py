from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import List, Optional

from quiz_gate.data_models import AnswerMap, LeaderboardEntry, Question, QuestionId


@dataclass(frozen=True)
class SessionFlags:
    """
    Transient process state. Immutable: each operation returns an updated copy via
    `with_changes` instead of mutating shared flags in place.
    """

    loading: bool = False
    submitting: bool = False
    data_loaded: bool = False
    backend_available: bool = True
    critical_error: bool = False
    human_confirmed: bool = False
    quiz_started: bool = False
    data_source: Optional[str] = None

    def with_changes(self, **changes) -> "SessionFlags":
        return replace(self, **changes)


@dataclass(frozen=True)
class Progress:
    answered: int
    total: int

    @property
    def complete(self) -> bool:
        return self.total > 0 and self.answered == self.total

    @property
    def fraction(self) -> float:
        return self.answered / self.total if self.total else 0.0


@dataclass
class QuizSession:
    """Questions, in-progress answers and the last graded result."""

    questions: List[Question] = field(default_factory=list)
    answers: AnswerMap = field(default_factory=dict)
    leaderboard: List[LeaderboardEntry] = field(default_factory=list)
    name: str = ""
    score: Optional[float] = None
    message: str = ""

    @property
    def question_ids(self) -> List[QuestionId]:
        return [question.id for question in self.questions]

    @property
    def progress(self) -> Progress:
        return Progress(answered=len(self.answers), total=len(self.questions))

    def select_answer(self, question_id: QuestionId, choice: str) -> None:
        """Record `choice` for `question_id`, overwriting any earlier pick."""
        if question_id not in self.question_ids:
            raise KeyError(f"Unknown question id: {question_id!r}")
        self.answers[question_id] = choice

    def replace_questions(self, questions: List[Question]) -> None:
        """Swap in a new question set, keeping only answers that still refer to it."""
        self.questions = list(questions)
        valid = set(self.question_ids)
        self.answers = {key: value for key, value in self.answers.items() if key in valid}

    def reset(self) -> None:
        """Start a fresh attempt. The loaded questions and leaderboard stay."""
        self.name = ""
        self.score = None
        self.message = ""
        self.answers = {}
