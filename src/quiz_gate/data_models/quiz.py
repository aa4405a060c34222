from __future__ import annotations

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

QuestionId = Union[int, str]
AnswerMap = Dict[QuestionId, str]


class Question(BaseModel):
    """One multiple-choice prompt as served by the questions endpoint."""

    model_config = ConfigDict(frozen=True)

    id: QuestionId
    question: str
    choices: List[str] = Field(min_length=1)


class LeaderboardEntry(BaseModel):
    """Ranked player result. Rank is implied by position in the list."""

    model_config = ConfigDict(frozen=True)

    name: str
    score: float


class SubmissionRequest(BaseModel):
    """Body of the POST to the scores endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    user_answers: Dict[str, str] = Field(alias="userAnswers")

    @classmethod
    def build(cls, name: str, answers: AnswerMap) -> "SubmissionRequest":
        # JSON object keys are strings; integer question ids are stringified on the wire.
        return cls(name=name, user_answers={str(key): value for key, value in answers.items()})


class SubmissionResponse(BaseModel):
    """Graded result returned by the scores endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    score: float
    message: str = ""
    high_scores: Optional[List[LeaderboardEntry]] = Field(default=None, alias="highScores")


QUESTION_LIST = TypeAdapter(List[Question])
LEADERBOARD = TypeAdapter(List[LeaderboardEntry])
