from .quiz import (
    LEADERBOARD,
    QUESTION_LIST,
    AnswerMap,
    LeaderboardEntry,
    Question,
    QuestionId,
    SubmissionRequest,
    SubmissionResponse,
)

__all__ = [
    "LEADERBOARD",
    "QUESTION_LIST",
    "AnswerMap",
    "LeaderboardEntry",
    "Question",
    "QuestionId",
    "SubmissionRequest",
    "SubmissionResponse",
]
