from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from typing import List

from quiz_gate.data_models import LEADERBOARD, QUESTION_LIST, LeaderboardEntry, Question

FALLBACK_RESOURCE = "fallback.json"


@dataclass(frozen=True)
class FallbackDataset:
    """Bundled stand-in used when the live backend cannot be reached."""

    questions: List[Question]
    leaderboard: List[LeaderboardEntry]


@lru_cache(maxsize=1)
def load_fallback() -> FallbackDataset:
    """Read the dataset shipped inside the package. Cached; the file never changes at runtime."""
    raw = resources.files("quiz_gate.data").joinpath(FALLBACK_RESOURCE).read_text(encoding="utf-8")
    data = json.loads(raw)
    return FallbackDataset(
        questions=QUESTION_LIST.validate_python(data["questions"]),
        leaderboard=LEADERBOARD.validate_python(data.get("leaderboard", [])),
    )
