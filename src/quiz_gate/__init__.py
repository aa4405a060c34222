"""
Quiz Gate.

A quiz client that stays silent until a real person is present, then loads
questions and the leaderboard through a cached, rate-limited, timeout-bounded
sync layer and submits answers for grading.
"""

from .client import QuizClient
from .config.loader import load_settings

__all__ = ["QuizClient", "load_settings"]
