"""Shared fixtures: fake clock, settings and a scriptable in-memory backend."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from quiz_gate.config.schema import Settings
from quiz_gate.gate import EnvironmentSignals

BASE_URL = "http://quiz.test"

QUESTIONS: List[Dict[str, Any]] = [
    {"id": 1, "question": "2 + 2?", "choices": ["3", "4", "5"]},
    {"id": 2, "question": "Capital of Italy?", "choices": ["Rome", "Milan"]},
    {"id": 3, "question": "Largest planet?", "choices": ["Earth", "Jupiter", "Mars"]},
]

SCORES: List[Dict[str, Any]] = [
    {"name": "Alice", "score": 3},
    {"name": "Bob", "score": 2},
]


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeBackend:
    """Routes requests to per-endpoint handlers and records every call."""

    def __init__(self) -> None:
        self.calls: List[httpx.Request] = []
        self.questions: Callable[[httpx.Request], httpx.Response] = lambda request: httpx.Response(
            200, json=QUESTIONS
        )
        self.scores: Callable[[httpx.Request], httpx.Response] = lambda request: httpx.Response(
            200, json=SCORES
        )
        self.submit: Callable[[httpx.Request], httpx.Response] = lambda request: httpx.Response(
            200, json={"score": 3, "message": "Perfect!", "highScores": SCORES}
        )

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        path = request.url.path
        if path == "/api/questions":
            handler = self.questions
        elif path == "/api/scores" and request.method == "POST":
            handler = self.submit
        elif path == "/api/scores":
            handler = self.scores
        else:
            return httpx.Response(404)
        response = handler(request)
        if hasattr(response, "__await__"):
            response = await response
        return response

    def count(self, path: str, method: Optional[str] = None) -> int:
        return sum(
            1
            for request in self.calls
            if request.url.path == path and (method is None or request.method == method)
        )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    return Settings.model_validate({"endpoints": {"base_url": BASE_URL}})


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def http(backend: FakeBackend):
    return httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(backend.handle))


@pytest.fixture
def human_env() -> EnvironmentSignals:
    return EnvironmentSignals(
        user_agent="Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 Chrome/126.0 Safari/537.36"
    )
