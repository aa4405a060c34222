from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Generic, List, Optional, TypeVar

import httpx
from pydantic import ValidationError

from quiz_gate.config.schema import Settings
from quiz_gate.data_models import (
    LEADERBOARD,
    QUESTION_LIST,
    LeaderboardEntry,
    Question,
    SubmissionRequest,
    SubmissionResponse,
)
from quiz_gate.sync.cache import Channel, ResponseCache
from quiz_gate.sync.deadline import DeadlineChannel, Ticket
from quiz_gate.sync.errors import (
    BackendConnectionError,
    BackendHTTPError,
    FetchTimeoutError,
    PayloadError,
    SyncError,
)
from quiz_gate.sync.fallback import load_fallback
from quiz_gate.sync.rate_limit import MinIntervalLimiter
from quiz_gate.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

_SUBMIT_CHANNEL = "submit"
_DETAIL_KEYS = ("message", "error", "detail")


class DataSource(str, Enum):
    LIVE = "live"
    CACHE = "cache"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class ReadOutcome(Generic[T]):
    """What a read produced and where it came from. `error` is set only for fallbacks."""

    channel: Channel
    payload: T
    source: DataSource
    error: Optional[SyncError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class LoadResult:
    questions: Optional[ReadOutcome[List[Question]]] = None
    leaderboard: Optional[ReadOutcome[List[LeaderboardEntry]]] = None
    rate_limited: bool = False


class ResilientFetcher:
    """
    Timeout-bounded, cached, rate-limited access to the scoring service.

    Reads never raise for backend trouble: they return live data, a fresh cache entry, or
    the bundled fallback dataset together with the error that caused the fallback. The
    write path (`submit`) raises `SyncError` subclasses so the committer can classify
    them.
    """

    def __init__(
        self,
        settings: Settings,
        http: httpx.AsyncClient,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.settings = settings
        self.http = http
        self.cache = ResponseCache(
            {
                Channel.QUESTIONS: settings.cache.questions_ttl_seconds,
                Channel.LEADERBOARD: settings.cache.leaderboard_ttl_seconds,
            },
            clock,
        )
        self.limiter = MinIntervalLimiter(settings.rate_limit.min_interval_seconds, clock)
        self._deadlines: Dict[str, DeadlineChannel] = {
            name: DeadlineChannel(name)
            for name in (Channel.QUESTIONS.value, Channel.LEADERBOARD.value, _SUBMIT_CHANNEL)
        }

    @staticmethod
    def create_http_client(settings: Settings, **kwargs: Any) -> httpx.AsyncClient:
        """Build the shared async client. Deadlines are enforced per call, not by httpx."""
        return httpx.AsyncClient(
            base_url=settings.endpoints.base_url,
            headers={"Accept": "application/json"},
            timeout=None,
            **kwargs,
        )

    async def fetch_questions(self, *, bypass_cache: bool = False) -> ReadOutcome[List[Question]]:
        return await self._read(
            Channel.QUESTIONS,
            self.settings.endpoints.questions_path,
            self._parse_questions,
            bypass_cache=bypass_cache,
        )

    async def fetch_leaderboard(
        self, *, bypass_cache: bool = False
    ) -> ReadOutcome[List[LeaderboardEntry]]:
        return await self._read(
            Channel.LEADERBOARD,
            self.settings.endpoints.scores_path,
            self._parse_leaderboard,
            bypass_cache=bypass_cache,
        )

    async def load(self, *, bypass_cache: bool = False) -> LoadResult:
        """
        Load questions and leaderboard together.

        Channels with a fresh cache entry are answered from it without touching the
        network or the rate limiter. If anything needs the network and the last attempt
        was too recent, the load is skipped and only cached channels are returned. The two
        reads run concurrently and neither one's failure affects the other.
        """
        pending = [
            channel for channel in Channel if bypass_cache or channel not in self.cache
        ]
        if pending and not self.limiter.try_acquire():
            logger.info(
                "load.rate_limited",
                pending=[channel.value for channel in pending],
                retry_in=round(self.limiter.remaining(), 2),
            )
            return LoadResult(
                questions=self._cached(Channel.QUESTIONS) if Channel.QUESTIONS not in pending else None,
                leaderboard=self._cached(Channel.LEADERBOARD) if Channel.LEADERBOARD not in pending else None,
                rate_limited=True,
            )

        questions, leaderboard = await asyncio.gather(
            self.fetch_questions(bypass_cache=bypass_cache),
            self.fetch_leaderboard(bypass_cache=bypass_cache),
        )
        return LoadResult(questions=questions, leaderboard=leaderboard)

    async def submit(self, request: SubmissionRequest) -> SubmissionResponse:
        """POST the answer set. Raises `SyncError` on timeout, transport, HTTP or payload failure."""
        deadline = self._deadlines[_SUBMIT_CHANNEL]
        ticket = deadline.begin()
        body = request.model_dump(by_alias=True)
        data = await self._request(
            deadline,
            ticket,
            self.http.post(self.settings.endpoints.scores_path, json=body),
            self.settings.timeouts.submit_seconds,
        )
        try:
            result = SubmissionResponse.model_validate(data)
        except ValidationError as exc:
            raise PayloadError(f"Unexpected submission response: {exc.error_count()} error(s)") from exc

        if result.high_scores is not None:
            self.cache.store(Channel.LEADERBOARD, list(result.high_scores))
        else:
            self.cache.invalidate(Channel.LEADERBOARD)
        logger.info("submit.graded", score=result.score)
        return result

    def _cached(self, channel: Channel) -> Optional[ReadOutcome]:
        entry = self.cache.get(channel)
        if entry is None:
            return None
        return ReadOutcome(channel, entry.payload, DataSource.CACHE)

    async def _read(
        self,
        channel: Channel,
        path: str,
        parse: Callable[[Any], T],
        *,
        bypass_cache: bool,
    ) -> ReadOutcome[T]:
        if not bypass_cache:
            cached = self._cached(channel)
            if cached is not None:
                logger.debug("fetch.cache_hit", channel=channel.value)
                return cached

        deadline = self._deadlines[channel.value]
        ticket = deadline.begin()
        try:
            data = await self._request(
                deadline, ticket, self.http.get(path), self.settings.timeouts.read_seconds
            )
            payload = parse(data)
        except SyncError as exc:
            logger.warning(
                "fetch.fallback",
                channel=channel.value,
                error=str(exc),
                backend_down=exc.backend_down,
            )
            return ReadOutcome(channel, self._fallback_payload(channel), DataSource.FALLBACK, exc)

        if deadline.is_current(ticket):
            self.cache.store(channel, payload)
        logger.info("fetch.live", channel=channel.value, items=len(payload))
        return ReadOutcome(channel, payload, DataSource.LIVE)

    async def _request(
        self,
        deadline: DeadlineChannel,
        ticket: Ticket,
        call: Awaitable[httpx.Response],
        timeout: float,
    ) -> Any:
        try:
            response = await deadline.run(ticket, call, timeout)
        except httpx.TimeoutException as exc:
            deadline.expire(ticket)
            raise FetchTimeoutError(deadline.name, timeout) from exc
        except httpx.TransportError as exc:
            raise BackendConnectionError(f"{deadline.name} request failed: {exc}") from exc

        if response.is_error:
            raise BackendHTTPError(response.status_code, _error_detail(response))
        try:
            return response.json()
        except ValueError as exc:
            raise PayloadError(f"{deadline.name} response is not JSON") from exc

    @staticmethod
    def _parse_questions(data: Any) -> List[Question]:
        try:
            questions = QUESTION_LIST.validate_python(data)
        except ValidationError as exc:
            raise PayloadError(f"Malformed question set: {exc.error_count()} error(s)") from exc
        if not questions:
            raise PayloadError("Backend returned an empty question set")
        return questions

    @staticmethod
    def _parse_leaderboard(data: Any) -> List[LeaderboardEntry]:
        try:
            return LEADERBOARD.validate_python(data)
        except ValidationError as exc:
            raise PayloadError(f"Malformed leaderboard: {exc.error_count()} error(s)") from exc

    @staticmethod
    def _fallback_payload(channel: Channel) -> list:
        dataset = load_fallback()
        if channel is Channel.QUESTIONS:
            return list(dataset.questions)
        return list(dataset.leaderboard)


def _error_detail(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        text = response.text.strip()
        return text[:200] or None
    if isinstance(body, dict):
        for key in _DETAIL_KEYS:
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return None
