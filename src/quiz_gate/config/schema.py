from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field, field_validator, model_validator


class EndpointConfig(BaseModel):
    """Location of the scoring service the client talks to."""

    base_url: str = Field("http://localhost:3000", description="Scheme, host and port of the backend.")
    questions_path: str = Field("/api/questions", description="GET returns the question set.")
    scores_path: str = Field("/api/scores", description="GET returns the leaderboard; POST grades answers.")

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        """Normalise the base URL so paths can be joined without doubling slashes."""
        return value.rstrip("/")


class TimeoutConfig(BaseModel):
    """Deadlines applied to outbound requests."""

    read_seconds: float = Field(10.0, gt=0)
    submit_seconds: float = Field(15.0, gt=0)


class CacheConfig(BaseModel):
    """TTL classes for memoized reads. Leaderboard data goes stale faster than questions."""

    questions_ttl_seconds: float = Field(300.0, gt=0)
    leaderboard_ttl_seconds: float = Field(120.0, gt=0)


class RateLimitConfig(BaseModel):
    """Minimum spacing between automatic load attempts."""

    min_interval_seconds: float = Field(10.0, gt=0)


class GateConfig(BaseModel):
    """Thresholds and vocabularies for the bot heuristic and interaction accumulator."""

    min_interaction_events: int = Field(3, ge=1)
    bot_user_agent_markers: List[str] = Field(
        default_factory=lambda: [
            "bot",
            "crawler",
            "spider",
            "scraper",
            "headless",
            "selenium",
            "puppeteer",
            "playwright",
            "phantomjs",
            "webdriver",
        ]
    )
    automation_markers: List[str] = Field(
        default_factory=lambda: [
            "_phantom",
            "callPhantom",
            "__nightmare",
            "_selenium",
            "__webdriver_evaluate",
            "__selenium_unwrapped",
            "__playwright",
            "__pwInitScripts",
            "domAutomation",
        ]
    )

    @field_validator("bot_user_agent_markers")
    @classmethod
    def lowercase_markers(cls, value: List[str]) -> List[str]:
        """User agents are matched case-insensitively, so store the vocabulary lowercased."""
        return [marker.lower() for marker in value if marker.strip()]


class SubmissionConfig(BaseModel):
    """Bounds on the player name accepted at submission time."""

    name_min_length: int = Field(2, ge=1)
    name_max_length: int = Field(50, ge=1)

    @model_validator(mode="after")
    def min_not_above_max(self) -> "SubmissionConfig":
        if self.name_min_length > self.name_max_length:
            raise ValueError("name_min_length must not exceed name_max_length")
        return self


class LoggingConfig(BaseModel):
    """Controls for client logging output and format."""

    level: str = Field("INFO")
    use_json: bool = False


class Settings(BaseModel):
    """Top-level client configuration aggregating all sub-settings."""

    project_name: str = Field("Quiz Gate")
    endpoints: EndpointConfig = Field(default_factory=EndpointConfig)
    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    gate: GateConfig = Field(default_factory=GateConfig)
    submission: SubmissionConfig = Field(default_factory=SubmissionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
