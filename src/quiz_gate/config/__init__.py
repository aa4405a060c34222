from .loader import load_settings
from .schema import (
    CacheConfig,
    EndpointConfig,
    GateConfig,
    LoggingConfig,
    RateLimitConfig,
    Settings,
    SubmissionConfig,
    TimeoutConfig,
)

__all__ = [
    "CacheConfig",
    "EndpointConfig",
    "GateConfig",
    "LoggingConfig",
    "RateLimitConfig",
    "Settings",
    "SubmissionConfig",
    "TimeoutConfig",
    "load_settings",
]
