from .cache import CacheEntry, Channel, ResponseCache, is_valid
from .deadline import DeadlineChannel, Ticket
from .errors import (
    BackendConnectionError,
    BackendHTTPError,
    FetchTimeoutError,
    PayloadError,
    SyncError,
)
from .fallback import FallbackDataset, load_fallback
from .fetch import DataSource, LoadResult, ReadOutcome, ResilientFetcher
from .rate_limit import MinIntervalLimiter

__all__ = [
    "BackendConnectionError",
    "BackendHTTPError",
    "CacheEntry",
    "Channel",
    "DataSource",
    "DeadlineChannel",
    "FallbackDataset",
    "FetchTimeoutError",
    "LoadResult",
    "MinIntervalLimiter",
    "PayloadError",
    "ReadOutcome",
    "ResilientFetcher",
    "ResponseCache",
    "SyncError",
    "Ticket",
    "is_valid",
]
