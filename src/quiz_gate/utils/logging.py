from __future__ import annotations

import logging
from typing import Optional

import structlog

from quiz_gate.config.schema import LoggingConfig

# httpx logs every request at INFO; the fetch layer already emits its own events.
_NOISY_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: str = "INFO", json_output: bool = False) -> None:
    """
    Initialize stdlib logging and structlog for the quiz client.

    The fetch and submission layers emit structured events through structlog; the gate
    modules log through the standard library. Both end up on the same handlers.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=numeric_level, format="%(message)s")
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    processors = [
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def configure_from_settings(config: LoggingConfig) -> None:
    configure_logging(config.level, config.use_json)


def get_logger(name: Optional[str] = None):
    """Return a structlog logger that inherits the global configuration."""
    return structlog.get_logger(name)
