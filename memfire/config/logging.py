"""Structured logging configuration using structlog.

memfire 모듈은 ``structlog.get_logger(__name__)``로 이벤트만 남기고, 출력 형식은
라이브러리를 사용하는 쪽에서 정합니다.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor

from memfire.config.settings import Settings, get_settings


def _resolve_level(level: str) -> int:
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def configure_logging(json_logs: bool = False, level: str = "INFO") -> None:
    """Configure structlog for processes embedding the store.

    The library never calls this on its own; test suites and applications
    opt in.

    Args:
        json_logs: Render one JSON object per event instead of console lines.
        level: Minimum log level name (e.g. ``"DEBUG"``).

    Raises:
        ValueError: If ``level`` is not a standard logging level name.
    """
    min_level = _resolve_level(level)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if json_logs:
        processors += [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=min_level)


def configure_logging_from_settings(settings: Settings | None = None) -> None:
    """Apply ``LOG_JSON`` / ``LOG_LEVEL`` from settings."""
    settings = settings or get_settings()
    configure_logging(json_logs=settings.LOG_JSON, level=settings.LOG_LEVEL)


def get_logger(
    name: str | None = None, **initial_context: Any
) -> structlog.BoundLogger:
    """Get a structured logger, optionally bound to ``initial_context``.

    Example:
        log = get_logger(__name__, collection="users")
        log.info("document_written", path="users/alice")
    """
    logger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger
