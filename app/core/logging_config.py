"""
structlog setup.

Production (ENVIRONMENT=production) writes one JSON object per line;
everything else gets the console renderer. Request-scoped values bound by
the request middleware (request_id, route) are merged into every entry.

    from app.core.logging_config import get_logger

    logger = get_logger(__name__)
    logger.warning("wakatime.placeholder_served", endpoint="stats", reason="missing_api_key")

    {"event": "wakatime.placeholder_served", "endpoint": "stats", "reason": "missing_api_key",
     "request_id": "req_3f2a...", "route": "GET /api/v1/wakatime/stats",
     "level": "warning", "timestamp": "2025-01-01T12:00:00Z"}
"""

import logging
import sys
from typing import Any

import structlog

from app.core.config import settings

IS_TEST = "pytest" in sys.modules


def configure_logging(json_logs: bool = False, level: str = "INFO") -> None:
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if json_logs:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=not IS_TEST))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        # structlog.testing.capture_logs needs uncached loggers
        cache_logger_on_first_use=not IS_TEST,
    )

    # uvicorn and sqlalchemy log through the standard library
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


configure_logging(json_logs=settings.ENVIRONMENT.lower() == "production", level=settings.LOG_LEVEL)
