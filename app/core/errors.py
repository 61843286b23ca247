"""
Exception types and the shared "log it, report it, carry on" helpers.

Exceptions:
- ConfigurationError: a required credential/setting is missing
- UpstreamError: a third-party provider answered badly or not at all
- StoreError: the remote collection store rejected a request
- StoreUnavailableError: the store is unconfigured or unreachable
- StoreNotFoundError: the requested row does not exist

Reporting goes to structlog always, and to Sentry when SENTRY_DSN is set
and the optional sentry-sdk extra is installed.

    with ErrorHandler("github_repo_details", context={"repo": "dotfiles"}, level="warning"):
        await fetch_repo_details(...)
"""

from contextlib import contextmanager
from typing import Any, Dict, Optional

import structlog

logger = structlog.get_logger(__name__)

__all__ = [
    "ConfigurationError",
    "UpstreamError",
    "StoreError",
    "StoreUnavailableError",
    "StoreNotFoundError",
    "init_sentry",
    "capture_exception",
    "ErrorHandler",
    "error_boundary",
    "is_sentry_enabled",
]


class ConfigurationError(Exception):
    """A required configuration value is missing."""

    def __init__(self, message: str, missing: Optional[Dict[str, bool]] = None):
        super().__init__(message)
        self.missing = missing or {}


class UpstreamError(Exception):
    """A third-party provider call failed (non-2xx status, timeout, transport error)."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class StoreError(Exception):
    """The remote collection store rejected a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class StoreUnavailableError(StoreError):
    """The remote collection store is unconfigured or unreachable."""


class StoreNotFoundError(StoreError):
    """The requested row does not exist in the remote collection store."""


_sentry_initialized: bool = False


def init_sentry(dsn: str, environment: str = "production", traces_sample_rate: float = 0.1) -> bool:
    """Start Sentry error tracking. Returns False when disabled or unavailable."""
    global _sentry_initialized

    if not dsn:
        logger.info("Sentry disabled (no DSN provided)")
        return False

    try:
        import sentry_sdk
        from sentry_sdk.integrations.fastapi import FastApiIntegration
    except ImportError:
        logger.warning("SENTRY_DSN is set but sentry-sdk is not installed; install the 'sentry' extra")
        return False

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        traces_sample_rate=traces_sample_rate,
        integrations=[FastApiIntegration(transaction_style="endpoint")],
    )
    _sentry_initialized = True
    logger.info("Sentry initialized", environment=environment)
    return True


def is_sentry_enabled() -> bool:
    return _sentry_initialized


def capture_exception(
    exc: BaseException,
    context: Optional[Dict[str, Any]] = None,
    level: str = "error",
) -> Optional[str]:
    """
    Log an exception together with the current request's bound context
    (request id, route) and forward it to Sentry when enabled.

    Returns the Sentry event id, or None when nothing was sent.
    """
    details = {
        **structlog.contextvars.get_contextvars(),
        "error_type": type(exc).__name__,
        **(context or {}),
    }
    getattr(logger, level, logger.error)("Exception captured", exc_info=exc, **details)

    if not _sentry_initialized:
        return None

    import sentry_sdk

    with sentry_sdk.new_scope() as scope:
        for key, value in details.items():
            if value is not None:
                scope.set_extra(key, value)
        scope.level = level
        return sentry_sdk.capture_exception(exc)


class ErrorHandler:
    """
    Context manager that reports an exception raised in its block and,
    unless reraise=True, suppresses it. `failed` tells the caller which
    way the block ended.
    """

    def __init__(
        self,
        operation: str,
        context: Optional[Dict[str, Any]] = None,
        level: str = "error",
        reraise: bool = False,
    ):
        self.operation = operation
        self.context = context or {}
        self.level = level
        self.reraise = reraise
        self.failed = False

    def __enter__(self) -> "ErrorHandler":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        # Cancellation and interpreter exits always propagate
        if not isinstance(exc_val, Exception):
            return False

        self.failed = True
        capture_exception(exc_val, context={"operation": self.operation, **self.context}, level=self.level)
        return not self.reraise


@contextmanager
def error_boundary(operation: str, **context):
    """Report at warning level and swallow."""
    with ErrorHandler(operation, context=context, level="warning") as handler:
        yield handler
