"""Error tracking collaborator.

Non-fatal errors are reported here with enough context (audit or
gatherer name) to diagnose them. Reporting never changes control flow.
"""

from __future__ import annotations

import logging
import os
from typing import Any

logger = logging.getLogger(__name__)


class ErrorReporter:
    """Default reporter: records nothing beyond a debug log line."""

    def capture_exception(
        self,
        error: BaseException,
        tags: dict[str, str] | None = None,
        level: str = "error",
    ) -> None:
        logger.debug(f"Not reporting {type(error).__name__} ({level}, tags={tags}): {error}")


class SentryErrorReporter(ErrorReporter):
    """Reporter backed by sentry-sdk."""

    def __init__(self, dsn: str, release: str | None = None, environment: str | None = None):
        import sentry_sdk

        self._sentry = sentry_sdk
        sentry_sdk.init(
            dsn=dsn,
            release=release,
            environment=environment,
            attach_stacktrace=True,
            send_default_pii=False,
        )

    def capture_exception(
        self,
        error: BaseException,
        tags: dict[str, str] | None = None,
        level: str = "error",
    ) -> None:
        scope_kwargs: dict[str, Any] = {"level": level}
        if tags:
            scope_kwargs["tags"] = tags
        try:
            self._sentry.capture_exception(error, **scope_kwargs)
        except Exception as e:
            logger.error(f"Failed to report error to Sentry: {e}")


def init_error_reporter(dsn: str | None = None, release: str | None = None) -> ErrorReporter:
    """
    Build the error reporter for a run.

    Uses PAGEAUDIT_SENTRY_DSN when no dsn is given; without one, returns
    the no-op reporter.
    """
    dsn = dsn or os.getenv("PAGEAUDIT_SENTRY_DSN")
    if not dsn:
        return ErrorReporter()
    return SentryErrorReporter(dsn, release=release)


__all__ = ["ErrorReporter", "SentryErrorReporter", "init_error_reporter"]
