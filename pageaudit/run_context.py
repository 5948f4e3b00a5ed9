"""Explicit per-run state threaded through gathering and auditing."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from .error_reporting import ErrorReporter

logger = logging.getLogger(__name__)

StatusListener = Callable[[str], None]


@dataclass
class RunContext:
    """
    State owned by a single run.

    Created at run start and discarded at run end. Holds the warnings that
    end up in the report, status listeners and the error reporter.
    """

    error_reporter: ErrorReporter = field(default_factory=ErrorReporter)
    warnings: list[str] = field(default_factory=list)
    status_listeners: list[StatusListener] = field(default_factory=list)

    def status(self, message: str) -> None:
        """Announce progress to the log and to any status listeners."""
        logger.info(message)
        for listener in self.status_listeners:
            listener(message)

    def warn(self, message: str) -> None:
        """Record a warning that will be surfaced in the run result."""
        logger.warning(message)
        self.warnings.append(message)

    def report(
        self,
        error: BaseException,
        tags: dict[str, str] | None = None,
        level: str = "error",
    ) -> None:
        self.error_reporter.capture_exception(error, tags=tags, level=level)
