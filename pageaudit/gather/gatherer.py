"""Gatherer interface for extracting raw artifacts during a pass."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from ..config import PassConfig, Settings
    from ..run_context import RunContext
    from .driver import Driver


@dataclass
class PassContext:
    """
    Context provided to gatherer hooks for one pass.

    Core drives the browser. Gatherers read from it.
    """

    url: str
    driver: "Driver"
    pass_config: "PassConfig"
    settings: "Settings"
    run_context: "RunContext"
    options: dict[str, Any] = field(default_factory=dict)


@dataclass
class LoadData:
    """Data recorded while the page loaded."""

    devtools_log: list[dict[str, Any]]
    trace: dict[str, Any] | None = None
    timed_out: bool = False


class Gatherer(Protocol):
    """
    Extracts one named raw artifact during a pass.

    Every hook is optional and may be sync or async. The value returned by
    after_pass becomes the artifact stored under `name`.
    """

    name: str

    def before_pass(self, ctx: PassContext) -> Any:
        """Runs before navigation, in gatherer list order."""
        ...

    def during_pass(self, ctx: PassContext) -> Any:
        """Runs after load, while the trace is still recording."""
        ...

    def after_pass(self, ctx: PassContext, load_data: LoadData) -> Any:
        """Runs after load data is collected; returns the artifact."""
        ...
