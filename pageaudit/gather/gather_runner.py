"""
Pass orchestration: runs the configured passes and builds the artifact bag.

Passes run strictly one after another because they share one session and
its navigation state. Within a pass, gatherer hooks run in list order.
"""

from __future__ import annotations

import inspect
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from ..errors import ArtifactError, ConfigError, ConnectionFailedError, PageAuditError, TraceError
from .gatherer import LoadData, PassContext

if TYPE_CHECKING:
    from ..config import PassConfig, Settings
    from ..registry import Registry
    from ..run_context import RunContext
    from .driver import Driver
    from .gatherer import Gatherer

logger = logging.getLogger(__name__)

TRACES = "traces"
DEVTOOLS_LOGS = "devtoolsLogs"


class GatherRunner:
    """
    Sequences multi-pass artifact collection.

    For each pass: apply throttling, run before_pass hooks, navigate
    (recording the protocol log and optionally a trace), run during_pass
    hooks, stop recording, run after_pass hooks, then merge the pass's
    artifacts into the shared bag.
    """

    def __init__(self, driver: "Driver", gatherers: "Registry", run_context: "RunContext"):
        self.driver = driver
        self.gatherers = gatherers
        self.run_context = run_context

    async def run(self, passes: list["PassConfig"], url: str, settings: "Settings") -> dict[str, Any]:
        """
        Run every pass and return the merged artifact bag.

        Raises:
            PageAuditError: on fatal failures (connection, trace, navigation,
                fatal gatherer errors). Non-fatal gatherer failures become
                ArtifactError values in the bag.
        """
        artifacts: dict[str, Any] = {TRACES: {}, DEVTOOLS_LOGS: {}}

        await self.driver.connect()
        try:
            await self._setup_driver(settings)
            artifacts["UserAgent"] = await self.driver.get_user_agent()
            artifacts["fetchedAt"] = datetime.now(timezone.utc).isoformat()

            for pass_config in passes:
                load_data, pass_artifacts = await self._run_pass(pass_config, url, settings)
                self._merge(artifacts, pass_config, load_data, pass_artifacts)

            artifacts["RunWarnings"] = list(self.run_context.warnings)
            artifacts["settings"] = settings.to_dict()
        finally:
            await self.driver.disconnect()

        return artifacts

    async def _setup_driver(self, settings: "Settings") -> None:
        self.run_context.status("Initializing…")
        await self.driver.enable_domains()
        await self.driver.emulate(settings)
        if settings.blocked_url_patterns:
            await self.driver.set_blocked_urls(settings.blocked_url_patterns)
        await self.driver.set_extra_headers(settings.extra_headers)

    def _instantiate(self, name: str) -> "Gatherer":
        factory = self.gatherers.get(name)
        if factory is None:
            raise ConfigError(f"Unknown gatherer: {name}")
        return factory() if isinstance(factory, type) else factory

    async def _run_pass(
        self, pass_config: "PassConfig", url: str, settings: "Settings"
    ) -> tuple[LoadData, dict[str, Any]]:
        pass_name = pass_config.pass_name
        ctx = PassContext(
            url=url,
            driver=self.driver,
            pass_config=pass_config,
            settings=settings,
            run_context=self.run_context,
        )
        gatherers = [self._instantiate(name) for name in pass_config.gatherers]
        errors: dict[str, ArtifactError] = {}

        await self.driver.load_blank(pass_config.blank_page, pass_config.blank_duration_ms)
        await self.driver.set_throttling(pass_config.throttling)

        for gatherer in gatherers:
            await self._run_hook(gatherer, "before_pass", errors, ctx)

        self.run_context.status(f"Loading page & waiting for onload ({pass_name})")
        self.driver.begin_devtools_log()
        if pass_config.record_trace:
            await self.driver.begin_trace(settings.additional_trace_categories)

        try:
            timed_out = await self.driver.go_to_url(url, pass_config, settings.max_wait_for_load_ms)
        except ConnectionFailedError:
            raise
        except PageAuditError as e:
            raise PageAuditError(f"Unable to load page: {e}", fatal=True) from e
        if timed_out:
            self.run_context.warn(
                f"The page loaded too slowly to finish within the time limit during {pass_name}. "
                "Results may be incomplete."
            )

        for gatherer in gatherers:
            await self._run_hook(gatherer, "during_pass", errors, ctx)

        devtools_log = self.driver.end_devtools_log()
        trace = None
        if pass_config.record_trace:
            self.run_context.status(f"Retrieving trace ({pass_name})")
            trace = await self.driver.end_trace()
            self._validate_trace(trace)

        load_data = LoadData(devtools_log=devtools_log, trace=trace, timed_out=timed_out)

        results: dict[str, Any] = {}
        for gatherer in gatherers:
            self.run_context.status(f"Retrieving: {gatherer.name}")
            value = await self._run_hook(gatherer, "after_pass", errors, ctx, load_data)
            if gatherer.name in errors:
                results[gatherer.name] = errors[gatherer.name]
            elif value is not None:
                results[gatherer.name] = value

        return load_data, results

    async def _run_hook(
        self,
        gatherer: "Gatherer",
        hook_name: str,
        errors: dict[str, ArtifactError],
        *args: Any,
    ) -> Any:
        if gatherer.name in errors:
            return None
        hook = getattr(gatherer, hook_name, None)
        if hook is None:
            return None
        try:
            result = hook(*args)
            if inspect.isawaitable(result):
                result = await result
            return result
        except Exception as e:
            if getattr(e, "fatal", False):
                raise
            logger.warning(f"{gatherer.name} gatherer failed in {hook_name}: {e}")
            marker = ArtifactError(str(e), artifact_name=gatherer.name)
            marker.__cause__ = e
            errors[gatherer.name] = marker
            return None

    @staticmethod
    def _validate_trace(trace: dict[str, Any] | None) -> None:
        if not isinstance(trace, dict) or not isinstance(trace.get("traceEvents"), list):
            raise TraceError("Trace was recorded but traceEvents is not a list")

    @staticmethod
    def _merge(
        artifacts: dict[str, Any],
        pass_config: "PassConfig",
        load_data: LoadData,
        pass_artifacts: dict[str, Any],
    ) -> None:
        pass_name = pass_config.pass_name
        if pass_name in artifacts[DEVTOOLS_LOGS]:
            raise ConfigError(f"Pass {pass_name} already ran in this run")

        artifacts[DEVTOOLS_LOGS][pass_name] = load_data.devtools_log
        if load_data.trace is not None:
            artifacts[TRACES][pass_name] = load_data.trace

        for name, value in pass_artifacts.items():
            if name in artifacts:
                raise ConfigError(f"Artifact {name} was already collected earlier in this run")
            artifacts[name] = value


__all__ = ["GatherRunner", "TRACES", "DEVTOOLS_LOGS"]
