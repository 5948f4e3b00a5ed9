"""
Run entry point.

A run is gather (or load) → audit → score → result record. Settings
select partial pipelines:

- gather_mode alone: collect artifacts, save them, stop.
- audit_mode alone: load saved artifacts from disk and audit them.
- both: full run that also saves the collected artifacts.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlsplit, urlunsplit

from . import __version__
from .audits.executor import AuditExecutor
from .computed.computed_artifact import ComputedArtifactStore
from .config import AuditRef, RunConfig, Settings
from .error_reporting import ErrorReporter, init_error_reporter
from .errors import ConfigError
from .gather.asset_saver import encode_artifacts, load_artifacts, save_artifacts
from .gather.driver import MOBILE_METRICS, Driver
from .gather.gather_runner import GatherRunner
from .protocol.client import ProtocolClient
from .protocol.devtools import DevToolsTransport
from .registry import (
    Registry,
    default_audit_registry,
    default_computed_registry,
    default_gatherer_registry,
)
from .report_schema import RunResult, RuntimeConfig, RuntimeEnvironment
from .run_context import RunContext
from .scoring import score_all_categories

logger = logging.getLogger(__name__)


def validate_url(url: str) -> str:
    """
    Check that a URL has a scheme and host, and return its normalized form.

    Scheme and host are lowercased and an empty path becomes "/".

    Raises:
        ValueError: if the URL is empty or lacks a scheme or host
    """
    if not isinstance(url, str) or not url:
        raise ValueError("You must provide a url to the runner")
    parsed = urlsplit(url)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError("The url provided should have a proper protocol and hostname.")
    if parsed.scheme != "https" and parsed.hostname != "localhost":
        logger.warning("The URL provided should be on HTTPS")
        logger.warning("Performance stats will be skewed redirecting from HTTP to HTTPS.")
    userinfo, at, host = parsed.netloc.rpartition("@")
    return urlunsplit(
        (parsed.scheme.lower(), f"{userinfo}{at}{host.lower()}", parsed.path or "/", parsed.query, parsed.fragment)
    )


class Runner:
    """
    Executes one configured run against one URL.

    Attributes:
        config: Passes, audits, categories and settings for the run
        gatherers: Gatherer name → implementation
        audits: Audit name → implementation
        computed: Computed artifact name → implementation
    """

    def __init__(
        self,
        config: RunConfig,
        gatherers: Registry | None = None,
        audits: Registry | None = None,
        computed: Registry | None = None,
        error_reporter: ErrorReporter | None = None,
    ):
        self.config = config
        self.gatherers = gatherers or default_gatherer_registry()
        self.audits = audits or default_audit_registry()
        self.computed = computed or default_computed_registry()
        self.error_reporter = error_reporter or init_error_reporter(release=__version__)

    async def run(
        self, url: str, client: ProtocolClient | None = None
    ) -> RunResult | dict[str, Any]:
        """
        Run the configured pipeline.

        Returns:
            The RunResult, or the raw artifact bag in gather-only mode

        Raises:
            ValueError: for a missing or malformed URL
            PageAuditError: on fatal errors (after reporting them)
        """
        initial_url = url
        url = validate_url(url)
        run_context = RunContext(error_reporter=self.error_reporter)
        settings = self.config.settings

        gather_only = bool(settings.gather_mode and not settings.audit_mode)

        try:
            # Audit ids are checked before the browser is touched.
            audits = [] if gather_only else self._resolve_audits()
            artifacts = await self._get_artifacts(url, client, settings, run_context)
            if gather_only:
                return artifacts
            return await self._audit_and_build(initial_url, url, audits, artifacts, settings, run_context)
        except Exception as e:
            run_context.report(e, level="fatal")
            raise

    async def _get_artifacts(
        self,
        url: str,
        client: ProtocolClient | None,
        settings: Settings,
        run_context: RunContext,
    ) -> dict[str, Any]:
        if settings.audit_mode and not settings.gather_mode:
            path = settings.artifacts_path()
            run_context.status(f"Loading artifacts from {path}")
            return load_artifacts(path)
        if self.config.artifacts:
            return dict(self.config.artifacts)

        if not self.config.passes:
            raise ConfigError("No browser artifacts are either provided or requested.")

        client = client or ProtocolClient(DevToolsTransport(), settings.command_timeout_s)
        gather_runner = GatherRunner(Driver(client), self.gatherers, run_context)
        artifacts = await gather_runner.run(self.config.passes, url, settings)

        if settings.gather_mode:
            path = save_artifacts(artifacts, settings.artifacts_path())
            logger.info(f"Saved artifacts to {path}")
        return artifacts

    def _resolve_audits(self) -> list[tuple[Any, AuditRef]]:
        if not self.config.audits:
            raise ConfigError("No audits to evaluate.")
        resolved = []
        for ref in self.config.audits:
            implementation = ref.implementation or self.audits.get(ref.id)
            if implementation is None:
                raise ConfigError(f"Unknown audit: {ref.id}")
            if isinstance(implementation, type):
                implementation = implementation()
            resolved.append((implementation, ref))
        return resolved

    def _check_settings(self, artifacts: dict[str, Any], settings: Settings) -> None:
        gather_settings = artifacts.get("settings")
        if not gather_settings:
            return
        if isinstance(gather_settings, dict):
            gather_settings = Settings.from_dict(gather_settings)
        if gather_settings.comparable() != settings.comparable():
            raise ConfigError("Cannot change settings between gathering and auditing")

    async def _audit_and_build(
        self,
        initial_url: str,
        url: str,
        audits: list[tuple[Any, AuditRef]],
        artifacts: dict[str, Any],
        settings: Settings,
        run_context: RunContext,
    ) -> RunResult:
        run_context.status("Analyzing and running audits...")
        self._check_settings(artifacts, settings)

        executor = AuditExecutor(ComputedArtifactStore(self.computed), run_context)
        results = await executor.run_audits(audits, artifacts, settings)

        run_context.status("Generating results...")
        run_warnings = list(artifacts.get("RunWarnings") or [])
        run_warnings.extend(w for w in run_context.warnings if w not in run_warnings)

        return RunResult(
            user_agent=artifacts.get("UserAgent"),
            pageaudit_version=__version__,
            fetched_at=artifacts.get("fetchedAt"),
            initial_url=initial_url,
            url=url,
            run_warnings=run_warnings,
            audits=results,
            artifacts=encode_artifacts(artifacts),
            runtime_config=self.get_runtime_config(settings),
            report_categories=score_all_categories(self.config.categories, results),
        )

    def get_runtime_config(self, settings: Settings) -> RuntimeConfig:
        """Describe the emulation and throttling the run was configured with."""
        if settings.emulated_form_factor == "mobile":
            emulation = (
                f"Emulated Nexus 5X ({MOBILE_METRICS['width']}x{MOBILE_METRICS['height']} "
                f"@ {MOBILE_METRICS['deviceScaleFactor']}x)"
            )
        else:
            emulation = "No emulation"

        throttling = self.config.passes[0].throttling if self.config.passes else None
        if throttling is None:
            network, cpu = "No throttling", "No throttling"
        else:
            network, cpu = throttling.describe()

        return RuntimeConfig(
            environment=[
                RuntimeEnvironment(name="Device Emulation", description=emulation),
                RuntimeEnvironment(name="Network Throttling", description=network),
                RuntimeEnvironment(name="CPU Throttling", description=cpu),
            ],
            blocked_url_patterns=list(settings.blocked_url_patterns),
            extra_headers=dict(settings.extra_headers),
        )


__all__ = ["Runner", "validate_url"]
