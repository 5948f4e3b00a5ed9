"""
Audit execution.

Runs each configured audit in order against the artifact bag and turns
every outcome, successful or not, into an AuditResult. Only fatal errors
escape.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any

from ..computed.computed_artifact import ComputedArtifactStore
from ..config import DEFAULT_PASS, AuditRef, Settings
from ..errors import ArtifactError, AuditError, MissingArtifactError
from ..report_schema import AuditResult
from ..run_context import RunContext
from .audit import (
    Audit,
    AuditContext,
    AuditProduct,
    generate_audit_result,
    generate_error_audit_result,
)

logger = logging.getLogger(__name__)

# Artifacts collected once per pass and keyed by pass name.
PER_PASS_ARTIFACTS = ("traces", "devtoolsLogs")


class AuditExecutor:
    """
    Evaluate audits sequentially against one artifact bag.

    Attributes:
        computed: Shared computed artifact store for the run
        run_context: Per-run warnings and error reporting
    """

    def __init__(self, computed: ComputedArtifactStore, run_context: RunContext | None = None):
        self.computed = computed
        self.run_context = run_context or RunContext()

    async def run_audits(
        self,
        audit_refs: list[tuple[Audit, AuditRef]],
        artifacts: dict[str, Any],
        settings: Settings,
    ) -> dict[str, AuditResult]:
        """
        Run every audit in order. Results are keyed by audit name.

        Raises:
            PageAuditError: only for fatal audit errors
        """
        results: dict[str, AuditResult] = {}
        for audit, ref in audit_refs:
            result = await self.run_audit(audit, ref, artifacts, settings)
            results[audit.meta.name] = result
        return results

    async def run_audit(
        self,
        audit: Audit,
        ref: AuditRef,
        artifacts: dict[str, Any],
        settings: Settings,
    ) -> AuditResult:
        meta = audit.meta
        self.run_context.status(f"Evaluating: {meta.description}")

        try:
            self._check_required_artifacts(audit, artifacts)

            options = {**meta.default_options, **ref.options}
            context = AuditContext(options=options, settings=settings, computed=self.computed)
            product = audit.compute(artifacts, context)
            if inspect.isawaitable(product):
                product = await product
            if not isinstance(product, AuditProduct):
                raise AuditError(f"Audit {meta.name} returned {type(product).__name__}, expected AuditProduct")
            result = generate_audit_result(meta, product)
        except Exception as e:
            logger.warning(f"Audit {meta.name} failed: {e}")
            if getattr(e, "fatal", False):
                raise
            if not getattr(e, "expected", False):
                self.run_context.report(e, tags={"audit": meta.name})

            friendly = getattr(e, "friendly_message", None)
            message = str(e)
            debug_string = f"{friendly} ({message})" if friendly else f"Audit error: {message}"
            result = generate_error_audit_result(meta, debug_string)

        self.run_context.status(f"Evaluated: {meta.description}")
        return result

    def _check_required_artifacts(self, audit: Audit, artifacts: dict[str, Any]) -> None:
        """
        Raises:
            MissingArtifactError: if a required artifact is absent
            AuditError: (expected) if a required artifact is an error marker
        """
        name = audit.meta.name
        for artifact_name in audit.meta.required_artifacts:
            value = artifacts.get(artifact_name)
            missing = artifact_name not in artifacts or value is None
            if not missing and artifact_name in PER_PASS_ARTIFACTS:
                missing = not isinstance(value, dict) or DEFAULT_PASS not in value
            if missing:
                raise MissingArtifactError(artifact_name, name)

            if isinstance(value, ArtifactError):
                self.run_context.report(value, tags={"gatherer": artifact_name})
                error = AuditError(
                    f"Required {artifact_name} gatherer encountered an error: {value.message}"
                )
                error.expected = True
                raise error


__all__ = ["AuditExecutor", "PER_PASS_ARTIFACTS"]
