"""
Audit interface and result normalization.

Audits are plain objects with a `meta` AuditDefinition and a `compute`
method; they are registered by name rather than subclassed.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

from ..config import DEFAULT_PASS
from ..errors import ScoreRangeError
from ..report_schema import AuditResult, ScoreDisplayMode
from .statistics import get_log_normal_distribution

if TYPE_CHECKING:
    from ..computed.computed_artifact import ComputedArtifactStore
    from ..config import Settings


@dataclass(frozen=True)
class AuditDefinition:
    """Static audit metadata."""

    name: str
    description: str
    required_artifacts: tuple[str, ...] = ()
    help_text: str = ""
    score_display_mode: ScoreDisplayMode = ScoreDisplayMode.BINARY
    failure_description: str | None = None
    informative: bool = False
    manual: bool = False
    default_options: dict[str, Any] = field(default_factory=dict)


@dataclass
class AuditProduct:
    """What an audit's compute returns. Only raw_value is required."""

    raw_value: Any
    score: float | None = None
    display_value: str | None = None
    debug_string: str | None = None
    not_applicable: bool = False
    error: bool = False
    details: dict[str, Any] | None = None
    extended_info: dict[str, Any] | None = None


@dataclass
class AuditContext:
    """Second argument to Audit.compute."""

    options: dict[str, Any]
    settings: "Settings"
    computed: "ComputedArtifactStore"


class Audit(Protocol):
    meta: AuditDefinition

    def compute(self, artifacts: dict[str, Any], context: AuditContext) -> AuditProduct:
        """May be async. May request computed artifacts through context.computed."""
        ...


def clamp_to_2_decimals(value: float) -> float:
    return round(value * 100) / 100


def compute_log_normal_score(
    measured_value: float, diminishing_returns_value: float, median_value: float
) -> float:
    """
    Score a measurement against a log-normal curve fit to two control points.

    The median maps to 0.5 and the point of diminishing returns to about
    0.9. Returns the fraction of the distribution above the measurement,
    clamped to [0, 1] and rounded to two decimals. Non-increasing in
    measured_value.
    """
    distribution = get_log_normal_distribution(median_value, diminishing_returns_value)
    score = distribution.complementary_percentile(measured_value)
    score = min(1.0, max(0.0, score))
    return clamp_to_2_decimals(score)


def _coerce_score(raw_value: Any) -> float:
    """Numeric coercion of a raw value: True -> 1, False/None/blank string -> 0."""
    if raw_value is None:
        return 0.0
    if isinstance(raw_value, str) and not raw_value.strip():
        return 0.0
    try:
        return float(raw_value)
    except (TypeError, ValueError):
        return math.nan


def normalize_score(meta: AuditDefinition, product: AuditProduct) -> float:
    """
    Resolve and validate the score for a successful audit.

    Raises:
        ScoreRangeError: if the score is non-finite or outside [0, 1].
    """
    score = product.score if product.score is not None else _coerce_score(product.raw_value)
    if isinstance(score, bool):
        score = float(score)
    if not isinstance(score, (int, float)) or not math.isfinite(score):
        raise ScoreRangeError(f"Invalid score for {meta.name}: {score}")
    if score > 1:
        raise ScoreRangeError(f"Audit score for {meta.name} is > 1")
    if score < 0:
        raise ScoreRangeError(f"Audit score for {meta.name} is < 0")
    return clamp_to_2_decimals(score)


def generate_audit_result(meta: AuditDefinition, product: AuditProduct) -> AuditResult:
    """
    Turn an audit's product into its normalized result.

    not_applicable forces score 1, informative and raw_value True.
    """
    score = normalize_score(meta, product)
    raw_value = product.raw_value
    informative = meta.informative
    if product.not_applicable:
        score = 1.0
        informative = True
        raw_value = True

    description = meta.description
    if meta.failure_description and score < 1:
        description = meta.failure_description

    return AuditResult(
        name=meta.name,
        description=description,
        help_text=meta.help_text,
        score=score,
        score_display_mode=meta.score_display_mode,
        raw_value=raw_value,
        display_value=str(product.display_value) if product.display_value else "",
        error=product.error,
        debug_string=product.debug_string,
        informative=informative,
        manual=meta.manual,
        not_applicable=product.not_applicable,
        details=product.details,
        extended_info=product.extended_info,
    )


def generate_error_audit_result(meta: AuditDefinition, debug_string: str) -> AuditResult:
    return AuditResult(
        name=meta.name,
        description=meta.description,
        help_text=meta.help_text,
        score=None,
        score_display_mode=meta.score_display_mode,
        raw_value=None,
        error=True,
        debug_string=debug_string,
        informative=meta.informative,
        manual=meta.manual,
    )


def make_table_details(
    headings: list[dict[str, Any]],
    items: list[dict[str, Any]],
    summary: dict[str, Any] | None = None,
) -> dict[str, Any]:
    if not items:
        return {"type": "table", "headings": [], "items": [], "summary": summary}
    return {"type": "table", "headings": headings, "items": items, "summary": summary}


def metric_computation_data(artifacts: dict[str, Any], context: AuditContext) -> dict[str, Any]:
    """Input shared by metric computed artifacts: default pass trace and log plus settings."""
    return {
        "trace": artifacts["traces"][DEFAULT_PASS],
        "devtoolsLog": artifacts["devtoolsLogs"][DEFAULT_PASS],
        "settings": context.settings,
    }


__all__ = [
    "DEFAULT_PASS",
    "Audit",
    "AuditContext",
    "AuditDefinition",
    "AuditProduct",
    "clamp_to_2_decimals",
    "compute_log_normal_score",
    "generate_audit_result",
    "generate_error_audit_result",
    "make_table_details",
    "metric_computation_data",
    "normalize_score",
]
