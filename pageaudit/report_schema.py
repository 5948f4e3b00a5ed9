"""
Result record models.

Pydantic models for the run result handed to external renderers. Field
names are snake_case in Python and camelCase in JSON output.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ScoreDisplayMode(str, Enum):
    """How an audit's score is presented."""

    NUMERIC = "numeric"
    BINARY = "binary"


class _ReportModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class AuditResult(_ReportModel):
    """
    Normalized outcome of one audit. Produced once per audit per run.

    score is in [0, 1] rounded to two decimals, or None for error results.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    name: str
    description: str
    help_text: str = ""
    score: float | None
    score_display_mode: ScoreDisplayMode = ScoreDisplayMode.BINARY
    raw_value: Any = None
    display_value: str = ""
    error: bool = False
    debug_string: str | None = None
    informative: bool = False
    manual: bool = False
    not_applicable: bool = False
    details: dict[str, Any] | None = None
    extended_info: dict[str, Any] | None = None


class CategoryAuditResult(_ReportModel):
    """Per-audit breakdown inside a category."""

    id: str
    weight: float
    score: float | None = None
    error: bool = False
    included: bool = True


class CategoryResult(_ReportModel):
    """Aggregated category score plus its per-audit breakdown."""

    id: str
    title: str = ""
    description: str = ""
    score: float
    audit_refs: list[CategoryAuditResult] = Field(default_factory=list)


class RuntimeEnvironment(_ReportModel):
    name: str
    description: str


class RuntimeConfig(_ReportModel):
    environment: list[RuntimeEnvironment] = Field(default_factory=list)
    blocked_url_patterns: list[str] = Field(default_factory=list)
    extra_headers: dict[str, str] = Field(default_factory=dict)


class RunResult(_ReportModel):
    """Complete result of one run."""

    user_agent: str | None = None
    pageaudit_version: str
    fetched_at: str | None = None
    initial_url: str
    url: str
    run_warnings: list[str] = Field(default_factory=list)
    audits: dict[str, AuditResult] = Field(default_factory=dict)
    artifacts: dict[str, Any] = Field(default_factory=dict)
    runtime_config: RuntimeConfig = Field(default_factory=RuntimeConfig)
    report_categories: list[CategoryResult] = Field(default_factory=list)


__all__ = [
    "AuditResult",
    "CategoryAuditResult",
    "CategoryResult",
    "RunResult",
    "RuntimeConfig",
    "RuntimeEnvironment",
    "ScoreDisplayMode",
]
