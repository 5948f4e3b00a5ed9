"""
Configuration management for page audit runs.

A run is configured by an ordered list of passes, the audits to evaluate,
optional weighted categories and shared settings.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Literal

from dotenv import load_dotenv

from .errors import ConfigError

load_dotenv()

DEFAULT_PASS = "defaultPass"
DEFAULT_ARTIFACTS_DIR = "latest-run"


def _filter_dataclass_fields(data: dict[str, Any], cls: type) -> dict[str, Any]:
    """Filter dict to only include fields that exist in the dataclass."""
    valid_fields = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in valid_fields}


def _get_command_timeout() -> float:
    """
    Determine the default per-command protocol timeout in seconds.

    PAGEAUDIT_COMMAND_TIMEOUT (env or .env) wins over the built-in default.
    """
    env_value = os.getenv("PAGEAUDIT_COMMAND_TIMEOUT")
    if env_value is not None:
        try:
            return float(env_value)
        except ValueError:
            pass
    return 30.0


@dataclass(frozen=True)
class ThrottlingProfile:
    """Network and CPU throttling applied to the session for one pass."""

    request_latency_ms: float = 0
    download_throughput_kbps: float = 0
    upload_throughput_kbps: float = 0
    cpu_slowdown_multiplier: float = 1

    def describe(self) -> tuple[str, str]:
        """Human-readable (network, cpu) descriptions."""
        network = (
            f"{self.request_latency_ms:g}ms HTTP RTT, "
            f"{self.download_throughput_kbps:g}Kbps down, "
            f"{self.upload_throughput_kbps:g}Kbps up"
        )
        cpu = f"{self.cpu_slowdown_multiplier:g}x slowdown"
        return network, cpu


@dataclass(frozen=True)
class PassConfig:
    """One navigation/collection cycle. Immutable once configured."""

    pass_name: str = DEFAULT_PASS
    record_trace: bool = False
    throttling: ThrottlingProfile | None = None
    gatherers: tuple[str, ...] = ()
    network_quiet_threshold_ms: int = 0
    cpu_quiet_threshold_ms: int = 0
    pause_after_load_ms: int = 0
    blank_page: str = "about:blank"
    blank_duration_ms: int = 300

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PassConfig":
        data = _filter_dataclass_fields(data, cls)
        throttling = data.pop("throttling", None)
        if isinstance(throttling, dict):
            throttling = ThrottlingProfile(**_filter_dataclass_fields(throttling, ThrottlingProfile))
        data["gatherers"] = tuple(data.get("gatherers", ()))
        return cls(throttling=throttling, **data)


@dataclass
class AuditRef:
    """
    Reference to an audit to evaluate.

    `implementation` lets callers pass an audit object directly instead of
    resolving `id` through the audit registry.
    """

    id: str
    options: dict[str, Any] = field(default_factory=dict)
    implementation: Any = None

    @classmethod
    def from_value(cls, value: Any) -> "AuditRef":
        if isinstance(value, AuditRef):
            return value
        if isinstance(value, str):
            return cls(id=value)
        if isinstance(value, dict):
            return cls(**_filter_dataclass_fields(value, cls))
        # An audit implementation passed directly
        return cls(id=value.meta.name, implementation=value)


@dataclass(frozen=True)
class CategoryAuditRef:
    """Weighted reference from a category to an audit."""

    id: str
    weight: float = 1.0


@dataclass
class CategoryConfig:
    """A named, weighted grouping of audits."""

    id: str
    title: str = ""
    description: str = ""
    audit_refs: list[CategoryAuditRef] = field(default_factory=list)

    @classmethod
    def from_dict(cls, category_id: str, data: dict[str, Any]) -> "CategoryConfig":
        refs = data.get("audit_refs", data.get("audits", []))
        return cls(
            id=category_id,
            title=data.get("title", category_id),
            description=data.get("description", ""),
            audit_refs=[
                ref if isinstance(ref, CategoryAuditRef) else CategoryAuditRef(**ref)
                for ref in refs
            ],
        )


@dataclass
class Settings:
    """
    Settings shared by gathering and auditing.

    gather_mode / audit_mode may be True or a directory path. Alone, they
    select collect-only or audit-from-disk runs; together they perform a
    full run that also persists artifacts.
    """

    gather_mode: bool | str = False
    audit_mode: bool | str = False
    max_wait_for_load_ms: int = 45_000
    command_timeout_s: float = field(default_factory=_get_command_timeout)
    emulated_form_factor: Literal["mobile", "desktop", "none"] = "mobile"
    additional_trace_categories: list[str] = field(default_factory=list)
    blocked_url_patterns: list[str] = field(default_factory=list)
    extra_headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "Settings":
        return cls(**_filter_dataclass_fields(data or {}, cls))

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def comparable(self) -> dict[str, Any]:
        """Settings with the mode flags removed, for gather/audit consistency checks."""
        data = self.to_dict()
        data.pop("gather_mode")
        data.pop("audit_mode")
        data.pop("command_timeout_s")
        return data

    def artifacts_path(self) -> Path:
        """Directory used by gather and audit modes. Defaults to ./latest-run."""
        if isinstance(self.audit_mode, str):
            return Path.cwd() / self.audit_mode
        if isinstance(self.gather_mode, str):
            return Path.cwd() / self.gather_mode
        return Path.cwd() / DEFAULT_ARTIFACTS_DIR


@dataclass
class RunConfig:
    """Complete run configuration."""

    passes: list[PassConfig] = field(default_factory=list)
    audits: list[AuditRef] = field(default_factory=list)
    categories: dict[str, CategoryConfig] = field(default_factory=dict)
    settings: Settings = field(default_factory=Settings)
    artifacts: dict[str, Any] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RunConfig":
        passes = [
            p if isinstance(p, PassConfig) else PassConfig.from_dict(p)
            for p in data.get("passes", [])
        ]
        audits = [AuditRef.from_value(a) for a in data.get("audits", [])]
        categories = {
            cid: c if isinstance(c, CategoryConfig) else CategoryConfig.from_dict(cid, c)
            for cid, c in (data.get("categories") or {}).items()
        }
        settings = data.get("settings")
        if not isinstance(settings, Settings):
            settings = Settings.from_dict(settings)
        config = cls(
            passes=passes,
            audits=audits,
            categories=categories,
            settings=settings,
            artifacts=data.get("artifacts"),
        )
        config.validate()
        return config

    @classmethod
    def load(cls, path: Path | str) -> "RunConfig":
        """Load configuration from a JSON file."""
        with open(path) as f:
            data = json.load(f)
        return cls.from_dict(data)

    def validate(self) -> None:
        """Reject configurations that would overwrite artifacts or reference unknown audits."""
        seen_passes: set[str] = set()
        seen_artifacts: dict[str, str] = {}
        for pass_config in self.passes:
            if pass_config.pass_name in seen_passes:
                raise ConfigError(f"Duplicate pass name: {pass_config.pass_name}")
            seen_passes.add(pass_config.pass_name)
            for gatherer in pass_config.gatherers:
                if gatherer in seen_artifacts:
                    raise ConfigError(
                        f"Gatherer {gatherer} is configured in both "
                        f"{seen_artifacts[gatherer]} and {pass_config.pass_name}"
                    )
                seen_artifacts[gatherer] = pass_config.pass_name

        audit_ids = {ref.id for ref in self.audits}
        for category in self.categories.values():
            for ref in category.audit_refs:
                if ref.id not in audit_ids:
                    raise ConfigError(
                        f"Category {category.id} references unknown audit {ref.id}"
                    )
