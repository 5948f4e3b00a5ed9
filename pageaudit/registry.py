"""
Name-based registries for gatherers, audits and computed artifacts.

Configuration refers to everything by name; registries map those names
to implementations (classes or instances).
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any


class Registry:
    """
    Register and look up implementations by name.

    Attributes:
        kind: What this registry holds, used in error messages
    """

    def __init__(self, kind: str):
        self.kind = kind
        self._entries: dict[str, Any] = {}

    def register(self, name: str, implementation: Any) -> None:
        """Register an implementation by name. Re-registering replaces it."""
        self._entries[name] = implementation

    def get(self, name: str) -> Any | None:
        """Get an implementation by name, or None if not found."""
        return self._entries.get(name)

    def items(self) -> Iterator[tuple[str, Any]]:
        return iter(list(self._entries.items()))

    def list_names(self) -> list[str]:
        """List all registered names."""
        return list(self._entries.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __repr__(self) -> str:
        return f"Registry({self.kind!r}, {self.list_names()!r})"


def default_gatherer_registry() -> Registry:
    from .gather.gatherers import DOMStats, ViewportDimensions

    registry = Registry("gatherer")
    registry.register("ViewportDimensions", ViewportDimensions)
    registry.register("DOMStats", DOMStats)
    return registry


def default_audit_registry() -> Registry:
    from .audits import ContentWidth, DOMSize, FirstContentfulPaintAudit, Metrics, NetworkRequests

    registry = Registry("audit")
    for audit in (ContentWidth, DOMSize, FirstContentfulPaintAudit, Metrics, NetworkRequests):
        registry.register(audit.meta.name, audit)
    return registry


def default_computed_registry() -> Registry:
    from .computed import FirstContentfulPaint, FirstMeaningfulPaint, NetworkRecords, TraceOfTab

    registry = Registry("computed artifact")
    for artifact in (TraceOfTab, NetworkRecords, FirstContentfulPaint, FirstMeaningfulPaint):
        registry.register(artifact.name, artifact)
    return registry


__all__ = [
    "Registry",
    "default_audit_registry",
    "default_computed_registry",
    "default_gatherer_registry",
]
