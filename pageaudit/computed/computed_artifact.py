"""
Computed artifacts: derived metrics memoized by structural input equality.

Design:
- One cache slot per (name, input) pair; equal inputs share a slot even
  when they are different objects.
- Concurrent identical requests share one in-flight computation.
- Failures propagate to every waiter and are not cached.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Hashable, Mapping
from dataclasses import fields, is_dataclass
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from ..registry import Registry

logger = logging.getLogger(__name__)


def freeze(value: Any) -> Hashable:
    """
    Build a hashable key with structural equality for a request input.

    Mappings compare by key/value regardless of insertion order; lists and
    tuples compare element-wise; dataclasses by type and field values.

    Raises:
        TypeError: if the value contains an unhashable type this cannot freeze.
    """
    if isinstance(value, Mapping):
        return ("map", frozenset((freeze(k), freeze(v)) for k, v in value.items()))
    if isinstance(value, (list, tuple)):
        return ("seq", tuple(freeze(v) for v in value))
    if isinstance(value, (set, frozenset)):
        return ("set", frozenset(freeze(v) for v in value))
    if is_dataclass(value) and not isinstance(value, type):
        return (
            "dc",
            type(value).__qualname__,
            tuple((f.name, freeze(getattr(value, f.name))) for f in fields(value)),
        )
    # Keep 1 and True apart, as they are distinct inputs.
    if isinstance(value, bool):
        return ("bool", value)
    hash(value)
    return value


class ComputedArtifact(Protocol):
    """A named derivation from raw artifacts. Must not mutate its input."""

    name: str

    def compute(self, input: Any, store: "ComputedArtifactStore") -> Any:
        """Derive the value. May be async and may request other computed artifacts."""
        ...


class ComputedArtifactStore:
    """
    On-demand, memoized access to computed artifacts for one run.

    There is no eviction; the store lives as long as the run.
    """

    def __init__(self, artifacts: "Registry | dict[str, Any] | None" = None):
        self._artifacts: dict[str, ComputedArtifact] = {}
        self._cache: dict[tuple[str, Hashable], Any] = {}
        self._in_flight: dict[tuple[str, Hashable], asyncio.Future] = {}
        if artifacts is not None:
            for name, artifact in artifacts.items():
                self.register(artifact, name=name)

    def register(self, artifact: Any, name: str | None = None) -> None:
        """Register a computed artifact (instance or class) under its name."""
        if isinstance(artifact, type):
            artifact = artifact()
        self._artifacts[name or artifact.name] = artifact

    def names(self) -> list[str]:
        return list(self._artifacts.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._artifacts

    def is_cached(self, name: str, input: Any) -> bool:
        return (name, freeze(input)) in self._cache

    async def request(self, name: str, input: Any) -> Any:
        """
        Return the computed artifact `name` for `input`, computing it at most once.

        Raises:
            KeyError: if no computed artifact is registered under name.
            Exception: whatever the derivation raised.
        """
        artifact = self._artifacts.get(name)
        if artifact is None:
            raise KeyError(f"Unknown computed artifact: {name}")

        key = (name, freeze(input))
        if key in self._cache:
            return self._cache[key]

        pending = self._in_flight.get(key)
        if pending is None:
            pending = asyncio.ensure_future(self._compute(artifact, key, input))
            self._in_flight[key] = pending
        # Shield so one cancelled waiter does not cancel the shared computation.
        return await asyncio.shield(pending)

    async def _compute(self, artifact: ComputedArtifact, key: tuple[str, Hashable], input: Any) -> Any:
        try:
            value = artifact.compute(input, self)
            if inspect.isawaitable(value):
                value = await value
            self._cache[key] = value
            return value
        except Exception as e:
            logger.debug(f"Computed artifact {key[0]} failed: {e}")
            raise
        finally:
            self._in_flight.pop(key, None)


__all__ = ["ComputedArtifact", "ComputedArtifactStore", "freeze"]
