"""Observed paint metrics built on TraceOfTab."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..errors import ComputedArtifactError

if TYPE_CHECKING:
    from .computed_artifact import ComputedArtifactStore


async def _paint_metric(
    mark: str, data: dict[str, Any], store: "ComputedArtifactStore"
) -> dict[str, float]:
    trace_of_tab = await store.request("TraceOfTab", data["trace"])
    timing = trace_of_tab["timings"].get(mark)
    if timing is None:
        raise ComputedArtifactError(f"No {mark} event found in trace")
    return {"timing": timing, "timestamp": trace_of_tab["timestamps"][mark]}


class FirstContentfulPaint:
    """
    Time until the first text or image is painted.

    Input is the metric computation data: {"trace", "devtoolsLog", "settings"}.
    """

    name = "FirstContentfulPaint"

    async def compute(self, data: dict[str, Any], store: "ComputedArtifactStore") -> dict[str, float]:
        return await _paint_metric("firstContentfulPaint", data, store)


class FirstMeaningfulPaint:
    name = "FirstMeaningfulPaint"

    async def compute(self, data: dict[str, Any], store: "ComputedArtifactStore") -> dict[str, float]:
        return await _paint_metric("firstMeaningfulPaint", data, store)
