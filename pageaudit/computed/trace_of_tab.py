"""Key page-load timestamps extracted from a trace."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..errors import ComputedArtifactError

if TYPE_CHECKING:
    from .computed_artifact import ComputedArtifactStore

# Output key -> trace event name(s), first match wins
_MARKS = {
    "firstPaint": ("firstPaint",),
    "firstContentfulPaint": ("firstContentfulPaint",),
    "firstMeaningfulPaint": ("firstMeaningfulPaint",),
    "domContentLoaded": ("domContentLoadedEventEnd",),
    "load": ("loadEventEnd",),
}


def _main_frame_id(events: list[dict[str, Any]]) -> str | None:
    for event in events:
        if event.get("name") == "TracingStartedInPage":
            return event.get("args", {}).get("data", {}).get("page")
    return None


class TraceOfTab:
    """
    Finds navigation start and the paint/load marks that follow it.

    Timestamps are in trace microseconds; timings are milliseconds
    relative to navigation start. A missing mark has a None value.
    """

    name = "TraceOfTab"

    def compute(self, trace: dict[str, Any], store: "ComputedArtifactStore") -> dict[str, Any]:
        events = sorted(
            (e for e in trace.get("traceEvents", []) if isinstance(e, dict) and "ts" in e),
            key=lambda e: e["ts"],
        )
        frame_id = _main_frame_id(events)

        def in_main_frame(event: dict[str, Any]) -> bool:
            frame = event.get("args", {}).get("frame")
            return frame_id is None or frame is None or frame == frame_id

        navigation_start = next(
            (e for e in events if e.get("name") == "navigationStart" and in_main_frame(e)),
            None,
        )
        if navigation_start is None:
            raise ComputedArtifactError(
                "No navigationStart event found in trace",
                friendly_message="The trace did not capture a page navigation",
            )
        start_ts = navigation_start["ts"]
        after_start = [e for e in events if e["ts"] >= start_ts and in_main_frame(e)]

        marks: dict[str, dict[str, Any] | None] = {}
        for key, names in _MARKS.items():
            marks[key] = next((e for e in after_start if e.get("name") in names), None)

        # Fall back to the last candidate when the browser never settled on an FMP
        if marks["firstMeaningfulPaint"] is None:
            candidates = [e for e in after_start if e.get("name") == "firstMeaningfulPaintCandidate"]
            marks["firstMeaningfulPaint"] = candidates[-1] if candidates else None

        trace_end = max(e["ts"] + e.get("dur", 0) for e in events)

        timestamps: dict[str, float | None] = {"navigationStart": start_ts}
        for key, event in marks.items():
            timestamps[key] = event["ts"] if event else None
        timestamps["traceEnd"] = trace_end

        timings = {
            key: (ts - start_ts) / 1000 if ts is not None else None
            for key, ts in timestamps.items()
        }
        return {"timestamps": timestamps, "timings": timings, "mainFrameId": frame_id}
