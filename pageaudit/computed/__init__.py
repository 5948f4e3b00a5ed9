"""Computed Layer - memoized derivations from raw artifacts."""

from .computed_artifact import ComputedArtifact, ComputedArtifactStore, freeze
from .network_records import NetworkRecords
from .paint_metrics import FirstContentfulPaint, FirstMeaningfulPaint
from .trace_of_tab import TraceOfTab

__all__ = [
    "ComputedArtifact",
    "ComputedArtifactStore",
    "freeze",
    "NetworkRecords",
    "FirstContentfulPaint",
    "FirstMeaningfulPaint",
    "TraceOfTab",
]
