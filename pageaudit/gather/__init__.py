"""Gather Layer - pass orchestration, driver and raw artifacts."""

from .asset_saver import load_artifacts, save_artifacts
from .devtools_log import DevtoolsLog
from .driver import Driver
from .gather_runner import DEVTOOLS_LOGS, TRACES, GatherRunner
from .gatherer import Gatherer, LoadData, PassContext

__all__ = [
    "load_artifacts",
    "save_artifacts",
    "DevtoolsLog",
    "Driver",
    "DEVTOOLS_LOGS",
    "TRACES",
    "GatherRunner",
    "Gatherer",
    "LoadData",
    "PassContext",
]
