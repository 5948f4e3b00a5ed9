"""Collects the page's timing metrics into one informative table."""

from __future__ import annotations

import logging
from typing import Any

from ..config import DEFAULT_PASS
from ..errors import PageAuditError
from .audit import AuditContext, AuditDefinition, AuditProduct, make_table_details, metric_computation_data

logger = logging.getLogger(__name__)


class Metrics:
    meta = AuditDefinition(
        name="metrics",
        description="Metrics",
        help_text="Collects all available metrics.",
        required_artifacts=("traces", "devtoolsLogs"),
        informative=True,
    )

    async def compute(self, artifacts: dict[str, Any], context: AuditContext) -> AuditProduct:
        data = metric_computation_data(artifacts, context)
        trace_of_tab = await context.computed.request("TraceOfTab", artifacts["traces"][DEFAULT_PASS])

        metrics: dict[str, Any] = {}
        for name in ("FirstContentfulPaint", "FirstMeaningfulPaint"):
            key = name[0].lower() + name[1:]
            try:
                metrics[key] = (await context.computed.request(name, data))["timing"]
            except PageAuditError as e:
                logger.debug(f"Metric {name} unavailable: {e}")
                metrics[key] = None

        timings = trace_of_tab["timings"]
        for key in ("firstPaint", "domContentLoaded", "load", "traceEnd"):
            metrics[f"observed{key[0].upper()}{key[1:]}"] = timings.get(key)

        headings = [
            {"key": "metric", "itemType": "text", "text": "Metric"},
            {"key": "value", "itemType": "ms", "text": "Value"},
        ]
        items = [{"metric": key, "value": value} for key, value in metrics.items()]
        return AuditProduct(
            raw_value=True,
            details=make_table_details(headings, items),
            extended_info={"value": metrics},
        )
