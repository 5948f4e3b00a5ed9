"""First Contentful Paint, scored on a log-normal curve."""

from __future__ import annotations

from typing import Any

from ..report_schema import ScoreDisplayMode
from .audit import (
    AuditContext,
    AuditDefinition,
    AuditProduct,
    compute_log_normal_score,
    metric_computation_data,
)


class FirstContentfulPaintAudit:
    meta = AuditDefinition(
        name="first-contentful-paint",
        description="First Contentful Paint",
        help_text=(
            "First Contentful Paint marks the time at which the first text or "
            "image is painted."
        ),
        required_artifacts=("traces", "devtoolsLogs"),
        score_display_mode=ScoreDisplayMode.NUMERIC,
        default_options={"scorePODR": 2900, "scoreMedian": 4000},
    )

    async def compute(self, artifacts: dict[str, Any], context: AuditContext) -> AuditProduct:
        data = metric_computation_data(artifacts, context)
        metric = await context.computed.request("FirstContentfulPaint", data)
        timing = metric["timing"]

        return AuditProduct(
            raw_value=timing,
            score=compute_log_normal_score(
                timing, context.options["scorePODR"], context.options["scoreMedian"]
            ),
            display_value=f"{timing / 1000:.1f} s",
        )
