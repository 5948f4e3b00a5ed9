"""Scores the page by the size and shape of its DOM."""

from __future__ import annotations

from typing import Any

from ..report_schema import ScoreDisplayMode
from .audit import AuditContext, AuditDefinition, AuditProduct, compute_log_normal_score, make_table_details

MAX_DOM_NODES = 1500
MAX_DOM_TREE_WIDTH = 60
MAX_DOM_TREE_DEPTH = 32


class DOMSize:
    meta = AuditDefinition(
        name="dom-size",
        description="Avoids an excessive DOM size",
        failure_description="Uses an excessive DOM size",
        help_text=(
            f"Browser engineers recommend pages contain fewer than ~{MAX_DOM_NODES:,} "
            "DOM nodes. A large DOM increases memory usage and causes longer "
            "style calculations and costly layout reflows."
        ),
        required_artifacts=("DOMStats",),
        score_display_mode=ScoreDisplayMode.NUMERIC,
        default_options={"scorePODR": 2400, "scoreMedian": 3000},
    )

    def compute(self, artifacts: dict[str, Any], context: AuditContext) -> AuditProduct:
        stats = artifacts["DOMStats"]
        total = stats["totalDOMNodes"]
        depth = stats["depth"]
        width = stats["width"]

        score = compute_log_normal_score(
            total, context.options["scorePODR"], context.options["scoreMedian"]
        )

        headings = [
            {"key": "statistic", "itemType": "text", "text": "Statistic"},
            {"key": "element", "itemType": "code", "text": "Element"},
            {"key": "value", "itemType": "numeric", "text": "Value"},
        ]
        items = [
            {"statistic": "Total DOM Nodes", "element": "", "value": total},
            {"statistic": "Maximum DOM Depth", "element": depth.get("snippet", ""), "value": depth["max"]},
            {"statistic": "Maximum Child Elements", "element": width.get("snippet", ""), "value": width["max"]},
        ]
        return AuditProduct(
            raw_value=total,
            score=score,
            display_value=f"{total:,} nodes",
            details=make_table_details(headings, items),
            extended_info={"value": items},
        )
