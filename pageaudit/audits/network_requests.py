"""Lists the network requests made while loading the page."""

from __future__ import annotations

from typing import Any

from ..config import DEFAULT_PASS
from .audit import AuditContext, AuditDefinition, AuditProduct, make_table_details


class NetworkRequests:
    meta = AuditDefinition(
        name="network-requests",
        description="Network Requests",
        help_text="Lists the network requests that were made during page load.",
        required_artifacts=("devtoolsLogs",),
        informative=True,
    )

    async def compute(self, artifacts: dict[str, Any], context: AuditContext) -> AuditProduct:
        devtools_log = artifacts["devtoolsLogs"][DEFAULT_PASS]
        records = await context.computed.request("NetworkRecords", devtools_log)

        earliest = min(
            (r["startTime"] for r in records if r["startTime"] is not None), default=None
        )

        def relative_ms(timestamp: float | None) -> float | None:
            if timestamp is None or earliest is None:
                return None
            return (timestamp - earliest) * 1000

        items = [
            {
                "url": record["url"],
                "startTime": relative_ms(record["startTime"]),
                "endTime": relative_ms(record["endTime"]),
                "transferSize": record["transferSize"],
                "statusCode": record["statusCode"],
                "mimeType": record["mimeType"],
                "resourceType": record["resourceType"],
            }
            for record in records
        ]
        headings = [
            {"key": "url", "itemType": "url", "text": "URL"},
            {"key": "startTime", "itemType": "ms", "text": "Start Time"},
            {"key": "endTime", "itemType": "ms", "text": "End Time"},
            {"key": "transferSize", "itemType": "bytes", "text": "Transfer Size"},
            {"key": "statusCode", "itemType": "text", "text": "Status Code"},
            {"key": "mimeType", "itemType": "text", "text": "MIME Type"},
            {"key": "resourceType", "itemType": "text", "text": "Resource Type"},
        ]
        return AuditProduct(
            raw_value=len(items),
            score=1,
            details=make_table_details(headings, items),
        )
