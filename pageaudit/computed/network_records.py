"""Network request records reconstructed from a protocol log."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .computed_artifact import ComputedArtifactStore


def _new_record(params: dict[str, Any]) -> dict[str, Any]:
    request = params.get("request", {})
    return {
        "requestId": params.get("requestId"),
        "url": request.get("url", ""),
        "requestMethod": request.get("method", "GET"),
        "resourceType": params.get("type", "Other"),
        "startTime": params.get("timestamp"),
        "endTime": None,
        "statusCode": None,
        "mimeType": "",
        "transferSize": 0,
        "finished": False,
        "failed": False,
    }


class NetworkRecords:
    """One record per request, with redirects kept as separate records."""

    name = "NetworkRecords"

    def compute(self, devtools_log: list[dict[str, Any]], store: "ComputedArtifactStore") -> list[dict[str, Any]]:
        records: dict[str, dict[str, Any]] = {}
        redirects = 0

        for message in devtools_log:
            method = message.get("method", "")
            params = message.get("params", {})
            request_id = params.get("requestId")
            if not method.startswith("Network.") or request_id is None:
                continue

            if method == "Network.requestWillBeSent":
                previous = records.get(request_id)
                if previous is not None and "redirectResponse" in params:
                    redirects += 1
                    previous["statusCode"] = params["redirectResponse"].get("status")
                    previous["endTime"] = params.get("timestamp")
                    previous["finished"] = True
                    records[f"{request_id}:redirect{redirects}"] = records.pop(request_id)
                records[request_id] = _new_record(params)
                continue

            record = records.get(request_id)
            if record is None:
                continue
            if method == "Network.responseReceived":
                response = params.get("response", {})
                record["statusCode"] = response.get("status")
                record["mimeType"] = response.get("mimeType", "")
            elif method == "Network.dataReceived":
                record["transferSize"] += params.get("encodedDataLength", 0)
            elif method == "Network.loadingFinished":
                record["endTime"] = params.get("timestamp")
                record["transferSize"] = params.get("encodedDataLength", record["transferSize"])
                record["finished"] = True
            elif method == "Network.loadingFailed":
                record["endTime"] = params.get("timestamp")
                record["failed"] = True

        return sorted(records.values(), key=lambda r: (r["startTime"] is None, r["startTime"] or 0))
