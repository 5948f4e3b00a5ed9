"""
Driver: page-level operations on top of the protocol client.

Navigation, load waiting, throttling, emulation, tracing and protocol
log recording used by the pass orchestrator and by gatherers.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

from ..config import PassConfig, Settings, ThrottlingProfile
from ..errors import ConnectionFailedError, ProtocolError, TraceError
from ..protocol.client import ProtocolClient
from .devtools_log import DevtoolsLog

logger = logging.getLogger(__name__)

DEFAULT_TRACE_CATEGORIES = [
    "-*",
    "toplevel",
    "v8.execute",
    "blink.console",
    "blink.user_timing",
    "benchmark",
    "loading",
    "latencyInfo",
    "devtools.timeline",
    "disabled-by-default-devtools.timeline",
    "disabled-by-default-devtools.timeline.frame",
    "disabled-by-default-devtools.timeline.stack",
    "disabled-by-default-devtools.screenshot",
]

# Mobile emulation metrics (412x732 @ 2.625x)
MOBILE_METRICS = {
    "width": 412,
    "height": 732,
    "deviceScaleFactor": 2.625,
    "mobile": True,
}

_POLL_INTERVAL_S = 0.05

# Records the end time of the most recent long task on the page.
_LONG_TASK_OBSERVER = """
(() => {
  if (window.__pageauditLongTaskObserver) return;
  window.__pageauditLastLongTask = performance.now();
  window.__pageauditLongTaskObserver = new PerformanceObserver(list => {
    for (const entry of list.getEntries()) {
      const end = entry.startTime + entry.duration;
      if (end > window.__pageauditLastLongTask) window.__pageauditLastLongTask = end;
    }
  });
  window.__pageauditLongTaskObserver.observe({entryTypes: ['longtask']});
})()
"""
_MS_SINCE_LONG_TASK = "performance.now() - (window.__pageauditLastLongTask || 0)"


class Driver:
    """Page operations over one protocol session."""

    def __init__(self, client: ProtocolClient):
        self.client = client
        self.devtools_log = DevtoolsLog()
        self._trace_active = False

    async def connect(self) -> None:
        await self.client.connect()
        self.client.set_message_recorder(self.devtools_log)

    async def disconnect(self) -> None:
        self.client.set_message_recorder(None)
        await self.client.disconnect()

    async def send_command(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        return await self.client.send_command(method, params)

    async def enable_domains(self) -> None:
        for domain in ("Page", "Network", "Runtime"):
            await self.send_command(f"{domain}.enable")

    async def get_user_agent(self) -> str:
        version = await self.send_command("Browser.getVersion")
        return version.get("userAgent", "")

    async def emulate(self, settings: Settings) -> None:
        if settings.emulated_form_factor == "mobile":
            await self.send_command("Emulation.setDeviceMetricsOverride", MOBILE_METRICS)
            await self.send_command("Emulation.setTouchEmulationEnabled", {"enabled": True})

    async def set_blocked_urls(self, patterns: list[str]) -> None:
        await self.send_command("Network.setBlockedURLs", {"urls": list(patterns)})

    async def set_extra_headers(self, headers: dict[str, str]) -> None:
        if headers:
            await self.send_command("Network.setExtraHTTPHeaders", {"headers": dict(headers)})

    async def set_throttling(self, profile: ThrottlingProfile | None) -> None:
        """Apply a throttling profile, or clear throttling when profile is None."""
        if profile is None:
            network = {"offline": False, "latency": 0, "downloadThroughput": -1, "uploadThroughput": -1}
            rate = 1
        else:
            network = {
                "offline": False,
                "latency": profile.request_latency_ms,
                # Kbps -> bytes/s
                "downloadThroughput": profile.download_throughput_kbps * 1024 / 8 or -1,
                "uploadThroughput": profile.upload_throughput_kbps * 1024 / 8 or -1,
            }
            rate = profile.cpu_slowdown_multiplier
        await self.send_command("Network.emulateNetworkConditions", network)
        await self.send_command("Emulation.setCPUThrottlingRate", {"rate": rate})

    async def evaluate(self, expression: str) -> Any:
        """Evaluate an expression in the page and return its value."""
        response = await self.send_command(
            "Runtime.evaluate",
            {"expression": expression, "returnByValue": True, "awaitPromise": True},
        )
        if "exceptionDetails" in response:
            details = response["exceptionDetails"]
            description = details.get("exception", {}).get("description") or details.get("text", "")
            raise ProtocolError(f"Evaluation exception: {description}", method="Runtime.evaluate")
        return response.get("result", {}).get("value")

    def _next_event(self, event_name: str) -> asyncio.Future:
        future = asyncio.get_running_loop().create_future()

        def resolve(params: dict[str, Any]) -> None:
            if not future.done():
                future.set_result(params)

        self.client.on(event_name, resolve)
        return future

    async def load_blank(self, url: str = "about:blank", duration_ms: int = 300) -> None:
        loaded = self._next_event("Page.loadEventFired")
        await self.send_command("Page.navigate", {"url": url})
        try:
            await asyncio.wait_for(loaded, timeout=5)
        except asyncio.TimeoutError:
            logger.debug(f"Blank page {url} did not fire load")
        await asyncio.sleep(duration_ms / 1000)

    async def go_to_url(self, url: str, pass_config: PassConfig, max_wait_for_load_ms: int) -> bool:
        """
        Navigate and wait for load plus the pass's quiet periods.

        Returns:
            True if waiting stopped because max_wait_for_load_ms elapsed.
        """
        deadline = time.monotonic() + max_wait_for_load_ms / 1000
        loaded = self._next_event("Page.loadEventFired")
        response = await self.send_command("Page.navigate", {"url": url})
        if response.get("errorText"):
            raise ProtocolError(f"Navigation to {url} failed: {response['errorText']}", method="Page.navigate")

        try:
            await asyncio.wait_for(loaded, timeout=max(deadline - time.monotonic(), 0))
        except asyncio.TimeoutError:
            return True

        if pass_config.pause_after_load_ms:
            await asyncio.sleep(pass_config.pause_after_load_ms / 1000)

        if not await self._wait_for_network_quiet(pass_config.network_quiet_threshold_ms, deadline):
            return True
        if pass_config.cpu_quiet_threshold_ms and not await self._wait_for_cpu_quiet(
            pass_config.cpu_quiet_threshold_ms, deadline
        ):
            return True
        return False

    async def _wait_for_network_quiet(self, threshold_ms: int, deadline: float) -> bool:
        log = self.devtools_log
        while True:
            if log.inflight_requests == 0 and log.ms_since_network_activity() >= threshold_ms:
                return True
            if time.monotonic() >= deadline:
                return False
            await asyncio.sleep(_POLL_INTERVAL_S)

    async def _wait_for_cpu_quiet(self, threshold_ms: int, deadline: float) -> bool:
        await self.evaluate(_LONG_TASK_OBSERVER)
        while True:
            quiet_for = await self.evaluate(_MS_SINCE_LONG_TASK)
            if quiet_for is not None and quiet_for >= threshold_ms:
                return True
            if time.monotonic() >= deadline:
                return False
            await asyncio.sleep(_POLL_INTERVAL_S)

    async def begin_trace(self, additional_categories: list[str] | None = None) -> None:
        categories = DEFAULT_TRACE_CATEGORIES + list(additional_categories or [])
        try:
            await self.send_command(
                "Tracing.start",
                {"categories": ",".join(categories), "transferMode": "ReportEvents"},
            )
        except ConnectionFailedError:
            raise
        except ProtocolError as e:
            raise TraceError(f"Unable to start trace: {e}") from e
        self._trace_active = True

    async def end_trace(self, timeout_s: float = 60.0) -> dict[str, Any]:
        """Stop tracing and collect every reported chunk of trace events."""
        if not self._trace_active:
            raise TraceError("end_trace called without an active trace")

        events: list[dict[str, Any]] = []
        complete = self._next_event("Tracing.tracingComplete")

        def collect(params: dict[str, Any]) -> None:
            # A stale re-registration from a finished trace must not take
            # chunks belonging to a later one.
            if complete.done():
                return
            events.extend(params.get("value", []))
            # Listeners drain on dispatch; re-arm for the next chunk.
            self.client.on("Tracing.dataCollected", collect)

        self.client.on("Tracing.dataCollected", collect)
        try:
            await self.send_command("Tracing.end")
            await asyncio.wait_for(complete, timeout=timeout_s)
        except ConnectionFailedError:
            raise
        except (ProtocolError, asyncio.TimeoutError) as e:
            raise TraceError(f"Unable to finish trace: {e}") from e
        finally:
            self._trace_active = False
        return {"traceEvents": events}

    def begin_devtools_log(self) -> None:
        self.devtools_log.begin()

    def end_devtools_log(self) -> list[dict[str, Any]]:
        return self.devtools_log.end()
