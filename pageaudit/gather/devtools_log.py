"""Protocol log recorder for one pass."""

from __future__ import annotations

import time
from typing import Any

_NETWORK_START = "Network.requestWillBeSent"
_NETWORK_DONE = ("Network.loadingFinished", "Network.loadingFailed")


class DevtoolsLog:
    """
    Records inbound protocol events while a pass is running.

    Also tracks in-flight network requests so the driver can wait for a
    network quiet period.
    """

    def __init__(self):
        self.messages: list[dict[str, Any]] = []
        self._recording = False
        self._inflight: set[str] = set()
        self._last_network_activity = time.monotonic()

    @property
    def is_recording(self) -> bool:
        return self._recording

    def begin(self) -> None:
        self.messages = []
        self._inflight.clear()
        self._last_network_activity = time.monotonic()
        self._recording = True

    def end(self) -> list[dict[str, Any]]:
        self._recording = False
        return self.messages

    def record(self, method: str, params: dict[str, Any]) -> None:
        if not self._recording:
            return
        # Trace payloads are collected separately and would bloat the log.
        if method.startswith("Tracing."):
            return
        self.messages.append({"method": method, "params": params})

        if method.startswith("Network."):
            self._last_network_activity = time.monotonic()
            request_id = params.get("requestId")
            if request_id is None:
                return
            if method == _NETWORK_START:
                self._inflight.add(request_id)
            elif method in _NETWORK_DONE:
                self._inflight.discard(request_id)

    @property
    def inflight_requests(self) -> int:
        return len(self._inflight)

    def ms_since_network_activity(self) -> float:
        return (time.monotonic() - self._last_network_activity) * 1000
