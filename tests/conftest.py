"""
Shared test fixtures.

FakeTransport stands in for a browser: it answers commands from a table
and emits the events a real page load or trace would produce.
"""

import asyncio
import itertools

import pytest

from pageaudit.config import PassConfig, Settings
from pageaudit.protocol.client import ProtocolClient
from pageaudit.protocol.transport import TargetInfo, Transport, TransportError

TARGET = TargetInfo(target_id="T1", url="https://example.com/", title="Example")

VIEWPORT = {
    "innerWidth": 412,
    "outerWidth": 412,
    "innerHeight": 732,
    "outerHeight": 732,
    "devicePixelRatio": 2.625,
}

DOM_STATS = {
    "totalDOMNodes": 120,
    "depth": {"max": 8, "snippet": "div#deep"},
    "width": {"max": 14, "snippet": "ul#list"},
}


def make_trace_events(fcp_ms=1000, fmp_ms=1500, frame="F1"):
    """A minimal main-frame trace with navigation start at ts=1,000,000us."""
    start = 1_000_000
    return [
        {"name": "TracingStartedInPage", "ts": start - 10, "args": {"data": {"page": frame}}},
        {"name": "navigationStart", "ts": start, "args": {"frame": frame}},
        {"name": "firstPaint", "ts": start + fcp_ms * 1000, "args": {"frame": frame}},
        {"name": "firstContentfulPaint", "ts": start + fcp_ms * 1000, "args": {"frame": frame}},
        {"name": "firstMeaningfulPaint", "ts": start + fmp_ms * 1000, "args": {"frame": frame}},
        {"name": "domContentLoadedEventEnd", "ts": start + 1_800_000, "args": {"frame": frame}},
        {"name": "loadEventEnd", "ts": start + 2_000_000, "args": {"frame": frame}},
    ]


def default_evaluate(params):
    expression = params.get("expression", "")
    if "innerWidth" in expression:
        return {"result": {"value": dict(VIEWPORT)}}
    if "totalDOMNodes" in expression:
        return {"result": {"value": dict(DOM_STATS)}}
    return {"result": {"value": None}}


class FakeTransport(Transport):
    """
    In-memory transport.

    Attributes:
        responses: method -> result dict, callable(params) or Exception
        sent: every (method, params) sent, in order
        trace_chunks: lists of trace events emitted as Tracing.dataCollected
    """

    def __init__(self, target=TARGET, responses=None, fail_attach=False, trace_chunks=None):
        self.target = target
        self.fail_attach = fail_attach
        self.responses = {
            "Browser.getVersion": {"userAgent": "FakeBrowser/1.0"},
            "Page.navigate": {"frameId": "F1"},
            "Runtime.evaluate": default_evaluate,
        }
        self.responses.update(responses or {})
        if trace_chunks is None:
            events = make_trace_events()
            trace_chunks = [events[:3], events[3:]]
        self.trace_chunks = trace_chunks
        self.sent = []
        self.attached = False
        self.detach_count = 0
        self.handler = None
        self._request_ids = itertools.count(1)

    async def query_active_target(self):
        if self.target is None:
            raise TransportError("No page target found")
        return self.target

    async def attach(self, target):
        if self.fail_attach:
            raise TransportError("Attach refused")
        self.attached = True

    async def detach(self, target):
        self.attached = False
        self.detach_count += 1

    async def send(self, target, method, params):
        self.sent.append((method, params))
        response = self.responses.get(method, {})
        if isinstance(response, Exception):
            raise response
        if callable(response):
            response = response(params)
        for event_method, event_params in self._events_after(method, params):
            self.emit_soon(event_method, event_params)
        return response

    def set_event_handler(self, handler):
        self.handler = handler

    def emit(self, method, params=None, target_id=None):
        if self.handler is not None:
            self.handler(target_id or self.target.target_id, method, params or {})

    def emit_soon(self, method, params=None, target_id=None):
        asyncio.get_running_loop().call_soon(self.emit, method, params, target_id)

    def sent_methods(self):
        return [method for method, _ in self.sent]

    def _events_after(self, method, params):
        if method == "Page.navigate":
            request_id = f"R{next(self._request_ids)}"
            url = params.get("url", "")
            return [
                (
                    "Network.requestWillBeSent",
                    {"requestId": request_id, "request": {"url": url, "method": "GET"},
                     "type": "Document", "timestamp": 1.0},
                ),
                (
                    "Network.responseReceived",
                    {"requestId": request_id, "response": {"status": 200, "mimeType": "text/html"}},
                ),
                ("Network.loadingFinished", {"requestId": request_id, "timestamp": 1.25,
                                             "encodedDataLength": 2048}),
                ("Page.loadEventFired", {"timestamp": 1.3}),
            ]
        if method == "Tracing.end":
            events = [("Tracing.dataCollected", {"value": chunk}) for chunk in self.trace_chunks]
            events.append(("Tracing.tracingComplete", {}))
            return events
        return []


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def client(transport):
    return ProtocolClient(transport, command_timeout_s=5.0)


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def fast_pass():
    """A pass with no waits, so tests never sleep."""

    def build(**kwargs):
        kwargs.setdefault("blank_duration_ms", 0)
        return PassConfig(**kwargs)

    return build


@pytest.fixture
def make_transport():
    """Factory for transports with custom responses or failure modes."""
    return FakeTransport


@pytest.fixture
def trace_events():
    """Factory for main-frame trace events with chosen paint timings."""
    return make_trace_events
