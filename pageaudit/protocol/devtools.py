"""
Remote-debugging transport for a browser started with a debugging port.

Targets are listed over HTTP (`/json/list`); commands and events travel
over the selected target's websocket as JSON messages correlated by id.
"""

from __future__ import annotations

import asyncio
import itertools
import json
import logging
from typing import Any

import httpx
import websockets

from .transport import ConnectionLostError, EventHandler, TargetInfo, Transport, TransportError

logger = logging.getLogger(__name__)


def parse_targets(payload: list[dict[str, Any]]) -> list[TargetInfo]:
    """Convert the `/json/list` payload into TargetInfo records."""
    return [
        TargetInfo(
            target_id=entry["id"],
            url=entry.get("url", ""),
            title=entry.get("title", ""),
            type=entry.get("type", "page"),
            websocket_url=entry.get("webSocketDebuggerUrl"),
        )
        for entry in payload
        if "id" in entry
    ]


class DevToolsTransport(Transport):
    """Transport speaking to a browser's remote-debugging endpoint."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 9222,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.host = host
        self.port = port
        self._http = http_client
        self._ws = None
        self._reader: asyncio.Task | None = None
        self._ids = itertools.count(1)
        self._pending: dict[int, asyncio.Future] = {}
        self._handler: EventHandler | None = None
        self._target: TargetInfo | None = None
        self._lost: ConnectionLostError | None = None

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    async def list_targets(self) -> list[TargetInfo]:
        client = self._http or httpx.AsyncClient()
        try:
            response = await client.get(f"{self.base_url}/json/list", timeout=10.0)
            response.raise_for_status()
            return parse_targets(response.json())
        except httpx.HTTPError as e:
            raise TransportError(f"Unable to list targets at {self.base_url}: {e}") from e
        finally:
            if self._http is None:
                await client.aclose()

    async def query_active_target(self) -> TargetInfo:
        pages = [t for t in await self.list_targets() if t.type == "page"]
        if not pages:
            raise TransportError(f"No page target available at {self.base_url}")
        return pages[0]

    async def attach(self, target: TargetInfo) -> None:
        if not target.websocket_url:
            raise TransportError(
                f"Target {target.target_id} has no websocket url; another debugger may be attached"
            )
        try:
            self._ws = await websockets.connect(target.websocket_url, max_size=None)
        except (OSError, websockets.WebSocketException) as e:
            raise TransportError(f"Unable to attach to {target.target_id}: {e}") from e
        self._target = target
        self._lost = None
        self._reader = asyncio.create_task(self._read_loop())

    async def detach(self, target: TargetInfo) -> None:
        if self._reader is not None:
            self._reader.cancel()
            try:
                await self._reader
            except asyncio.CancelledError:
                pass
            self._reader = None
        if self._ws is not None:
            await self._ws.close()
            self._ws = None
        self._fail_pending(TransportError("Session detached"))
        self._target = None

    async def send(self, target: TargetInfo, method: str, params: dict[str, Any]) -> dict[str, Any]:
        if self._ws is None:
            raise TransportError(f"{method}: not attached")
        if self._lost is not None:
            raise ConnectionLostError(f"{method}: {self._lost}")
        message_id = next(self._ids)
        future = asyncio.get_running_loop().create_future()
        self._pending[message_id] = future
        try:
            try:
                await self._ws.send(json.dumps({"id": message_id, "method": method, "params": params}))
            except websockets.ConnectionClosed as e:
                raise ConnectionLostError(f"{method}: connection closed: {e}") from e
            return await future
        finally:
            self._pending.pop(message_id, None)

    def set_event_handler(self, handler: EventHandler | None) -> None:
        self._handler = handler

    async def _read_loop(self) -> None:
        error: TransportError = ConnectionLostError("Connection closed by the browser")
        try:
            async for raw in self._ws:
                self._route(json.loads(raw))
        except websockets.ConnectionClosed as e:
            error = ConnectionLostError(f"Connection closed: {e}")
        except asyncio.CancelledError:
            error = TransportError("Session detached")
            raise
        finally:
            if isinstance(error, ConnectionLostError):
                logger.warning(f"Debugging connection lost: {error}")
                self._lost = error
            self._fail_pending(error)

    def _route(self, message: dict[str, Any]) -> None:
        if "id" in message:
            future = self._pending.get(message["id"])
            if future is None or future.done():
                return
            if "error" in message:
                error = message["error"]
                future.set_exception(TransportError(error.get("message", str(error))))
            else:
                future.set_result(message.get("result", {}))
        elif "method" in message and self._handler is not None and self._target is not None:
            self._handler(self._target.target_id, message["method"], message.get("params", {}))

    def _fail_pending(self, error: Exception) -> None:
        for future in self._pending.values():
            if not future.done():
                future.set_exception(error)
        self._pending.clear()


__all__ = ["DevToolsTransport", "parse_targets"]
