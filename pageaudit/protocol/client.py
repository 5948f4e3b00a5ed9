"""
Protocol client: one remote-debugging session.

Sends commands, correlates their responses, and dispatches inbound
events to listeners registered by event name.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from ..errors import CommandTimeoutError, ConnectionFailedError, ProtocolError
from .transport import ConnectionLostError, TargetInfo, Transport, TransportError

logger = logging.getLogger(__name__)

EventCallback = Callable[[dict[str, Any]], None]


class SessionState(Enum):
    """Attachment lifecycle of the session."""

    DISCONNECTED = "disconnected"
    ATTACHING = "attaching"
    ATTACHED = "attached"
    DETACHING = "detaching"


@dataclass
class Session:
    """The one active connection to a debuggable target."""

    target_id: str
    url: str
    target: TargetInfo


class MessageRecorder(Protocol):
    """Sees every inbound event before listener dispatch."""

    def record(self, method: str, params: dict[str, Any]) -> None:
        ...


class ProtocolClient:
    """
    Manages one remote-debugging session.

    Event listeners are drained on dispatch: when an event arrives, every
    callback registered for its name runs in registration order and the
    registrations for that name are removed. Callers that need the next
    occurrence must register again; a callback may re-register itself
    while it runs.
    """

    def __init__(self, transport: Transport, command_timeout_s: float | None = 30.0):
        self.transport = transport
        self.command_timeout_s = command_timeout_s
        self.state = SessionState.DISCONNECTED
        self.session: Session | None = None
        self._listeners: dict[str, list[EventCallback]] = {}
        self._recorder: MessageRecorder | None = None

    @property
    def is_attached(self) -> bool:
        return self.state == SessionState.ATTACHED

    @property
    def url(self) -> str | None:
        return self.session.url if self.session else None

    async def connect(self) -> Session:
        """
        Resolve the active target and attach a debugging session to it.

        Raises:
            ConnectionFailedError: no target, or attach refused. The client
                is left disconnected.
        """
        if self.state == SessionState.ATTACHED and self.session is not None:
            return self.session
        if self.state != SessionState.DISCONNECTED:
            raise ConnectionFailedError(f"Cannot connect while {self.state.value}")

        self.state = SessionState.ATTACHING
        try:
            target = await self.transport.query_active_target()
            await self.transport.attach(target)
        except TransportError as e:
            self.state = SessionState.DISCONNECTED
            raise ConnectionFailedError(f"Unable to attach to target: {e}") from e
        except BaseException:
            self.state = SessionState.DISCONNECTED
            raise

        self.transport.set_event_handler(self._on_event)
        self.session = Session(target_id=target.target_id, url=target.url, target=target)
        self.state = SessionState.ATTACHED
        logger.debug(f"Attached to target {target.target_id} ({target.url})")
        return self.session

    async def disconnect(self) -> None:
        """Detach. No-op when not connected; always clears session state."""
        if self.state != SessionState.ATTACHED or self.session is None:
            return

        self.state = SessionState.DETACHING
        target = self.session.target
        try:
            await self.transport.detach(target)
        except TransportError as e:
            logger.warning(f"Error detaching from {target.target_id}: {e}")
        finally:
            self.transport.set_event_handler(None)
            self._listeners.clear()
            self.session = None
            self.state = SessionState.DISCONNECTED

    async def send_command(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        Send one command and wait for its response.

        Raises:
            ProtocolError: not attached, or the transport rejected the call.
            CommandTimeoutError: no response within command_timeout_s.
            ConnectionFailedError: the connection went away. The client is
                left disconnected.
        """
        if not self.is_attached or self.session is None:
            raise ProtocolError(f"{method}: session is {self.state.value}", method=method)

        call = self.transport.send(self.session.target, method, params or {})
        try:
            if self.command_timeout_s:
                return await asyncio.wait_for(call, timeout=self.command_timeout_s)
            return await call
        except asyncio.TimeoutError as e:
            raise CommandTimeoutError(
                f"{method} timed out after {self.command_timeout_s}s", method=method
            ) from e
        except ConnectionLostError as e:
            await self.disconnect()
            raise ConnectionFailedError(f"{method} failed: {e}", method=method) from e
        except TransportError as e:
            raise ProtocolError(f"{method} failed: {e}", method=method) from e

    def on(self, event_name: str, callback: EventCallback) -> None:
        """Register a callback for the next occurrence of event_name."""
        self._listeners.setdefault(event_name, []).append(callback)

    def listener_count(self, event_name: str) -> int:
        return len(self._listeners.get(event_name, []))

    def set_message_recorder(self, recorder: MessageRecorder | None) -> None:
        self._recorder = recorder

    def _on_event(self, target_id: str, method: str, params: dict[str, Any]) -> None:
        if not self.is_attached or self.session is None or target_id != self.session.target_id:
            return

        if self._recorder is not None:
            self._recorder.record(method, params)

        # Take the whole batch before invoking so the list is cleared even
        # if a callback raises, and re-registrations land in a fresh list.
        callbacks = self._listeners.pop(method, [])
        for callback in callbacks:
            try:
                callback(params)
            except Exception as e:
                logger.error(f"Listener for {method} raised: {e}")


__all__ = ["ProtocolClient", "Session", "SessionState", "MessageRecorder"]
