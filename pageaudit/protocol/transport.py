"""Transport abstraction underneath the protocol client."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

# (target_id, method, params)
EventHandler = Callable[[str, str, dict[str, Any]], None]


class TransportError(Exception):
    """The transport reported an error for a call."""


class ConnectionLostError(TransportError):
    """The connection to the target went away while attached."""


@dataclass(frozen=True)
class TargetInfo:
    """A debuggable target as reported by the browser."""

    target_id: str
    url: str = ""
    title: str = ""
    type: str = "page"
    websocket_url: str | None = None


class Transport(ABC):
    """
    Carries commands to one debuggable target and delivers its events.

    Implementations raise TransportError for any call the browser
    rejects; the protocol client maps those onto its own error types.
    """

    @abstractmethod
    async def query_active_target(self) -> TargetInfo:
        """Resolve the target to attach to."""
        pass

    @abstractmethod
    async def attach(self, target: TargetInfo) -> None:
        """Attach a debugging session to the target."""
        pass

    @abstractmethod
    async def detach(self, target: TargetInfo) -> None:
        """Detach the debugging session."""
        pass

    @abstractmethod
    async def send(self, target: TargetInfo, method: str, params: dict[str, Any]) -> dict[str, Any]:
        """Send one command and return its result payload."""
        pass

    @abstractmethod
    def set_event_handler(self, handler: EventHandler | None) -> None:
        """Install the callback that receives inbound events."""
        pass
