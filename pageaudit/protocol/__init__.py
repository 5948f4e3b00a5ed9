"""Protocol Layer - remote-debugging session and transports."""

from .client import ProtocolClient, Session, SessionState
from .devtools import DevToolsTransport
from .transport import ConnectionLostError, TargetInfo, Transport, TransportError

__all__ = [
    "ProtocolClient",
    "Session",
    "SessionState",
    "DevToolsTransport",
    "ConnectionLostError",
    "TargetInfo",
    "Transport",
    "TransportError",
]
