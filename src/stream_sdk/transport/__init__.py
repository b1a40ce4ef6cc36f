"""Byte-frame transports for StreamClient.

- Transport: the protocol every transport implements
- WebSocketTransport: production transport (websockets library)
- MockTransport: in-memory transport for tests and demos
"""

from .base import Transport
from .mock import MockTransport
from .websocket import WebSocketTransport

__all__ = [
    "Transport",
    "MockTransport",
    "WebSocketTransport",
]
