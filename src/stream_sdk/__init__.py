"""Stream SDK - realtime event client.

Maintains one connection to a streaming backend, exchanges JSON event
envelopes over a pluggable byte-frame transport and dispatches inbound
events to registered handlers.

Transports:
- websocket: production transport (create_client)
- mock: in-memory, for tests (create_test_client)
"""

from .client import ClientState, StreamClient, create_client, create_test_client
from .config import ClientConfig
from .errors import (
    ConfigurationError,
    EncodingError,
    NotConnectedError,
    StreamSDKError,
    TransportError,
)
from .events import Event, EventType, Metadata, decode_event, encode_event
from .handlers import EventHandler, HandlerRegistry
from .transport import MockTransport, Transport, WebSocketTransport

__all__ = [
    # Client
    "StreamClient",
    "ClientState",
    "ClientConfig",
    "create_client",
    "create_test_client",
    # Events
    "Event",
    "EventType",
    "Metadata",
    "encode_event",
    "decode_event",
    # Handlers
    "EventHandler",
    "HandlerRegistry",
    # Transports
    "Transport",
    "WebSocketTransport",
    "MockTransport",
    # Errors
    "StreamSDKError",
    "ConfigurationError",
    "NotConnectedError",
    "EncodingError",
    "TransportError",
]
