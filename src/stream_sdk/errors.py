"""Error taxonomy for the stream SDK.

Every error surfaced by the public client API derives from StreamSDKError:
- ConfigurationError: bad or missing setup, detected before any I/O
- NotConnectedError: a send was attempted while the client is not connected
- EncodingError: an event could not be serialized
- TransportError: the transport boundary failed (original error is chained)

Decode failures on the receive path and handler faults are absorbed by the
client and never raised to callers.
"""


class StreamSDKError(Exception):
    """Base class for all stream SDK errors."""


class ConfigurationError(StreamSDKError):
    """Missing or invalid transport, identifier or configuration value."""


class NotConnectedError(StreamSDKError):
    """Raised when sending while the client is not connected."""

    def __init__(self, message: str = "Client not connected"):
        super().__init__(message)


class EncodingError(StreamSDKError):
    """Raised when an event cannot be encoded to its wire form."""


class TransportError(StreamSDKError):
    """Wraps a failure raised by the transport."""
