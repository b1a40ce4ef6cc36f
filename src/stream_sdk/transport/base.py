"""Transport contract consumed by StreamClient.

A transport is a duplex byte-frame channel. StreamClient owns the
transport exclusively and guarantees that:
- connect() is called before any send()/recv()
- recv() is only awaited by one task at a time
- close() is called at most once, after the receive and heartbeat
  tasks have exited

Transports therefore do not need to be idempotent or re-entrant.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Transport(Protocol):
    """Protocol for byte-frame transports."""

    async def connect(self) -> None:
        """Establish the duplex channel (may carry credentials)."""
        ...

    async def send(self, frame: bytes) -> None:
        """Transmit one frame."""
        ...

    async def recv(self) -> bytes:
        """Block until one frame arrives.

        Raises:
            Exception: When the channel fails or is closed
        """
        ...

    async def close(self) -> None:
        """Release the channel."""
        ...
