"""Mock transport for testing.

Everything is in-memory: frames pushed into `inbound` are returned by
recv(), frames passed to send() land in `sent`.

Usage:
    transport = MockTransport()
    client = StreamClient(transport)
    await client.connect()

    transport.push(encode_event(Event.create("custom", "s1", {"msg": "hi"})))
    frame = await transport.next_sent(timeout=1.0)
"""

from __future__ import annotations

import asyncio

MOCK_CLOSED = "mock closed"


class MockTransport:
    """In-memory transport with call recording and failure injection."""

    def __init__(self) -> None:
        self.inbound: asyncio.Queue[bytes | None] = asyncio.Queue()
        self.sent: asyncio.Queue[bytes] = asyncio.Queue()
        self.closed = False

        # Failure injection
        self.connect_error: Exception | None = None
        self.send_error: Exception | None = None

        # Call recording
        self.connect_calls = 0
        self.close_calls = 0
        self.send_calls = 0
        self.pending_recvs = 0
        self.max_pending_recvs = 0

    def push(self, frame: bytes | str) -> None:
        """Queue a frame for the next recv()."""
        if isinstance(frame, str):
            frame = frame.encode("utf-8")
        self.inbound.put_nowait(frame)

    def fail_recv(self) -> None:
        """Make the next recv() fail as if the channel dropped."""
        self.inbound.put_nowait(None)

    async def next_sent(self, timeout: float = 1.0) -> bytes:
        """Wait for the next frame passed to send()."""
        return await asyncio.wait_for(self.sent.get(), timeout=timeout)

    def drain_sent(self) -> list[bytes]:
        """Return every frame sent so far without waiting."""
        frames = []
        while not self.sent.empty():
            frames.append(self.sent.get_nowait())
        return frames

    async def connect(self) -> None:
        self.connect_calls += 1
        if self.closed:
            raise ConnectionError(MOCK_CLOSED)
        if self.connect_error is not None:
            raise self.connect_error

    async def send(self, frame: bytes) -> None:
        self.send_calls += 1
        if self.closed:
            raise ConnectionError(MOCK_CLOSED)
        if self.send_error is not None:
            raise self.send_error
        await self.sent.put(frame)

    async def recv(self) -> bytes:
        if self.closed:
            raise ConnectionError(MOCK_CLOSED)
        self.pending_recvs += 1
        self.max_pending_recvs = max(self.max_pending_recvs, self.pending_recvs)
        try:
            frame = await self.inbound.get()
        finally:
            self.pending_recvs -= 1
        if frame is None:
            raise ConnectionError("mock recv failed")
        return frame

    async def close(self) -> None:
        self.close_calls += 1
        self.closed = True
        # Wake a parked recv()
        self.inbound.put_nowait(None)
