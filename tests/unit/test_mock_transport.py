"""Unit tests for the in-memory mock transport."""

import asyncio

import pytest

from stream_sdk.transport import MockTransport, Transport


class TestMockTransport:
    """Tests for MockTransport send/recv/close behavior."""

    def test_satisfies_protocol(self):
        assert isinstance(MockTransport(), Transport)

    @pytest.mark.asyncio
    async def test_send_recv(self):
        transport = MockTransport()
        await transport.connect()

        await transport.send(b"hello")
        assert await transport.next_sent() == b"hello"

        transport.push("server-msg")
        assert await transport.recv() == b"server-msg"

        await transport.close()
        assert transport.closed is True

    @pytest.mark.asyncio
    async def test_operations_fail_after_close(self):
        transport = MockTransport()
        await transport.close()

        with pytest.raises(ConnectionError):
            await transport.send(b"x")
        with pytest.raises(ConnectionError):
            await transport.recv()
        with pytest.raises(ConnectionError):
            await transport.connect()

    @pytest.mark.asyncio
    async def test_close_wakes_pending_recv(self):
        transport = MockTransport()
        recv = asyncio.create_task(transport.recv())
        await asyncio.sleep(0)
        assert transport.pending_recvs == 1

        await transport.close()

        with pytest.raises(ConnectionError):
            await asyncio.wait_for(recv, timeout=1.0)
        assert transport.pending_recvs == 0

    @pytest.mark.asyncio
    async def test_failure_injection(self):
        transport = MockTransport()
        transport.connect_error = OSError("refused")
        transport.send_error = OSError("broken pipe")

        with pytest.raises(OSError, match="refused"):
            await transport.connect()
        with pytest.raises(OSError, match="broken pipe"):
            await transport.send(b"x")
        assert transport.drain_sent() == []

    @pytest.mark.asyncio
    async def test_fail_recv(self):
        transport = MockTransport()
        transport.fail_recv()

        with pytest.raises(ConnectionError):
            await transport.recv()
