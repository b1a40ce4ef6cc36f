"""Pytest configuration and shared fixtures."""

import pytest

from stream_sdk import ClientConfig, MockTransport, StreamClient


@pytest.fixture
def transport() -> MockTransport:
    """In-memory transport."""
    return MockTransport()


@pytest.fixture
def client(transport: MockTransport) -> StreamClient:
    """Client on the mock transport with heartbeats disabled."""
    return StreamClient(transport, ClientConfig(heartbeat_interval=0))
