"""WebSocket transport.

Carries one event envelope per text message over a websocket connection.
The API key, when set, is sent as a bearer token on the opening handshake.
"""

from __future__ import annotations

import logging
from typing import Any

from websockets.asyncio.client import connect

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

ENCODING = "utf-8"


class WebSocketTransport:
    """Client-side websocket transport built on the websockets library."""

    def __init__(self, url: str, api_key: str = "", open_timeout: float = 10.0):
        if not url:
            raise ConfigurationError("WebSocket URL is required")
        self.url = url
        self.api_key = api_key
        self.open_timeout = open_timeout
        self._ws: Any = None  # websockets.asyncio.client.ClientConnection

    @property
    def is_open(self) -> bool:
        """Check if the websocket has been opened and not closed."""
        return self._ws is not None

    def _headers(self) -> dict[str, str]:
        if not self.api_key:
            return {}
        return {"Authorization": f"Bearer {self.api_key}"}

    async def connect(self) -> None:
        """Open the websocket."""
        self._ws = await connect(
            self.url,
            additional_headers=self._headers(),
            open_timeout=self.open_timeout,
        )
        logger.info(f"WebSocket connected to {self.url}")

    async def send(self, frame: bytes) -> None:
        """Send one frame as a text message."""
        if self._ws is None:
            raise ConnectionError("WebSocket not connected")
        await self._ws.send(frame.decode(ENCODING))

    async def recv(self) -> bytes:
        """Receive one message.

        Raises:
            ConnectionError: If the websocket was never opened
            websockets.ConnectionClosed: When the connection ends
        """
        if self._ws is None:
            raise ConnectionError("WebSocket not connected")
        message = await self._ws.recv()
        if isinstance(message, str):
            return message.encode(ENCODING)
        return message

    async def close(self) -> None:
        """Close the websocket."""
        if self._ws is None:
            return
        ws, self._ws = self._ws, None
        await ws.close()
        logger.info(f"WebSocket to {self.url} closed")
