"""Local echo server for trying the client without a backend.

Routes:
- /health - Health check
- /ws - WebSocket that echoes every message back to its sender

When an API key is configured, websocket clients must present it as
`Authorization: Bearer <key>` or the socket is closed with code 4401.
"""

from __future__ import annotations

import logging

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route, WebSocketRoute
from starlette.websockets import WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)

UNAUTHORIZED_CLOSE_CODE = 4401


def create_app(api_key: str | None = None) -> Starlette:
    """Create the echo server application.

    Args:
        api_key: Bearer token required from websocket clients (None: open)
    """

    async def health(request: Request) -> JSONResponse:
        return JSONResponse({"status": "ok"})

    async def echo(websocket: WebSocket) -> None:
        if api_key and websocket.headers.get("authorization") != f"Bearer {api_key}":
            logger.info("Rejecting websocket without valid credentials")
            await websocket.close(code=UNAUTHORIZED_CLOSE_CODE)
            return

        await websocket.accept()
        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
                if message.get("text") is not None:
                    logger.debug(f"echo: {message['text'][:200]}")
                    await websocket.send_text(message["text"])
                elif message.get("bytes") is not None:
                    await websocket.send_bytes(message["bytes"])
        except WebSocketDisconnect:
            pass
        logger.info("WebSocket client disconnected")

    return Starlette(
        routes=[
            Route("/health", health, methods=["GET"]),
            WebSocketRoute("/ws", echo),
        ]
    )
