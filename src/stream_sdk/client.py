"""Realtime stream client.

StreamClient keeps one logical connection to the streaming backend:

- connect() opens the transport and starts two background tasks: the
  receive loop (always) and the heartbeat loop (when configured)
- the receive loop decodes every inbound frame and fans the event out to
  all registered handlers, each on its own task
- start_stream/end_stream/send_event encode an event and push it through
  the transport on the caller's task
- close() signals both loops, waits for them to exit, then closes the
  transport exactly once

State machine:
    IDLE --connect()--> CONNECTED --close()--> CLOSING --> CLOSED
    IDLE --close()--> CLOSED

There is no reconnection. When the transport fails the receive loop ends
and the client stays CONNECTED; sends then fail with TransportError until
close() is called.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
import uuid
from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import ValidationError

from .config import ClientConfig
from .errors import ConfigurationError, NotConnectedError, TransportError
from .events import Event, EventType, Metadata, decode_event, encode_event
from .handlers import EventHandler, HandlerRegistry
from .transport.base import Transport
from .transport.mock import MockTransport
from .transport.websocket import WebSocketTransport

logger = logging.getLogger(__name__)


class ClientState(str, Enum):
    """Connection state machine."""

    IDLE = "idle"
    CONNECTED = "connected"
    CLOSING = "closing"
    CLOSED = "closed"


class StreamClient:
    """Connection coordinator for a realtime event stream.

    The client owns the transport exclusively. Connect and close are
    serialized by a lock; send operations only read the state, so a send
    may lose the race against a concurrent close() and surface the
    transport's failure as TransportError.

    Handlers run concurrently with the receive loop and with each other:
    coroutine handlers become tasks, plain functions each get a dedicated
    thread per invocation. There is no pool, so the number of threads is
    bounded only by how many sync invocations are running at once.
    A handler that raises is logged and ignored. Slow handlers get no
    backpressure; every dispatch is independent.

    Usage:
        async with create_client(ClientConfig(endpoint="ws://...")) as client:
            client.on_event(print)
            stream_id = await client.start_stream(Metadata(title="Demo"))
            await client.send_event(stream_id, {"viewer": "user-1"})
            await client.end_stream(stream_id)
    """

    def __init__(self, transport: Transport | None, config: ClientConfig | None = None):
        self.config = config or ClientConfig()
        self._transport = transport
        self._state = ClientState.IDLE
        self._lock = asyncio.Lock()
        self._closing = asyncio.Event()
        self._handlers = HandlerRegistry()

        self._receive_task: asyncio.Task[None] | None = None
        self._heartbeat_task: asyncio.Task[None] | None = None
        self._dispatch_tasks: set[asyncio.Task[None]] = set()

    @property
    def state(self) -> ClientState:
        """Current connection state."""
        return self._state

    @property
    def is_connected(self) -> bool:
        """Check if the client is connected."""
        return self._state == ClientState.CONNECTED

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def connect(self) -> None:
        """Open the transport and start the background loops.

        Calling connect() on a connected client does nothing.

        Raises:
            ConfigurationError: If there is no transport or the client was closed
            TransportError: If the transport fails to connect
        """
        transport = self._transport
        if transport is None:
            raise ConfigurationError("Transport is required")

        async with self._lock:
            if self._state == ClientState.CONNECTED:
                return
            if self._state in (ClientState.CLOSING, ClientState.CLOSED):
                raise ConfigurationError("Client is closed; create a new client to reconnect")

            try:
                await transport.connect()
            except Exception as e:
                raise TransportError(f"Failed to connect: {e}") from e

            self._state = ClientState.CONNECTED
            self._receive_task = asyncio.create_task(
                self._receive_loop(transport), name="stream-sdk-receive"
            )
            if self.config.heartbeat_enabled:
                self._heartbeat_task = asyncio.create_task(
                    self._heartbeat_loop(transport), name="stream-sdk-heartbeat"
                )

            logger.info(
                f"{self.__class__.__name__} connected "
                f"(heartbeat={'on' if self._heartbeat_task else 'off'})"
            )

    async def close(self) -> None:
        """Stop the background loops and close the transport.

        Safe to call more than once; only the first call has an effect.
        Cancelling close() propagates to the caller. The client is then left
        CLOSING with the transport still open, and calling close() again
        finishes the shutdown.

        Raises:
            TransportError: If the transport fails to close (the client is
                CLOSED regardless)
        """
        async with self._lock:
            if self._state == ClientState.CLOSED:
                return
            transport = self._transport
            if self._state == ClientState.IDLE or transport is None:
                # Nothing was opened
                self._state = ClientState.CLOSED
                return

            self._state = ClientState.CLOSING
            self._closing.set()

            # The receive loop is normally parked in recv(); cancel it there
            if self._receive_task is not None:
                self._receive_task.cancel()

            # asyncio.wait() does not raise the loops' CancelledError, so a
            # cancellation of this close() call still reaches the caller
            loops = {t for t in (self._receive_task, self._heartbeat_task) if t is not None}
            if loops:
                await asyncio.wait(loops)
            self._receive_task = None
            self._heartbeat_task = None

            try:
                await transport.close()
            except Exception as e:
                raise TransportError(f"Failed to close transport: {e}") from e
            finally:
                self._state = ClientState.CLOSED
                logger.info(f"{self.__class__.__name__} closed")

    async def __aenter__(self) -> StreamClient:
        await self.connect()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    # =========================================================================
    # Handlers
    # =========================================================================

    def on_event(self, handler: EventHandler) -> EventHandler:
        """Register a handler called once per received event.

        Returns the handler so this can be used as a decorator.
        """
        self._handlers.add(handler)
        return handler

    # =========================================================================
    # Send operations
    # =========================================================================

    async def start_stream(self, metadata: Metadata | Mapping[str, Any] | None = None) -> str:
        """Announce a new stream and return its id.

        Args:
            metadata: Stream metadata (Metadata, a mapping, or None)

        Returns:
            The generated stream id
        """
        meta = _coerce_metadata(metadata)
        self._require_connected()

        stream_id = str(uuid.uuid4())
        await self._send(
            Event.create(EventType.STREAM_START, stream_id=stream_id, data=meta.model_dump())
        )
        return stream_id

    async def end_stream(self, stream_id: str) -> None:
        """Announce that a stream has ended."""
        _require_stream_id(stream_id)
        self._require_connected()
        await self._send(Event.create(EventType.STREAM_END, stream_id=stream_id))

    async def send_event(self, stream_id: str, data: Any) -> None:
        """Send a custom event (viewer join/leave, metadata update, ...)."""
        _require_stream_id(stream_id)
        self._require_connected()
        await self._send(Event.create(EventType.CUSTOM, stream_id=stream_id, data=data))

    def _require_connected(self) -> None:
        if self._state != ClientState.CONNECTED:
            raise NotConnectedError(f"Client not connected (state={self._state.value})")

    async def _send(self, event: Event) -> None:
        frame = encode_event(event)
        try:
            await self._transport.send(frame)  # type: ignore[union-attr]
        except Exception as e:
            raise TransportError(f"Failed to send {event.type.value} event: {e}") from e
        logger.debug(f"Sent {event.type.value} event {event.id} (stream={event.stream_id})")

    # =========================================================================
    # Background loops
    # =========================================================================

    async def _receive_loop(self, transport: Transport) -> None:
        """Read frames and dispatch decoded events until closed or failed."""
        while not self._closing.is_set():
            try:
                frame = await transport.recv()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                # Connection is unusable; no reconnection
                if not self._closing.is_set():
                    logger.warning(f"Receive loop stopped: {e}")
                return

            try:
                event = decode_event(frame)
            except ValueError as e:
                logger.debug(f"Dropping malformed frame: {e}")
                continue

            self._dispatch(event)

    def _dispatch(self, event: Event) -> None:
        for handler in self._handlers.list():
            task = asyncio.create_task(self._invoke(handler, event))
            self._dispatch_tasks.add(task)
            task.add_done_callback(self._dispatch_tasks.discard)

    async def _invoke(self, handler: EventHandler, event: Event) -> None:
        try:
            if inspect.iscoroutinefunction(handler):
                await handler(event)
            else:
                result = await _run_in_thread(handler, event)
                if inspect.isawaitable(result):
                    await result
        except Exception:
            logger.exception(
                f"Event handler {getattr(handler, '__name__', handler)!r} "
                f"failed on event {event.id}"
            )

    async def _heartbeat_loop(self, transport: Transport) -> None:
        """Send a heartbeat at a fixed rate until closed.

        Ticks are scheduled on the loop clock, so a slow send does not push
        later ticks back. Ticks that fall due while a send is still running
        are dropped rather than sent in a burst.
        """
        loop = asyncio.get_running_loop()
        interval = self.config.heartbeat_interval
        next_tick = loop.time() + interval

        while not self._closing.is_set():
            try:
                await asyncio.wait_for(
                    self._closing.wait(), timeout=max(0.0, next_tick - loop.time())
                )
                return
            except TimeoutError:
                pass

            try:
                await transport.send(encode_event(Event.heartbeat()))
            except Exception as e:
                logger.debug(f"Heartbeat send failed: {e}")

            next_tick += interval
            now = loop.time()
            while next_tick <= now:
                next_tick += interval


async def _run_in_thread(handler: EventHandler, event: Event) -> Any:
    """Call a plain-function handler on a thread of its own and await it.

    Each call gets a new daemon thread instead of a slot in the loop's
    default executor, so a handler that never returns cannot starve its
    siblings or other users of that executor.
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future[Any] = loop.create_future()

    def settle(result: Any, error: Exception | None) -> None:
        if future.done():
            # The dispatch task was cancelled while the handler ran
            return
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(result)

    def run() -> None:
        try:
            result = handler(event)
        except Exception as e:
            outcome: tuple[Any, Exception | None] = (None, e)
        else:
            outcome = (result, None)
        try:
            loop.call_soon_threadsafe(settle, *outcome)
        except RuntimeError:
            logger.debug(f"Event loop closed before handler finished event {event.id}")

    threading.Thread(target=run, name=f"stream-sdk-handler-{event.id}", daemon=True).start()
    return await future


def _require_stream_id(stream_id: str) -> None:
    if not stream_id:
        raise ConfigurationError("Stream id is required")


def _coerce_metadata(metadata: Metadata | Mapping[str, Any] | None) -> Metadata:
    if metadata is None:
        return Metadata()
    if isinstance(metadata, Metadata):
        return metadata
    try:
        return Metadata.model_validate(dict(metadata))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid stream metadata: {e}") from e


# Factory functions


def create_client(config: ClientConfig | None = None) -> StreamClient:
    """Create a client connected over websocket.

    Args:
        config: Client configuration (default: ClientConfig())

    Returns:
        StreamClient using a WebSocketTransport for config.endpoint
    """
    config = config or ClientConfig()
    transport = WebSocketTransport(
        config.endpoint,
        api_key=config.api_key,
        open_timeout=config.open_timeout,
    )
    return StreamClient(transport, config)


def create_test_client(
    config: ClientConfig | None = None,
) -> tuple[StreamClient, MockTransport]:
    """Create a client on an in-memory transport.

    Returns:
        (client, transport) so tests can push inbound frames and
        inspect sent ones
    """
    transport = MockTransport()
    return StreamClient(transport, config), transport
