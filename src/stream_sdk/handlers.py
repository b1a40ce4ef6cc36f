"""Handler registry for inbound events."""

from __future__ import annotations

import threading
from collections.abc import Awaitable, Callable

from .events import Event

# Handlers may be plain functions or coroutine functions
EventHandler = Callable[[Event], None] | Callable[[Event], Awaitable[None]]


class HandlerRegistry:
    """Append-only list of event handlers.

    Guarded by a threading lock rather than an asyncio one: synchronous
    handlers run on worker threads and may register further handlers.
    Dispatch always works on a snapshot, so a handler added mid-dispatch
    only sees later events.
    """

    def __init__(self) -> None:
        self._handlers: list[EventHandler] = []
        self._lock = threading.Lock()

    def add(self, handler: EventHandler) -> None:
        """Register a handler. Duplicates are kept."""
        with self._lock:
            self._handlers.append(handler)

    def list(self) -> tuple[EventHandler, ...]:
        """Return an independent snapshot of the registered handlers."""
        with self._lock:
            return tuple(self._handlers)

    def __len__(self) -> int:
        with self._lock:
            return len(self._handlers)
