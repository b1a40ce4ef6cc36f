"""Event envelope exchanged with the streaming backend.

Every frame on the wire is one JSON object with fixed field names:

    {
        "id": "4f1c...",
        "type": "stream.start" | "stream.end" | "custom",
        "stream_id": "b2a9...",
        "data": {...},
        "at": "2024-01-15T10:30:00.123456Z"
    }

Connection-level events (heartbeats) carry an empty stream_id.
Unknown fields are ignored when decoding.
"""

from __future__ import annotations

import re
import time
import uuid
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import EncodingError

HEARTBEAT_TYPE = "heartbeat"

# Peers may send nanosecond precision; datetime holds microseconds
_SUBMICRO_FRACTION = re.compile(r"(\.\d{6})\d+")


class EventType(str, Enum):
    """All event types on the wire."""

    STREAM_START = "stream.start"
    STREAM_END = "stream.end"
    CUSTOM = "custom"


class Metadata(BaseModel):
    """Descriptive payload of a stream.start event.

    Extra fields are kept so callers can extend it without breaking
    older peers.
    """

    model_config = ConfigDict(extra="allow")

    title: str = ""


class Event(BaseModel):
    """An immutable event.

    Events are created by the sender with a fresh id and timestamp and are
    never mutated afterwards; handlers all receive the same instance.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    type: EventType
    stream_id: str = ""
    data: Any = None
    at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("at", mode="before")
    @classmethod
    def truncate_fraction(cls, value: Any) -> Any:
        if isinstance(value, str):
            return _SUBMICRO_FRACTION.sub(r"\1", value, count=1)
        return value

    def is_heartbeat(self) -> bool:
        """Check if this is a connection-level heartbeat."""
        return (
            self.type == EventType.CUSTOM
            and not self.stream_id
            and isinstance(self.data, dict)
            and self.data.get("type") == HEARTBEAT_TYPE
        )

    @classmethod
    def create(
        cls,
        event_type: str | EventType,
        stream_id: str = "",
        data: Any = None,
    ) -> Event:
        """Factory method for creating events."""
        return cls(type=EventType(event_type), stream_id=stream_id, data=data)

    @classmethod
    def heartbeat(cls) -> Event:
        """Create a connection-level heartbeat event."""
        return cls(
            id=f"hb-{time.time_ns()}",
            type=EventType.CUSTOM,
            stream_id="",
            data={"type": HEARTBEAT_TYPE},
        )


def encode_event(event: Event) -> bytes:
    """Serialize an event to UTF-8 JSON.

    Raises:
        EncodingError: If the payload is not JSON serializable
    """
    try:
        return event.model_dump_json().encode("utf-8")
    except (TypeError, ValueError) as e:
        raise EncodingError(f"Failed to encode event {event.id}: {e}") from e


def decode_event(frame: bytes | str) -> Event:
    """Parse one wire frame into an Event.

    Raises:
        ValueError: If the frame is not a valid event envelope
    """
    return Event.model_validate_json(frame)
