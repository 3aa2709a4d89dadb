"""Event manager for Server-Sent Events (SSE)."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import uuid4


class EventType(str, Enum):
    """Types of events that can be emitted."""

    STATE_CHANGED = "state_changed"
    SYNC_STARTED = "sync_started"
    SYNC_FINISHED = "sync_finished"
    SYNC_FAILED = "sync_failed"
    HEARTBEAT = "heartbeat"


@dataclass
class Event:
    """An event to be sent via SSE."""

    event_type: EventType
    data: dict[str, Any]
    server: str | None = None

    def to_sse(self) -> str:
        """Convert to SSE format."""
        return f"event: {self.event_type.value}\ndata: {json.dumps(self.data)}\n\n"


@dataclass
class Subscriber:
    """A subscriber to the event stream."""

    id: str
    queue: asyncio.Queue[Event]
    server: str | None = None  # None means every server

    @classmethod
    def create(cls, server: str | None = None) -> Subscriber:
        """Create a new subscriber."""
        return cls(id=str(uuid4()), queue=asyncio.Queue(), server=server)

    def wants(self, event: Event) -> bool:
        return self.server is None or event.server is None or self.server == event.server


@dataclass
class EventManager:
    """Manager for SSE events."""

    _subscribers: dict[str, Subscriber] = field(default_factory=dict)
    _heartbeat_interval: int = 30  # seconds

    def subscribe(self, server: str | None = None) -> Subscriber:
        """Subscribe a client to events.

        Args:
            server: Optional server address to filter events. None means all.

        Returns:
            Subscriber instance for receiving events.
        """
        subscriber = Subscriber.create(server)
        self._subscribers[subscriber.id] = subscriber
        return subscriber

    def unsubscribe(self, subscriber_id: str) -> None:
        """Unsubscribe a client from events."""
        self._subscribers.pop(subscriber_id, None)

    def emit_sync(self, event: Event) -> None:
        """Queue an event for every matching subscriber without blocking."""
        for subscriber in list(self._subscribers.values()):
            if subscriber.wants(event):
                subscriber.queue.put_nowait(event)

    @property
    def subscriber_count(self) -> int:
        """Get the number of active subscribers."""
        return len(self._subscribers)

    # Convenience methods for emitting specific event types

    def emit_state_changed(self, snapshot: dict[str, Any]) -> None:
        """Emit a state_changed event carrying a full state snapshot.

        Signature matches SyncState listeners, so the manager can be
        subscribed to the state directly.
        """
        event = Event(
            event_type=EventType.STATE_CHANGED,
            server=snapshot.get("server"),
            data=snapshot,
        )
        self.emit_sync(event)

    def emit_sync_progress(self, event_type: EventType, server: str | None) -> None:
        """Emit one of the sync_started / sync_finished / sync_failed events."""
        event = Event(
            event_type=event_type,
            server=server,
            data={"server": server, "timestamp": _now()},
        )
        self.emit_sync(event)

    def create_heartbeat_event(self) -> Event:
        """Create a heartbeat event."""
        return Event(
            event_type=EventType.HEARTBEAT,
            server=None,  # Heartbeat goes to all subscribers
            data={"timestamp": _now()},
        )


class EventProgress:
    """Progress indicator that publishes each signal as an SSE event.

    Pass the server the call targets, e.g. ``store.target_server(server)``:
    start() fires before the store records that target in its state.
    """

    def __init__(
        self,
        event_manager: EventManager,
        server_of: Callable[[], str] | None = None,
    ) -> None:
        """Initialize the progress publisher.

        Args:
            event_manager: Manager to emit through.
            server_of: Optional zero-argument callable returning the server
                address the signalled synchronization targets.
        """
        self.event_manager = event_manager
        self.server_of = server_of

    def _server(self) -> str | None:
        return self.server_of() if self.server_of is not None else None

    def start(self) -> None:
        self.event_manager.emit_sync_progress(EventType.SYNC_STARTED, self._server())

    def finish(self) -> None:
        self.event_manager.emit_sync_progress(EventType.SYNC_FINISHED, self._server())

    def fail(self) -> None:
        self.event_manager.emit_sync_progress(EventType.SYNC_FAILED, self._server())


def _now() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")
