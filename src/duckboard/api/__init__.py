"""Dashboard API for Duckboard."""

from duckboard.api.app import app, create_app
from duckboard.api.events import Event, EventManager, EventProgress, EventType
from duckboard.api.models import (
    APIResponse,
    StateResponse,
    StatusResponse,
    SyncRequest,
    SyncResultResponse,
    ViewResponse,
)

__all__ = [
    "APIResponse",
    "Event",
    "EventManager",
    "EventProgress",
    "EventType",
    "StateResponse",
    "StatusResponse",
    "SyncRequest",
    "SyncResultResponse",
    "ViewResponse",
    "app",
    "create_app",
]
