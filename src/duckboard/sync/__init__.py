"""Sync - Keeps the dashboard state in step with a Duck server."""

from duckboard.sync.client import DuckClient, build_address, info_address
from duckboard.sync.exceptions import (
    BadStatusError,
    FetchError,
    MalformedPayloadError,
    ServerUnreachableError,
    SyncCancelledError,
    SyncError,
)
from duckboard.sync.models import (
    BuildRecord,
    PrimaryOutcome,
    SecondaryOutcome,
    ServerInfo,
    SyncResult,
    SyncState,
    ViewInfo,
    available_views,
)
from duckboard.sync.poller import Poller
from duckboard.sync.progress import CompositeProgress, LoggingProgress, NullProgress, Progress
from duckboard.sync.store import SyncStore

__all__ = [
    "BadStatusError",
    "BuildRecord",
    "CompositeProgress",
    "DuckClient",
    "FetchError",
    "LoggingProgress",
    "MalformedPayloadError",
    "NullProgress",
    "Poller",
    "PrimaryOutcome",
    "Progress",
    "SecondaryOutcome",
    "ServerInfo",
    "ServerUnreachableError",
    "SyncCancelledError",
    "SyncError",
    "SyncResult",
    "SyncState",
    "SyncStore",
    "ViewInfo",
    "available_views",
    "build_address",
    "info_address",
]
