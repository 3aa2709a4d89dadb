"""FastAPI dependencies for dependency injection."""

from __future__ import annotations

from collections.abc import Generator  # noqa: TC003
from typing import Annotated

from fastapi import Depends

from duckboard.api.events import EventManager
from duckboard.sync import Poller, SyncStore

# Global SyncStore instance (initialized on app startup)
_sync_store: SyncStore | None = None


def init_sync_store(store: SyncStore) -> SyncStore:
    """Initialize the global SyncStore instance."""
    global _sync_store  # noqa: PLW0603
    _sync_store = store
    return _sync_store


def close_sync_store() -> None:
    """Forget the global SyncStore instance."""
    global _sync_store  # noqa: PLW0603
    _sync_store = None


def get_sync_store() -> Generator[SyncStore, None, None]:
    """Dependency that provides the SyncStore instance."""
    if _sync_store is None:
        raise RuntimeError("SyncStore not initialized. Call init_sync_store() first.")
    yield _sync_store


# Type alias for dependency injection
SyncStoreDep = Annotated[SyncStore, Depends(get_sync_store)]

# Global EventManager instance
_event_manager: EventManager | None = None


def init_event_manager() -> EventManager:
    """Initialize the global EventManager instance."""
    global _event_manager  # noqa: PLW0603
    _event_manager = EventManager()
    return _event_manager


def close_event_manager() -> None:
    """Forget the global EventManager instance."""
    global _event_manager  # noqa: PLW0603
    _event_manager = None


def get_event_manager() -> Generator[EventManager, None, None]:
    """Dependency that provides the EventManager instance."""
    if _event_manager is None:
        raise RuntimeError("EventManager not initialized. Call init_event_manager() first.")
    yield _event_manager


# Type alias for dependency injection
EventManagerDep = Annotated[EventManager, Depends(get_event_manager)]


# Global Poller instance (optional: the app runs without background polling)
_poller: Poller | None = None


def init_poller(poller: Poller) -> None:
    """Initialize the global Poller instance."""
    global _poller  # noqa: PLW0603
    _poller = poller


def close_poller() -> None:
    """Forget the global Poller instance."""
    global _poller  # noqa: PLW0603
    _poller = None


def get_poller() -> Generator[Poller | None, None, None]:
    """Dependency that provides the Poller, or None when polling is disabled."""
    yield _poller


# Type alias for dependency injection
PollerDep = Annotated[Poller | None, Depends(get_poller)]
