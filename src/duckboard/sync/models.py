"""Data models for build-status synchronization."""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


logger = logging.getLogger("duckboard.sync")

# Opaque payloads from the Duck server. The store never looks inside them.
BuildRecord = dict[str, Any]
ServerInfo = dict[str, Any]

StateListener = Callable[[dict[str, Any]], None]


@dataclass
class SyncState:
    """Observable dashboard state, shared by the store and its observers.

    Only SyncStore writes to it; everything else reads fields directly or
    subscribes to receive a snapshot after every change.

    Attributes:
        version: Version of the dashboard itself. Set once at startup.
        server: Targeted server address. Empty means the local server.
        view: Selected view slug. None means all builds, unfiltered.
        builds: Last fetched build list. None means no data.
        info: Cached server metadata. None until fetched, or after a reset.
        error: True iff the most recent synchronization failed.
        loading: True while a build-list request is in flight.
    """

    version: str = ""
    server: str = ""
    view: str | None = None
    builds: list[BuildRecord] | None = None
    info: ServerInfo | None = None
    error: bool = False
    loading: bool = False
    _listeners: list[StateListener] = field(default_factory=list, repr=False, compare=False)

    def snapshot(self) -> dict[str, Any]:
        """Return a detached, JSON-serializable copy of the state."""
        return {
            "version": self.version,
            "server": self.server,
            "view": self.view,
            "builds": copy.deepcopy(self.builds),
            "info": copy.deepcopy(self.info),
            "error": self.error,
            "loading": self.loading,
        }

    def subscribe(self, listener: StateListener) -> None:
        """Register a listener called with a snapshot after each change."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: StateListener) -> None:
        """Remove a listener. Unknown listeners are ignored."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def notify(self) -> None:
        """Send the current snapshot to every listener."""
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("State listener %r failed", listener)


@dataclass(frozen=True)
class ViewInfo:
    """A server-defined view as listed in ServerInfo."""

    name: str
    slug: str | None = None


def available_views(info: ServerInfo | None) -> list[ViewInfo]:
    """Extract the views a server advertises.

    Entries without a name are skipped; a missing or malformed list
    yields no views.
    """
    if not info:
        return []
    raw_views = info.get("views")
    if not isinstance(raw_views, list):
        return []

    views = []
    for raw in raw_views:
        if not isinstance(raw, dict) or not raw.get("name"):
            continue
        slug = raw.get("slug")
        views.append(ViewInfo(name=str(raw["name"]), slug=str(slug) if slug else None))
    return views


class PrimaryOutcome(str, Enum):
    """Result of the build-list request."""

    SUCCESS = "success"
    FAILED = "failed"


class SecondaryOutcome(str, Enum):
    """Result of the server-info request."""

    SKIPPED = "skipped"  # info already cached, or primary failed
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class SyncResult:
    """Result of one synchronize call.

    Attributes:
        generation: Sequence number of the call within its store.
        primary: Outcome of the build-list request.
        secondary: Outcome of the server-info request.
        applied: False when a newer call superseded this one, in which case
            its responses were not written to the state.
        error: The primary failure, if any.
    """

    generation: int
    primary: PrimaryOutcome
    secondary: SecondaryOutcome = SecondaryOutcome.SKIPPED
    applied: bool = True
    error: Exception | None = None

    @property
    def success(self) -> bool:
        return self.primary == PrimaryOutcome.SUCCESS
