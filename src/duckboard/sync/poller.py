"""Poller - Re-runs synchronization on a fixed interval."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from duckboard.sync.progress import Progress
    from duckboard.sync.store import SyncStore

logger = logging.getLogger("duckboard.sync.poller")


class Poller:
    """Keeps the dashboard fresh by calling SyncStore.synchronize periodically.

    The store never retries on its own; recovering from a failed sync is
    simply the next tick of this loop.
    """

    def __init__(
        self,
        store: SyncStore,
        progress: Progress,
        interval: float = 15.0,
        server: str | None = None,
        view: str | None = None,
    ) -> None:
        """Initialize the Poller.

        Args:
            store: Store to synchronize.
            progress: Progress indicator passed to every call.
            interval: Seconds between the end of one sync and the next.
            server: Server to target (None = store default).
            view: View to target (None = all builds).
        """
        self.store = store
        self.progress = progress
        self.interval = interval
        self.server = server
        self.view = view
        self.ticks = 0
        self._task: asyncio.Task[None] | None = None
        self._wake = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start polling on the running event loop. No-op if already running."""
        if self.running:
            return
        # The first tick runs immediately, which honours any earlier refresh
        self._wake.clear()
        self._task = asyncio.get_running_loop().create_task(
            self._loop(), name="duckboard-poller"
        )
        logger.info("Poller started (interval=%ss)", self.interval)

    async def stop(self) -> None:
        """Stop polling and wait for the loop to exit."""
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Poller stopped after %d tick(s)", self.ticks)

    def retarget(self, server: str | None, view: str | None, refresh: bool = True) -> None:
        """Change what subsequent ticks synchronize.

        Args:
            server: New server (None = store default).
            view: New view (None = all builds).
            refresh: Run the next tick now instead of waiting out the interval.
        """
        self.server = server
        self.view = view
        if refresh:
            self._wake.set()

    async def _loop(self) -> None:
        while True:
            task = self.store.synchronize(self.progress, self.server, self.view)
            try:
                await task
            except asyncio.CancelledError:
                current = asyncio.current_task()
                if current is not None and current.cancelling():
                    raise
                # The store cancelled this call, not us: keep polling
                logger.debug("Sync cancelled by store, continuing")
            self.ticks += 1

            try:
                await asyncio.wait_for(self._wake.wait(), timeout=self.interval)
            except TimeoutError:
                pass
            self._wake.clear()
