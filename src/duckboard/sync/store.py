"""SyncStore - Fetches build status and reconciles it into the shared state."""

from __future__ import annotations

import asyncio
import functools
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from duckboard.logging import sanitize_for_log
from duckboard.sync.exceptions import FetchError
from duckboard.sync.models import (
    PrimaryOutcome,
    SecondaryOutcome,
    SyncResult,
    SyncState,
)

if TYPE_CHECKING:
    from duckboard.sync.client import DuckClient
    from duckboard.sync.progress import Progress

logger = logging.getLogger("duckboard.sync")


@dataclass
class _Call:
    """Bookkeeping for one synchronize call."""

    generation: int
    progress: Progress
    settled: bool = False  # finish() or fail() already signalled


class SyncStore:
    """Single writer of a SyncState.

    Each synchronize call fetches the build list for a server (and view),
    then lazily fetches the server info if none is cached. Calls may
    overlap: only the most recent call writes its responses to the state,
    older calls still report their own outcome to their progress indicator.
    """

    def __init__(
        self,
        state: SyncState,
        client: DuckClient,
        default_server: str = "",
    ) -> None:
        """Initialize the Sync Store.

        Args:
            state: State container to keep up to date.
            client: DuckClient used for all requests.
            default_server: Server targeted when a call names none.
        """
        self.state = state
        self.client = client
        self.default_server = default_server
        self._generation = 0
        self._tasks: dict[asyncio.Task[SyncResult], _Call] = {}

    @property
    def in_flight(self) -> int:
        """Number of synchronize calls still waiting for their build list."""
        return sum(not call.settled for call in self._tasks.values())

    def target_server(self, server: str | None = None) -> str:
        """Server a synchronize call with this argument will query."""
        return self.default_server if server is None else server

    def synchronize(
        self,
        progress: Progress,
        server: str | None = None,
        view: str | None = None,
    ) -> asyncio.Task[SyncResult]:
        """Start one round of fetching and reconciliation.

        Signals progress.start() and records the target server and view
        immediately, then schedules the requests on the running event loop.
        The returned task never raises for fetch failures; those end up in
        the state (error=True) and in progress.fail(). It only raises
        CancelledError if cancel() is called before the build list arrives,
        or aclose() before the call completes.

        Args:
            progress: Indicator receiving start() then finish() or fail().
            server: Server to query. Defaults to the configured server.
            view: View slug to filter by. None for all builds.

        Returns:
            Task resolving to the SyncResult of this call.
        """
        loop = asyncio.get_running_loop()
        progress.start()

        effective_server = self.target_server(server)

        self._generation += 1
        generation = self._generation

        if effective_server != self.state.server:
            # Server info is cached per server
            self.state.info = None
        self.state.server = effective_server
        self.state.view = view
        self.state.loading = True
        self.state.notify()

        call = _Call(generation=generation, progress=progress)
        task = loop.create_task(
            self._run(call, effective_server, view),
            name=f"duckboard-sync-{generation}",
        )
        self._tasks[task] = call
        task.add_done_callback(functools.partial(self._on_done, call))
        return task

    def cancel(self) -> None:
        """Cancel every synchronize call still waiting for its build list.

        Calls whose build list already arrived have signalled finish() or
        fail(); they are left to complete their server info request.
        """
        for task, call in list(self._tasks.items()):
            if not call.settled:
                task.cancel()

    async def aclose(self) -> None:
        """Cancel all calls, including pending info requests, and wait for them."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _on_done(self, call: _Call, task: asyncio.Task[SyncResult]) -> None:
        self._tasks.pop(task, None)
        if not task.cancelled() or call.settled:
            return
        # Cancelled before the build list arrived (possibly before the
        # request went out at all)
        logger.info("Sync #%d cancelled", call.generation)
        if self._is_current(call.generation):
            self.state.loading = False
            self.state.notify()
        call.settled = True
        call.progress.fail()

    async def _run(self, call: _Call, server: str, view: str | None) -> SyncResult:
        try:
            builds = await self.client.fetch_builds(server, view)
        except FetchError as e:
            return self._apply_failure(call, server, e)
        except Exception as e:
            logger.exception(
                "Unexpected error fetching builds from %s", sanitize_for_log(server) or "(local)"
            )
            return self._apply_failure(call, server, e)

        current = self._is_current(call.generation)
        if current:
            self.state.builds = builds
            self.state.error = False
            self.state.loading = False
            self.state.notify()
        else:
            logger.debug(
                "Sync #%d superseded, discarding %d build(s)", call.generation, len(builds)
            )
        call.settled = True
        call.progress.finish()

        result = SyncResult(
            generation=call.generation,
            primary=PrimaryOutcome.SUCCESS,
            applied=current,
        )

        # Checked here, once; a concurrent call filling info in the meantime
        # costs at most one redundant request.
        if current and self.state.info is None:
            result.secondary = await self._fetch_info(call.generation, server)

        return result

    def _apply_failure(self, call: _Call, server: str, error: Exception) -> SyncResult:
        current = self._is_current(call.generation)
        logger.warning(
            "Duck server %s could not be reached: %s",
            sanitize_for_log(server) or "(local)",
            sanitize_for_log(str(error)),
        )
        if current:
            self.state.builds = None
            self.state.error = True
            self.state.info = None
            self.state.loading = False
            self.state.notify()
        call.settled = True
        call.progress.fail()
        return SyncResult(
            generation=call.generation,
            primary=PrimaryOutcome.FAILED,
            applied=current,
            error=error,
        )

    async def _fetch_info(self, generation: int, server: str) -> SecondaryOutcome:
        """Fetch server info; failures only clear the cache."""
        try:
            info = await self.client.fetch_server_info(server)
        except Exception as e:
            if isinstance(e, FetchError):
                logger.debug("Server info unavailable: %s", sanitize_for_log(str(e)))
            else:
                logger.exception("Unexpected error fetching server info")
            if self._is_current(generation):
                self.state.info = None
                self.state.notify()
            return SecondaryOutcome.FAILED

        if self._is_current(generation):
            self.state.info = info
            self.state.notify()
        return SecondaryOutcome.SUCCESS
