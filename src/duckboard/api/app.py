"""FastAPI application setup."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from duckboard import __version__
from duckboard.api.dependencies import (
    close_event_manager,
    close_poller,
    close_sync_store,
    init_event_manager,
    init_poller,
    init_sync_store,
)
from duckboard.api.events import EventProgress
from duckboard.api.models import APIResponse
from duckboard.api.routes import events, state, sync
from duckboard.config import DashboardConfig, find_config, load_config
from duckboard.sync import (
    CompositeProgress,
    DuckClient,
    LoggingProgress,
    Poller,
    SyncCancelledError,
    SyncState,
    SyncStore,
)

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    import httpx

logger = logging.getLogger("duckboard.api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    # Startup
    config: DashboardConfig | None = app.state.config
    if config is None:
        config = load_config(find_config())
    logger.info(
        "Starting dashboard %s for %s Duck server",
        config.version,
        config.server_label,
    )

    sync_state = SyncState(version=config.version)
    client = DuckClient(
        base_url=config.base_url,
        timeout=config.request_timeout,
        transport=app.state.transport,
    )
    store = init_sync_store(SyncStore(sync_state, client, default_server=config.default_server))
    event_manager = init_event_manager()
    sync_state.subscribe(event_manager.emit_state_changed)

    poller = None
    if app.state.poll:
        progress = CompositeProgress(
            LoggingProgress(label="scheduled sync"),
            EventProgress(event_manager, lambda: store.target_server(poller.server)),
        )
        poller = Poller(
            store,
            progress,
            interval=config.poll_interval,
            view=config.default_view,
        )
        init_poller(poller)
        poller.start()

    yield
    # Shutdown
    if poller is not None:
        await poller.stop()
    await store.aclose()
    await client.aclose()
    sync_state.unsubscribe(event_manager.emit_state_changed)
    close_poller()
    close_event_manager()
    close_sync_store()


def create_app(
    config: DashboardConfig | None = None,
    poll: bool = True,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Dashboard configuration. Loaded from duckboard.yaml and the
            environment at startup when None.
        poll: Whether to synchronize in the background on a timer.
        transport: Custom httpx transport for the Duck client (for testing).
    """
    app = FastAPI(
        title="Duckboard API",
        description="Build status of a Duck CI server, kept in sync for dashboards",
        version=__version__,
        lifespan=lifespan,
    )

    # Store config for lifespan manager
    app.state.config = config
    app.state.poll = poll
    app.state.transport = transport

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(SyncCancelledError)
    async def sync_cancelled_handler(_request: Request, _exc: SyncCancelledError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=APIResponse[None](
                data=None, error="Synchronization was cancelled"
            ).model_dump(),
        )

    app.include_router(state.router, prefix="/dashboard")
    app.include_router(sync.router, prefix="/dashboard")
    app.include_router(events.router, prefix="/dashboard")

    return app


# Default app instance
app = create_app()
