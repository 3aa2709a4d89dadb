"""Sync endpoints for manual synchronization."""

import asyncio

from fastapi import APIRouter

from duckboard.api.dependencies import EventManagerDep, PollerDep, SyncStoreDep
from duckboard.api.events import EventProgress
from duckboard.api.models import (
    APIResponse,
    CancelResponse,
    SyncRequest,
    SyncResultResponse,
    sync_result_to_response,
)
from duckboard.sync import SyncCancelledError

router = APIRouter(tags=["sync"])


@router.post("/sync", response_model=APIResponse[SyncResultResponse])
async def synchronize(
    store: SyncStoreDep,
    event_manager: EventManagerDep,
    poller: PollerDep,
    request: SyncRequest | None = None,
) -> APIResponse[SyncResultResponse]:
    """Synchronize once, and keep polling the requested server and view.

    Fetch failures are not HTTP errors: they are reported in the returned
    state (error=true), exactly as observers see them.
    """
    request = request or SyncRequest()

    target = store.target_server(request.server)
    progress = EventProgress(event_manager, lambda: target)
    task = store.synchronize(progress, server=request.server, view=request.view)
    if poller is not None:
        poller.retarget(request.server, request.view, refresh=False)

    try:
        result = await task
    except asyncio.CancelledError:
        current = asyncio.current_task()
        if current is not None and current.cancelling():
            raise
        raise SyncCancelledError("Synchronization was cancelled") from None
    return APIResponse(data=sync_result_to_response(result, store.state))


@router.delete("/sync", response_model=APIResponse[CancelResponse])
async def cancel_sync(store: SyncStoreDep) -> APIResponse[CancelResponse]:
    """Cancel every synchronization still waiting for the Duck server."""
    in_flight = store.in_flight
    store.cancel()
    return APIResponse(data=CancelResponse(cancelled=in_flight))
