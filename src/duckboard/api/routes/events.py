"""Server-Sent Events (SSE) endpoint."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from fastapi import APIRouter, Query
from fastapi.responses import StreamingResponse

from duckboard.api.dependencies import EventManagerDep  # noqa: TC001

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

router = APIRouter(prefix="/events", tags=["events"])


@router.get("/stream")
async def event_stream(
    event_manager: EventManagerDep,
    server: str | None = Query(default=None, description="Filter by server address"),
) -> StreamingResponse:
    """Subscribe to Server-Sent Events stream.

    Streams state_changed snapshots and sync progress events, filtered by
    server if provided. A heartbeat is sent when nothing happened for
    the heartbeat interval.
    """
    em = event_manager
    subscriber = em.subscribe(server)

    async def generate() -> AsyncGenerator[str, None]:
        try:
            while True:
                try:
                    event = await asyncio.wait_for(
                        subscriber.queue.get(),
                        timeout=em._heartbeat_interval,
                    )
                    yield event.to_sse()
                except TimeoutError:
                    yield em.create_heartbeat_event().to_sse()
        finally:
            em.unsubscribe(subscriber.id)

    return StreamingResponse(
        generate(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
        },
    )
