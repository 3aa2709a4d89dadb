"""Read-only endpoints exposing the dashboard state."""

from fastapi import APIRouter

from duckboard.api.dependencies import SyncStoreDep
from duckboard.api.models import (
    APIResponse,
    StateResponse,
    StatusResponse,
    ViewResponse,
    state_to_response,
    state_to_status,
    view_to_response,
)
from duckboard.sync import available_views

router = APIRouter(tags=["state"])


@router.get("/state", response_model=APIResponse[StateResponse])
def get_state(store: SyncStoreDep) -> APIResponse[StateResponse]:
    """Get a snapshot of the dashboard state."""
    return APIResponse(data=state_to_response(store.state))


@router.get("/status", response_model=APIResponse[StatusResponse])
def get_status(store: SyncStoreDep) -> APIResponse[StatusResponse]:
    """Get whether the Duck server answered the last synchronization."""
    return APIResponse(data=state_to_status(store.state))


@router.get("/views", response_model=APIResponse[list[ViewResponse]])
def list_views(store: SyncStoreDep) -> APIResponse[list[ViewResponse]]:
    """List the views advertised by the cached server info."""
    return APIResponse(data=[view_to_response(v) for v in available_views(store.state.info)])
