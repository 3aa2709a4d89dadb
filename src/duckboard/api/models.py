"""Pydantic models for the dashboard API."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from duckboard.sync.models import SyncResult, SyncState, ViewInfo

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    data: T | None = None
    error: str | None = None


# State models


class StateResponse(BaseModel):
    """Snapshot of the dashboard state."""

    version: str
    server: str
    view: str | None
    builds: list[dict[str, Any]] | None
    info: dict[str, Any] | None
    error: bool
    loading: bool


def state_to_response(state: SyncState) -> StateResponse:
    """Convert a SyncState to StateResponse."""
    return StateResponse.model_validate(state.snapshot())


class ViewResponse(BaseModel):
    """A view advertised by the Duck server."""

    model_config = ConfigDict(from_attributes=True)

    name: str
    slug: str | None


def view_to_response(view: ViewInfo) -> ViewResponse:
    """Convert a ViewInfo to ViewResponse."""
    return ViewResponse.model_validate(view)


class StatusResponse(BaseModel):
    """Whether the Duck server answered the last sync, as a user-facing message."""

    reachable: bool
    message: str


def unreachable_message(server: str) -> str:
    """Message shown when the build list cannot be fetched."""
    if server:
        return f'The Duck server could not be reached at "{server}".'
    return "The local Duck server could not be reached."


def state_to_status(state: SyncState) -> StatusResponse:
    """Derive the user-facing status of a SyncState."""
    if state.error:
        return StatusResponse(reachable=False, message=unreachable_message(state.server))
    return StatusResponse(reachable=True, message="")


# Sync models


class SyncRequest(BaseModel):
    """Request model for a manual synchronization."""

    server: str | None = Field(default=None, max_length=2048)
    view: str | None = Field(default=None, min_length=1, max_length=255)


class SyncResultResponse(BaseModel):
    """Response model for a manual synchronization."""

    primary: str
    secondary: str
    applied: bool
    state: StateResponse


def sync_result_to_response(result: SyncResult, state: SyncState) -> SyncResultResponse:
    """Convert a SyncResult (and the state after it) to SyncResultResponse."""
    return SyncResultResponse(
        primary=result.primary.value,
        secondary=result.secondary.value,
        applied=result.applied,
        state=state_to_response(state),
    )


class CancelResponse(BaseModel):
    """Response model for cancelling in-flight synchronizations."""

    cancelled: int
