"""Custom exceptions for build-status synchronization."""


class SyncError(Exception):
    """Base exception for synchronization errors."""


class FetchError(SyncError):
    """A request to the Duck server did not produce a usable payload."""

    def __init__(self, message: str, address: str) -> None:
        super().__init__(message)
        self.address = address


class ServerUnreachableError(FetchError):
    """Network failure or timeout while talking to the Duck server."""


class BadStatusError(FetchError):
    """Duck server answered with a non-2xx status code."""

    def __init__(self, message: str, address: str, status_code: int) -> None:
        super().__init__(message, address)
        self.status_code = status_code


class MalformedPayloadError(FetchError):
    """Response body was not JSON or had an unexpected shape."""


class SyncCancelledError(SyncError):
    """A synchronization was cancelled through SyncStore.cancel() while awaited."""
