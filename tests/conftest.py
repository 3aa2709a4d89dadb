"""Shared pytest fixtures and configuration."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Iterator
from typing import Any

import httpx
import pytest


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


@pytest.fixture(autouse=True)
def reset_duckboard_logger() -> Iterator[None]:
    """Detach handlers added by setup_logging so they don't leak between tests."""
    yield
    logger = logging.getLogger("duckboard")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


class FakeDuckServer:
    """In-memory stand-in for the Duck server REST API.

    Routes are keyed by URL path, so every server address shares them;
    handlers that care about the host can inspect the request.
    """

    def __init__(self) -> None:
        self.routes: dict[str, Callable[[httpx.Request], Any]] = {}
        self.requests: list[httpx.Request] = []

    def respond(self, path: str, json: Any = None, status_code: int = 200) -> None:
        """Answer GET path with a JSON body."""
        self.routes[path] = lambda _request: httpx.Response(status_code, json=json)

    def respond_text(self, path: str, text: str, status_code: int = 200) -> None:
        """Answer GET path with a plain-text body."""
        self.routes[path] = lambda _request: httpx.Response(status_code, text=text)

    def raise_error(self, path: str, error: Exception) -> None:
        """Make requests to path fail at the transport level."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise error

        self.routes[path] = handler

    def route(self, path: str, handler: Callable[[httpx.Request], Any]) -> None:
        """Answer GET path with a custom (sync or async) handler."""
        self.routes[path] = handler

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get(request.url.path)
        if handler is None:
            return httpx.Response(404, json={"error": "not found"})
        response = handler(request)
        if inspect.isawaitable(response):
            response = await response
        return response

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    @property
    def urls(self) -> list[str]:
        return [str(r.url) for r in self.requests]

    @property
    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    def count(self, path: str) -> int:
        return self.paths.count(path)


@pytest.fixture
def duck_server() -> FakeDuckServer:
    """A fake Duck server with no routes."""
    return FakeDuckServer()


@pytest.fixture
def sample_builds() -> list[dict[str, Any]]:
    """Build records shaped like the Duck server's /api/builds payload."""
    return [
        {
            "id": 3,
            "provider": "GitHub",
            "collector": "github",
            "project": "duck",
            "build": "CI",
            "branch": "main",
            "buildId": "903",
            "buildNumber": "903",
            "started": "2020-06-01T10:00:00Z",
            "finished": None,
            "url": "https://ci.example.com/builds/903",
            "status": "Running",
        },
        {
            "id": 1,
            "provider": "TeamCity",
            "collector": "teamcity",
            "project": "duck",
            "build": "Nightly",
            "branch": "main",
            "buildId": "17",
            "buildNumber": "1.2.17",
            "started": "2020-06-01T01:00:00Z",
            "finished": "2020-06-01T01:12:00Z",
            "url": "https://tc.example.com/viewLog.html?buildId=17",
            "status": "Success",
        },
        {
            "id": 2,
            "provider": "Azure",
            "collector": "azure",
            "project": "duck",
            "build": "Release",
            "branch": "release/1.2",
            "buildId": "88",
            "buildNumber": "88",
            "started": "2020-05-31T22:00:00Z",
            "finished": "2020-05-31T22:30:00Z",
            "url": "https://dev.azure.com/duck/_build/results?buildId=88",
            "status": "Failed",
        },
    ]


@pytest.fixture
def sample_info() -> dict[str, Any]:
    """Server metadata shaped like the Duck server's /api/server payload."""
    return {
        "title": "Duck CI",
        "version": "0.9.0",
        "started": 1590969600,
        "views": [
            {"name": "Nightly", "slug": "nightly"},
            {"name": "Everything"},
        ],
    }
