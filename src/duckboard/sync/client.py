"""DuckClient - Reads build lists and server metadata from a Duck server."""

from __future__ import annotations

import logging
import re
from typing import Any

import httpx

from duckboard.config import DEFAULT_BASE_URL
from duckboard.logging import sanitize_for_log, truncate_output
from duckboard.sync.exceptions import (
    BadStatusError,
    MalformedPayloadError,
    ServerUnreachableError,
)
from duckboard.sync.models import BuildRecord, ServerInfo

logger = logging.getLogger("duckboard.sync.client")

_SCHEME = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*://")


def build_address(server: str, view: str | None = None) -> str:
    """Request target for the build list, optionally filtered by a view.

    An empty server yields a path relative to the local Duck server.
    """
    address = f"{server.rstrip('/')}/api/builds"
    if view is not None:
        address = f"{address}/view/{view}"
    return address


def info_address(server: str) -> str:
    """Request target for server metadata."""
    return f"{server.rstrip('/')}/api/server"


class DuckClient:
    """Async client for the Duck server REST API.

    Every failure (transport error, timeout, non-2xx status, body that is
    not the expected JSON shape) is raised as a FetchError subclass.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize Duck Client.

        Args:
            base_url: Origin that relative addresses resolve against
            timeout: Seconds before a request is abandoned
            transport: Custom httpx transport (for testing)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create HTTP client for the Duck API."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={"Accept": "application/json"},
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def resolve_url(self, address: str) -> str:
        """Turn a request target into an absolute URL.

        Relative paths are joined to base_url; bare hosts such as
        "localhost:9000/api/builds" are given an http scheme.
        """
        if address.startswith("/"):
            return f"{self.base_url}{address}"
        if _SCHEME.match(address):
            return address
        return f"http://{address}"

    async def fetch_builds(self, server: str, view: str | None = None) -> list[BuildRecord]:
        """Fetch the build list, in server order.

        Args:
            server: Server address ("" for the local server)
            view: Optional view slug to filter by

        Returns:
            Build records exactly as returned by the server

        Raises:
            FetchError: If the request fails or the body is not a JSON array
        """
        address = build_address(server, view)
        payload = await self._get_json(address)
        if not isinstance(payload, list):
            raise MalformedPayloadError(
                f"Expected a list of builds from {address}, got {type(payload).__name__}",
                address,
            )
        logger.debug("Fetched %d build(s) from %s", len(payload), sanitize_for_log(address))
        return payload

    async def fetch_server_info(self, server: str) -> ServerInfo:
        """Fetch server metadata (title, version, start time, views).

        Raises:
            FetchError: If the request fails or the body is not a JSON object
        """
        address = info_address(server)
        payload = await self._get_json(address)
        if not isinstance(payload, dict):
            raise MalformedPayloadError(
                f"Expected server info object from {address}, got {type(payload).__name__}",
                address,
            )
        return payload

    async def _get_json(self, address: str) -> Any:
        """GET an address and decode its JSON body.

        Raises:
            ServerUnreachableError: On transport failure or timeout
            BadStatusError: On a non-2xx response
            MalformedPayloadError: If the body is not valid JSON
        """
        url = self.resolve_url(address)
        try:
            response = await self.client.get(url)
        except httpx.TimeoutException as e:
            raise ServerUnreachableError(f"Request to {address} timed out", address) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ServerUnreachableError(f"Request to {address} failed: {e}", address) from e
        except ValueError as e:
            # Host names httpx cannot encode, e.g. malformed IDNA labels (UnicodeError)
            raise ServerUnreachableError(f"Invalid server address {address}: {e}", address) from e

        if not response.is_success:
            logger.debug(
                "Duck server answered %d for %s: %s",
                response.status_code,
                sanitize_for_log(address),
                truncate_output(response.text),
            )
            raise BadStatusError(
                f"Request to {address} failed: {response.status_code}",
                address,
                response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise MalformedPayloadError(f"Response from {address} is not JSON", address) from e
