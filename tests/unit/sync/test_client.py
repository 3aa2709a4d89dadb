"""Unit tests for DuckClient."""

import httpx
import pytest

from duckboard.sync import (
    BadStatusError,
    DuckClient,
    FetchError,
    MalformedPayloadError,
    ServerUnreachableError,
    build_address,
    info_address,
)


@pytest.mark.unit
class TestAddresses:
    """Tests for request target construction."""

    def test_build_address_local(self) -> None:
        """No server prefix gives a relative path."""
        assert build_address("") == "/api/builds"

    def test_build_address_with_server_and_view(self) -> None:
        """Server prefix and view suffix are both applied."""
        address = build_address("localhost:9000", "nightly")
        assert address == "localhost:9000/api/builds/view/nightly"

    def test_build_address_trailing_slash(self) -> None:
        """A trailing slash on the server does not double up."""
        assert build_address("http://ci.local/") == "http://ci.local/api/builds"

    def test_info_address(self) -> None:
        assert info_address("") == "/api/server"
        assert info_address("ci.local:15825") == "ci.local:15825/api/server"


@pytest.mark.unit
class TestResolveUrl:
    """Tests for turning request targets into absolute URLs."""

    def test_relative_path_uses_base_url(self) -> None:
        client = DuckClient(base_url="http://127.0.0.1:15825/")
        assert client.resolve_url("/api/builds") == "http://127.0.0.1:15825/api/builds"

    def test_bare_host_gets_http_scheme(self) -> None:
        client = DuckClient()
        url = client.resolve_url("localhost:9000/api/server")
        assert url == "http://localhost:9000/api/server"

    def test_absolute_url_unchanged(self) -> None:
        client = DuckClient()
        assert client.resolve_url("https://ci.local/api/builds") == "https://ci.local/api/builds"


@pytest.mark.unit
class TestFetchBuilds:
    """Tests for fetch_builds."""

    @pytest.mark.asyncio
    async def test_returns_payload(self, duck_server, sample_builds) -> None:
        """Build list is returned untouched."""
        duck_server.respond("/api/builds", sample_builds)
        client = DuckClient(transport=duck_server.transport)

        builds = await client.fetch_builds("")

        assert builds == sample_builds
        await client.aclose()

    @pytest.mark.asyncio
    async def test_sends_accept_json(self, duck_server) -> None:
        duck_server.respond("/api/builds", [])
        client = DuckClient(transport=duck_server.transport)

        await client.fetch_builds("")

        assert duck_server.requests[0].headers["accept"] == "application/json"
        await client.aclose()

    @pytest.mark.asyncio
    async def test_bad_status(self, duck_server) -> None:
        duck_server.respond("/api/builds/view/x", {"error": "no such view"}, status_code=404)
        client = DuckClient(transport=duck_server.transport)

        with pytest.raises(BadStatusError) as exc_info:
            await client.fetch_builds("", "x")

        assert exc_info.value.status_code == 404
        assert exc_info.value.address == "/api/builds/view/x"

    @pytest.mark.asyncio
    async def test_connection_error(self, duck_server) -> None:
        duck_server.raise_error("/api/builds", httpx.ConnectError("refused"))
        client = DuckClient(transport=duck_server.transport)

        with pytest.raises(ServerUnreachableError):
            await client.fetch_builds("")

    @pytest.mark.asyncio
    async def test_timeout(self, duck_server) -> None:
        duck_server.raise_error("/api/builds", httpx.ConnectTimeout("timed out"))
        client = DuckClient(transport=duck_server.transport)

        with pytest.raises(ServerUnreachableError, match="timed out"):
            await client.fetch_builds("")

    @pytest.mark.asyncio
    async def test_malformed_host(self, duck_server) -> None:
        """A host name that cannot be IDNA-decoded is reported, not raised raw."""
        client = DuckClient(transport=duck_server.transport)

        with pytest.raises(ServerUnreachableError) as exc_info:
            await client.fetch_builds("xn--")

        assert exc_info.value.address == "xn--/api/builds"
        assert duck_server.requests == []

    @pytest.mark.asyncio
    async def test_not_json(self, duck_server) -> None:
        duck_server.respond_text("/api/builds", "Service Unavailable")
        client = DuckClient(transport=duck_server.transport)

        with pytest.raises(MalformedPayloadError):
            await client.fetch_builds("")

    @pytest.mark.asyncio
    async def test_not_a_list(self, duck_server) -> None:
        duck_server.respond("/api/builds", {"id": 1})
        client = DuckClient(transport=duck_server.transport)

        with pytest.raises(MalformedPayloadError, match="list of builds"):
            await client.fetch_builds("")

    @pytest.mark.asyncio
    async def test_all_failures_are_fetch_errors(self, duck_server) -> None:
        """Callers can treat every failure uniformly."""
        duck_server.respond("/api/builds", status_code=500)
        client = DuckClient(transport=duck_server.transport)

        with pytest.raises(FetchError):
            await client.fetch_builds("")


@pytest.mark.unit
class TestFetchServerInfo:
    """Tests for fetch_server_info."""

    @pytest.mark.asyncio
    async def test_returns_payload(self, duck_server, sample_info) -> None:
        duck_server.respond("/api/server", sample_info)
        client = DuckClient(transport=duck_server.transport)

        info = await client.fetch_server_info("ci.local:15825")

        assert info == sample_info
        assert duck_server.urls == ["http://ci.local:15825/api/server"]

    @pytest.mark.asyncio
    async def test_not_an_object(self, duck_server) -> None:
        duck_server.respond("/api/server", ["not", "info"])
        client = DuckClient(transport=duck_server.transport)

        with pytest.raises(MalformedPayloadError):
            await client.fetch_server_info("")


@pytest.mark.unit
class TestClientLifecycle:
    """Tests for lazy HTTP client creation."""

    def test_client_created_lazily(self) -> None:
        client = DuckClient(timeout=2.5)
        assert client._client is None

        http_client = client.client

        assert isinstance(http_client, httpx.AsyncClient)
        assert client.client is http_client
        assert http_client.timeout.read == 2.5

    @pytest.mark.asyncio
    async def test_aclose_resets_client(self) -> None:
        client = DuckClient()
        _ = client.client

        await client.aclose()

        assert client._client is None

    @pytest.mark.asyncio
    async def test_aclose_without_client(self) -> None:
        """Closing an unused client is a no-op."""
        await DuckClient().aclose()
