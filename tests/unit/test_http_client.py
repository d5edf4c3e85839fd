# ABOUTME: Unit tests for the HTTP client abstraction.
# ABOUTME: Tests the HttpClient protocol, IsbnHttpClient status handling, and transport errors.

import httpx
import pytest

from isbnrename.metadata.http import (
    HttpClient,
    IsbnHttpClient,
    MetadataFetchError,
    ProviderStatusError,
    ProviderTransportError,
)


class FakeTransport(httpx.BaseTransport):
    """Fake transport for httpx that returns canned responses."""

    def __init__(self, responses: list[httpx.Response] | None = None) -> None:
        self._responses = list(responses or [])
        self.requests: list[httpx.Request] = []

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._responses:
            return self._responses.pop(0)
        return httpx.Response(200, content=b"ok")

    @property
    def call_count(self) -> int:
        return len(self.requests)


class FailingTransport(httpx.BaseTransport):
    def handle_request(self, request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)


class TestHttpClientProtocol:
    def test_isbn_client_satisfies_protocol(self) -> None:
        with IsbnHttpClient() as client:
            assert isinstance(client, HttpClient)


class TestIsbnHttpClient:
    def test_get_returns_raw_bytes(self) -> None:
        transport = FakeTransport([httpx.Response(200, content=b"<rss/>")])
        with IsbnHttpClient(transport=transport) as client:
            assert client.get("https://example.com/api") == b"<rss/>"

    def test_user_agent_header(self) -> None:
        transport = FakeTransport()
        with IsbnHttpClient(transport=transport) as client:
            client.get("https://example.com/api")
        assert transport.requests[0].headers["user-agent"].startswith("isbnrename/")

    def test_custom_headers_override_user_agent(self) -> None:
        transport = FakeTransport()
        with IsbnHttpClient(transport=transport) as client:
            client.get("https://example.com/api", headers={"User-Agent": "Mozilla/5.0"})
        assert transport.requests[0].headers["user-agent"] == "Mozilla/5.0"

    @pytest.mark.parametrize("status", [201, 204, 404, 429, 500, 503])
    def test_non_200_raises_status_error(self, status: int) -> None:
        transport = FakeTransport([httpx.Response(status, content=b"")])
        with IsbnHttpClient(transport=transport) as client:
            with pytest.raises(ProviderStatusError, match=str(status)) as excinfo:
                client.get("https://example.com/missing")
        assert excinfo.value.status_code == status

    def test_no_retry_on_server_error(self) -> None:
        transport = FakeTransport(
            [httpx.Response(503, content=b""), httpx.Response(200, content=b"ok")]
        )
        with IsbnHttpClient(transport=transport) as client:
            with pytest.raises(ProviderStatusError):
                client.get("https://example.com/api")
        assert transport.call_count == 1

    def test_connection_error_raises_transport_error(self) -> None:
        with IsbnHttpClient(transport=FailingTransport()) as client:
            with pytest.raises(ProviderTransportError, match="connection refused"):
                client.get("https://example.com/api")

    def test_errors_share_base_class(self) -> None:
        assert issubclass(ProviderStatusError, MetadataFetchError)
        assert issubclass(ProviderTransportError, MetadataFetchError)
