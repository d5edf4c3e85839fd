# ABOUTME: HTTP client abstraction for metadata provider requests.
# ABOUTME: Returns raw response bytes, enforces HTTP 200, and accepts an injectable transport.

import logging
from typing import Any, Protocol, runtime_checkable

import httpx

from isbnrename import __version__

logger = logging.getLogger(__name__)


class MetadataFetchError(Exception):
    """Raised when a metadata provider cannot produce a record."""


class ProviderTransportError(MetadataFetchError):
    """Raised when the HTTP request itself fails (DNS, connection, timeout)."""


class ProviderStatusError(MetadataFetchError):
    """Raised when a provider answers with anything other than HTTP 200."""

    def __init__(self, url: str, status_code: int) -> None:
        super().__init__(f"HTTP {status_code} from {url}")
        self.url = url
        self.status_code = status_code


class UnknownFormatError(MetadataFetchError):
    """Raised when a response body holds no record a provider can use."""


class FieldNotFoundError(UnknownFormatError):
    """Raised when a required field (title or author) could not be extracted."""


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP GET operations against metadata sources."""

    def get(self, url: str, headers: dict[str, str] | None = None) -> bytes: ...


class IsbnHttpClient:
    """HTTP client for metadata lookups.

    Wraps httpx.Client with a project User-Agent and a fixed timeout. Every
    call is a single attempt: failures surface immediately so the provider
    chain can move on to the next source.
    """

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        client_kwargs: dict[str, Any] = {
            "headers": {"User-Agent": f"isbnrename/{__version__}"},
            "timeout": timeout,
            "follow_redirects": True,
        }
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client = httpx.Client(**client_kwargs)

    def get(self, url: str, headers: dict[str, str] | None = None) -> bytes:
        """Send a GET request and return the raw body.

        Args:
            url: The URL to request.
            headers: Optional extra headers, e.g. a site-specific User-Agent.

        Returns:
            The unmodified response body.

        Raises:
            ProviderTransportError: When the request could not be completed.
            ProviderStatusError: When the response status is not 200.
        """
        logger.debug("GET %s", url)
        try:
            response = self._client.get(url, headers=headers)
        except httpx.HTTPError as exc:
            raise ProviderTransportError(f"Request failed: {url}: {exc}") from exc

        if response.status_code != 200:
            raise ProviderStatusError(url, response.status_code)
        return response.content

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "IsbnHttpClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
