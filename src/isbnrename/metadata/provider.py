# ABOUTME: MetadataProvider protocol and the shared raw-response provider base class.
# ABOUTME: Every source (fixed endpoint or YAML site) fetches, parses, saves and loads this way.

import logging
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from isbnrename.metadata.http import FieldNotFoundError, HttpClient
from isbnrename.metadata.types import BookRecord

logger = logging.getLogger(__name__)


@runtime_checkable
class MetadataProvider(Protocol):
    """Protocol for ISBN metadata sources.

    Implementations fetch one response per ISBN, keep its raw bytes so they
    can be saved beside the scanned images, and expose the parsed BookRecord.
    """

    @property
    def name(self) -> str: ...

    @property
    def record(self) -> BookRecord | None: ...

    def get(self, isbn: str) -> BookRecord: ...

    def save(self, directory: Path) -> Path: ...

    def load(self, directory: Path) -> BookRecord: ...

    def template_context(self) -> dict[str, Any]: ...


class RawResponseProvider:
    """Base class for providers backed by a single HTTP GET.

    Subclasses set ``name``, ``filename`` and implement ``build_url`` and
    ``parse``. ``parse`` returns the BookRecord together with the decoded
    payload that templates can reach through ``extra.<name>``.
    """

    name: str = ""
    filename: str = ""

    def __init__(self, http_client: HttpClient) -> None:
        self._http = http_client
        self._raw: bytes | None = None
        self._record: BookRecord | None = None
        self._payload: Any = None

    @property
    def record(self) -> BookRecord | None:
        return self._record

    @property
    def raw(self) -> bytes | None:
        return self._raw

    def build_url(self, isbn: str) -> str:
        raise NotImplementedError

    def request_headers(self) -> dict[str, str] | None:
        return None

    def parse(self, data: bytes) -> tuple[BookRecord, Any]:
        raise NotImplementedError

    def get(self, isbn: str) -> BookRecord:
        """Fetch and parse the response for ``isbn``.

        Raises:
            MetadataFetchError: On transport failure, non-200 status, or an
                unusable response body.
        """
        self._raw = self._http.get(self.build_url(isbn), headers=self.request_headers())
        return self._apply(self._raw)

    def save(self, directory: Path) -> Path:
        """Write the raw response bytes into ``directory``."""
        if self._raw is None:
            raise ValueError(f"{self.name}: nothing to save, call get() first")
        path = directory / self._output_filename()
        path.write_bytes(self._raw)
        logger.debug("Saved %s response to %s", self.name, path)
        return path

    def load(self, directory: Path) -> BookRecord:
        """Read a previously saved response from ``directory`` and parse it."""
        path = directory / self._output_filename()
        self._raw = path.read_bytes()
        return self._apply(self._raw)

    def template_context(self) -> dict[str, Any]:
        """Fields exposed to the rename template.

        Always holds the common record fields plus ``extra``, a mapping from
        provider name to the decoded response for sources that have one.
        """
        if self._record is None:
            raise ValueError(f"{self.name}: no record, call get() or load() first")
        context: dict[str, Any] = self._record.as_context()
        context["extra"] = {self.name: self._payload} if self._payload is not None else {}
        return context

    def _output_filename(self) -> str:
        return self.filename

    def _apply(self, data: bytes) -> BookRecord:
        self._record = None
        self._payload = None
        record, payload = self.parse(data)
        if not record.is_valid:
            raise FieldNotFoundError(f"{self.name}: title or author missing")
        self._record = record
        self._payload = payload
        return record
