# ABOUTME: openBD metadata provider.
# ABOUTME: Reads the summary block of the first usable record and prefers ONIX contributor names.

import json
from typing import Any

from isbnrename.metadata.http import UnknownFormatError
from isbnrename.metadata.provider import RawResponseProvider
from isbnrename.metadata.types import BookRecord, join_authors

_OPENBD_URL = "https://api.openbd.jp/v1/get?isbn={isbn}"


def _contributor_names(record: dict[str, Any]) -> list[str]:
    """Collect PersonName contents from the ONIX DescriptiveDetail block."""
    detail = (record.get("onix") or {}).get("DescriptiveDetail") or {}
    names = []
    for contributor in detail.get("Contributor") or []:
        content = (contributor.get("PersonName") or {}).get("content", "")
        if content:
            names.append(content)
    return names


def parse_openbd_response(data: bytes) -> tuple[BookRecord, list[Any]]:
    """Parse an openBD ``/v1/get`` response.

    openBD answers with one entry per requested ISBN, ``null`` for unknown
    ones. The first entry whose summary has both author and title is used.

    Raises:
        UnknownFormatError: If the body is not a JSON array or holds no
            usable entry.
    """
    try:
        payload = json.loads(data)
    except ValueError as exc:
        raise UnknownFormatError(f"openbd: invalid JSON: {exc}") from exc
    if not isinstance(payload, list):
        raise UnknownFormatError("openbd: unknown format")

    for entry in payload:
        if not isinstance(entry, dict):
            continue
        summary = entry.get("summary") or {}
        if not summary.get("author") or not summary.get("title"):
            continue

        title = summary["title"]
        if summary.get("volume"):
            title += " " + summary["volume"]
        # Contributor names are cleaner than the summary's free-form author text.
        author = join_authors(_contributor_names(entry)) or summary["author"]
        record = BookRecord(
            title=title,
            author=author,
            publisher=summary.get("publisher", ""),
            pubdate=summary.get("pubdate", ""),
            isbn=summary.get("isbn", ""),
        )
        return record, payload

    raise UnknownFormatError("openbd: unknown format")


class OpenBDProvider(RawResponseProvider):
    """Metadata provider backed by the openBD API (Japanese publications)."""

    name = "openbd"
    filename = "isbn_openbd.json"

    def build_url(self, isbn: str) -> str:
        return _OPENBD_URL.format(isbn=isbn)

    def parse(self, data: bytes) -> tuple[BookRecord, Any]:
        return parse_openbd_response(data)
