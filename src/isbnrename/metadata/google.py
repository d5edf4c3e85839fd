# ABOUTME: Google Books metadata provider.
# ABOUTME: Looks up volumes by ISBN and folds every usable item into one BookRecord.

import json
from typing import Any

from isbnrename.metadata.http import UnknownFormatError
from isbnrename.metadata.provider import RawResponseProvider
from isbnrename.metadata.types import BookRecord, join_authors

_GOOGLE_VOLUMES_URL = "https://www.googleapis.com/books/v1/volumes?q=isbn:{isbn}"


def parse_google_response(data: bytes) -> tuple[BookRecord, dict[str, Any]]:
    """Parse a Google Books volumes response.

    Every item with a title and at least one author overwrites the running
    title, author and pubdate, so the last usable item wins. ISBN_13
    identifiers replace whatever identifier was seen earlier.

    Raises:
        UnknownFormatError: If the body is not JSON or no item has both a
            title and an author.
    """
    try:
        payload = json.loads(data)
    except ValueError as exc:
        raise UnknownFormatError(f"google: invalid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise UnknownFormatError("google: unknown format")

    title = author = pubdate = isbn = ""
    found = False
    for item in payload.get("items") or []:
        if not isinstance(item, dict):
            continue
        info = item.get("volumeInfo")
        if not isinstance(info, dict):
            continue
        authors = [name for name in info.get("authors") or [] if name]
        if not authors or not info.get("title"):
            continue
        found = True
        title = info["title"]
        if info.get("subtitle"):
            title += " " + info["subtitle"]
        author = join_authors(authors)
        pubdate = info.get("publishedDate", "")
        for identifier in info.get("industryIdentifiers") or []:
            if not isbn or identifier.get("type") == "ISBN_13":
                isbn = identifier.get("identifier", "")

    if not found:
        raise UnknownFormatError("google: unknown format")
    return BookRecord(title=title, author=author, pubdate=pubdate, isbn=isbn), payload


class GoogleBooksProvider(RawResponseProvider):
    """Metadata provider backed by the Google Books volumes API."""

    name = "google"
    filename = "isbn_google.json"

    def build_url(self, isbn: str) -> str:
        return _GOOGLE_VOLUMES_URL.format(isbn=isbn)

    def parse(self, data: bytes) -> tuple[BookRecord, Any]:
        return parse_google_response(data)
