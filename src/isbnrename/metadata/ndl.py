# ABOUTME: National Diet Library (kokkai) OpenSearch metadata provider.
# ABOUTME: Parses the RSS feed and takes the first item catalogued as a book.

from typing import Any

from lxml import etree

from isbnrename.metadata.http import UnknownFormatError
from isbnrename.metadata.provider import RawResponseProvider
from isbnrename.metadata.types import BookRecord

_NDL_OPENSEARCH_URL = "https://iss.ndl.go.jp/api/opensearch?isbn={isbn}"

# Category NDL assigns to printed books; excludes cassettes, microfilm, etc.
_BOOK_CATEGORY = "本"
_ISBN_TYPE = "dcndl:ISBN"
_DATE_TYPE = "dcterms:W3CDTF"

_PARSER = etree.XMLParser(resolve_entities=False, no_network=True)


def _localname(element: etree._Element) -> str:
    return etree.QName(element).localname


def _type_attr(element: etree._Element) -> str:
    """Value of the element's ``type`` attribute in any namespace (xsi:type)."""
    for key, value in element.attrib.items():
        if etree.QName(key).localname == "type":
            return value
    return ""


def _child_text(item: etree._Element, name: str) -> str:
    for child in item:
        if isinstance(child.tag, str) and _localname(child) == name:
            return (child.text or "").strip()
    return ""


def _item_fields(item: etree._Element) -> dict[str, str]:
    """Flatten an RSS item into localname -> first text, for templates."""
    fields: dict[str, str] = {}
    for child in item:
        if isinstance(child.tag, str):
            fields.setdefault(_localname(child), (child.text or "").strip())
    return fields


def parse_ndl_response(data: bytes) -> tuple[BookRecord, dict[str, Any]]:
    """Parse an NDL OpenSearch RSS response.

    Items without author or title, or not catalogued as books, are skipped.
    The first qualifying item is used and the rest are ignored.

    Raises:
        UnknownFormatError: If the body is not XML or no item qualifies.
    """
    try:
        root = etree.fromstring(data, parser=_PARSER)
    except etree.XMLSyntaxError as exc:
        raise UnknownFormatError(f"kokkai: invalid XML: {exc}") from exc
    if root is None:
        raise UnknownFormatError("kokkai: unknown format")

    items = [el for el in root.iter() if isinstance(el.tag, str) and _localname(el) == "item"]
    for item in items:
        author = _child_text(item, "author")
        title = _child_text(item, "title")
        if not author or not title:
            continue
        if _child_text(item, "category") != _BOOK_CATEGORY:
            continue

        isbn = ""
        pubdate = ""
        for child in item:
            if not isinstance(child.tag, str):
                continue
            name = _localname(child)
            text = (child.text or "").strip()
            if name == "identifier" and _type_attr(child) == _ISBN_TYPE and len(isbn) != 13:
                isbn = text
            elif name == "issued" and _type_attr(child) == _DATE_TYPE:
                pubdate = text

        volume = _child_text(item, "volume")
        if volume:
            title += " " + volume

        record = BookRecord(
            title=title,
            author=author,
            publisher=_child_text(item, "publisher"),
            pubdate=pubdate,
            isbn=isbn,
        )
        return record, {"items": [_item_fields(el) for el in items]}

    raise UnknownFormatError("kokkai: unknown format")


class NDLProvider(RawResponseProvider):
    """Metadata provider backed by the National Diet Library OpenSearch API."""

    name = "kokkai"
    filename = "isbn_kokkai.xml"

    def build_url(self, isbn: str) -> str:
        return _NDL_OPENSEARCH_URL.format(isbn=isbn)

    def parse(self, data: bytes) -> tuple[BookRecord, Any]:
        return parse_ndl_response(data)
