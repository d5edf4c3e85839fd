# ABOUTME: Configurable metadata provider driven by a YAML site description.
# ABOUTME: Extracts BookRecord fields from any HTML/XML page using XPath rules and optional regexes.

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import lxml.html
import yaml
from lxml import etree

from isbnrename.metadata.http import FieldNotFoundError, HttpClient, UnknownFormatError
from isbnrename.metadata.provider import RawResponseProvider
from isbnrename.metadata.types import BookRecord

logger = logging.getLogger(__name__)

ISBN_PLACEHOLDER = "{isbn}"
SITE_FILE_SUFFIX = ".yml"

_FIELD_NAMES = ("author", "title", "publisher", "pubdate", "isbn")

# Site files written for the earlier Go tool use capitalised keys and a
# Go-template placeholder; they are read through this mapping.
_LEGACY_PLACEHOLDER = "{{.ISBN}}"
_LEGACY_KEYS = {
    "URL": "url",
    "UA": "user_agent",
    "File": "file",
    "Parse": "parse",
    "Author": "author",
    "Title": "title",
    "Publisher": "publisher",
    "Pubdate": "pubdate",
    "ISBN": "isbn",
    "XPath": "xpath",
    "Join": "join",
    "Regexp": "regexp",
    "Pattern": "pattern",
    "Replace": "replace",
}

# Digit runs (hyphens allowed) long enough to be an ISBN-10 or ISBN-13.
_ISBN_CANDIDATE_RE = re.compile(r"[\d\-]{9,}[xX]?")


class ProviderConfigError(Exception):
    """Raised when a site description is missing fields or holds invalid rules."""


@dataclass(frozen=True)
class FieldRule:
    """Extraction rule for one BookRecord field.

    ``xpath`` expressions are evaluated in order. Every extracted string is
    stripped and, when ``pattern`` is set, passed through ``re.sub``.
    """

    xpath: tuple[str, ...] = ()
    join: str = ""
    pattern: str = ""
    replace: str = ""
    _compiled: re.Pattern[str] | None = field(
        default=None, init=False, compare=False, repr=False
    )

    def __post_init__(self) -> None:
        if self.pattern:
            object.__setattr__(self, "_compiled", re.compile(self.pattern))

    def apply_regexp(self, text: str) -> str:
        if self._compiled is None:
            return text
        return self._compiled.sub(self.replace, text)


@dataclass(frozen=True)
class ProviderSpec:
    """Declarative description of a metadata web site."""

    name: str
    url: str
    user_agent: str = ""
    file: str = ""
    author: FieldRule = FieldRule()
    title: FieldRule = FieldRule()
    publisher: FieldRule = FieldRule()
    pubdate: FieldRule = FieldRule()
    isbn: FieldRule = FieldRule()

    def build_url(self, isbn: str) -> str:
        return self.url.replace(ISBN_PLACEHOLDER, isbn)


def _build_rule(name: str, field_name: str, raw: Any) -> FieldRule:
    """Validate one ``parse.<field>`` mapping and turn it into a FieldRule."""
    if raw is None:
        return FieldRule()
    if not isinstance(raw, dict):
        raise ProviderConfigError(f"{name}: parse.{field_name} must be a mapping")

    xpaths = raw.get("xpath") or []
    if isinstance(xpaths, str):
        xpaths = [xpaths]
    for expr in xpaths:
        try:
            etree.XPath(expr)
        except etree.XPathSyntaxError as exc:
            raise ProviderConfigError(
                f"{name}: parse.{field_name}.xpath {expr!r} is invalid: {exc}"
            ) from exc

    regexp = raw.get("regexp") or {}
    if not isinstance(regexp, dict):
        raise ProviderConfigError(f"{name}: parse.{field_name}.regexp must be a mapping")
    try:
        rule = FieldRule(
            xpath=tuple(str(expr) for expr in xpaths),
            join=str(raw.get("join") or ""),
            pattern=str(regexp.get("pattern") or ""),
            replace=str(regexp.get("replace") or ""),
        )
        # Group references in the replacement are resolved even without a match.
        rule.apply_regexp("")
    except re.error as exc:
        raise ProviderConfigError(
            f"{name}: check parse.{field_name}.regexp.pattern and replace: {exc}"
        ) from exc
    return rule


def _normalize_keys(data: Any) -> Any:
    """Rename legacy capitalised keys to their lowercase equivalents."""
    if isinstance(data, dict):
        return {
            _LEGACY_KEYS.get(key, key): _normalize_keys(value) for key, value in data.items()
        }
    return data


def parse_provider_spec(name: str, data: dict[str, Any]) -> ProviderSpec:
    """Build a ProviderSpec from an already-loaded YAML mapping.

    Files in the older capitalised format (``URL``, ``UA``, ``Parse.Title.XPath``,
    ``{{.ISBN}}``) are accepted as well. Replacement strings always use
    Python ``re.sub`` syntax (``\\1``), not ``$1``.

    Raises:
        ProviderConfigError: On a missing ``url``/``parse`` section, a URL
            without the ``{isbn}`` placeholder, or an invalid XPath or regex.
    """
    if not isinstance(data, dict):
        raise ProviderConfigError(f"{name}: site description must be a mapping")
    data = _normalize_keys(data)

    url = data.get("url")
    if not url:
        raise ProviderConfigError(f"{name}: url is required")
    url = str(url).replace(_LEGACY_PLACEHOLDER, ISBN_PLACEHOLDER)
    if ISBN_PLACEHOLDER not in url:
        raise ProviderConfigError(f"{name}: url must contain {ISBN_PLACEHOLDER}")

    parse = data.get("parse")
    if not isinstance(parse, dict):
        raise ProviderConfigError(f"{name}: parse section is required")

    rules = {
        field_name: _build_rule(name, field_name, parse.get(field_name))
        for field_name in _FIELD_NAMES
    }
    if not rules["title"].xpath:
        raise ProviderConfigError(f"{name}: parse.title.xpath is required")

    return ProviderSpec(
        name=name,
        url=url,
        user_agent=str(data.get("user_agent") or ""),
        file=str(data.get("file") or ""),
        **rules,
    )


def load_provider_spec(path: Path, name: str | None = None) -> ProviderSpec:
    """Load a site description from a YAML file.

    The provider name defaults to the file stem, so ``amazon.yml`` defines
    the ``amazon`` provider.
    """
    name = name or path.stem
    try:
        with path.open(encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except OSError as exc:
        raise ProviderConfigError(f"{name}: cannot read {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ProviderConfigError(f"{name}: invalid YAML in {path}: {exc}") from exc
    return parse_provider_spec(name, data)


def _node_text(node: Any) -> str:
    """Text content of an XPath result (element or string result)."""
    if isinstance(node, lxml.html.HtmlElement):
        return node.text_content()
    if isinstance(node, etree._Element):
        return "".join(node.itertext())
    return str(node)


def _extract(doc: etree._Element, rule: FieldRule) -> Iterator[str]:
    """Yield every processed value the rule's XPath expressions produce."""
    for expr in rule.xpath:
        result = doc.xpath(expr)
        nodes = result if isinstance(result, list) else [result]
        for node in nodes:
            yield rule.apply_regexp(_node_text(node).strip())


def _first_non_empty(doc: etree._Element, rule: FieldRule) -> str:
    for value in _extract(doc, rule):
        if value:
            return value
    return ""


def _find_isbn(doc: etree._Element, rule: FieldRule) -> str:
    """First ISBN-10, or ISBN-13 not ending in x/X, found in the extracted text."""
    for value in _extract(doc, rule):
        for candidate in _ISBN_CANDIDATE_RE.findall(value):
            number = candidate.replace("-", "")
            if len(number) == 10:
                return number
            if len(number) == 13 and number[-1] not in "xX":
                return number
    return ""


def parse_site_document(spec: ProviderSpec, data: bytes) -> BookRecord:
    """Apply a ProviderSpec's rules to a fetched HTML/XML document.

    Author and title collect every match joined by the rule's separator;
    publisher and pubdate take the first non-empty match. When no author is
    found the publisher stands in for it.

    Raises:
        UnknownFormatError: If the document cannot be parsed or an XPath or
            regex fails while being applied to it.
        FieldNotFoundError: If title or author (after the publisher
            fallback) is empty.
    """
    try:
        doc = lxml.html.document_fromstring(data)
    except (etree.ParserError, ValueError) as exc:
        raise UnknownFormatError(f"{spec.name}: cannot parse document: {exc}") from exc

    try:
        author = spec.author.join.join(_extract(doc, spec.author))
        title = spec.title.join.join(_extract(doc, spec.title))
        publisher = _first_non_empty(doc, spec.publisher)
        pubdate = _first_non_empty(doc, spec.pubdate)
        isbn = _find_isbn(doc, spec.isbn)
    except (etree.XPathError, re.error) as exc:
        raise UnknownFormatError(f"{spec.name}: cannot apply parse rules: {exc}") from exc
    logger.debug(
        "%s: author=%r title=%r publisher=%r pubdate=%r isbn=%r",
        spec.name, author, title, publisher, pubdate, isbn,
    )

    if not author:
        author = publisher
    if not author:
        raise FieldNotFoundError(f"{spec.name}: author not found")
    if not title:
        raise FieldNotFoundError(f"{spec.name}: title not found")

    return BookRecord(title=title, author=author, publisher=publisher, pubdate=pubdate, isbn=isbn)


class SiteProvider(RawResponseProvider):
    """Metadata provider defined entirely by a ProviderSpec."""

    def __init__(self, spec: ProviderSpec, http_client: HttpClient) -> None:
        super().__init__(http_client)
        self.spec = spec
        self.name = spec.name
        self.filename = spec.file

    def build_url(self, isbn: str) -> str:
        return self.spec.build_url(isbn)

    def request_headers(self) -> dict[str, str] | None:
        if self.spec.user_agent:
            return {"User-Agent": self.spec.user_agent}
        return None

    def parse(self, data: bytes) -> tuple[BookRecord, Any]:
        return parse_site_document(self.spec, data), None

    def _output_filename(self) -> str:
        if not self.spec.file:
            raise ProviderConfigError(f"{self.spec.name}: no file configured for saved responses")
        return self.spec.file
