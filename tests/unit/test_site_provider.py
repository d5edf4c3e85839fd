# ABOUTME: Unit tests for the YAML-configured site provider.
# ABOUTME: Covers site description validation, XPath/regex extraction, and saved responses.

import copy
from pathlib import Path

import pytest
import yaml

from isbnrename.metadata.http import FieldNotFoundError, UnknownFormatError
from isbnrename.metadata.site import (
    FieldRule,
    ProviderConfigError,
    ProviderSpec,
    SiteProvider,
    load_provider_spec,
    parse_provider_spec,
    parse_site_document,
)
from tests.fixtures.http_clients import FakeHttpClient
from tests.fixtures.provider_responses import SITE_HTML, SITE_HTML_NO_AUTHOR, SITE_SPEC

SITE_URL = "https://books.example.com/search?isbn=9784101010014"


def _spec_data(**overrides) -> dict:
    data = copy.deepcopy(SITE_SPEC)
    data.update(overrides)
    return data


class TestFieldRule:
    def test_without_pattern_returns_text(self) -> None:
        assert FieldRule(xpath=("//a",)).apply_regexp("a  b") == "a  b"

    def test_pattern_substitutes_every_match(self) -> None:
        rule = FieldRule(pattern=r"(\d{4})/(\d{2})", replace=r"\1-\2")
        assert rule.apply_regexp("2020/01 and 2021/02") == "2020-01 and 2021-02"


class TestParseProviderSpec:
    def test_full_description(self) -> None:
        spec = parse_provider_spec("example", _spec_data())
        assert spec.name == "example"
        assert spec.file == "isbn_example.html"
        assert spec.user_agent.startswith("Mozilla/5.0")
        assert spec.author.join == "／"
        assert spec.title.xpath == ("//h1[@class='title']",)
        assert spec.build_url("9784101010014") == SITE_URL

    def test_single_xpath_string_is_accepted(self) -> None:
        data = _spec_data()
        data["parse"]["title"]["xpath"] = "//h1"
        assert parse_provider_spec("example", data).title.xpath == ("//h1",)

    def test_missing_url(self) -> None:
        data = _spec_data()
        del data["url"]
        with pytest.raises(ProviderConfigError, match="url is required"):
            parse_provider_spec("example", data)

    def test_url_without_placeholder(self) -> None:
        with pytest.raises(ProviderConfigError, match=r"\{isbn\}"):
            parse_provider_spec("example", _spec_data(url="https://books.example.com/"))

    def test_missing_parse_section(self) -> None:
        data = _spec_data()
        del data["parse"]
        with pytest.raises(ProviderConfigError, match="parse section"):
            parse_provider_spec("example", data)

    def test_title_xpath_is_required(self) -> None:
        data = _spec_data()
        del data["parse"]["title"]
        with pytest.raises(ProviderConfigError, match="parse.title.xpath"):
            parse_provider_spec("example", data)

    def test_invalid_xpath(self) -> None:
        data = _spec_data()
        data["parse"]["author"]["xpath"] = ["//span[@class="]
        with pytest.raises(ProviderConfigError, match="parse.author.xpath"):
            parse_provider_spec("example", data)

    def test_invalid_regexp_names_the_field(self) -> None:
        data = _spec_data()
        data["parse"]["pubdate"]["regexp"]["pattern"] = "(unclosed"
        with pytest.raises(ProviderConfigError, match=r"check parse\.pubdate\.regexp"):
            parse_provider_spec("example", data)

    def test_invalid_replacement_is_rejected_at_load(self) -> None:
        data = _spec_data()
        data["parse"]["title"]["regexp"] = {"pattern": "Book", "replace": r"\1"}
        with pytest.raises(ProviderConfigError, match=r"check parse\.title\.regexp"):
            parse_provider_spec("example", data)

    def test_capitalised_go_format_is_accepted(self) -> None:
        data = {
            "URL": "https://books.example.com/search?isbn={{.ISBN}}",
            "UA": "Mozilla/5.0",
            "File": "isbn_example.html",
            "Parse": {
                "Author": {"XPath": ["//span[@class='author']"], "Join": "／"},
                "Title": {
                    "XPath": ["//h1[@class='title']"],
                    "Regexp": {"Pattern": r"\s+", "Replace": " "},
                },
                "ISBN": {"XPath": ["//td[@class='isbn']"]},
            },
        }
        spec = parse_provider_spec("example", data)
        assert spec.build_url("9784101010014") == SITE_URL
        assert spec.user_agent == "Mozilla/5.0"
        assert spec.file == "isbn_example.html"
        assert spec.title.pattern == r"\s+"

        record = parse_site_document(spec, SITE_HTML)
        assert record.title == "Example Book"
        assert record.author == "Jane Doe／John Roe"
        assert record.isbn == "9784101010014"

    def test_not_a_mapping(self) -> None:
        with pytest.raises(ProviderConfigError, match="mapping"):
            parse_provider_spec("example", ["url"])  # type: ignore[arg-type]


class TestLoadProviderSpec:
    def test_name_defaults_to_file_stem(self, tmp_path: Path) -> None:
        path = tmp_path / "example.yml"
        path.write_text(yaml.safe_dump(SITE_SPEC, allow_unicode=True), encoding="utf-8")
        spec = load_provider_spec(path)
        assert spec.name == "example"
        assert spec.author.join == "／"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ProviderConfigError, match="cannot read"):
            load_provider_spec(tmp_path / "absent.yml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.yml"
        path.write_text("url: [unclosed\n")
        with pytest.raises(ProviderConfigError, match="invalid YAML"):
            load_provider_spec(path)


class TestParseSiteDocument:
    def test_extracts_every_field(self) -> None:
        record = parse_site_document(parse_provider_spec("example", _spec_data()), SITE_HTML)
        assert record.title == "Example Book"
        assert record.author == "Jane Doe／John Roe"
        assert record.publisher == "Example Press"
        assert record.pubdate == "2020-01-01"
        assert record.isbn == "9784101010014"

    def test_publisher_stands_in_for_missing_author(self) -> None:
        spec = parse_provider_spec("example", _spec_data())
        record = parse_site_document(spec, SITE_HTML_NO_AUTHOR)
        assert record.author == "Example Press"
        assert record.title == "Anonymous Classics"
        assert record.isbn == ""

    def test_missing_author_and_publisher(self) -> None:
        spec = parse_provider_spec("example", _spec_data())
        with pytest.raises(FieldNotFoundError, match="author not found"):
            parse_site_document(spec, b"<html><body><h1 class='title'>T</h1></body></html>")

    def test_missing_title(self) -> None:
        spec = parse_provider_spec("example", _spec_data())
        html = b"<html><body><span class='author'>Jane Doe</span></body></html>"
        with pytest.raises(FieldNotFoundError, match="title not found"):
            parse_site_document(spec, html)

    def test_string_xpath_results(self) -> None:
        data = _spec_data()
        data["parse"]["title"] = {"xpath": ["string(//title)"]}
        record = parse_site_document(parse_provider_spec("example", data), SITE_HTML)
        assert record.title == "Example Book | Example Store"

    def test_isbn_10_is_accepted(self) -> None:
        spec = parse_provider_spec("example", _spec_data())
        html = (
            b"<html><body><h1 class='title'>T</h1><span class='author'>A</span>"
            b"<table><tr><td class='isbn'>ISBN-10: 4-10-101001-3</td></tr></table>"
            b"</body></html>"
        )
        assert parse_site_document(spec, html).isbn == "4101010013"


    def test_xpath_failing_at_evaluation_is_unknown_format(self) -> None:
        data = _spec_data()
        data["parse"]["title"] = {"xpath": ["//dc:title"]}
        spec = parse_provider_spec("example", data)
        with pytest.raises(UnknownFormatError, match="cannot apply parse rules"):
            parse_site_document(spec, SITE_HTML)

    def test_bad_replacement_at_extraction_is_unknown_format(self) -> None:
        spec = ProviderSpec(
            name="example",
            url="https://books.example.com/search?isbn={isbn}",
            title=FieldRule(xpath=("//h1",), pattern="Book", replace=r"\1"),
        )
        with pytest.raises(UnknownFormatError, match="example"):
            parse_site_document(spec, SITE_HTML)


class TestSiteProvider:
    def test_sends_configured_user_agent(self) -> None:
        client = FakeHttpClient({SITE_URL: SITE_HTML})
        provider = SiteProvider(parse_provider_spec("example", _spec_data()), client)
        provider.get("9784101010014")
        assert client.requests == [(SITE_URL, {"User-Agent": "Mozilla/5.0 (isbnrename tests)"})]

    def test_no_user_agent_sends_default_headers(self) -> None:
        client = FakeHttpClient({SITE_URL: SITE_HTML})
        provider = SiteProvider(parse_provider_spec("example", _spec_data(user_agent="")), client)
        provider.get("9784101010014")
        assert client.requests == [(SITE_URL, None)]

    def test_context_has_no_extra_payload(self) -> None:
        client = FakeHttpClient({SITE_URL: SITE_HTML})
        provider = SiteProvider(parse_provider_spec("example", _spec_data()), client)
        provider.get("9784101010014")
        context = provider.template_context()
        assert context["author"] == "Jane Doe／John Roe"
        assert context["extra"] == {}

    def test_save_without_file_is_config_error(self, tmp_path: Path) -> None:
        client = FakeHttpClient({SITE_URL: SITE_HTML})
        provider = SiteProvider(parse_provider_spec("example", _spec_data(file="")), client)
        provider.get("9784101010014")
        with pytest.raises(ProviderConfigError, match="no file configured"):
            provider.save(tmp_path)
