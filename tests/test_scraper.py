"""Tests for the regulatory web scraper."""

from unittest.mock import MagicMock, patch

import requests
from regintel.scraping.scraper import (
    RegulatoryDataScraper,
    ScrapeResult,
    extract_keywords,
    get_regulation_type,
)
from regintel.scraping.sources import DEFAULT_SOURCES, RegulatorySource, get_source

LONG_TEXT = (
    "The European Commission published new guidance on clinical evaluation of medical device "
    "software under the MDR, covering equivalence and post-market clinical follow-up."
)


def _make_source(**kwargs) -> RegulatorySource:
    defaults = dict(
        id="test_source",
        name="Test Source",
        url="https://example.org/news",
        description="Test",
        category="compliance",
        region="EU",
        selectors=["article p", ".content p"],
    )
    defaults.update(kwargs)
    return RegulatorySource(**defaults)


def _response(html: str) -> MagicMock:
    response = MagicMock()
    response.text = html
    response.raise_for_status.return_value = None
    return response


def _scraper(sources=None) -> RegulatoryDataScraper:
    return RegulatoryDataScraper(sources=sources, sleep=lambda _: None)


class TestSources:
    def test_active_and_configured_sources(self):
        active = [s for s in DEFAULT_SOURCES if s.is_active]
        configured = [s for s in DEFAULT_SOURCES if s.status == "configured"]
        assert len(active) == 8
        assert len(configured) == 3
        assert all(s.requires_auth for s in configured)

    def test_get_source(self):
        assert get_source("fda_medical_device_db").link_mode is True
        assert get_source("nope") is None


class TestKeywords:
    def test_base_keywords_first(self):
        assert extract_keywords("", "standards") == ["ISO", "IEC", "standards", "quality"]

    def test_medtech_terms_appended_and_capped(self):
        keywords = extract_keywords("medtech device fda ema mdr", "compliance")
        assert keywords == ["MDR", "IVDR", "compliance", "regulation", "medtech", "device"]

    def test_unknown_category_uses_database_keywords(self):
        assert extract_keywords("", "other")[0] == "FDA"

    def test_regulation_type(self):
        assert get_regulation_type("standards") == "Technical_Standard"
        assert get_regulation_type("unknown") == "General_Regulatory"


class TestScrapeSource:
    def test_first_matching_selector_wins(self):
        source = _make_source()
        html = f"<div class='content'><p>{LONG_TEXT}</p></div><article><p>{LONG_TEXT} A</p></article>"
        scraper = _scraper([source])

        with patch.object(scraper.session, "get", return_value=_response(html)):
            items = scraper.scrape_source(source)

        assert len(items) == 1
        assert items[0].content.endswith(" A")
        assert items[0].title == "Test Source - Item 1"
        assert items[0].is_fallback is False
        assert items[0].regulation_type == "Compliance_Guidance"

    def test_live_items_use_database_keywords(self):
        source = _make_source(category="standards")
        scraper = _scraper([source])

        with patch.object(scraper.session, "get", return_value=_response(f"<article><p>{LONG_TEXT}</p></article>")):
            items = scraper.scrape_source(source)

        assert items[0].keywords[:4] == ["FDA", "database", "medical device", "regulatory"]
        assert scraper.generate_fallback_data(source)[0].keywords[:2] == ["ISO", "IEC"]

    def test_short_blocks_are_skipped(self):
        source = _make_source()
        html = f"<article><p>Too short</p><p>{LONG_TEXT}</p></article>"
        scraper = _scraper([source])

        with patch.object(scraper.session, "get", return_value=_response(html)):
            items = scraper.scrape_source(source)

        assert len(items) == 1
        # Index counts skipped elements too
        assert items[0].title == "Test Source - Item 2"

    def test_length_must_exceed_minimum(self):
        source = _make_source(min_length=len(LONG_TEXT))
        scraper = _scraper([source])
        with patch.object(scraper.session, "get", return_value=_response(f"<article><p>{LONG_TEXT}</p></article>")):
            assert scraper.scrape_source(source) == []

    def test_max_items(self):
        source = _make_source(max_items=2)
        html = "<article>" + "".join(f"<p>{LONG_TEXT} {i}</p>" for i in range(5)) + "</article>"
        scraper = _scraper([source])

        with patch.object(scraper.session, "get", return_value=_response(html)):
            assert len(scraper.scrape_source(source)) == 2

    def test_required_terms(self):
        source = _make_source(required_terms=["Medizinprodukt"])
        html = f"<article><p>{LONG_TEXT}</p><p>Medizinprodukt {LONG_TEXT}</p></article>"
        scraper = _scraper([source])

        with patch.object(scraper.session, "get", return_value=_response(html)):
            items = scraper.scrape_source(source)

        assert len(items) == 1
        assert items[0].content.startswith("Medizinprodukt")

    def test_link_mode_resolves_href(self):
        source = get_source("fda_medical_device_db")
        html = '<table class="table-striped"><tr><td><a href="/medical-devices/510k">510(k) Premarket Notification</a></td></tr></table>'
        scraper = _scraper([source])

        with patch.object(scraper.session, "get", return_value=_response(html)):
            items = scraper.scrape_source(source)

        assert len(items) == 1
        assert items[0].url == "https://www.fda.gov/medical-devices/510k"
        assert items[0].title == "FDA Database: 510(k) Premarket Notification"
        assert items[0].regulation_type == "FDA_Database"

    def test_accept_language_header(self):
        source = _make_source(accept_language="de-DE")
        scraper = _scraper([source])

        with patch.object(scraper.session, "get", return_value=_response("<html></html>")) as mock_get:
            scraper.scrape_source(source)

        assert mock_get.call_args.kwargs["headers"] == {"Accept-Language": "de-DE"}

    def test_no_selector_match_uses_fallback(self):
        source = _make_source()
        scraper = _scraper([source])

        with patch.object(scraper.session, "get", return_value=_response("<html><body></body></html>")):
            items = scraper.scrape_source(source)

        assert len(items) == 4
        assert all(item.is_fallback for item in items)
        assert items[0].title.startswith("EU MDR implementation")

    def test_request_failure_uses_fallback(self):
        source = _make_source()
        scraper = _scraper([source])

        with patch.object(scraper.session, "get", side_effect=requests.exceptions.ConnectionError("down")):
            items = scraper.scrape_source(source)

        assert items and all(item.is_fallback for item in items)

    def test_fallback_disabled(self):
        source = _make_source()
        scraper = _scraper([source])
        scraper.fallback_items = 0
        assert scraper.generate_fallback_data(source) == []


class TestFetchUrl:
    def test_timeout(self):
        scraper = _scraper([])
        with patch.object(scraper.session, "get", side_effect=requests.exceptions.Timeout()):
            success, message = scraper._fetch_url("https://example.org")
        assert success is False
        assert "Timeout" in message

    def test_http_error(self):
        scraper = _scraper([])
        response = MagicMock()
        response.status_code = 403
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(response=response)

        with patch.object(scraper.session, "get", return_value=response):
            success, message = scraper._fetch_url("https://example.org")

        assert success is False
        assert "403" in message


class TestScrapeAllSources:
    def test_skips_configured_sources_and_sleeps_between(self):
        sources = [_make_source(id="a"), _make_source(id="b"), _make_source(id="c", status="configured")]
        sleeps = []
        scraper = RegulatoryDataScraper(sources=sources, sleep=sleeps.append)

        with patch.object(scraper, "scrape_source", return_value=[]) as mock_scrape:
            result = scraper.scrape_all_sources()

        assert mock_scrape.call_count == 2
        assert result.sources_scraped == 2
        assert sleeps == [scraper.delay_seconds]

    def test_source_error_does_not_stop_others(self):
        sources = [_make_source(id="a"), _make_source(id="b")]
        scraper = _scraper(sources)

        with patch.object(scraper, "scrape_source", side_effect=[RuntimeError("boom"), []]):
            result = scraper.scrape_all_sources()

        assert result.sources_scraped == 1
        assert result.errors == ["Test Source: boom"]

    def test_fallback_sources_recorded(self):
        source = _make_source()
        scraper = _scraper([source])

        with patch.object(scraper.session, "get", side_effect=requests.exceptions.ConnectionError()):
            result = scraper.scrape_all_sources()

        assert result.fallback_sources == ["test_source"]
        assert "fallbacks" in str(result)


class TestStats:
    def test_get_stats(self):
        stats = _scraper().get_stats()
        assert stats["total_sources"] == 11
        assert stats["active_sources"] == 8
        assert stats["configured_sources"] == 3
        assert stats["auth_required"] == 3
        assert stats["regions"]["DE"] == 1


def test_scrape_result_str():
    assert str(ScrapeResult(sources_scraped=2)) == "Scraped 0 items from 2 sources"
