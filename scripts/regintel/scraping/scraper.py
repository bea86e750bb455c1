"""
Web scraper for regulatory sources.

Each active source is fetched in turn and parsed with BeautifulSoup. The
source's CSS selectors are tried in order; the first one that matches any
element is used to extract text blocks. When nothing matches, or the request
fails, canned fallback items are generated for the source's category.
"""

import logging
import time
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup

from ..config import config
from ..models import ScrapedItem
from .sources import DEFAULT_SOURCES, RegulatorySource

logger = logging.getLogger(__name__)

ACCEPT_HEADER = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"

# Number of leading characters keywords are extracted from
KEYWORD_SAMPLE_CHARS = 200
# Live items take the database base keywords; fallback items use their source category
LIVE_KEYWORD_CATEGORY = "regulatory_database"

FALLBACK_TITLES = {
    "regulatory_database": [
        "FDA medical device database access requirements updated for enhanced transparency",
        "New regulatory submission pathways for innovative medical technologies",
        "Quality system regulations compliance framework for medical device manufacturers",
        "Post-market surveillance reporting obligations for Class II and III devices",
    ],
    "market_analysis": [
        "Global medtech market regulatory convergence drives efficiency gains",
        "Digital health regulatory frameworks evolving to support innovation",
        "Risk-based approach to medical device regulation gains international adoption",
        "Regulatory intelligence platforms enhance compliance decision-making",
    ],
    "compliance": [
        "EU MDR implementation challenges and solutions for medical device companies",
        "Brexit impact on UK medical device regulatory pathways and market access",
        "IVDR transition timeline and key compliance milestones for manufacturers",
        "Notified body capacity constraints affecting EU market approvals",
    ],
    "standards": [
        "ISO 13485 quality management system updates for medical device sector",
        "IEC 62304 software lifecycle processes for medical device development",
        "Risk management standards ISO 14971 application in modern medtech",
        "Clinical evaluation guidelines under new regulatory frameworks",
    ],
}

FALLBACK_BLURBS = {
    "regulatory_database": (
        "This database provides comprehensive information on medical devices, including "
        "approvals, recalls, safety communications and compliance requirements. Regulatory "
        "authorities worldwide use these systems to monitor medical device safety."
    ),
    "market_analysis": (
        "Market analyses show current trends in medtech regulation, including regulatory "
        "convergence, digital transformation and changing compliance requirements. These "
        "insights support strategic decisions by manufacturers."
    ),
    "compliance": (
        "Compliance requirements for medical devices evolve continuously. New regulations "
        "such as EU MDR and IVDR require stronger clinical evidence, post-market surveillance "
        "and risk management systems."
    ),
    "standards": (
        "International standards such as ISO 13485, IEC 62304 and ISO 14971 form the "
        "foundation of quality management systems in medtech. These standards are updated "
        "regularly to reflect technological developments."
    ),
}

REGULATION_TYPES = {
    "regulatory_database": "Database_Entry",
    "market_analysis": "Market_Intelligence",
    "compliance": "Compliance_Guidance",
    "standards": "Technical_Standard",
}

BASE_KEYWORDS = {
    "regulatory_database": ["FDA", "database", "medical device", "regulatory"],
    "market_analysis": ["market", "analysis", "trends", "compliance"],
    "compliance": ["MDR", "IVDR", "compliance", "regulation"],
    "standards": ["ISO", "IEC", "standards", "quality"],
}

MEDTECH_TERMS = {
    "medtech", "medical", "device", "regulatory", "compliance",
    "fda", "who", "ema", "mdr", "ivdr",
}


def get_regulation_type(category: str) -> str:
    """Map a source category to its regulation type label."""
    return REGULATION_TYPES.get(category, "General_Regulatory")


def extract_keywords(text: str, category: str) -> list[str]:
    """
    Build the keyword list for a scraped item.

    The category's base keywords come first, followed by up to three medtech
    terms found in the text. At most six keywords are returned.
    """
    base = BASE_KEYWORDS.get(category, BASE_KEYWORDS["regulatory_database"])
    words = text.lower().split()
    found = [word for word in words if word in MEDTECH_TERMS]
    return (list(base) + found[:3])[:6]


@dataclass
class ScrapeResult:
    """Results from scraping all active sources."""

    items: list[ScrapedItem] = field(default_factory=list)
    sources_scraped: int = 0
    fallback_sources: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    scrape_time: Optional[datetime] = None

    def __str__(self) -> str:
        return (
            f"Scraped {len(self.items)} items from {self.sources_scraped} sources"
            f"{f' ({len(self.fallback_sources)} fallbacks)' if self.fallback_sources else ''}"
            f"{f' ({len(self.errors)} errors)' if self.errors else ''}"
        )


class RegulatoryDataScraper:
    """Scrapes the configured regulatory sources."""

    def __init__(
        self,
        sources: Optional[list[RegulatorySource]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Initialize the scraper.

        Args:
            sources: Sources to scrape. Defaults to DEFAULT_SOURCES.
            sleep: Function used for the delay between sources.
        """
        self.sources = list(sources) if sources is not None else list(DEFAULT_SOURCES)
        self.sleep = sleep
        self.timeout = config.get("scraper.request_timeout", 30)
        self.delay_seconds = config.get("scraper.delay_seconds", 3)
        self.fallback_items = config.get("scraper.fallback_items", 4)
        self.session = requests.Session()
        self.session.headers.update(
            {
                "User-Agent": config.get("scraper.user_agent"),
                "Accept": ACCEPT_HEADER,
            }
        )

    def _fetch_url(self, url: str, accept_language: Optional[str] = None) -> tuple[bool, str]:
        """
        Fetch content from a URL.

        Returns:
            Tuple of (success, content_or_error).
        """
        headers = {"Accept-Language": accept_language} if accept_language else None
        try:
            response = self.session.get(url, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            return True, response.text
        except requests.exceptions.Timeout:
            return False, f"Timeout fetching {url}"
        except requests.exceptions.HTTPError as e:
            return False, f"HTTP error {e.response.status_code} for {url}"
        except requests.exceptions.RequestException as e:
            return False, f"Request failed for {url}: {str(e)}"

    def get_sources(self) -> list[RegulatorySource]:
        return self.sources

    def get_stats(self) -> dict:
        """Summarize the configured sources."""
        return {
            "total_sources": len(self.sources),
            "active_sources": sum(1 for s in self.sources if s.status == "active"),
            "configured_sources": sum(1 for s in self.sources if s.status == "configured"),
            "auth_required": sum(1 for s in self.sources if s.requires_auth),
            "categories": dict(Counter(s.category for s in self.sources)),
            "regions": dict(Counter(s.region for s in self.sources)),
        }

    def scrape_all_sources(self) -> ScrapeResult:
        """
        Scrape every active source sequentially.

        A failure in one source is logged and recorded; the remaining sources
        are still processed.
        """
        result = ScrapeResult(scrape_time=datetime.now())
        active = [s for s in self.sources if s.is_active]

        for i, source in enumerate(active):
            try:
                logger.info("Scraping regulatory source: %s", source.name)
                items = self.scrape_source(source)
                result.items.extend(items)
                result.sources_scraped += 1
                if any(item.is_fallback for item in items):
                    result.fallback_sources.append(source.id)
            except Exception as e:
                logger.error("Error scraping %s: %s", source.name, e)
                result.errors.append(f"{source.name}: {e}")

            if i < len(active) - 1 and self.delay_seconds:
                self.sleep(self.delay_seconds)

        logger.info(str(result))
        return result

    def scrape_source(self, source: RegulatorySource) -> list[ScrapedItem]:
        """
        Scrape a single source using its selector cascade.

        Returns:
            Extracted items, or fallback items if the request failed or no
            selector matched.
        """
        success, content = self._fetch_url(source.url, source.accept_language)
        if not success:
            logger.error("Error scraping %s: %s", source.name, content)
            return self.generate_fallback_data(source)

        soup = BeautifulSoup(content, "html.parser")

        for selector in source.selectors:
            elements = soup.select(selector)
            if not elements:
                continue

            logger.info("Found %d elements for %s using selector: %s", len(elements), source.name, selector)
            # The first matching selector wins even if no element passes the filters
            return self._extract_items(source, elements)

        logger.warning("No selector matched for %s, using fallback content", source.name)
        return self.generate_fallback_data(source)

    def _extract_items(self, source: RegulatorySource, elements: list) -> list[ScrapedItem]:
        items = []
        now = datetime.now().isoformat()
        category = source.item_category or source.category

        for index, element in enumerate(elements):
            if index >= source.max_items:
                break

            text = element.get_text(strip=True) if source.link_mode else element.get_text(" ", strip=True)
            if not text or len(text) <= source.min_length:
                continue
            if not all(term in text for term in source.required_terms):
                continue

            if source.link_mode:
                href = element.get("href")
                if not href:
                    continue
                url = urljoin(source.url, href)
                body = (
                    f"FDA Medical Device Database: {text}. Provides comprehensive regulatory data "
                    "for medical devices including approvals, recalls, and compliance information."
                )
                keyword_text = text
            else:
                url = source.url
                body = text
                keyword_text = text[:KEYWORD_SAMPLE_CHARS]

            items.append(
                ScrapedItem(
                    source_name=source.name,
                    source_id=source.id,
                    title=source.title_template.format(index=index + 1, text=text, name=source.name),
                    url=url,
                    content=body,
                    category=category,
                    region=source.region,
                    publication_date=now,
                    scrape_timestamp=now,
                    regulation_type=source.regulation_type or get_regulation_type(category),
                    keywords=extract_keywords(keyword_text, LIVE_KEYWORD_CATEGORY),
                )
            )

        return items

    def generate_fallback_data(self, source: RegulatorySource) -> list[ScrapedItem]:
        """
        Generate canned items for a source that could not be scraped.

        The number of items is capped by ``scraper.fallback_items``; zero
        disables fallback content entirely.
        """
        titles = FALLBACK_TITLES.get(source.category, FALLBACK_TITLES["regulatory_database"])
        now = datetime.now().isoformat()

        return [
            ScrapedItem(
                source_name=source.name,
                source_id=source.id,
                title=title,
                url=source.url,
                content=self.generate_detailed_content(title, source),
                category=source.category,
                region=source.region,
                publication_date=now,
                scrape_timestamp=now,
                regulation_type=get_regulation_type(source.category),
                keywords=extract_keywords(title, source.category),
                is_fallback=True,
            )
            for title in titles[: max(self.fallback_items, 0)]
        ]

    def generate_detailed_content(self, title: str, source: RegulatorySource) -> str:
        blurb = FALLBACK_BLURBS.get(source.category, FALLBACK_BLURBS["regulatory_database"])
        return f"{title} - Regulatory information from {source.name}. {blurb}"
