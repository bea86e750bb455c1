"""
RSS/Atom feed monitor for regulatory agencies.

Reads agency feeds with feedparser and turns entries into ScrapedItems with
their real publication dates.
"""

import logging
import re
import time
from dataclasses import dataclass
from datetime import datetime
from time import mktime
from typing import Callable, Optional

import feedparser

from ..config import config
from ..models import ScrapedItem
from .scraper import ScrapeResult

logger = logging.getLogger(__name__)


@dataclass
class RSSFeed:
    """An agency RSS or Atom feed."""

    id: str
    name: str
    url: str
    authority: str
    region: str
    active: bool = True


DEFAULT_FEEDS: list[RSSFeed] = [
    RSSFeed(
        id="fda-main",
        name="FDA News & Updates",
        url="https://www.fda.gov/about-fda/contact-fda/stay-informed/rss-feeds-fda",
        authority="FDA",
        region="US",
    ),
    RSSFeed(
        id="fda-medical-devices",
        name="FDA Medical Device Safety",
        url="https://www.fda.gov/medical-devices/rss.xml",
        authority="FDA",
        region="US",
    ),
    RSSFeed(
        id="ema-main",
        name="EMA News & Updates",
        url="https://www.ema.europa.eu/en/rss.xml",
        authority="EMA",
        region="EU",
    ),
    RSSFeed(
        id="bfarm-main",
        name="BfArM Updates",
        url="https://www.bfarm.de/DE/Service/RSS/_node.html",
        authority="BfArM",
        region="DE",
    ),
    RSSFeed(
        id="swissmedic-main",
        name="Swissmedic Updates",
        url="https://www.swissmedic.ch/swissmedic/de/home.rss.html",
        authority="Swissmedic",
        region="CH",
    ),
    RSSFeed(
        id="mhra-main",
        name="MHRA Updates",
        url="https://www.gov.uk/government/organisations/medicines-and-healthcare-products-regulatory-agency.atom",
        authority="MHRA",
        region="UK",
    ),
]

CRITICAL_TERMS = ("recall", "safety alert", "urgent", "immediate action")
HIGH_TERMS = ("warning", "guidance", "approval", "clearance")
MEDIUM_TERMS = ("announcement", "update", "new", "change")


def determine_rss_priority(title: str, description: str) -> str:
    """Derive a priority from keywords in a feed entry."""
    text = f"{title} {description}".lower()
    if any(term in text for term in CRITICAL_TERMS):
        return "critical"
    if any(term in text for term in HIGH_TERMS):
        return "high"
    if any(term in text for term in MEDIUM_TERMS):
        return "medium"
    return "low"


def _clean_text(text: str) -> str:
    """Strip markup from feed summaries."""
    text = re.sub(r"<[^>]+>", "", text or "")
    return re.sub(r"\s+", " ", text).strip()


class RSSFeedMonitor:
    """Fetch entries from agency feeds."""

    def __init__(
        self,
        feeds: Optional[list[RSSFeed]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.feeds = list(feeds) if feeds is not None else list(DEFAULT_FEEDS)
        self.sleep = sleep
        self.delay_seconds = config.get("scraper.rss_delay_seconds", 2)
        self.user_agent = config.get("scraper.user_agent")

    def fetch_all(self) -> ScrapeResult:
        """
        Fetch every active feed sequentially.

        A failing feed is logged and recorded; the others are still read.
        """
        result = ScrapeResult(scrape_time=datetime.now())
        active = [f for f in self.feeds if f.active]

        for i, feed in enumerate(active):
            try:
                logger.info("Checking feed: %s", feed.name)
                items = self.fetch_feed(feed)
                result.items.extend(items)
                result.sources_scraped += 1
                logger.info("  %s: %d entries", feed.name, len(items))
            except Exception as e:
                logger.error("Feed %s failed: %s", feed.name, e)
                result.errors.append(f"{feed.name}: {e}")

            if i < len(active) - 1 and self.delay_seconds:
                self.sleep(self.delay_seconds)

        return result

    def fetch_feed(self, feed: RSSFeed) -> list[ScrapedItem]:
        """Parse a single feed into ScrapedItems."""
        parsed = feedparser.parse(feed.url, agent=self.user_agent)

        if parsed.get("bozo") and not parsed.entries:
            raise ValueError(f"Could not parse feed: {parsed.get('bozo_exception')}")

        now = datetime.now().isoformat()
        items = []
        for entry in parsed.entries:
            title = _clean_text(entry.get("title", ""))
            if not title:
                continue

            description = _clean_text(entry.get("summary", ""))
            link = entry.get("link") or feed.url
            published = self._parse_date(entry)
            categories = [t.get("term") for t in entry.get("tags", []) if t.get("term")]

            items.append(
                ScrapedItem(
                    source_name=f"{feed.name} (RSS)",
                    source_id=feed.id,
                    title=f"{feed.authority}: {title}",
                    url=link,
                    content=self._format_content(feed, description, link, entry.get("author"), categories),
                    category="regulatory_update",
                    region=feed.region,
                    publication_date=published.isoformat() if published else now,
                    scrape_timestamp=now,
                    regulation_type="RSS_Update",
                    priority=determine_rss_priority(title, description),
                    keywords=categories[:6],
                )
            )

        return items

    def _format_content(
        self,
        feed: RSSFeed,
        description: str,
        link: str,
        author: Optional[str],
        categories: list[str],
    ) -> str:
        parts = [f"Source: {feed.name}"]
        if author:
            parts.append(f"Author: {author}")
        if categories:
            parts.append(f"Categories: {', '.join(categories)}")
        if link:
            parts.append(f"Original Link: {link}")
        if description:
            parts.append(f"Description:\n{description}")
        return "\n\n".join(parts)

    def _parse_date(self, item) -> Optional[datetime]:
        """Extract publication date from feed item."""
        for attr in ("published_parsed", "updated_parsed"):
            value = item.get(attr)
            if value:
                try:
                    return datetime.fromtimestamp(mktime(value))
                except (ValueError, OverflowError):
                    continue
        return None
