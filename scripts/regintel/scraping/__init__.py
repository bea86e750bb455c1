"""
Regulatory data collection.

This module provides:
- Statically configured regulatory web sources with CSS selector profiles
- A sequential web scraper with category-based fallback content
- Agency RSS/Atom feed monitoring
- openFDA 510(k) clearance and device recall collection
- Cross-source deduplication
- The collection pipeline that classifies and stores scraped items
"""

from .dedup import deduplicate_items, normalize_url
from .openfda import OpenFDACollector
from .pipeline import CollectionPipeline, CollectionResult, item_to_update
from .rss import DEFAULT_FEEDS, RSSFeed, RSSFeedMonitor
from .scraper import (
    RegulatoryDataScraper,
    ScrapeResult,
    extract_keywords,
    get_regulation_type,
)
from .sources import DEFAULT_SOURCES, RegulatorySource, get_source

__all__ = [
    # Sources
    "RegulatorySource",
    "DEFAULT_SOURCES",
    "get_source",
    # Scraper
    "RegulatoryDataScraper",
    "ScrapeResult",
    "extract_keywords",
    "get_regulation_type",
    # RSS
    "RSSFeed",
    "RSSFeedMonitor",
    "DEFAULT_FEEDS",
    # openFDA
    "OpenFDACollector",
    # Dedup
    "deduplicate_items",
    "normalize_url",
    # Pipeline
    "CollectionPipeline",
    "CollectionResult",
    "item_to_update",
]
