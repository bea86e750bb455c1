"""
Deduplication of scraped items by URL normalization and title similarity.
"""

import logging
import re
from difflib import SequenceMatcher
from typing import Optional
from urllib.parse import parse_qs, urlencode, urlparse, urlunparse

from ..models import ScrapedItem

logger = logging.getLogger(__name__)

TITLE_SIMILARITY_THRESHOLD = 0.85

TRACKING_PARAMS = {
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "utm_content",
    "utm_term",
    "ref",
    "source",
}


def normalize_url(url: Optional[str]) -> Optional[str]:
    """Normalize a URL for comparison.

    Lowercases, drops tracking parameters, fragments and trailing slashes.
    """
    if not url:
        return None

    try:
        parsed = urlparse(url.lower().strip())
        if parsed.query:
            params = parse_qs(parsed.query)
            filtered = {k: v for k, v in params.items() if k not in TRACKING_PARAMS}
            query = urlencode(filtered, doseq=True)
        else:
            query = ""
        path = parsed.path.rstrip("/")
        return urlunparse((parsed.scheme, parsed.netloc, path, parsed.params, query, ""))
    except ValueError:
        return url


def normalize_title(title: str) -> str:
    """Lowercase, strip punctuation and collapse whitespace."""
    if not title:
        return ""
    text = re.sub(r"[^\w\s]", " ", title.lower())
    return re.sub(r"\s+", " ", text).strip()


def titles_similar(title1: str, title2: str) -> bool:
    n1 = normalize_title(title1)
    n2 = normalize_title(title2)
    if not n1 or not n2:
        return False
    return SequenceMatcher(None, n1, n2).ratio() >= TITLE_SIMILARITY_THRESHOLD


def deduplicate_items(items: list[ScrapedItem]) -> list[ScrapedItem]:
    """Remove duplicate items, keeping the first occurrence.

    One source yields many items from the same page with numbered titles, so
    URL and title similarity only count as duplicates across sources. Within a
    source, only an exact repeat of title and URL is dropped.
    """
    if not items:
        return []

    # source_id -> normalized URLs / titles already kept
    seen_urls: dict[str, set[str]] = {}
    seen_titles: dict[str, list[str]] = {}
    seen_exact: set[tuple[str, str, Optional[str]]] = set()
    unique: list[ScrapedItem] = []

    for item in items:
        norm_url = normalize_url(item.url)
        exact_key = (item.source_id, item.title, norm_url)
        if exact_key in seen_exact:
            continue

        other_sources = [s for s in seen_titles if s != item.source_id]
        if norm_url and any(norm_url in seen_urls[s] for s in other_sources):
            continue
        if any(titles_similar(item.title, t) for s in other_sources for t in seen_titles[s]):
            continue

        seen_exact.add(exact_key)
        seen_titles.setdefault(item.source_id, []).append(item.title)
        urls = seen_urls.setdefault(item.source_id, set())
        if norm_url:
            urls.add(norm_url)
        unique.append(item)

    dedup_count = len(items) - len(unique)
    if dedup_count > 0:
        logger.info("Deduplicated %d items (from %d to %d)", dedup_count, len(items), len(unique))

    return unique
