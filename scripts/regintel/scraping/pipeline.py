"""
Collection pipeline: scrape, deduplicate, classify and store regulatory updates.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..config import config
from ..database import Database
from ..enrichment.analysis import analyze_regulatory_content, contains_term, prioritize_update
from ..models import RegulatoryUpdate, ScrapedItem
from .dedup import deduplicate_items
from .openfda import OpenFDACollector
from .rss import RSSFeedMonitor
from .scraper import RegulatoryDataScraper

logger = logging.getLogger(__name__)

CATEGORY_UPDATE_TYPES = {
    "regulatory_database": "regulation",
    "regulatory_update": "regulation",
    "market_analysis": "guidance",
    "compliance": "guidance",
    "standards": "standard",
    "approval": "approval",
    "recall": "recall",
}

DESCRIPTION_CHARS = 500

DEVICE_CLASS_PATTERN = re.compile(r"\bclass\s+(iii|ii|i|a|b|c|d)\b", re.IGNORECASE)


def detect_device_classes(text: str) -> list[str]:
    """Find device class mentions such as 'Class II' in text."""
    found = []
    for match in DEVICE_CLASS_PATTERN.finditer(text or ""):
        label = f"Class {match.group(1).upper()}"
        if label not in found:
            found.append(label)
    return found


def item_to_update(item: ScrapedItem) -> RegulatoryUpdate:
    """Convert a scraped item into a classified RegulatoryUpdate."""
    text = f"{item.title} {item.content}"
    analysis = analyze_regulatory_content(text)

    update_type = CATEGORY_UPDATE_TYPES.get(item.category, "regulation")
    if contains_term(item.title, "recall"):
        update_type = "recall"

    description = item.content if len(item.content) <= DESCRIPTION_CHARS else item.content[:DESCRIPTION_CHARS].rsplit(" ", 1)[0] + "..."

    device_classes = [item.device_class] if item.device_class else detect_device_classes(text)

    update = RegulatoryUpdate(
        title=item.title,
        description=description,
        content=item.content,
        source_id=item.source_id,
        source_url=item.url,
        region=config.normalize_region(item.region),
        update_type=update_type,
        device_classes=device_classes,
        categories=list(dict.fromkeys(item.categories + analysis.categories)),
        keywords=item.keywords,
        device_type=analysis.device_types[0] if analysis.device_types else None,
        therapeutic_area=analysis.therapeutic_area,
        published_at=item.publication_date,
        metadata={
            "source_name": item.source_name,
            "regulation_type": item.regulation_type,
            "scraped_at": item.scrape_timestamp,
            "is_fallback": item.is_fallback,
            "risk_level": analysis.risk_level,
            "regulatory_impact": analysis.regulatory_impact,
            "timeline_sensitivity": analysis.timeline_sensitivity,
        },
    )

    if item.priority:
        update.priority = config.normalize_priority(item.priority)
    else:
        assessment = prioritize_update(update)
        update.priority = assessment.priority
        update.metadata["priority_reasoning"] = assessment.reasoning
    return update


@dataclass
class CollectionResult:
    """Results from a collection run."""

    run_id: Optional[int] = None
    sources_scraped: int = 0
    items_found: int = 0
    unique_items: int = 0
    inserted: int = 0
    duplicates: int = 0
    inserted_ids: list[int] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    started_at: Optional[datetime] = None

    def __str__(self) -> str:
        return (
            f"Collected {self.items_found} items from {self.sources_scraped} sources: "
            f"{self.inserted} new, {self.duplicates} duplicates"
            f"{f' ({len(self.errors)} errors)' if self.errors else ''}"
        )


class CollectionPipeline:
    """Runs scraping and feed monitoring and stores the results."""

    def __init__(
        self,
        db: Database,
        scraper: Optional[RegulatoryDataScraper] = None,
        rss_monitor: Optional[RSSFeedMonitor] = None,
        openfda: Optional[OpenFDACollector] = None,
    ) -> None:
        self.db = db
        self.scraper = scraper or RegulatoryDataScraper()
        self.rss_monitor = rss_monitor
        self.openfda = openfda

    def run(
        self,
        include_rss: Optional[bool] = None,
        dry_run: bool = False,
        include_openfda: Optional[bool] = None,
    ) -> CollectionResult:
        """
        Run a full collection.

        Args:
            include_rss: Also read agency feeds. Defaults to ``scraper.rss_enabled``.
            dry_run: Scrape and classify without writing to the database.
            include_openfda: Also read openFDA clearances and recalls.
                Defaults to ``openfda.enabled``.
        """
        if include_rss is None:
            include_rss = config.get("scraper.rss_enabled", True)
        if include_openfda is None:
            include_openfda = config.get("openfda.enabled", True)

        result = CollectionResult(started_at=datetime.now())
        if not dry_run:
            result.run_id = self.db.create_collection_run()

        try:
            items: list[ScrapedItem] = []

            scrape_result = self.scraper.scrape_all_sources()
            items.extend(scrape_result.items)
            result.sources_scraped += scrape_result.sources_scraped
            result.errors.extend(scrape_result.errors)

            if include_rss:
                monitor = self.rss_monitor or RSSFeedMonitor()
                rss_result = monitor.fetch_all()
                items.extend(rss_result.items)
                result.sources_scraped += rss_result.sources_scraped
                result.errors.extend(rss_result.errors)

            if include_openfda:
                collector = self.openfda or OpenFDACollector()
                fda_result = collector.fetch_all()
                items.extend(fda_result.items)
                result.sources_scraped += fda_result.sources_scraped
                result.errors.extend(fda_result.errors)

            result.items_found = len(items)
            unique = deduplicate_items(items)
            result.unique_items = len(unique)
            result.duplicates = len(items) - len(unique)

            for item in unique:
                try:
                    if self.db.source_url_exists(item.url, item.title):
                        result.duplicates += 1
                        continue
                    update = item_to_update(item)
                    if dry_run:
                        logger.info("[dry-run] Would insert: %s (%s)", update.title, update.priority)
                        continue
                    update_id = self.db.add_regulatory_update(update)
                    result.inserted_ids.append(update_id)
                    result.inserted += 1
                except Exception as e:
                    logger.error("Failed to store %s: %s", item.title, e)
                    result.errors.append(f"{item.title}: {e}")

            status = "completed"
        except Exception as e:
            logger.error("Collection run failed: %s", e)
            result.errors.append(str(e))
            status = "failed"

        if result.run_id is not None:
            self.db.update_collection_run(
                result.run_id,
                sources_scraped=result.sources_scraped,
                items_found=result.items_found,
                inserted=result.inserted,
                duplicates=result.duplicates,
                errors=len(result.errors),
                status=status,
            )

        logger.info(str(result))
        return result
