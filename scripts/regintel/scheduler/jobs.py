"""
Scheduled job definitions.

Jobs are async functions that wrap the synchronous pipeline calls in
asyncio.to_thread() so scraping never blocks the event loop.
"""

import asyncio
import logging

logger = logging.getLogger(__name__)


async def collection_job():
    """Scrape all sources and agency feeds and store new updates."""
    logger.info("Collection job started")

    def _run():
        from regintel.services import get_pipeline

        return get_pipeline().run()

    result = await asyncio.to_thread(_run)
    logger.info("Collection job complete: %s", result)
    return result


async def enhancement_job():
    """Enhance every stored update that has not been enhanced yet."""
    logger.info("Enhancement job started")

    def _run():
        from regintel.enrichment.enhancer import mass_enhance_all
        from regintel.services import get_db

        return mass_enhance_all(get_db())

    counts = await asyncio.to_thread(_run)
    logger.info(
        "Enhancement job complete: %d enhanced, %d skipped, %d errors",
        counts["enhanced"], counts["skipped"], counts["errors"],
    )
    return counts
