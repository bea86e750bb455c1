"""
Source listing, data collection and enhancement routes.

Collection and mass enhancement run as background tasks; their progress is
tracked in module-level status dicts.
"""

import logging
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from regintel.database import Database
from regintel.enrichment.enhancer import mass_enhance_all
from regintel.scraping.rss import DEFAULT_FEEDS
from regintel.services import get_pipeline, get_scraper
from regintel.web.dependencies import api_response, get_db
from regintel.web.schemas import CollectionRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["collection"])

# Background job status tracking
collection_status = {"running": False, "last_result": None, "error": None}
enhancement_status = {"running": False, "last_result": None, "error": None}


def do_collection(db: Database, include_rss: Optional[bool] = None):
    """Run a full collection (background task). The route marks the job running."""
    try:
        result = get_pipeline(db).run(include_rss=include_rss)
        collection_status["last_result"] = {
            "run_id": result.run_id,
            "sources_scraped": result.sources_scraped,
            "items_found": result.items_found,
            "inserted": result.inserted,
            "duplicates": result.duplicates,
            "errors": result.errors,
        }
    except Exception as e:
        logger.exception("Background collection failed")
        collection_status["error"] = str(e)
    finally:
        collection_status["running"] = False


def do_enhancement(db: Database):
    """Enhance all stored updates (background task)."""
    try:
        enhancement_status["last_result"] = mass_enhance_all(db)
    except Exception as e:
        logger.exception("Background enhancement failed")
        enhancement_status["error"] = str(e)
    finally:
        enhancement_status["running"] = False


@router.get("/sources")
async def list_sources():
    """Configured regulatory sources and agency feeds."""
    scraper = get_scraper()
    return api_response(
        {
            "sources": [s.to_dict() for s in scraper.get_sources()],
            "feeds": [asdict(f) for f in DEFAULT_FEEDS],
        }
    )


@router.get("/sources/stats")
async def source_stats():
    stats = get_scraper().get_stats()
    stats["rss_feeds"] = len(DEFAULT_FEEDS)
    return api_response(stats)


@router.post("/collection/run", status_code=202)
async def start_collection(
    background_tasks: BackgroundTasks,
    body: Optional[CollectionRequest] = None,
    db: Database = Depends(get_db),
):
    """Start a collection run in the background."""
    if collection_status["running"]:
        raise HTTPException(status_code=409, detail="A collection run is already in progress")

    # Claimed before queueing so a second request gets 409 until the task finishes
    collection_status.update(running=True, last_result=None, error=None)
    include_rss = body.include_rss if body else None
    background_tasks.add_task(do_collection, db, include_rss)
    return api_response({"started": True})


@router.get("/collection/status")
async def get_collection_status():
    """Return current collection status as JSON (for polling)."""
    return JSONResponse(collection_status)


@router.get("/collection/runs")
async def list_collection_runs(limit: int = Query(20, ge=1, le=200), db: Database = Depends(get_db)):
    return api_response(db.list_collection_runs(limit=limit))


@router.post("/enhancement/run", status_code=202)
async def start_enhancement(background_tasks: BackgroundTasks, db: Database = Depends(get_db)):
    """Start mass content enhancement in the background."""
    if enhancement_status["running"]:
        raise HTTPException(status_code=409, detail="Enhancement is already in progress")

    enhancement_status.update(running=True, last_result=None, error=None)
    background_tasks.add_task(do_enhancement, db)
    return api_response({"started": True})


@router.get("/enhancement/status")
async def get_enhancement_status():
    return JSONResponse(enhancement_status)
