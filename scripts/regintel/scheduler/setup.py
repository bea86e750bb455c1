"""
APScheduler factory: creates the scheduler with the collection and enhancement jobs.
"""

import logging

from apscheduler.events import EVENT_JOB_ERROR
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from regintel.config import config

logger = logging.getLogger(__name__)


def create_scheduler() -> AsyncIOScheduler:
    """Create an AsyncIOScheduler with the data collection jobs configured.

    Reads the schedule from the ``scheduler`` config section. Jobs use
    misfire_grace_time=3600 so runs missed while the host slept still fire.

    Returns:
        Configured AsyncIOScheduler (not yet started).
    """
    timezone = config.get("scheduler.timezone", "Europe/Berlin")
    scheduler = AsyncIOScheduler(timezone=timezone)

    _add_collection_job(scheduler)
    _add_enhancement_job(scheduler)

    from regintel.scheduler.error_handler import job_error_listener

    scheduler.add_listener(job_error_listener, mask=EVENT_JOB_ERROR)

    logger.info(
        "Scheduler configured with %d jobs (timezone=%s)", len(scheduler.get_jobs()), timezone
    )
    return scheduler


def _add_collection_job(scheduler: AsyncIOScheduler) -> None:
    """Add the periodic scrape and feed collection job."""
    from regintel.scheduler.jobs import collection_job

    hours = config.get("scheduler.collection_interval_hours", 6)

    scheduler.add_job(
        collection_job,
        IntervalTrigger(hours=hours),
        id="collection",
        name="Regulatory Data Collection",
        misfire_grace_time=3600,
        replace_existing=True,
    )
    logger.info("Collection scheduled every %s hours", hours)


def _add_enhancement_job(scheduler: AsyncIOScheduler) -> None:
    """Add the daily content enhancement job."""
    from regintel.scheduler.jobs import enhancement_job

    enhancement_time = config.get("scheduler.enhancement_time", "03:00")
    hour, minute = _parse_time(enhancement_time)

    scheduler.add_job(
        enhancement_job,
        CronTrigger(hour=hour, minute=minute),
        id="enhancement",
        name="Daily Content Enhancement",
        misfire_grace_time=3600,
        replace_existing=True,
    )
    logger.info("Enhancement scheduled daily at %s", enhancement_time)


def _parse_time(time_str: str) -> tuple[int, int]:
    """Parse 'HH:MM' string to (hour, minute) tuple."""
    parts = str(time_str).split(":")
    return int(parts[0]), int(parts[1]) if len(parts) > 1 else 0
