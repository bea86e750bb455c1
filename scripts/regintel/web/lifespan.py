"""
FastAPI lifespan context manager.

Starts and stops the APScheduler collection and enhancement jobs alongside
the web server. The scheduler is optional and skipped when disabled in
config or when APScheduler is not installed.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage startup/shutdown of the scheduler."""
    app.state.started_at = datetime.now()
    app.state.scheduler = _start_scheduler()

    logger.info("regintel started: scheduler=%s", app.state.scheduler is not None)

    yield

    if app.state.scheduler:
        try:
            app.state.scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped")
        except Exception:
            logger.exception("Error stopping scheduler")

    logger.info("regintel shutdown complete")


def _start_scheduler():
    """Start APScheduler if it is installed and enabled in config."""
    try:
        from regintel.config import config

        if not config.get("scheduler.enabled", False):
            logger.info("Scheduler disabled in config")
            return None

        from regintel.scheduler.setup import create_scheduler

        scheduler = create_scheduler()
        scheduler.start()
        logger.info("APScheduler started with %d jobs", len(scheduler.get_jobs()))
        return scheduler
    except ImportError:
        logger.info("APScheduler not installed - install with: pip install -e '.[scheduler]'")
        return None
    except Exception:
        logger.exception("Failed to start scheduler")
        return None
