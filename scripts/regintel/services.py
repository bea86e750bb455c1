"""Shared service accessors for core regintel components.

Provides a single place to retrieve configured singleton-backed services.
"""

from .config import config


def get_config():
    """Return application configuration instance."""
    return config


def get_db():
    """Return database service instance."""
    from .database import db

    return db


def get_scraper():
    """Return a regulatory web scraper."""
    from .scraping.scraper import RegulatoryDataScraper

    return RegulatoryDataScraper()


def get_pipeline(db=None):
    """Return a collection pipeline bound to ``db`` (default database if omitted)."""
    from .scraping.pipeline import CollectionPipeline

    return CollectionPipeline(db or get_db())


def get_approval_service():
    """Return approval service instance."""
    from .enrichment.approval import ApprovalService

    return ApprovalService()


def get_enhancer():
    """Return content enhancer instance."""
    from .enrichment.enhancer import ContentEnhancer

    return ContentEnhancer()
