"""
Dashboard routes: statistics, trend analysis, approval settings and newsletter export.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from regintel.database import Database
from regintel.enrichment.analysis import analyze_market_trends
from regintel.enrichment.approval import ApprovalService
from regintel.export.pdf import newsletter_pdf
from regintel.web.dependencies import api_response, get_approval_service, get_db, pdf_response
from regintel.web.schemas import NewsletterRequest

router = APIRouter(prefix="/api", tags=["dashboard"])


@router.get("/dashboard/stats")
async def dashboard_stats(db: Database = Depends(get_db)):
    """Record counts and breakdowns for the dashboard."""
    return api_response(db.get_statistics())


@router.get("/dashboard/trends")
async def dashboard_trends(days: int = Query(30, ge=1, le=365), db: Database = Depends(get_db)):
    """Emerging trends and regional activity over the last ``days`` days."""
    return api_response(analyze_market_trends(db.get_all_regulatory_updates(), days=days))


@router.get("/approval/metrics")
async def approval_metrics(service: ApprovalService = Depends(get_approval_service)):
    return api_response(service.get_service_metrics())


@router.post("/newsletter/pdf")
async def newsletter_download(body: NewsletterRequest, db: Database = Depends(get_db)):
    """
    Render a newsletter PDF.

    Uses the listed ``update_ids`` when given (unknown ids are skipped),
    otherwise the most recent updates for ``region``.
    """
    if body.update_ids:
        updates = [u for u in (db.get_regulatory_update(i) for i in body.update_ids) if u is not None]
    else:
        updates = db.get_recent_regulatory_updates(limit=body.limit, region=body.region)

    newsletter = {
        "title": body.title,
        "content": body.content,
        "status": body.status,
        "created_at": datetime.now().isoformat(),
        "updates": [u.to_dict() for u in updates],
    }
    return pdf_response(newsletter_pdf(newsletter), body.title, "newsletter")
