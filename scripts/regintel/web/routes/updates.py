"""
Regulatory update routes: listing, search, CRUD, PDF export and enrichment.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from regintel.database import Database
from regintel.enrichment.approval import ApprovalService
from regintel.enrichment.enhancer import ContentEnhancer, is_enhanced
from regintel.export.pdf import regulatory_update_pdf
from regintel.models import RegulatoryUpdate
from regintel.web.dependencies import (
    api_response,
    get_approval_service,
    get_db,
    get_enhancer,
    patch_changes,
    pdf_response,
    normalize_update_fields,
)
from regintel.web.schemas import RegulatoryUpdateCreate, RegulatoryUpdatePatch

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/regulatory-updates", tags=["regulatory-updates"])


def _get_or_404(db: Database, update_id: int) -> RegulatoryUpdate:
    update = db.get_regulatory_update(update_id)
    if update is None:
        raise HTTPException(status_code=404, detail="Regulatory update not found")
    return update


@router.get("")
async def list_updates(
    region: Optional[str] = None,
    priority: Optional[str] = None,
    update_type: Optional[str] = None,
    limit: int = Query(50, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: Database = Depends(get_db),
):
    """List regulatory updates with optional filters."""
    filters = normalize_update_fields({"region": region, "priority": priority, "update_type": update_type})
    updates = db.list_regulatory_updates(**filters, limit=limit, offset=offset)
    return api_response([u.to_dict() for u in updates])


@router.get("/recent")
async def recent_updates(
    limit: int = Query(50, ge=1, le=1000),
    region: Optional[str] = None,
    db: Database = Depends(get_db),
):
    """Most recent updates; ``region=all`` or no region returns every region."""
    updates = db.get_recent_regulatory_updates(limit=limit, region=region)
    return api_response([u.to_dict() for u in updates])


@router.get("/search")
async def search_updates(
    q: str = Query(..., min_length=1),
    limit: int = Query(20, ge=1, le=100),
    db: Database = Depends(get_db),
):
    """Full-text search over title, description and content."""
    updates = db.search_regulatory_updates(q, limit=limit)
    return api_response([u.to_dict() for u in updates])


@router.post("", status_code=201)
async def create_update(body: RegulatoryUpdateCreate, db: Database = Depends(get_db)):
    update = RegulatoryUpdate(**normalize_update_fields(body.model_dump()))
    update.id = db.add_regulatory_update(update)
    logger.info("Created regulatory update %d: %s", update.id, update.title)
    return api_response(_get_or_404(db, update.id).to_dict())


@router.get("/{update_id}")
async def get_update(update_id: int, db: Database = Depends(get_db)):
    return api_response(_get_or_404(db, update_id).to_dict())


@router.patch("/{update_id}")
async def patch_update(update_id: int, body: RegulatoryUpdatePatch, db: Database = Depends(get_db)):
    """Update selected fields of a regulatory update."""
    _get_or_404(db, update_id)
    changes = normalize_update_fields(patch_changes(body))
    if changes:
        db.update_regulatory_update(update_id, **changes)
    return api_response(_get_or_404(db, update_id).to_dict())


@router.delete("/{update_id}")
async def delete_update(update_id: int, db: Database = Depends(get_db)):
    if not db.delete_regulatory_update(update_id):
        raise HTTPException(status_code=404, detail="Regulatory update not found")
    return api_response({"deleted": update_id})


@router.get("/{update_id}/pdf")
async def download_update_pdf(update_id: int, db: Database = Depends(get_db)):
    update = _get_or_404(db, update_id)
    return pdf_response(regulatory_update_pdf(update), update.title, "regulatory_update")


@router.post("/{update_id}/evaluate")
async def evaluate_update(
    update_id: int,
    db: Database = Depends(get_db),
    service: ApprovalService = Depends(get_approval_service),
):
    """Run the approval evaluation for an update."""
    update = _get_or_404(db, update_id)
    decision = service.evaluate_regulatory_update(update)
    return api_response(decision.to_dict())


@router.post("/{update_id}/enhance")
async def enhance_update(
    update_id: int,
    db: Database = Depends(get_db),
    enhancer: ContentEnhancer = Depends(get_enhancer),
):
    """Expand an update's content with the structured analysis sections."""
    update = _get_or_404(db, update_id)
    if is_enhanced(update.content):
        return api_response({"enhanced": False, "reason": "already enhanced", "update": update.to_dict()})

    enhanced = enhancer.enhance_update(db, update_id)
    return api_response({"enhanced": enhanced, "update": _get_or_404(db, update_id).to_dict()})
