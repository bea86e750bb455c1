"""
Legal case routes.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from regintel.database import Database
from regintel.enrichment.analysis import analyze_legal_case
from regintel.enrichment.approval import ApprovalService
from regintel.export.pdf import full_decision_text, legal_decision_pdf
from regintel.models import LegalCase
from regintel.web.dependencies import api_response, get_approval_service, get_db, patch_changes, pdf_response
from regintel.web.schemas import LegalCaseCreate, LegalCasePatch

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/legal-cases", tags=["legal-cases"])


def _get_or_404(db: Database, case_id: int) -> LegalCase:
    legal_case = db.get_legal_case(case_id)
    if legal_case is None:
        raise HTTPException(status_code=404, detail="Legal case not found")
    return legal_case


@router.get("")
async def list_cases(
    jurisdiction: Optional[str] = None,
    court: Optional[str] = None,
    limit: int = Query(50, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: Database = Depends(get_db),
):
    cases = db.list_legal_cases(jurisdiction=jurisdiction, court=court, limit=limit, offset=offset)
    return api_response([c.to_dict() for c in cases])


@router.post("", status_code=201)
async def create_case(body: LegalCaseCreate, db: Database = Depends(get_db)):
    case_id = db.add_legal_case(LegalCase(**body.model_dump()))
    logger.info("Created legal case %d: %s", case_id, body.title)
    return api_response(_get_or_404(db, case_id).to_dict())


@router.get("/{case_id}")
async def get_case(case_id: int, db: Database = Depends(get_db)):
    return api_response(_get_or_404(db, case_id).to_dict())


@router.patch("/{case_id}")
async def patch_case(case_id: int, body: LegalCasePatch, db: Database = Depends(get_db)):
    _get_or_404(db, case_id)
    changes = patch_changes(body, ("title", "court", "jurisdiction"))
    if changes:
        db.update_legal_case(case_id, **changes)
    return api_response(_get_or_404(db, case_id).to_dict())


@router.delete("/{case_id}")
async def delete_case(case_id: int, db: Database = Depends(get_db)):
    if not db.delete_legal_case(case_id):
        raise HTTPException(status_code=404, detail="Legal case not found")
    return api_response({"deleted": case_id})


@router.get("/{case_id}/pdf")
async def download_decision_pdf(case_id: int, db: Database = Depends(get_db)):
    legal_case = _get_or_404(db, case_id)
    return pdf_response(legal_decision_pdf(legal_case), legal_case.case_number or legal_case.title, "decision")


@router.get("/{case_id}/decision-text")
async def decision_text(case_id: int, db: Database = Depends(get_db)):
    """Plain-text rendering of the full decision."""
    legal_case = _get_or_404(db, case_id)
    return api_response({"id": case_id, "text": full_decision_text(legal_case)})


@router.post("/{case_id}/evaluate")
async def evaluate_case(
    case_id: int,
    db: Database = Depends(get_db),
    service: ApprovalService = Depends(get_approval_service),
):
    """Evaluate a case for approval and summarize its themes and precedent value."""
    legal_case = _get_or_404(db, case_id)
    decision = service.evaluate_legal_case(legal_case)
    analysis = analyze_legal_case(legal_case.title, legal_case.summary or "", legal_case.keywords)
    return api_response({"decision": decision.to_dict(), "analysis": analysis.to_dict()})
