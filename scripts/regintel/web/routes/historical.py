"""
Historical archive routes.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from regintel.database import Database
from regintel.export.pdf import historical_document_pdf
from regintel.models import HistoricalDataRecord
from regintel.web.dependencies import api_response, get_db, pdf_response
from regintel.web.schemas import HistoricalRecordCreate

router = APIRouter(prefix="/api/historical/data", tags=["historical"])


def _get_or_404(db: Database, record_id: int) -> HistoricalDataRecord:
    record = db.get_historical_record(record_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Historical record not found")
    return record


@router.get("")
async def list_records(
    source_id: Optional[str] = None,
    region: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: Database = Depends(get_db),
):
    """List archived documents, optionally limited to a publication date range."""
    records = db.list_historical_records(
        source_id=source_id,
        region=region,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        offset=offset,
    )
    return api_response([r.to_dict() for r in records])


@router.post("", status_code=201)
async def create_record(body: HistoricalRecordCreate, db: Database = Depends(get_db)):
    record_id = db.add_historical_record(HistoricalDataRecord(**body.model_dump()))
    return api_response(_get_or_404(db, record_id).to_dict())


@router.get("/{record_id}")
async def get_record(record_id: int, db: Database = Depends(get_db)):
    return api_response(_get_or_404(db, record_id).to_dict())


@router.delete("/{record_id}")
async def delete_record(record_id: int, db: Database = Depends(get_db)):
    if not db.delete_historical_record(record_id):
        raise HTTPException(status_code=404, detail="Historical record not found")
    return api_response({"deleted": record_id})


@router.get("/{record_id}/pdf")
async def download_record_pdf(record_id: int, db: Database = Depends(get_db)):
    record = _get_or_404(db, record_id)
    return pdf_response(historical_document_pdf(record), record.document_id or record.title, "historical")
