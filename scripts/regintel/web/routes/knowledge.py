"""
Knowledge base article routes.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from regintel.database import Database
from regintel.export.pdf import knowledge_article_pdf
from regintel.models import KnowledgeArticle
from regintel.web.dependencies import api_response, get_db, patch_changes, pdf_response
from regintel.web.schemas import KnowledgeArticleCreate, KnowledgeArticlePatch

router = APIRouter(prefix="/api/knowledge-base", tags=["knowledge-base"])


def _get_or_404(db: Database, article_id: int) -> KnowledgeArticle:
    article = db.get_knowledge_article(article_id)
    if article is None:
        raise HTTPException(status_code=404, detail="Article not found")
    return article


@router.get("")
async def list_articles(
    category: Optional[str] = None,
    tag: Optional[str] = None,
    language: Optional[str] = None,
    published_only: bool = False,
    limit: int = Query(50, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: Database = Depends(get_db),
):
    articles = db.list_knowledge_articles(
        category=category,
        tag=tag,
        language=language,
        published_only=published_only,
        limit=limit,
        offset=offset,
    )
    return api_response([a.to_dict() for a in articles])


@router.get("/search")
async def search_articles(
    q: str = Query(..., min_length=1),
    limit: int = Query(20, ge=1, le=100),
    db: Database = Depends(get_db),
):
    articles = db.search_knowledge_articles(q, limit=limit)
    return api_response([a.to_dict() for a in articles])


@router.post("", status_code=201)
async def create_article(body: KnowledgeArticleCreate, db: Database = Depends(get_db)):
    article_id = db.add_knowledge_article(KnowledgeArticle(**body.model_dump()))
    return api_response(_get_or_404(db, article_id).to_dict())


@router.get("/{article_id}")
async def get_article(article_id: int, db: Database = Depends(get_db)):
    return api_response(_get_or_404(db, article_id).to_dict())


@router.patch("/{article_id}")
async def patch_article(article_id: int, body: KnowledgeArticlePatch, db: Database = Depends(get_db)):
    _get_or_404(db, article_id)
    changes = patch_changes(body, ("title", "content", "language", "is_published"))
    if changes:
        db.update_knowledge_article(article_id, **changes)
    return api_response(_get_or_404(db, article_id).to_dict())


@router.delete("/{article_id}")
async def delete_article(article_id: int, db: Database = Depends(get_db)):
    if not db.delete_knowledge_article(article_id):
        raise HTTPException(status_code=404, detail="Article not found")
    return api_response({"deleted": article_id})


@router.get("/{article_id}/pdf")
async def download_article_pdf(article_id: int, db: Database = Depends(get_db)):
    article = _get_or_404(db, article_id)
    return pdf_response(knowledge_article_pdf(article), article.title, "article")
