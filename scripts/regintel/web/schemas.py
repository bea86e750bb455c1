"""
Request bodies for the JSON API.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class RegulatoryUpdateCreate(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    content: Optional[str] = None
    source_id: Optional[str] = None
    source_url: Optional[str] = None
    region: str = "Global"
    update_type: str = "regulation"
    priority: str = "medium"
    device_classes: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    device_type: Optional[str] = None
    therapeutic_area: Optional[str] = None
    published_at: Optional[str] = None
    effective_date: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class RegulatoryUpdatePatch(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    content: Optional[str] = None
    source_id: Optional[str] = None
    source_url: Optional[str] = None
    region: Optional[str] = None
    update_type: Optional[str] = None
    priority: Optional[str] = None
    device_classes: Optional[list[str]] = None
    categories: Optional[list[str]] = None
    keywords: Optional[list[str]] = None
    device_type: Optional[str] = None
    therapeutic_area: Optional[str] = None
    published_at: Optional[str] = None
    effective_date: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None


class LegalCaseCreate(BaseModel):
    title: str = Field(min_length=1)
    court: str = Field(min_length=1)
    jurisdiction: str = Field(min_length=1)
    case_number: Optional[str] = None
    summary: Optional[str] = None
    content: Optional[str] = None
    decision_date: Optional[str] = None
    verdict: Optional[str] = None
    damages: Optional[str] = None
    outcome: Optional[str] = None
    impact_level: Optional[str] = None
    document_url: Optional[str] = None
    keywords: list[str] = Field(default_factory=list)


class LegalCasePatch(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    court: Optional[str] = Field(default=None, min_length=1)
    jurisdiction: Optional[str] = Field(default=None, min_length=1)
    case_number: Optional[str] = None
    summary: Optional[str] = None
    content: Optional[str] = None
    decision_date: Optional[str] = None
    verdict: Optional[str] = None
    damages: Optional[str] = None
    outcome: Optional[str] = None
    impact_level: Optional[str] = None
    document_url: Optional[str] = None
    keywords: Optional[list[str]] = None


class KnowledgeArticleCreate(BaseModel):
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    summary: Optional[str] = None
    category: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    authority: Optional[str] = None
    language: str = "en"
    author: Optional[str] = None
    source_url: Optional[str] = None
    is_published: bool = False
    published_at: Optional[str] = None


class KnowledgeArticlePatch(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    content: Optional[str] = Field(default=None, min_length=1)
    summary: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[list[str]] = None
    authority: Optional[str] = None
    language: Optional[str] = None
    author: Optional[str] = None
    source_url: Optional[str] = None
    is_published: Optional[bool] = None
    published_at: Optional[str] = None


class HistoricalRecordCreate(BaseModel):
    title: str = Field(min_length=1)
    document_id: Optional[str] = None
    description: Optional[str] = None
    source_id: Optional[str] = None
    source_type: Optional[str] = None
    document_url: Optional[str] = None
    region: Optional[str] = None
    category: Optional[str] = None
    priority: Optional[str] = None
    device_classes: list[str] = Field(default_factory=list)
    raw_text: Optional[str] = None
    published_at: Optional[str] = None


class CollectionRequest(BaseModel):
    include_rss: Optional[bool] = None


class NewsletterRequest(BaseModel):
    title: str = "Regulatory Intelligence Newsletter"
    content: Optional[str] = None
    status: str = "Draft"
    update_ids: list[int] = Field(default_factory=list)
    region: Optional[str] = None
    limit: int = Field(default=10, ge=1, le=100)
