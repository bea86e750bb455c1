"""
Record types shared by the collection, enrichment, export and API layers.

All records are flat dataclasses. List and dict fields are stored as JSON
text in SQLite and decoded again by ``from_row``.
"""

import json
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Optional

# Fields that hold JSON-encoded values in the database
JSON_LIST_FIELDS = {"device_classes", "categories", "keywords", "tags"}
JSON_DICT_FIELDS = {"metadata"}


def _decode(name: str, value: Any) -> Any:
    """Decode a JSON column value into its Python type."""
    if name in JSON_LIST_FIELDS:
        if not value:
            return []
        return json.loads(value) if isinstance(value, str) else list(value)
    if name in JSON_DICT_FIELDS:
        if not value:
            return {}
        return json.loads(value) if isinstance(value, str) else dict(value)
    if name == "is_published":
        return bool(value)
    return value


class _Record:
    """Mixin with row conversion helpers."""

    @classmethod
    def from_row(cls, row: Any):
        """Build a record from a sqlite3.Row or mapping, ignoring unknown columns."""
        data = dict(row)
        known = {f.name for f in fields(cls)}
        return cls(**{k: _decode(k, v) for k, v in data.items() if k in known})

    @classmethod
    def from_dict(cls, data: dict):
        """Build a record from a plain dict, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> dict:
        return asdict(self)

    def to_row(self) -> dict:
        """Return column values with list/dict fields JSON-encoded, without ``id``."""
        row = {}
        for key, value in asdict(self).items():
            if key == "id":
                continue
            if key in JSON_LIST_FIELDS or key in JSON_DICT_FIELDS:
                value = json.dumps(value, ensure_ascii=False)
            row[key] = value
        return row


@dataclass
class RegulatoryUpdate(_Record):
    """A regulatory update (guidance, regulation, recall, ...) from an agency."""

    title: str
    description: Optional[str] = None
    content: Optional[str] = None
    source_id: Optional[str] = None
    source_url: Optional[str] = None
    region: str = "Global"
    update_type: str = "regulation"
    priority: str = "medium"
    device_classes: list[str] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    device_type: Optional[str] = None
    therapeutic_area: Optional[str] = None
    published_at: Optional[str] = None
    effective_date: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    id: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class LegalCase(_Record):
    """A court decision relevant to medical device law."""

    title: str
    court: str
    jurisdiction: str
    case_number: Optional[str] = None
    summary: Optional[str] = None
    content: Optional[str] = None
    decision_date: Optional[str] = None
    verdict: Optional[str] = None
    damages: Optional[str] = None
    outcome: Optional[str] = None
    impact_level: Optional[str] = None
    document_url: Optional[str] = None
    keywords: list[str] = field(default_factory=list)
    id: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class KnowledgeArticle(_Record):
    """A knowledge base article."""

    title: str
    content: str
    summary: Optional[str] = None
    category: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    authority: Optional[str] = None
    language: str = "en"
    author: Optional[str] = None
    source_url: Optional[str] = None
    is_published: bool = False
    published_at: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class HistoricalDataRecord(_Record):
    """An archived source document with its raw text."""

    title: str
    document_id: Optional[str] = None
    description: Optional[str] = None
    source_id: Optional[str] = None
    source_type: Optional[str] = None
    document_url: Optional[str] = None
    region: Optional[str] = None
    category: Optional[str] = None
    priority: Optional[str] = None
    device_classes: list[str] = field(default_factory=list)
    raw_text: Optional[str] = None
    published_at: Optional[str] = None
    archived_at: Optional[str] = None
    id: Optional[int] = None


@dataclass
class ScrapedItem:
    """A single block of content extracted from a regulatory source."""

    source_name: str
    source_id: str
    title: str
    url: str
    content: str
    category: str
    region: str
    publication_date: str
    scrape_timestamp: str
    regulation_type: Optional[str] = None
    device_class: Optional[str] = None
    keywords: list[str] = field(default_factory=list)
    priority: Optional[str] = None
    categories: list[str] = field(default_factory=list)
    is_fallback: bool = False

    def to_dict(self) -> dict:
        return asdict(self)
