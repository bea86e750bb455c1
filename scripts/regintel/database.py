"""
Database management for the regulatory intelligence service.

Handles SQLite schema creation, CRUD operations for regulatory updates, legal
cases, knowledge articles and historical records, full-text search using FTS5,
and the collection run audit trail.
"""

import json
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional, Type

from .config import config
from .models import (
    JSON_DICT_FIELDS,
    JSON_LIST_FIELDS,
    HistoricalDataRecord,
    KnowledgeArticle,
    LegalCase,
    RegulatoryUpdate,
)

# Fields that may be changed through the update_* methods, per table
UPDATABLE_FIELDS = {
    "regulatory_updates": {
        "title", "description", "content", "source_id", "source_url", "region",
        "update_type", "priority", "device_classes", "categories", "keywords",
        "device_type", "therapeutic_area", "published_at", "effective_date", "metadata",
    },
    "legal_cases": {
        "title", "court", "jurisdiction", "case_number", "summary", "content",
        "decision_date", "verdict", "damages", "outcome", "impact_level",
        "document_url", "keywords",
    },
    "knowledge_articles": {
        "title", "content", "summary", "category", "tags", "authority",
        "language", "author", "source_url", "is_published", "published_at",
    },
}

TERMINAL_RUN_STATUSES = {"completed", "failed"}


class Database:
    """Database manager for the regulatory intelligence service."""

    def __init__(self, db_path: Optional[Path] = None) -> None:
        """
        Initialize the database manager.

        Args:
            db_path: Optional path to the database file. Uses config default if not provided.
        """
        self.db_path = Path(db_path) if db_path else config.database_path
        self._ensure_directory()
        self._init_schema()

    def _ensure_directory(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    @contextmanager
    def connection(self) -> Generator[sqlite3.Connection, None, None]:
        """
        Context manager for database connections.

        Yields:
            SQLite connection with row factory set to sqlite3.Row.
        """
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self) -> None:
        """Initialize the database schema."""
        with self.connection() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS regulatory_updates (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    description TEXT,
                    content TEXT,
                    source_id TEXT,
                    source_url TEXT,
                    region TEXT NOT NULL DEFAULT 'Global',
                    update_type TEXT NOT NULL DEFAULT 'regulation',
                    priority TEXT NOT NULL DEFAULT 'medium',
                    device_classes TEXT NOT NULL DEFAULT '[]',
                    categories TEXT NOT NULL DEFAULT '[]',
                    keywords TEXT NOT NULL DEFAULT '[]',
                    device_type TEXT,
                    therapeutic_area TEXT,
                    published_at TEXT,
                    effective_date TEXT,
                    metadata TEXT NOT NULL DEFAULT '{}',
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE VIRTUAL TABLE IF NOT EXISTS regulatory_updates_fts USING fts5(
                    title,
                    description,
                    content,
                    content='regulatory_updates',
                    content_rowid='id',
                    tokenize='porter unicode61'
                )
            """)

            # Triggers to keep FTS in sync
            cursor.execute("""
                CREATE TRIGGER IF NOT EXISTS regulatory_updates_ai AFTER INSERT ON regulatory_updates BEGIN
                    INSERT INTO regulatory_updates_fts(rowid, title, description, content)
                    VALUES (new.id, new.title, new.description, new.content);
                END
            """)
            cursor.execute("""
                CREATE TRIGGER IF NOT EXISTS regulatory_updates_ad AFTER DELETE ON regulatory_updates BEGIN
                    INSERT INTO regulatory_updates_fts(regulatory_updates_fts, rowid, title, description, content)
                    VALUES ('delete', old.id, old.title, old.description, old.content);
                END
            """)
            cursor.execute("""
                CREATE TRIGGER IF NOT EXISTS regulatory_updates_au AFTER UPDATE ON regulatory_updates BEGIN
                    INSERT INTO regulatory_updates_fts(regulatory_updates_fts, rowid, title, description, content)
                    VALUES ('delete', old.id, old.title, old.description, old.content);
                    INSERT INTO regulatory_updates_fts(rowid, title, description, content)
                    VALUES (new.id, new.title, new.description, new.content);
                END
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS legal_cases (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    court TEXT NOT NULL,
                    jurisdiction TEXT NOT NULL,
                    case_number TEXT,
                    summary TEXT,
                    content TEXT,
                    decision_date TEXT,
                    verdict TEXT,
                    damages TEXT,
                    outcome TEXT,
                    impact_level TEXT,
                    document_url TEXT,
                    keywords TEXT NOT NULL DEFAULT '[]',
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS knowledge_articles (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    content TEXT NOT NULL,
                    summary TEXT,
                    category TEXT,
                    tags TEXT NOT NULL DEFAULT '[]',
                    authority TEXT,
                    language TEXT NOT NULL DEFAULT 'en',
                    author TEXT,
                    source_url TEXT,
                    is_published BOOLEAN DEFAULT 0,
                    published_at TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE VIRTUAL TABLE IF NOT EXISTS knowledge_articles_fts USING fts5(
                    title,
                    summary,
                    content,
                    content='knowledge_articles',
                    content_rowid='id',
                    tokenize='porter unicode61'
                )
            """)
            cursor.execute("""
                CREATE TRIGGER IF NOT EXISTS knowledge_articles_ai AFTER INSERT ON knowledge_articles BEGIN
                    INSERT INTO knowledge_articles_fts(rowid, title, summary, content)
                    VALUES (new.id, new.title, new.summary, new.content);
                END
            """)
            cursor.execute("""
                CREATE TRIGGER IF NOT EXISTS knowledge_articles_ad AFTER DELETE ON knowledge_articles BEGIN
                    INSERT INTO knowledge_articles_fts(knowledge_articles_fts, rowid, title, summary, content)
                    VALUES ('delete', old.id, old.title, old.summary, old.content);
                END
            """)
            cursor.execute("""
                CREATE TRIGGER IF NOT EXISTS knowledge_articles_au AFTER UPDATE ON knowledge_articles BEGIN
                    INSERT INTO knowledge_articles_fts(knowledge_articles_fts, rowid, title, summary, content)
                    VALUES ('delete', old.id, old.title, old.summary, old.content);
                    INSERT INTO knowledge_articles_fts(rowid, title, summary, content)
                    VALUES (new.id, new.title, new.summary, new.content);
                END
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS historical_records (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    document_id TEXT,
                    description TEXT,
                    source_id TEXT,
                    source_type TEXT,
                    document_url TEXT,
                    region TEXT,
                    category TEXT,
                    priority TEXT,
                    device_classes TEXT NOT NULL DEFAULT '[]',
                    raw_text TEXT,
                    published_at TEXT,
                    archived_at TEXT
                )
            """)

            # Collection runs for audit trail
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS collection_runs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    started_at TEXT NOT NULL,
                    completed_at TEXT,
                    sources_scraped INTEGER DEFAULT 0,
                    items_found INTEGER DEFAULT 0,
                    inserted INTEGER DEFAULT 0,
                    duplicates INTEGER DEFAULT 0,
                    errors INTEGER DEFAULT 0,
                    status TEXT DEFAULT 'in_progress'
                )
            """)

            cursor.execute("CREATE INDEX IF NOT EXISTS idx_updates_region ON regulatory_updates(region)")
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_updates_priority ON regulatory_updates(priority)")
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_updates_published ON regulatory_updates(published_at)")
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_updates_source_url ON regulatory_updates(source_url)")
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_cases_jurisdiction ON legal_cases(jurisdiction)")
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_articles_category ON knowledge_articles(category)")
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_historical_source ON historical_records(source_id)")

    # Generic helpers

    def _insert(self, table: str, row: Dict[str, Any], timestamps: bool = True) -> int:
        """Insert a row and return its ID."""
        row = dict(row)
        if timestamps:
            now = datetime.now().isoformat()
            row["created_at"] = row.get("created_at") or now
            row["updated_at"] = now

        columns = ", ".join(row.keys())
        placeholders = ", ".join("?" for _ in row)
        with self.connection() as conn:
            cursor = conn.execute(
                f"INSERT INTO {table} ({columns}) VALUES ({placeholders})",
                list(row.values()),
            )
            return cursor.lastrowid

    def _get(self, table: str, record_cls: Type, record_id: int):
        with self.connection() as conn:
            row = conn.execute(f"SELECT * FROM {table} WHERE id = ?", (record_id,)).fetchone()
            return record_cls.from_row(row) if row else None

    def _update(self, table: str, record_id: int, **kwargs) -> bool:
        """
        Update allowed fields of a row.

        Returns:
            True if the row was updated, False if nothing was changed.
        """
        if not kwargs:
            return False

        allowed_fields = UPDATABLE_FIELDS[table]
        updates = {k: v for k, v in kwargs.items() if k in allowed_fields}
        if not updates:
            return False

        for key, value in updates.items():
            if key in JSON_LIST_FIELDS or key in JSON_DICT_FIELDS:
                updates[key] = json.dumps(value, ensure_ascii=False)
        updates["updated_at"] = datetime.now().isoformat()

        set_clause = ", ".join(f"{k} = ?" for k in updates.keys())
        values = list(updates.values()) + [record_id]

        with self.connection() as conn:
            cursor = conn.execute(f"UPDATE {table} SET {set_clause} WHERE id = ?", values)
            return cursor.rowcount > 0

    def _delete(self, table: str, record_id: int) -> bool:
        with self.connection() as conn:
            cursor = conn.execute(f"DELETE FROM {table} WHERE id = ?", (record_id,))
            return cursor.rowcount > 0

    def _select(self, table: str, record_cls: Type, conditions: List[str], params: List[Any],
                order_by: str, limit: int, offset: int = 0) -> list:
        where_clause = " AND ".join(conditions) if conditions else "1=1"
        with self.connection() as conn:
            cursor = conn.execute(
                f"""
                SELECT * FROM {table}
                WHERE {where_clause}
                ORDER BY {order_by}
                LIMIT ? OFFSET ?
                """,
                params + [limit, offset],
            )
            return [record_cls.from_row(row) for row in cursor.fetchall()]

    @staticmethod
    def _fts_query(query: str) -> str:
        """Quote each term so user input cannot break FTS5 syntax."""
        terms = [t.replace('"', "") for t in query.split()]
        return " ".join(f'"{t}"' for t in terms if t)

    # Regulatory updates

    def add_regulatory_update(self, update: RegulatoryUpdate) -> int:
        """
        Add a regulatory update.

        Args:
            update: The update to store. Its ``id`` is ignored.

        Returns:
            The ID of the newly created row.
        """
        return self._insert("regulatory_updates", update.to_row())

    def get_regulatory_update(self, update_id: int) -> Optional[RegulatoryUpdate]:
        return self._get("regulatory_updates", RegulatoryUpdate, update_id)

    def update_regulatory_update(self, update_id: int, **kwargs) -> bool:
        return self._update("regulatory_updates", update_id, **kwargs)

    def delete_regulatory_update(self, update_id: int) -> bool:
        return self._delete("regulatory_updates", update_id)

    def list_regulatory_updates(
        self,
        region: Optional[str] = None,
        priority: Optional[str] = None,
        update_type: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[RegulatoryUpdate]:
        """
        List regulatory updates with optional filtering, newest first.

        Args:
            region: Filter by region (exact, case-insensitive).
            priority: Filter by priority.
            update_type: Filter by update type.
            limit: Maximum number of results.
            offset: Offset for pagination.
        """
        conditions = []
        params: List[Any] = []

        if region:
            conditions.append("LOWER(region) = LOWER(?)")
            params.append(region)
        if priority:
            conditions.append("priority = ?")
            params.append(priority)
        if update_type:
            conditions.append("update_type = ?")
            params.append(update_type)

        return self._select(
            "regulatory_updates", RegulatoryUpdate, conditions, params,
            "COALESCE(published_at, created_at) DESC, id DESC", limit, offset,
        )

    def get_recent_regulatory_updates(self, limit: int = 50, region: Optional[str] = None) -> List[RegulatoryUpdate]:
        """
        Get the most recent regulatory updates.

        A region of ``None`` or ``"all"`` disables the filter; otherwise the
        region matches case-insensitively as a substring.
        """
        conditions = []
        params: List[Any] = []
        if region and region.lower() != "all":
            conditions.append("LOWER(region) LIKE ?")
            params.append(f"%{region.lower()}%")

        return self._select(
            "regulatory_updates", RegulatoryUpdate, conditions, params,
            "COALESCE(published_at, created_at) DESC, id DESC", limit,
        )

    def get_all_regulatory_updates(self) -> List[RegulatoryUpdate]:
        with self.connection() as conn:
            rows = conn.execute("SELECT * FROM regulatory_updates ORDER BY id").fetchall()
            return [RegulatoryUpdate.from_row(row) for row in rows]

    def search_regulatory_updates(self, query: str, limit: int = 20) -> List[RegulatoryUpdate]:
        """Search regulatory updates using full-text search, best match first."""
        fts_query = self._fts_query(query)
        if not fts_query:
            return []

        with self.connection() as conn:
            cursor = conn.execute(
                """
                SELECT u.*, bm25(regulatory_updates_fts) as relevance
                FROM regulatory_updates_fts fts
                JOIN regulatory_updates u ON fts.rowid = u.id
                WHERE regulatory_updates_fts MATCH ?
                ORDER BY relevance
                LIMIT ?
                """,
                (fts_query, limit),
            )
            return [RegulatoryUpdate.from_row(row) for row in cursor.fetchall()]

    def source_url_exists(self, url: Optional[str], title: str) -> bool:
        """Check whether an update with the same title and source URL is already stored."""
        with self.connection() as conn:
            cursor = conn.execute(
                "SELECT 1 FROM regulatory_updates WHERE title = ? AND IFNULL(source_url, '') = ?",
                (title, url or ""),
            )
            return cursor.fetchone() is not None

    # Legal cases

    def add_legal_case(self, legal_case: LegalCase) -> int:
        return self._insert("legal_cases", legal_case.to_row())

    def get_legal_case(self, case_id: int) -> Optional[LegalCase]:
        return self._get("legal_cases", LegalCase, case_id)

    def update_legal_case(self, case_id: int, **kwargs) -> bool:
        return self._update("legal_cases", case_id, **kwargs)

    def delete_legal_case(self, case_id: int) -> bool:
        return self._delete("legal_cases", case_id)

    def list_legal_cases(
        self,
        jurisdiction: Optional[str] = None,
        court: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[LegalCase]:
        conditions = []
        params: List[Any] = []
        if jurisdiction:
            conditions.append("LOWER(jurisdiction) = LOWER(?)")
            params.append(jurisdiction)
        if court:
            conditions.append("LOWER(court) LIKE ?")
            params.append(f"%{court.lower()}%")

        return self._select(
            "legal_cases", LegalCase, conditions, params,
            "COALESCE(decision_date, created_at) DESC, id DESC", limit, offset,
        )

    # Knowledge articles

    def add_knowledge_article(self, article: KnowledgeArticle) -> int:
        row = article.to_row()
        row["is_published"] = 1 if article.is_published else 0
        return self._insert("knowledge_articles", row)

    def get_knowledge_article(self, article_id: int) -> Optional[KnowledgeArticle]:
        return self._get("knowledge_articles", KnowledgeArticle, article_id)

    def update_knowledge_article(self, article_id: int, **kwargs) -> bool:
        if "is_published" in kwargs:
            kwargs["is_published"] = 1 if kwargs["is_published"] else 0
        return self._update("knowledge_articles", article_id, **kwargs)

    def delete_knowledge_article(self, article_id: int) -> bool:
        return self._delete("knowledge_articles", article_id)

    def list_knowledge_articles(
        self,
        category: Optional[str] = None,
        tag: Optional[str] = None,
        language: Optional[str] = None,
        published_only: bool = False,
        limit: int = 100,
        offset: int = 0,
    ) -> List[KnowledgeArticle]:
        """List knowledge articles. ``tag`` matches one element of the tag list exactly."""
        conditions = []
        params: List[Any] = []
        if category:
            conditions.append("LOWER(category) = LOWER(?)")
            params.append(category)
        if tag:
            conditions.append("EXISTS (SELECT 1 FROM json_each(knowledge_articles.tags) WHERE value = ?)")
            params.append(tag)
        if language:
            conditions.append("language = ?")
            params.append(language)
        if published_only:
            conditions.append("is_published = 1")

        return self._select(
            "knowledge_articles", KnowledgeArticle, conditions, params,
            "COALESCE(published_at, created_at) DESC, id DESC", limit, offset,
        )

    def search_knowledge_articles(self, query: str, limit: int = 20) -> List[KnowledgeArticle]:
        """Search knowledge articles using full-text search, best match first."""
        fts_query = self._fts_query(query)
        if not fts_query:
            return []

        with self.connection() as conn:
            cursor = conn.execute(
                """
                SELECT a.*, bm25(knowledge_articles_fts) as relevance
                FROM knowledge_articles_fts fts
                JOIN knowledge_articles a ON fts.rowid = a.id
                WHERE knowledge_articles_fts MATCH ?
                ORDER BY relevance
                LIMIT ?
                """,
                (fts_query, limit),
            )
            return [KnowledgeArticle.from_row(row) for row in cursor.fetchall()]

    # Historical records

    def add_historical_record(self, record: HistoricalDataRecord) -> int:
        row = record.to_row()
        row["archived_at"] = row.get("archived_at") or datetime.now().isoformat()
        return self._insert("historical_records", row, timestamps=False)

    def get_historical_record(self, record_id: int) -> Optional[HistoricalDataRecord]:
        return self._get("historical_records", HistoricalDataRecord, record_id)

    def delete_historical_record(self, record_id: int) -> bool:
        return self._delete("historical_records", record_id)

    def list_historical_records(
        self,
        source_id: Optional[str] = None,
        region: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[HistoricalDataRecord]:
        """
        List historical records.

        Args:
            source_id: Filter by source.
            region: Filter by region.
            start_date: ISO date; only records published on or after it.
            end_date: ISO date; only records published on or before it.
        """
        conditions = []
        params: List[Any] = []
        if source_id:
            conditions.append("source_id = ?")
            params.append(source_id)
        if region:
            conditions.append("LOWER(region) = LOWER(?)")
            params.append(region)
        if start_date:
            conditions.append("published_at >= ?")
            params.append(start_date)
        if end_date:
            # Compare on the date part so an end date includes the whole day
            conditions.append("substr(published_at, 1, 10) <= ?")
            params.append(end_date[:10])

        return self._select(
            "historical_records", HistoricalDataRecord, conditions, params,
            "published_at DESC, id DESC", limit, offset,
        )

    # Collection runs

    def create_collection_run(self) -> int:
        """
        Create a new collection run record.

        Returns:
            Run ID.
        """
        with self.connection() as conn:
            cursor = conn.execute(
                "INSERT INTO collection_runs (started_at) VALUES (?)",
                (datetime.now().isoformat(),),
            )
            return cursor.lastrowid

    def update_collection_run(
        self,
        run_id: int,
        sources_scraped: Optional[int] = None,
        items_found: Optional[int] = None,
        inserted: Optional[int] = None,
        duplicates: Optional[int] = None,
        errors: Optional[int] = None,
        status: Optional[str] = None,
    ) -> None:
        """Update a collection run record."""
        updates = {}
        if sources_scraped is not None:
            updates["sources_scraped"] = sources_scraped
        if items_found is not None:
            updates["items_found"] = items_found
        if inserted is not None:
            updates["inserted"] = inserted
        if duplicates is not None:
            updates["duplicates"] = duplicates
        if errors is not None:
            updates["errors"] = errors
        if status is not None:
            updates["status"] = status
            if status in TERMINAL_RUN_STATUSES:
                updates["completed_at"] = datetime.now().isoformat()

        if not updates:
            return

        set_clause = ", ".join(f"{k} = ?" for k in updates.keys())
        values = list(updates.values()) + [run_id]

        with self.connection() as conn:
            conn.execute(f"UPDATE collection_runs SET {set_clause} WHERE id = ?", values)

    def list_collection_runs(self, limit: int = 20) -> List[Dict[str, Any]]:
        with self.connection() as conn:
            cursor = conn.execute(
                "SELECT * FROM collection_runs ORDER BY id DESC LIMIT ?", (limit,)
            )
            return [dict(row) for row in cursor.fetchall()]

    # Statistics

    def get_statistics(self) -> Dict[str, Any]:
        """
        Get database statistics for the dashboard.

        Returns:
            Dictionary containing various statistics.
        """
        with self.connection() as conn:
            stats = {}

            stats["total_updates"] = conn.execute("SELECT COUNT(*) FROM regulatory_updates").fetchone()[0]
            stats["total_legal_cases"] = conn.execute("SELECT COUNT(*) FROM legal_cases").fetchone()[0]
            stats["total_articles"] = conn.execute("SELECT COUNT(*) FROM knowledge_articles").fetchone()[0]
            stats["total_historical"] = conn.execute("SELECT COUNT(*) FROM historical_records").fetchone()[0]

            cursor = conn.execute(
                "SELECT region, COUNT(*) as count FROM regulatory_updates GROUP BY region"
            )
            stats["by_region"] = {row["region"]: row["count"] for row in cursor.fetchall()}

            cursor = conn.execute(
                "SELECT priority, COUNT(*) as count FROM regulatory_updates GROUP BY priority"
            )
            stats["by_priority"] = {row["priority"]: row["count"] for row in cursor.fetchall()}

            cursor = conn.execute(
                "SELECT update_type, COUNT(*) as count FROM regulatory_updates GROUP BY update_type"
            )
            stats["by_type"] = {row["update_type"]: row["count"] for row in cursor.fetchall()}

            week_ago = (datetime.now() - timedelta(days=7)).isoformat()
            stats["recent_updates"] = conn.execute(
                "SELECT COUNT(*) FROM regulatory_updates WHERE COALESCE(published_at, created_at) >= ?",
                (week_ago,),
            ).fetchone()[0]

            stats["enhanced_updates"] = conn.execute(
                "SELECT COUNT(*) FROM regulatory_updates WHERE json_extract(metadata, '$.enhanced') = 1"
            ).fetchone()[0]

            stats["collection_runs"] = conn.execute("SELECT COUNT(*) FROM collection_runs").fetchone()[0]

            return stats


# Global database instance
db = Database()
