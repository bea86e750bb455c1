"""Shared test fixtures for the regulatory intelligence test suite."""

import pytest
from regintel.config import Config
from regintel.database import Database
from regintel.models import HistoricalDataRecord, KnowledgeArticle, LegalCase, RegulatoryUpdate


@pytest.fixture
def fresh_config(tmp_path, monkeypatch):
    """Create a Config instance with reset singleton state pointed at a temp directory."""
    Config._instance = None
    monkeypatch.setenv("REGINTEL_BASE_DIR", str(tmp_path))
    cfg = Config()
    yield cfg
    Config._instance = None


@pytest.fixture
def tmp_db(tmp_path):
    """Create a Database instance using a temp-dir SQLite file."""
    db_path = tmp_path / "test.db"
    return Database(db_path=db_path)


@pytest.fixture
def populated_db(tmp_db):
    """tmp_db with four regulatory updates, a legal case, an article and a historical record."""
    tmp_db.add_regulatory_update(
        RegulatoryUpdate(
            title="FDA Cybersecurity Guidance for Medical Devices",
            description="Premarket cybersecurity expectations for connected medical devices.",
            content="Manufacturers should provide a software bill of materials and threat model.",
            source_id="fda-medical-devices",
            source_url="https://www.fda.gov/cyber",
            region="US",
            update_type="guidance",
            priority="high",
            published_at="2024-06-01T00:00:00",
        )
    )
    tmp_db.add_regulatory_update(
        RegulatoryUpdate(
            title="EU MDR Transition Extension",
            description="Regulation (EU) 2023/607 extends the MDR transition period.",
            source_id="ema-main",
            source_url="https://ec.europa.eu/mdr",
            region="EU",
            update_type="regulation",
            priority="medium",
            published_at="2024-03-20T00:00:00",
        )
    )
    tmp_db.add_regulatory_update(
        RegulatoryUpdate(
            title="BfArM Recall of Infusion Pumps",
            description="Field safety corrective action for infusion pumps.",
            source_id="bfarm-main",
            source_url="https://www.bfarm.de/recall",
            region="DE",
            update_type="recall",
            priority="critical",
            published_at="2024-05-10T00:00:00",
        )
    )
    tmp_db.add_regulatory_update(
        RegulatoryUpdate(
            title="ISO 14971 Risk Management Update",
            description="Application of risk management to medical devices.",
            source_id="who_global_atlas",
            region="Global",
            update_type="standard",
            priority="low",
            published_at="2024-01-05T00:00:00",
        )
    )
    tmp_db.add_legal_case(
        LegalCase(
            title="Riegel v. Medtronic, Inc.",
            court="Supreme Court of the United States",
            jurisdiction="US",
            case_number="552 U.S. 312",
            summary="Product liability claims against a PMA catheter are preempted.",
            decision_date="2008-02-20",
            impact_level="high",
            keywords=["preemption", "PMA"],
        )
    )
    tmp_db.add_knowledge_article(
        KnowledgeArticle(
            title="Choosing an FDA Premarket Pathway",
            content="Most class II devices use a 510(k) premarket notification.",
            category="guidance",
            tags=["FDA", "510(k)"],
            is_published=True,
        )
    )
    tmp_db.add_historical_record(
        HistoricalDataRecord(
            title="MDCG 2019-11 Software Guidance",
            document_id="MDCG-2019-11",
            source_id="mdcg",
            region="EU",
            raw_text="Qualification and classification of software.",
            published_at="2019-10-11T00:00:00",
        )
    )
    return tmp_db
