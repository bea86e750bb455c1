"""Tests for PDF and text exports."""

from regintel.export import (
    full_decision_text,
    historical_document_pdf,
    knowledge_article_pdf,
    legal_decision_pdf,
    newsletter_pdf,
    regulatory_update_pdf,
    split_text_into_lines,
)
from regintel.export.pdf import DEFAULT_VERDICT, PDFWriter
from regintel.models import LegalCase, RegulatoryUpdate


class TestSplitTextIntoLines:
    def test_wraps_at_limit(self):
        lines = split_text_into_lines("alpha beta gamma delta", max_chars=11)
        assert lines == ["alpha beta", "gamma delta"]
        assert all(len(line) <= 11 for line in lines)

    def test_keeps_line_breaks(self):
        assert split_text_into_lines("first\nsecond") == ["first", "second"]

    def test_splits_long_words(self):
        assert split_text_into_lines("x" * 25, max_chars=10) == ["x" * 10, "x" * 10, "x" * 5]

    def test_empty(self):
        assert split_text_into_lines(None) == []
        assert split_text_into_lines("") == []


class TestPdfDocuments:
    def test_regulatory_update(self, populated_db):
        pdf = regulatory_update_pdf(populated_db.get_regulatory_update(1))
        assert pdf.startswith(b"%PDF")

    def test_update_with_missing_fields(self):
        assert regulatory_update_pdf(RegulatoryUpdate(title="Bare")).startswith(b"%PDF")

    def test_plain_dict_accepted(self):
        assert regulatory_update_pdf({"title": "From dict", "keywords": ["mdr"]}).startswith(b"%PDF")

    def test_legal_decision(self, populated_db):
        assert legal_decision_pdf(populated_db.get_legal_case(1)).startswith(b"%PDF")

    def test_knowledge_article(self, populated_db):
        assert knowledge_article_pdf(populated_db.get_knowledge_article(1)).startswith(b"%PDF")

    def test_historical_document(self, populated_db):
        assert historical_document_pdf(populated_db.get_historical_record(1)).startswith(b"%PDF")

    def test_newsletter(self, populated_db):
        newsletter = {
            "title": "Weekly digest",
            "content": "This week in regulation.",
            "updates": populated_db.get_recent_regulatory_updates(limit=3),
        }
        assert newsletter_pdf(newsletter).startswith(b"%PDF")

    def test_long_content_breaks_pages(self):
        writer = PDFWriter(title="Long")
        writer.paragraph("word " * 5000)
        assert writer.canvas.getPageNumber() > 1
        assert writer.finish().startswith(b"%PDF")


class TestFullDecisionText:
    def test_contains_case_details(self):
        text = full_decision_text(
            LegalCase(
                title="Riegel v. Medtronic, Inc.",
                court="Supreme Court of the United States",
                jurisdiction="US",
                case_number="552 U.S. 312",
                decision_date="2008-02-20",
                verdict="Claims preempted.",
            )
        )
        assert text.startswith("SUPREME COURT OF THE UNITED STATES")
        assert "552 U.S. 312" in text
        assert "decided on 20.02.2008" in text
        assert "Claims preempted." in text

    def test_defaults_for_missing_fields(self):
        text = full_decision_text({"title": "Unnamed"})
        assert "FEDERAL COURT OF JUSTICE" in text
        assert DEFAULT_VERDICT in text
        assert "decided on Unknown" in text
