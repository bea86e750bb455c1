"""Tests for the approval workflow service."""

from datetime import datetime
from unittest.mock import patch

from regintel.enrichment.approval import ApprovalService
from regintel.models import LegalCase, RegulatoryUpdate, ScrapedItem
from regintel.scraping.pipeline import item_to_update
from regintel.scraping.rss import DEFAULT_FEEDS
from regintel.scraping.sources import DEFAULT_SOURCES

NOW = datetime(2024, 6, 4)

GOOD_DESCRIPTION = (
    "The FDA issued final guidance describing the cybersecurity information that manufacturers "
    "of a medical device should include in premarket submissions. The guidance covers the software "
    "bill of materials, threat modeling, security architecture views and labeling, and explains how "
    "the quality system regulation and design controls apply to cybersecurity throughout the total "
    "product lifecycle. It replaces the earlier premarket guidance and applies to the regulation of "
    "cyber devices."
)


def _good_update() -> RegulatoryUpdate:
    return RegulatoryUpdate(
        title="FDA final guidance on medical device cybersecurity for Class II 510k devices",
        description=GOOD_DESCRIPTION,
        source_id="fda_510k",
        region="US",
        update_type="guidance",
        priority="high",
        categories=["Cybersecurity"],
        device_classes=["Class II"],
        published_at="2024-06-01T00:00:00",
    )


class TestEvaluateRegulatoryUpdate:
    def test_strong_update_is_auto_approved(self):
        decision = ApprovalService().evaluate_regulatory_update(_good_update(), now=NOW)
        assert decision.approved is True
        assert decision.review_level == "auto"
        assert decision.confidence >= 0.85
        assert decision.compliance_issues == []
        assert decision.quality.timeliness == 1.0

    def test_weak_update_goes_to_board(self):
        decision = ApprovalService().evaluate_regulatory_update(RegulatoryUpdate(title="x"), now=NOW)
        assert decision.approved is False
        assert decision.review_level == "board"
        assert "Insufficient content detail" in decision.compliance_issues
        assert "Missing content categorization" in decision.compliance_issues
        assert "Missing device classification" in decision.compliance_issues

    def test_compliance_issue_blocks_approval(self):
        update = _good_update()
        update.device_classes = []
        decision = ApprovalService().evaluate_regulatory_update(update, now=NOW)
        assert decision.approved is False
        assert "Missing device classification" in decision.compliance_issues

    def test_confidence_bounds(self):
        decision = ApprovalService().evaluate_regulatory_update(_good_update(), now=NOW)
        assert 0.0 <= decision.confidence <= 1.0

    def test_error_routes_to_expert(self):
        with patch(
            "regintel.enrichment.approval.analyze_regulatory_content", side_effect=RuntimeError("boom")
        ):
            decision = ApprovalService().evaluate_regulatory_update(_good_update())
        assert decision.approved is False
        assert decision.confidence == 0.0
        assert decision.review_level == "expert"

    def test_custom_thresholds(self):
        service = ApprovalService(auto_threshold=0.99, senior_threshold=0.5, expert_threshold=0.1)
        decision = service.evaluate_regulatory_update(_good_update(), now=NOW)
        assert decision.review_level == "senior"


class TestScoring:
    def test_timeliness(self):
        service = ApprovalService()
        assert service.evaluate_timeliness("2024-06-01T00:00:00", NOW) == 1.0
        assert service.evaluate_timeliness("2024-05-15", NOW) == 0.8
        assert service.evaluate_timeliness("2020-01-01", NOW) == 0.1
        assert service.evaluate_timeliness(None, NOW) == 0.1
        assert service.evaluate_timeliness("not a date", NOW) == 0.1

    def test_source_reliability(self):
        service = ApprovalService()
        assert service.evaluate_source_reliability("fda_recalls") == 0.98
        assert service.evaluate_source_reliability("unknown") == 0.5
        assert service.evaluate_source_reliability(None) == 0.5

    def test_every_collected_source_has_reliability(self):
        service = ApprovalService()
        source_ids = [s.id for s in DEFAULT_SOURCES] + [f.id for f in DEFAULT_FEEDS] + ["fda_510k", "fda_recalls"]
        for source_id in source_ids:
            assert service.evaluate_source_reliability(source_id) != 0.5, source_id

    def test_collected_item_scored_by_source(self):
        item = ScrapedItem(
            source_name="EMA News & Updates (RSS)",
            source_id="ema-main",
            title="EMA: Medical device expert panels update",
            url="https://www.ema.europa.eu/en/news/panels",
            content="Expert panels under the MDR issued new opinions.",
            category="regulatory_update",
            region="EU",
            publication_date="2024-06-01T00:00:00",
            scrape_timestamp="2024-06-01T00:00:00",
        )
        metrics = ApprovalService().assess_quality(item_to_update(item), now=NOW)
        assert metrics.source_reliability == 0.90

    def test_eu_mdr_gap(self):
        update = RegulatoryUpdate(
            title="New medical device labelling rules",
            description="Labelling changes for every medical device placed on the market.",
            region="EU",
            categories=["Labelling"],
            device_classes=["Class I"],
        )
        assert "Potential MDR compliance gap" in ApprovalService().check_compliance(update)

    def test_quality_weights(self):
        metrics = ApprovalService().assess_quality(_good_update(), now=NOW)
        expected = (
            metrics.content_quality * 0.40
            + metrics.source_reliability * 0.25
            + metrics.relevance_score * 0.20
            + metrics.timeliness * 0.15
        )
        assert abs(metrics.overall_score - expected) < 1e-9


class TestEvaluateLegalCase:
    def test_high_impact_liability_case_goes_to_senior(self):
        legal_case = LegalCase(
            title="Riegel v. Medtronic, Inc.",
            court="Supreme Court of the United States",
            jurisdiction="US",
            summary="Product liability claims against a PMA catheter are preempted.",
            impact_level="high",
        )
        decision = ApprovalService().evaluate_legal_case(legal_case)
        assert decision.review_level == "senior"
        assert decision.approved is False
        assert "Product liability implications" in decision.risk_factors
        assert "High-impact legal precedent" in decision.risk_factors

    def test_irrelevant_case_goes_to_expert(self):
        decision = ApprovalService().evaluate_legal_case(
            LegalCase(title="Lease dispute", court="Local court", jurisdiction="US")
        )
        assert decision.review_level == "expert"
        assert decision.approved is False

    def test_error_routes_to_board(self):
        with patch("regintel.enrichment.approval.analyze_legal_case", side_effect=RuntimeError("boom")):
            decision = ApprovalService().evaluate_legal_case(
                LegalCase(title="Case", court="Court", jurisdiction="US")
            )
        assert decision.review_level == "board"
        assert decision.confidence == 0.0


def test_service_metrics():
    metrics = ApprovalService().get_service_metrics()
    assert metrics["thresholds"] == {"auto_approval": 0.85, "senior_review": 0.70, "expert_review": 0.50}
