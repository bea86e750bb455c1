"""
Approval workflow scoring for regulatory updates and legal cases.

Each item gets a weighted quality score, risk factors and compliance issues,
which together decide whether it is auto-approved or routed to senior,
expert or board review.
"""

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..config import config
from ..models import LegalCase, RegulatoryUpdate
from .analysis import (
    RegulatoryAnalysis,
    analyze_legal_case,
    analyze_regulatory_content,
    find_terms,
)

logger = logging.getLogger(__name__)

SERVICE_VERSION = "2.0.0"

# Keyed by the source ids of the scrapers, agency feeds and the openFDA collector
SOURCE_RELIABILITY = {
    # openFDA
    "fda_510k": 0.95,
    "fda_recalls": 0.98,
    # Agency web sources and feeds
    "fda_medical_device_db": 0.95,
    "fda-medical-devices": 0.95,
    "fda-main": 0.90,
    "ema-main": 0.90,
    "bfarm_web_scraping": 0.85,
    "bfarm-main": 0.85,
    "swissmedic_web_scraping": 0.85,
    "swissmedic-main": 0.85,
    "mhra-main": 0.80,
    "health_canada_web_scraping": 0.80,
    "who_global_atlas": 0.75,
    # Research, industry and commercial sources
    "ncbi_global_framework": 0.70,
    "medtech_europe_convergence": 0.65,
    "clarivate_medtech": 0.60,
    "iqvia_regulatory_intelligence": 0.60,
    "iqvia_compliance_blog": 0.55,
    "medboard_regulatory": 0.55,
}
DEFAULT_RELIABILITY = 0.50

QUALITY_KEYWORDS = ["regulation", "compliance", "approval", "standard", "guideline"]

HIGH_RELEVANCE_KEYWORDS = [
    "medical device", "medizinprodukt", "mdr", "ivdr", "510k", "pma",
    "clinical evaluation", "post-market surveillance", "cybersecurity",
]
MEDIUM_RELEVANCE_KEYWORDS = [
    "healthcare", "health technology", "digital health", "telemedicine",
    "artificial intelligence", "machine learning", "iot device",
]
RELEVANT_REGIONS = {"US", "EU", "DE", "CH", "UK"}

LEGAL_MEDTECH_KEYWORDS = [
    "medical device", "implant", "pacemaker", "catheter", "stent",
    "diagnostic device", "surgical instrument", "medical software",
]
LEGAL_KEYWORDS = [
    "product liability", "fda violation", "regulatory compliance",
    "clinical trial", "informed consent", "medical malpractice",
]
PRECEDENT_WEIGHTS = {"high": 0.3, "medium": 0.2, "low": 0.1}
RELEVANT_LEGAL_THEMES = {"Product Liability", "Regulatory Compliance", "AI/ML Devices"}

VALID_PRIORITIES = {"critical", "high", "medium", "low"}


@dataclass
class QualityMetrics:
    content_quality: float = 0.0
    source_reliability: float = 0.0
    relevance_score: float = 0.0
    timeliness: float = 0.0
    overall_score: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ApprovalDecision:
    """Outcome of an approval evaluation."""

    approved: bool
    confidence: float
    review_level: str
    reasoning: list[str] = field(default_factory=list)
    required_actions: list[str] = field(default_factory=list)
    risk_factors: list[str] = field(default_factory=list)
    compliance_issues: list[str] = field(default_factory=list)
    quality: Optional[QualityMetrics] = None

    def to_dict(self) -> dict:
        return asdict(self)


def _parse_date(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed.replace(tzinfo=None)


class ApprovalService:
    """Scores content and routes it to the appropriate review level."""

    def __init__(
        self,
        auto_threshold: Optional[float] = None,
        senior_threshold: Optional[float] = None,
        expert_threshold: Optional[float] = None,
    ) -> None:
        self.auto_threshold = auto_threshold if auto_threshold is not None else config.get("approval.auto_threshold", 0.85)
        self.senior_threshold = senior_threshold if senior_threshold is not None else config.get("approval.senior_threshold", 0.70)
        self.expert_threshold = expert_threshold if expert_threshold is not None else config.get("approval.expert_threshold", 0.50)

    # Regulatory updates

    def evaluate_regulatory_update(self, update: RegulatoryUpdate, now: Optional[datetime] = None) -> ApprovalDecision:
        """
        Evaluate a regulatory update for publication.

        Any error during evaluation yields a rejected decision routed to
        expert review.
        """
        try:
            logger.info("Evaluating: %s", update.title)
            analysis = analyze_regulatory_content(f"{update.title} {update.description or ''}")
            quality = self.assess_quality(update, now)
            risk_factors = self.assess_risk(update, analysis)
            compliance_issues = self.check_compliance(update)
            decision = self.make_decision(analysis, quality, risk_factors, compliance_issues)
            logger.info(
                "Decision: %s (%.2f, %s review)",
                "APPROVED" if decision.approved else "NOT APPROVED",
                decision.confidence,
                decision.review_level,
            )
            return decision
        except Exception as e:
            logger.error("Error evaluating update %s: %s", update.id, e)
            return ApprovalDecision(
                approved=False,
                confidence=0.0,
                review_level="expert",
                reasoning=["Approval system error - manual review required"],
                required_actions=["Technical team investigation needed"],
                risk_factors=["System malfunction"],
                compliance_issues=["Unable to verify compliance"],
            )

    def assess_quality(self, update: RegulatoryUpdate, now: Optional[datetime] = None) -> QualityMetrics:
        metrics = QualityMetrics(
            content_quality=self.evaluate_content_quality(update),
            source_reliability=self.evaluate_source_reliability(update.source_id),
            relevance_score=self.evaluate_relevance(update),
            timeliness=self.evaluate_timeliness(update.published_at or update.created_at, now),
        )
        metrics.overall_score = (
            metrics.content_quality * 0.40
            + metrics.source_reliability * 0.25
            + metrics.relevance_score * 0.20
            + metrics.timeliness * 0.15
        )
        return metrics

    def evaluate_content_quality(self, update: RegulatoryUpdate) -> float:
        score = 0.5

        if update.title and 20 <= len(update.title) <= 200:
            score += 0.15

        if update.description:
            if len(update.description) >= 100:
                score += 0.15
            if len(update.description) >= 300:
                score += 0.10
            score += min(len(find_terms(update.description, QUALITY_KEYWORDS)) * 0.05, 0.15)

        if update.categories:
            score += 0.10
        if update.device_classes:
            score += 0.05

        return min(score, 1.0)

    def evaluate_source_reliability(self, source_id: Optional[str]) -> float:
        return SOURCE_RELIABILITY.get(source_id or "", DEFAULT_RELIABILITY)

    def evaluate_relevance(self, update: RegulatoryUpdate) -> float:
        text = f"{update.title} {update.description or ''}"
        score = 0.3
        score += min(len(find_terms(text, HIGH_RELEVANCE_KEYWORDS)) * 0.20, 0.60)
        score += min(len(find_terms(text, MEDIUM_RELEVANCE_KEYWORDS)) * 0.10, 0.20)
        if update.region in RELEVANT_REGIONS:
            score += 0.10
        return min(score, 1.0)

    def evaluate_timeliness(self, published_at: Optional[str], now: Optional[datetime] = None) -> float:
        published = _parse_date(published_at)
        if published is None:
            return 0.1

        age_days = ((now or datetime.now()) - published).total_seconds() / 86400
        if age_days <= 7:
            return 1.0
        if age_days <= 30:
            return 0.8
        if age_days <= 90:
            return 0.6
        if age_days <= 180:
            return 0.4
        if age_days <= 365:
            return 0.2
        return 0.1

    def assess_risk(self, update: RegulatoryUpdate, analysis: RegulatoryAnalysis) -> list[str]:
        risk_factors = []
        if analysis.risk_level in ("critical", "high"):
            risk_factors.append("High-risk device category")
        if "Safety Alert" in analysis.categories or update.update_type == "recall":
            risk_factors.append("Safety-critical content")
        if "AI/ML Technology" in analysis.categories:
            risk_factors.append("Emerging AI/ML technology")
        if len(analysis.compliance_requirements) > 3:
            risk_factors.append("Complex compliance requirements")
        if analysis.timeline_sensitivity == "urgent":
            risk_factors.append("Time-sensitive regulatory change")
        return risk_factors

    def check_compliance(self, update: RegulatoryUpdate) -> list[str]:
        issues = []
        if not update.description or len(update.description) < 50:
            issues.append("Insufficient content detail")
        if not update.categories:
            issues.append("Missing content categorization")
        if not update.device_classes:
            issues.append("Missing device classification")
        if update.priority not in VALID_PRIORITIES:
            issues.append("Invalid priority assignment")

        if update.region == "EU":
            text = f"{update.title} {update.description or ''}"
            if find_terms(text, ["medical device"]) and not find_terms(text, ["mdr"]):
                issues.append("Potential MDR compliance gap")
        return issues

    def make_decision(
        self,
        analysis: RegulatoryAnalysis,
        quality: QualityMetrics,
        risk_factors: list[str],
        compliance_issues: list[str],
    ) -> ApprovalDecision:
        confidence = quality.overall_score * analysis.ai_confidence_score
        reasoning = []
        required_actions = []

        if risk_factors:
            confidence *= 1 - len(risk_factors) * 0.1
            reasoning.append(f"Risk factors identified: {len(risk_factors)}")

        if compliance_issues:
            confidence *= 1 - len(compliance_issues) * 0.15
            reasoning.append(f"Compliance issues: {len(compliance_issues)}")
            required_actions.append("Address compliance issues before publication")

        approved = False
        if confidence >= self.auto_threshold and not compliance_issues:
            approved = True
            review_level = "auto"
            reasoning.append("High confidence, auto-approved")
        elif confidence >= self.senior_threshold:
            review_level = "senior"
            reasoning.append("Medium confidence, senior review required")
            required_actions.append("Senior reviewer approval needed")
        elif confidence >= self.expert_threshold:
            review_level = "expert"
            reasoning.append("Lower confidence, expert review required")
            required_actions.append("Subject matter expert review needed")
        else:
            review_level = "board"
            reasoning.append("Low confidence, board review required")
            required_actions.append("Full board review and approval needed")

        reasoning.append(f"Quality score: {quality.overall_score:.2f}")
        reasoning.append(f"AI confidence: {analysis.ai_confidence_score:.2f}")

        return ApprovalDecision(
            approved=approved,
            confidence=max(0.0, min(1.0, confidence)),
            review_level=review_level,
            reasoning=reasoning,
            required_actions=required_actions,
            risk_factors=risk_factors,
            compliance_issues=compliance_issues,
            quality=quality,
        )

    # Legal cases

    def evaluate_legal_case(self, legal_case: LegalCase) -> ApprovalDecision:
        """
        Evaluate a legal case for publication.

        Any error during evaluation yields a rejected decision routed to
        board review.
        """
        try:
            logger.info("Evaluating legal case: %s", legal_case.title)
            analysis = analyze_legal_case(legal_case.title, legal_case.summary or "", legal_case.keywords)
            relevance = self.assess_legal_relevance(legal_case)

            risk_factors = []
            if legal_case.impact_level == "high":
                risk_factors.append("High-impact legal precedent")
            if analysis.precedent_value == "high":
                risk_factors.append("Significant legal precedent value")
            if "Product Liability" in analysis.themes:
                risk_factors.append("Product liability implications")
            if "Regulatory Compliance" in analysis.themes:
                risk_factors.append("Regulatory compliance implications")

            confidence = relevance * 0.6 + PRECEDENT_WEIGHTS[analysis.precedent_value]
            relevant_themes = [t for t in analysis.themes if t in RELEVANT_LEGAL_THEMES]
            confidence = min(confidence + min(len(relevant_themes) * 0.05, 0.15), 1.0)

            approved = False
            review_level = "expert"
            if confidence >= self.auto_threshold and analysis.precedent_value == "high":
                approved = True
                review_level = "auto"
            elif confidence >= self.senior_threshold:
                review_level = "senior"

            return ApprovalDecision(
                approved=approved,
                confidence=confidence,
                review_level=review_level,
                reasoning=[
                    f"Precedent value: {analysis.precedent_value}",
                    f"Relevance score: {relevance:.2f}",
                    f"Risk assessment: {analysis.risk_assessment}",
                ],
                required_actions=analysis.action_items,
                risk_factors=risk_factors,
            )
        except Exception as e:
            logger.error("Error evaluating legal case %s: %s", legal_case.id, e)
            return ApprovalDecision(
                approved=False,
                confidence=0.0,
                review_level="board",
                reasoning=["Legal case evaluation failed"],
                required_actions=["Manual legal review required"],
                risk_factors=["Evaluation system failure"],
            )

    def assess_legal_relevance(self, legal_case: LegalCase) -> float:
        text = f"{legal_case.title} {legal_case.summary or ''}"
        score = 0.3
        score += min(len(find_terms(text, LEGAL_MEDTECH_KEYWORDS)) * 0.15, 0.45)
        score += min(len(find_terms(text, LEGAL_KEYWORDS)) * 0.10, 0.30)
        if legal_case.impact_level == "high":
            score += 0.15
        elif legal_case.impact_level == "medium":
            score += 0.10
        return min(score, 1.0)

    def get_service_metrics(self) -> dict[str, Any]:
        return {
            "service_name": "ApprovalService",
            "thresholds": {
                "auto_approval": self.auto_threshold,
                "senior_review": self.senior_threshold,
                "expert_review": self.expert_threshold,
            },
            "version": SERVICE_VERSION,
            "last_update": datetime.now().isoformat(),
        }
