"""
Keyword-based analysis of regulatory content and legal cases.

Scores are weighted sums of keyword hits; nothing here is learned.
"""

import logging
import re
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta
from functools import lru_cache
from typing import Any, Iterable, Optional

from ..models import RegulatoryUpdate

logger = logging.getLogger(__name__)

DEVICE_TYPE_KEYWORDS = [
    "diagnostic", "therapeutic", "surgical", "monitoring", "imaging",
    "implantable", "prosthetic", "orthopedic", "cardiovascular", "neurological",
    "ophthalmic", "dental", "dermatological", "respiratory", "anesthesia",
    "infusion pump", "defibrillator", "pacemaker", "catheter", "stent",
    "artificial intelligence", "machine learning", "software", "mobile app",
]

THERAPEUTIC_AREAS = [
    "cardiology", "neurology", "oncology", "orthopedics", "ophthalmology",
    "gastroenterology", "urology", "gynecology", "dermatology", "endocrinology",
]

COMPLIANCE_TERMS = [
    "cybersecurity", "clinical evaluation", "post-market surveillance",
    "quality management", "risk management", "biocompatibility",
    "software lifecycle", "usability engineering", "clinical investigation",
]

HIGH_RISK_TERMS = ["class iii", "implantable", "life-sustaining", "critical"]
MEDIUM_RISK_TERMS = ["class ii", "monitoring"]
LOW_RISK_TERMS = ["class i", "non-invasive"]

AI_TERMS = ["ai", "artificial intelligence"]
SAFETY_TERMS = ["recall", "safety alert"]
URGENT_TERMS = ["immediate", "urgent", "critical", "emergency", "recall", "safety alert"]

MEDICAL_TERMS = ["medical device", "therapeutic", "diagnostic", "surgical", "implantable"]
REGULATORY_TERMS = ["fda", "ema", "mdr", "iso", "iec", "clinical evaluation"]

LEGAL_THEMES = {
    "Product Liability": ["product liability", "defective device", "manufacturer liability"],
    "Regulatory Compliance": ["fda violation", "regulatory breach", "compliance failure"],
    "Clinical Trials": ["clinical trial", "informed consent", "ethics committee"],
    "Patents": ["patent infringement", "intellectual property", "licensing"],
    "Data Protection": ["gdpr", "dsgvo", "data protection", "privacy"],
    "AI/ML Devices": ["artificial intelligence", "machine learning", "ai device"],
}

PRIORITY_GUIDANCE = {
    "critical": (
        "Safety-relevant content or high-risk devices",
        ["Review affected products immediately", "Notify the relevant teams"],
    ),
    "high": (
        "New technologies or extensive compliance requirements",
        ["Analyse the impact in detail", "Check whether internal policies need updating"],
    ),
    "medium": (
        "Standard regulatory changes",
        ["Schedule a routine review"],
    ),
    "low": (
        "Minor or general information",
        ["Archive for reference"],
    ),
}

RISK_ASSESSMENTS = {
    "high": "High risk - immediate action required",
    "medium": "Medium risk - regular monitoring",
    "low": "Low risk - general observation",
}


@lru_cache(maxsize=None)
def _term_pattern(term: str) -> re.Pattern:
    return re.compile(rf"\b{re.escape(term)}\b", re.IGNORECASE)


def contains_term(text: str, term: str) -> bool:
    """Whole-word, case-insensitive match of ``term`` in ``text``."""
    return bool(_term_pattern(term).search(text))


def find_terms(text: str, terms: Iterable[str]) -> list[str]:
    return [term for term in terms if contains_term(text, term)]


@dataclass
class RegulatoryAnalysis:
    """Result of analyzing a piece of regulatory text."""

    categories: list[str] = field(default_factory=list)
    confidence: float = 0.0
    device_types: list[str] = field(default_factory=list)
    risk_level: str = "medium"
    therapeutic_area: str = "general"
    compliance_requirements: list[str] = field(default_factory=list)
    ai_confidence_score: float = 0.5
    regulatory_impact: str = "low"
    timeline_sensitivity: str = "routine"

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class PriorityAssessment:
    priority: str
    reasoning: str
    action_items: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class LegalCaseAnalysis:
    themes: list[str]
    risk_assessment: str
    precedent_value: str
    action_items: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def analyze_regulatory_content(text: str) -> RegulatoryAnalysis:
    """
    Analyze regulatory text by keyword detection.

    Args:
        text: Title and description (or any free text).

    Returns:
        RegulatoryAnalysis with categories, risk level and confidence scores.
    """
    text = text or ""
    categories: list[str] = []
    confidence = 0.0

    device_types = find_terms(text, DEVICE_TYPE_KEYWORDS)
    confidence += 0.1 * len(device_types)

    if find_terms(text, HIGH_RISK_TERMS):
        risk_level = "high"
        confidence += 0.3
    elif find_terms(text, MEDIUM_RISK_TERMS):
        risk_level = "medium"
        confidence += 0.2
    elif find_terms(text, LOW_RISK_TERMS):
        risk_level = "low"
        confidence += 0.1
    else:
        risk_level = "medium"

    therapeutic_area = "general"
    for area in THERAPEUTIC_AREAS:
        if contains_term(text, area):
            therapeutic_area = area
            categories.append(area)
            confidence += 0.1
            break

    compliance = find_terms(text, COMPLIANCE_TERMS)
    confidence += 0.1 * len(compliance)

    if find_terms(text, AI_TERMS):
        categories.append("AI/ML Technology")
        confidence += 0.2

    if find_terms(text, SAFETY_TERMS):
        categories.append("Safety Alert")
        confidence += 0.3

    if not categories:
        categories.append("Medical Device")
        confidence = max(confidence, 0.5)

    if not device_types:
        device_types.append("Medical Device")

    return RegulatoryAnalysis(
        categories=list(dict.fromkeys(categories)),
        confidence=min(confidence, 1.0),
        device_types=list(dict.fromkeys(device_types)),
        risk_level=risk_level,
        therapeutic_area=therapeutic_area,
        compliance_requirements=compliance,
        ai_confidence_score=calculate_ai_confidence(text, categories, device_types),
        regulatory_impact=determine_regulatory_impact(risk_level, categories),
        timeline_sensitivity=assess_timeline_sensitivity(text, categories),
    )


def calculate_ai_confidence(text: str, categories: list[str], device_types: list[str]) -> float:
    confidence = 0.5
    confidence += 0.1 * len(find_terms(text, MEDICAL_TERMS))
    confidence += 0.15 * len(find_terms(text, REGULATORY_TERMS))
    confidence += min(len(categories) * 0.1, 0.3)
    confidence += min(len(device_types) * 0.1, 0.2)
    return min(confidence, 1.0)


def determine_regulatory_impact(risk_level: str, categories: list[str]) -> str:
    if risk_level == "critical" or "Safety Alert" in categories or "Recall" in categories:
        return "high"
    if risk_level == "high" or "AI/ML Technology" in categories or "Cybersecurity" in categories:
        return "medium"
    return "low"


def assess_timeline_sensitivity(text: str, categories: list[str]) -> str:
    if find_terms(text, URGENT_TERMS) or "Safety Alert" in categories:
        return "urgent"
    if "AI/ML Technology" in categories or "Cybersecurity" in categories:
        return "standard"
    return "routine"


def prioritize_update(update: RegulatoryUpdate) -> PriorityAssessment:
    """
    Assign a priority to a regulatory update with reasoning and action items.

    Falls back to a medium priority with a manual review action if the
    analysis fails.
    """
    try:
        analysis = analyze_regulatory_content(f"{update.title} {update.description or ''}")

        if (
            "Safety Alert" in analysis.categories
            or update.update_type == "recall"
            or analysis.risk_level == "high"
        ):
            priority = "critical"
        elif (
            "AI/ML Technology" in analysis.categories
            or (update.region == "EU" and len(analysis.compliance_requirements) > 2)
            or analysis.confidence > 0.8
        ):
            priority = "high"
        elif analysis.confidence > 0.5:
            priority = "medium"
        else:
            priority = "low"

        reasoning, actions = PRIORITY_GUIDANCE[priority]
        return PriorityAssessment(priority=priority, reasoning=reasoning, action_items=list(actions))
    except Exception as e:
        logger.error("Error prioritizing regulatory update: %s", e)
        return PriorityAssessment(
            priority="medium",
            reasoning="Automatic prioritization failed",
            action_items=["Manual review required"],
        )


def analyze_legal_case(title: str, summary: str = "", key_issues: Optional[list[str]] = None) -> LegalCaseAnalysis:
    """
    Detect legal themes in a case and assess its precedent value.

    Args:
        title: Case title.
        summary: Case summary.
        key_issues: Additional issue keywords.
    """
    text = " ".join([title or "", summary or "", *(key_issues or [])])

    themes = [
        theme for theme, keywords in LEGAL_THEMES.items()
        if any(contains_term(text, kw) for kw in keywords)
    ]

    if "Product Liability" in themes or "Regulatory Compliance" in themes:
        precedent_value = "high"
        action_items = [
            "Review current compliance measures",
            "Run a risk analysis for similar products",
        ]
    elif "AI/ML Devices" in themes or "Data Protection" in themes:
        precedent_value = "high"
        action_items = ["Assess the impact on digital health solutions"]
    elif themes:
        precedent_value = "medium"
        action_items = ["Monitor similar cases"]
    else:
        precedent_value = "low"
        action_items = ["Archive for reference"]

    return LegalCaseAnalysis(
        themes=themes or ["General"],
        risk_assessment=RISK_ASSESSMENTS[precedent_value],
        precedent_value=precedent_value,
        action_items=action_items,
    )


def _update_date(update: RegulatoryUpdate) -> Optional[datetime]:
    value = update.published_at or update.created_at
    if not value:
        return None
    try:
        return datetime.fromisoformat(value[:19])
    except ValueError:
        return None


def analyze_market_trends(updates: list[RegulatoryUpdate], days: int = 30) -> dict[str, Any]:
    """
    Summarize recent regulatory activity.

    Counts updates from the last ``days`` days per region and per technology
    theme, and derives emerging trends and recommendations from the counts.
    """
    cutoff = datetime.now() - timedelta(days=days)
    recent = [u for u in updates if (_update_date(u) or datetime.min) > cutoff]

    region_activity: dict[str, int] = {}
    for update in recent:
        region_activity[update.region] = region_activity.get(update.region, 0) + 1

    def count(title_terms: list[str], description_terms: list[str]) -> int:
        return sum(
            1 for u in recent
            if find_terms(u.title, title_terms) or find_terms(u.description or "", description_terms)
        )

    ai_ml = count(["ai", "artificial intelligence"], ["machine learning"])
    cybersecurity = count(["cybersecurity"], ["cyber", "cybersecurity"])
    digital_health = count(["digital", "telemedicine"], ["remote monitoring"])

    emerging_trends = []
    recommendations = []
    if ai_ml > 5:
        emerging_trends.append("AI/ML integration in medical technology")
        recommendations.append("Increase focus on AI compliance and validation")
    if cybersecurity > 3:
        emerging_trends.append("Cybersecurity requirements are tightening")
        recommendations.append("Run a cybersecurity assessment for all connected devices")
    if digital_health > 7:
        emerging_trends.append("Digital health solutions are expanding")
        recommendations.append("Review and adapt the digital health strategy")
    if sum(region_activity.values()) > 20:
        recommendations.append("Elevated regulatory activity - strengthen compliance monitoring")

    return {
        "period_days": days,
        "emerging_trends": emerging_trends,
        "device_type_trends": {
            "AI/ML Devices": ai_ml,
            "Digital Health": digital_health,
            "Connected Devices": cybersecurity,
        },
        "region_activity": region_activity,
        "recommendations": recommendations,
    }
